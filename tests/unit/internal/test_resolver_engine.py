from __future__ import annotations

from typing import Any

import pytest

from fixtura._internal.declarations import AttributeSpec, OptionSpec, as_builder
from fixtura._internal.resolver import (
    AttributeEvaluator,
    DependencyResolver,
    OptionEvaluator,
)
from fixtura.exceptions import (
    FixturaDependencyCycleError,
    FixturaMissingOptionError,
    FixturaOptionDependencyError,
    FixturaUnknownDependencyError,
)


def _attr(name: str, dependencies: tuple[str, ...], value: Any) -> AttributeSpec:
    return AttributeSpec(name=name, dependencies=dependencies, builder=as_builder(value))


def _opt(name: str, dependencies: tuple[str, ...] = (), value: Any = None) -> OptionSpec:
    return OptionSpec(name=name, dependencies=dependencies, builder=as_builder(value))


class TestDependencyResolver:
    def test_present_value_skips_builder(self) -> None:
        calls: list[str] = []
        spec = _attr("name", (), lambda: calls.append("built") or "built")
        working = {"name": "given"}

        value = DependencyResolver().resolve(spec, working, lambda _: None)

        assert value == "given"
        assert calls == []

    def test_falsy_present_value_is_not_missing(self) -> None:
        spec = _attr("count", (), 10)

        for falsy in (0, False, None, ""):
            working = {"count": falsy}
            assert DependencyResolver().resolve(spec, working, lambda _: None) is falsy

    def test_always_build_calls_builder_with_present_value(self) -> None:
        spec = _attr("count", ("count",), lambda count: count * 2)
        working = {"count": 4}

        value = DependencyResolver().resolve(
            spec,
            working,
            lambda dependency: working[dependency],
            always_build=True,
        )

        assert value == 8
        assert working["count"] == 8

    def test_dependencies_passed_positionally_in_declared_order(self) -> None:
        spec = _attr("full", ("last", "first"), lambda last, first: f"{first} {last}")
        known = {"first": "Ada", "last": "Lovelace"}
        working: dict[str, Any] = {}

        value = DependencyResolver().resolve(spec, working, known.__getitem__)

        assert value == "Ada Lovelace"
        assert working == {"full": "Ada Lovelace"}

    def test_option_without_builder_is_missing(self) -> None:
        spec = OptionSpec(name="region", dependencies=())

        with pytest.raises(FixturaMissingOptionError, match="option `region` has no default value"):
            DependencyResolver().resolve(spec, {}, lambda _: None)


class TestOptionEvaluator:
    def test_defaults_and_passthrough(self) -> None:
        evaluator = OptionEvaluator({"a": _opt("a", value=1)}, attribute_names=())

        assert evaluator.evaluate({"extra": "kept"}) == {"extra": "kept", "a": 1}

    def test_option_depending_on_option(self) -> None:
        specs = {
            "b": _opt("b", ("a",), lambda a: a + "bar"),
            "a": _opt("a", value="foo"),
        }
        evaluator = OptionEvaluator(specs, attribute_names=())

        assert evaluator.evaluate() == {"a": "foo", "b": "foobar"}
        assert evaluator.evaluate({"a": "bar"})["b"] == "barbar"
        assert evaluator.evaluate({"b": "specific"})["b"] == "specific"

    def test_option_builder_runs_once_per_evaluation(self) -> None:
        calls: list[int] = []

        def build_a() -> int:
            calls.append(1)
            return len(calls)

        specs = {
            "a": _opt("a", value=build_a),
            "b": _opt("b", ("a",), lambda a: a),
            "c": _opt("c", ("a",), lambda a: a),
        }

        assert OptionEvaluator(specs, attribute_names=()).evaluate() == {"a": 1, "b": 1, "c": 1}
        assert calls == [1]

    def test_option_cycle(self) -> None:
        specs = {
            "a": _opt("a", ("b",), lambda b: b),
            "b": _opt("b", ("a",), lambda a: a),
        }

        with pytest.raises(FixturaDependencyCycleError) as exc_info:
            OptionEvaluator(specs, attribute_names=()).evaluate()

        assert exc_info.value.path == ("a", "b", "a")

    def test_option_self_dependency_without_value(self) -> None:
        calls: list[Any] = []
        specs = {"a": _opt("a", ("a",), lambda a: calls.append(a))}

        with pytest.raises(FixturaOptionDependencyError, match="option `a` depends on itself"):
            OptionEvaluator(specs, attribute_names=()).evaluate()
        assert calls == []

    def test_option_self_dependency_with_value(self) -> None:
        calls: list[Any] = []
        specs = {"a": _opt("a", ("a",), lambda a: calls.append(a))}

        assert OptionEvaluator(specs, attribute_names=()).evaluate({"a": "given"}) == {"a": "given"}
        assert calls == []

    def test_option_depending_on_attribute(self) -> None:
        specs = {"a": _opt("a", ("name",), lambda name: name)}

        with pytest.raises(FixturaOptionDependencyError, match="cannot depend on attribute `name`"):
            OptionEvaluator(specs, attribute_names={"name"}).evaluate()

    def test_option_depending_on_unknown_name(self) -> None:
        specs = {"a": _opt("a", ("nope",), lambda nope: nope)}

        with pytest.raises(FixturaUnknownDependencyError) as exc_info:
            OptionEvaluator(specs, attribute_names=()).evaluate()

        assert exc_info.value.owner == "a"
        assert exc_info.value.dependency == "nope"

    def test_option_may_depend_on_undeclared_provided_option(self) -> None:
        specs = {"a": _opt("a", ("given",), lambda given: given * 2)}

        assert OptionEvaluator(specs, attribute_names=()).evaluate({"given": 3}) == {
            "given": 3,
            "a": 6,
        }


class TestAttributeEvaluator:
    def test_no_declarations_returns_copy_of_overrides(self) -> None:
        overrides = {"a": 1, "b": [1, 2]}

        result = AttributeEvaluator({}).evaluate(overrides, {})

        assert result == overrides
        assert result is not overrides

    def test_overrides_are_not_mutated(self) -> None:
        specs = {"a": _attr("a", (), 1)}
        overrides = {"b": 2}

        AttributeEvaluator(specs).evaluate(overrides, {})

        assert overrides == {"b": 2}

    def test_declaration_order_does_not_matter(self) -> None:
        specs = {
            "full": _attr("full", ("first", "last"), lambda first, last: f"{first} {last}"),
            "first": _attr("first", (), "Default"),
            "last": _attr("last", (), "Name"),
        }

        assert AttributeEvaluator(specs).evaluate(None, {}) == {
            "full": "Default Name",
            "first": "Default",
            "last": "Name",
        }

    def test_options_take_precedence_in_lookup(self) -> None:
        specs = {
            "value": _attr("value", ("flag",), lambda flag: flag),
            "flag": _attr("flag", (), "attribute"),
        }

        result = AttributeEvaluator(specs).evaluate(None, {"flag": "option"})

        assert result == {"value": "option", "flag": "attribute"}

    def test_cycle_path_starts_at_requested_attribute(self) -> None:
        specs = {
            "fees": _attr("fees", ("total", "rate"), lambda total, rate: total * rate),
            "total": _attr("total", ("fees", "rate"), lambda fees, rate: fees / rate),
        }

        with pytest.raises(
            FixturaDependencyCycleError,
            match="detected a dependency cycle: fees -> total -> fees",
        ):
            AttributeEvaluator(specs).evaluate(None, {"rate": 0.5})

    def test_cycle_broken_by_override(self) -> None:
        specs = {
            "fees": _attr("fees", ("total", "rate"), lambda total, rate: total * rate),
            "total": _attr("total", ("fees", "rate"), lambda fees, rate: fees / rate),
        }

        result = AttributeEvaluator(specs).evaluate({"total": 100}, {"rate": 0.5})

        assert result == {"total": 100, "fees": 50.0}

    def test_longer_cycle_reports_full_path(self) -> None:
        specs = {
            "a": _attr("a", ("b",), lambda b: b),
            "b": _attr("b", ("c",), lambda c: c),
            "c": _attr("c", ("a",), lambda a: a),
        }

        with pytest.raises(FixturaDependencyCycleError) as exc_info:
            AttributeEvaluator(specs).evaluate(None, {})

        assert exc_info.value.path == ("a", "b", "c", "a")

    def test_self_dependency_receives_override(self) -> None:
        def fill_person(person: dict[str, Any] | None) -> dict[str, Any]:
            person = dict(person or {})
            person.setdefault("name", "Bob")
            return person

        specs = {"person": _attr("person", ("person",), fill_person)}

        assert AttributeEvaluator(specs).evaluate({"person": {"age": 55}}, {}) == {
            "person": {"age": 55, "name": "Bob"},
        }
        assert AttributeEvaluator(specs).evaluate(None, {}) == {"person": {"name": "Bob"}}

    def test_self_dependent_builder_runs_once_per_pass(self) -> None:
        calls: list[Any] = []

        def tally(value: int | None) -> int:
            calls.append(value)
            return (value or 0) + 1

        specs = {
            "reader": _attr("reader", ("counter",), lambda counter: counter),
            "counter": _attr("counter", ("counter",), tally),
        }

        result = AttributeEvaluator(specs).evaluate({"counter": 10}, {})

        assert result == {"counter": 11, "reader": 11}
        assert calls == [10]

    def test_undeclared_provided_attribute_can_be_a_dependency(self) -> None:
        specs = {"greeting": _attr("greeting", ("name",), lambda name: f"hi {name}")}

        assert AttributeEvaluator(specs).evaluate({"name": "Ada"}, {}) == {
            "name": "Ada",
            "greeting": "hi Ada",
        }

    def test_unknown_dependency(self) -> None:
        specs = {"greeting": _attr("greeting", ("name",), lambda name: name)}

        with pytest.raises(FixturaUnknownDependencyError, match="`greeting` depends on `name`"):
            AttributeEvaluator(specs).evaluate(None, {})
