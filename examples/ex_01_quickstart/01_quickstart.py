"""Quickstart: declare a factory once and build objects from it.

Sequences hand out unique numbers, and attributes can be computed from other
attributes. Anything passed to ``build`` wins over the declared defaults.
"""

from __future__ import annotations

from typing import Any

from fixtura import FactoryRegistry


class User:
    def __init__(self, attributes: dict[str, Any]) -> None:
        self.id = attributes["id"]
        self.name = attributes["name"]
        self.email = attributes["email"]


def main() -> None:
    registry = FactoryRegistry()
    registry.define("user", User).sequence("id").attr("name", "Ada").attr(
        "email",
        ["name", "id"],
        lambda name, user_id: f"{name.lower()}{user_id}@example.com",
    )

    user = registry.build("user")
    print(f"id={user.id}")  # => id=1
    print(f"email={user.email}")  # => email=ada1@example.com

    grace = registry.build("user", {"name": "Grace"})
    print(f"email={grace.email}")  # => email=grace2@example.com

    registry.reset("user")
    print(f"after_reset={registry.build('user').id}")  # => after_reset=1


if __name__ == "__main__":
    main()
