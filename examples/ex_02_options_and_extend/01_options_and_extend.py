"""Options steer builders without ending up in the built object.

Child factories extend a parent by name and add their own attributes.
"""

from __future__ import annotations

from fixtura import FactoryRegistry


def main() -> None:
    registry = FactoryRegistry()
    registry.define("person").attr("name", "Ada").option("include_pet", False).attr(
        "pet",
        ["include_pet"],
        lambda include_pet: "cat" if include_pet else None,
    )
    registry.define("admin").extend("person").attr("role", "admin")

    plain = registry.build("admin")
    print(f"pet={plain['pet']}")  # => pet=None

    admin = registry.build("admin", options={"include_pet": True})
    print(f"pet={admin['pet']}")  # => pet=cat
    print(f"role={admin['role']}")  # => role=admin
    print(f"option_in_object={'include_pet' in admin}")  # => option_in_object=False
    print(f"parent_has_role={'role' in registry.build('person')}")  # => parent_has_role=False


if __name__ == "__main__":
    main()
