"""Async persistence: ``create`` returns an awaitable once a hook is async.

``build`` stays synchronous, so the same factory serves both worlds.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fixtura import FactoryRegistry


class Database:
    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []

    async def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        await asyncio.sleep(0)
        self.rows.append(row)
        return row


async def run() -> None:
    database = Database()
    registry = FactoryRegistry()
    registry.define("user").sequence("id").on_create(
        lambda user, _options: database.insert(user),
    )

    users = await registry.create_list("user", 3)
    print(f"ids={[user['id'] for user in users]}")  # => ids=[1, 2, 3]
    print(f"saved={len(database.rows)}")  # => saved=3

    built = registry.build("user")
    print(f"build_is_sync={isinstance(built, dict)}")  # => build_is_sync=True


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
