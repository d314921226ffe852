from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from lazygraph.config import load_settings
from lazygraph.engine.base import Engine
from lazygraph.errors import EngineNotFoundError


@dataclass
class RegisteredEngine:
    name: str
    factory: Callable[[], Engine]


class EngineRegistry:
    def __init__(self) -> None:
        self._items: dict[str, RegisteredEngine] = {}

    def register(self, name: str, factory: Callable[[], Engine]) -> None:
        self._items[name] = RegisteredEngine(name=name, factory=factory)

    def get(self, name: str) -> RegisteredEngine | None:
        return self._items.get(name)

    def create(self, name: str) -> Engine:
        item = self.get(name)
        if not item:
            known = ", ".join(sorted(self._items)) or "<none>"
            raise EngineNotFoundError(f"Engine not found: {name} (known: {known})")
        return item.factory()

    def names(self) -> list[str]:
        return sorted(self._items)


global_registry = EngineRegistry()


def register_engine(name: str) -> Callable[[Callable[[], Engine]], Callable[[], Engine]]:
    def wrapper(factory: Callable[[], Engine]) -> Callable[[], Engine]:
        global_registry.register(name, factory)
        return factory

    return wrapper


def create_engine(name: str | None = None) -> Engine:
    """Instantiate an engine by name; defaults to the configured engine."""
    return global_registry.create(name or load_settings().engine)
