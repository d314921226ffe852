from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass
class EngineCapabilities:
    name: str
    op_types: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class OutputHandle(Protocol):
    """One output slot of one operation."""

    @property
    def op(self) -> OperationHandle: ...

    @property
    def index(self) -> int: ...


class OperationHandle(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def type(self) -> str: ...

    def output(self, slot: int) -> OutputHandle: ...


class BuilderHandle(Protocol):
    """An operation under construction."""

    def set_attr(self, name: str, value: Any) -> BuilderHandle: ...

    def add_input(self, output: OutputHandle) -> BuilderHandle: ...

    def build(self) -> OperationHandle: ...


class GraphHandle(Protocol):
    def op_builder(self, op_type: str, name: str) -> BuilderHandle: ...

    def operation(self, name: str) -> OperationHandle | None: ...


class RunnerHandle(Protocol):
    def feed(self, name: str, tensor: Any) -> RunnerHandle: ...

    def fetch(self, name: str) -> RunnerHandle: ...

    def run(self) -> Sequence[Any]: ...


class SessionHandle(Protocol):
    """Execution context bound to one graph. Must be closed."""

    @property
    def graph(self) -> GraphHandle: ...

    def runner(self) -> RunnerHandle: ...

    def close(self) -> None: ...

    def __enter__(self) -> SessionHandle: ...

    def __exit__(self, *exc: object) -> None: ...


class Engine(Protocol):
    """Interface for tensor execution engines."""

    def capabilities(self) -> EngineCapabilities: ...

    def new_graph(self) -> GraphHandle: ...

    def new_session(self, graph: GraphHandle) -> SessionHandle: ...
