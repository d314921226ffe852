from __future__ import annotations

import itertools
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lazygraph.engine.base import Engine, GraphHandle, SessionHandle
from lazygraph.engine.registry import create_engine
from lazygraph.utils import get_logger

if TYPE_CHECKING:
    from lazygraph.graph.node import DeferredNode

logger = get_logger(__name__)


class NameAllocator:
    """
    Hands out operation names that are unique within a graph.
    Generated names carry a monotonic per-prefix suffix; a requested name is
    used as-is only while the graph does not already contain it.

    ``fresh`` and ``unique`` hand out names outside any graph (variable
    storage keys); neither returns a name it has returned before.
    """

    def __init__(self) -> None:
        self._counters: dict[str, itertools.count] = {}
        self._issued: set[str] = set()
        self._lock = threading.Lock()

    def _counter(self, prefix: str) -> itertools.count:
        return self._counters.setdefault(prefix, itertools.count(1))

    def _next(self, prefix: str) -> int:
        with self._lock:
            return next(self._counter(prefix))

    def allocate(self, graph: GraphHandle, op_type: str, requested: str | None = None) -> str:
        if requested is not None and graph.operation(requested) is None:
            return requested
        prefix = requested or op_type
        while True:
            candidate = f"{prefix}_{self._next(prefix)}"
            if graph.operation(candidate) is None:
                return candidate

    def fresh(self, prefix: str) -> str:
        """A new ``<prefix>_<n>`` name not handed out before."""
        with self._lock:
            counter = self._counter(prefix)
            candidate = f"{prefix}_{next(counter)}"
            while candidate in self._issued:
                candidate = f"{prefix}_{next(counter)}"
            self._issued.add(candidate)
            return candidate

    def unique(self, requested: str) -> str:
        """``requested`` itself the first time, then ``<requested>_<n>``."""
        with self._lock:
            candidate = requested
            counter = self._counter(requested)
            while candidate in self._issued:
                candidate = f"{requested}_{next(counter)}"
            self._issued.add(candidate)
            return candidate


@dataclass(frozen=True)
class VariableBinding:
    variable: DeferredNode
    initializer: DeferredNode


class GraphBuildContext:
    """
    Owns the default graph of a build, its name allocator and its variable
    registry. The registry only grows; initializers run in declaration order.
    """

    def __init__(
        self,
        engine: Engine | str | None = None,
        graph: GraphHandle | None = None,
    ) -> None:
        self.engine: Engine = (
            engine if engine is not None and not isinstance(engine, str) else create_engine(engine)
        )
        self.graph: GraphHandle = graph if graph is not None else self.engine.new_graph()
        self.names = NameAllocator()
        self.lock = threading.RLock()
        self._variables: list[VariableBinding] = []

    def declare_variable(
        self, variable: DeferredNode, initializer: DeferredNode
    ) -> VariableBinding:
        binding = VariableBinding(variable=variable, initializer=initializer)
        with self.lock:
            self._variables.append(binding)
            count = len(self._variables)
        logger.debug("declared variable #%d (%s)", count, variable.describe())
        return binding

    @property
    def variables(self) -> tuple[VariableBinding, ...]:
        with self.lock:
            return tuple(self._variables)

    def variable_initializers(self) -> list[DeferredNode]:
        """Snapshot of the initializer nodes, in declaration order."""
        return [binding.initializer for binding in self.variables]

    def clear_variables(self) -> None:
        with self.lock:
            self._variables.clear()

    def new_session(self, graph: GraphHandle | None = None) -> SessionHandle:
        return self.engine.new_session(self.graph if graph is None else graph)

    @contextmanager
    def as_default(self) -> Iterator[GraphBuildContext]:
        previous = set_default_context(self)
        try:
            yield self
        finally:
            set_default_context(previous)


_default_context: GraphBuildContext | None = None
_default_lock = threading.Lock()


def get_default_context() -> GraphBuildContext:
    global _default_context
    with _default_lock:
        if _default_context is None:
            _default_context = GraphBuildContext()
        return _default_context


def set_default_context(context: GraphBuildContext | None) -> GraphBuildContext | None:
    """Install ``context`` as the process default and return the previous one."""
    global _default_context
    with _default_lock:
        previous = _default_context
        _default_context = context
        return previous


def reset_default_context(engine: Engine | str | None = None) -> GraphBuildContext:
    """Replace the default context with a fresh one (new graph, empty registry)."""
    context = GraphBuildContext(engine)
    set_default_context(context)
    return context


def default_graph() -> GraphHandle:
    return get_default_context().graph
