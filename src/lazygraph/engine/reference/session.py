from __future__ import annotations

from typing import Any

import numpy as np

from lazygraph.engine.reference.graph import Graph, Operation, execution_plan
from lazygraph.engine.reference.kernels import get_kernel
from lazygraph.engine.reference.schema import ref_input_map
from lazygraph.errors import ExecutionError, LazyGraphError
from lazygraph.utils import get_logger

logger = get_logger(__name__)


def _op_name(name: str) -> str:
    """Accept both ``op`` and ``op:0`` spellings."""
    base, sep, slot = name.rpartition(":")
    if sep and slot.isdigit():
        if int(slot) != 0:
            raise ExecutionError(
                f"Only output slot 0 is available, got '{name}'", code="EEXEC_SLOT"
            )
        return base
    return name


class Runner:
    """Collects feeds and fetches for one execution."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._feeds: dict[str, Any] = {}
        self._fetches: list[str] = []

    def feed(self, name: str, tensor: Any) -> Runner:
        self._feeds[_op_name(name)] = tensor
        return self

    def fetch(self, name: str) -> Runner:
        self._fetches.append(_op_name(name))
        return self

    def run(self) -> list[np.ndarray]:
        return self._session._execute(dict(self._feeds), list(self._fetches))


class Session:
    """Executes a reference graph; variable storage lives here, not in the graph."""

    def __init__(self, graph: Graph) -> None:
        self._graph = graph
        self._variables: dict[str, np.ndarray] = {}
        self._closed = False

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def closed(self) -> bool:
        return self._closed

    def runner(self) -> Runner:
        self._check_open()
        return Runner(self)

    def close(self) -> None:
        if not self._closed:
            self._variables.clear()
            self._closed = True
            logger.debug("session closed")

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def read_variable(self, key: str) -> np.ndarray | None:
        return self._variables.get(key)

    def write_variable(self, key: str, value: np.ndarray) -> None:
        self._variables[key] = np.array(value)

    def _check_open(self) -> None:
        if self._closed:
            raise ExecutionError("Session is closed", code="EEXEC_CLOSED")

    def _lookup(self, name: str, code: str) -> Operation:
        op = self._graph.operation(name)
        if op is None:
            raise ExecutionError(
                f"Operation '{name}' not found in graph", code=code, op_name=name
            )
        return op

    def _execute(self, feeds: dict[str, Any], fetches: list[str]) -> list[np.ndarray]:
        self._check_open()
        if not fetches:
            return []
        fed: dict[str, np.ndarray] = {}
        for name, value in feeds.items():
            op = self._lookup(name, "EEXEC_FEED")
            fed[name] = self._coerce_feed(op, value)
        targets = [self._lookup(name, "EEXEC_FETCH") for name in fetches]
        plan = execution_plan(targets, set(fed), ref_input_map())
        logger.debug("executing %d operation(s) for fetches %s", len(plan), fetches)

        values: dict[str, np.ndarray] = {}
        for op in plan:
            if op.name in fed:
                values[op.name] = fed[op.name]
                continue
            values[op.name] = self._compute(op, values)
        return [np.array(values[name]) for name in fetches]

    def _compute(self, op: Operation, values: dict[str, np.ndarray]) -> np.ndarray:
        kernel = get_kernel(op.type)
        if kernel is None:
            raise ExecutionError(
                f"No kernel registered for '{op.type}'", code="EEXEC_KERNEL", op_name=op.name
            )
        refs = ref_input_map().get(op.type, set())
        args = [
            np.empty(0) if slot in refs else values[inp.op.name]
            for slot, inp in enumerate(op.inputs)
        ]
        try:
            with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
                return np.asarray(kernel(op, args, self))
        except LazyGraphError:
            raise
        except (ArithmeticError, TypeError, ValueError) as exc:
            raise ExecutionError(
                f"{op.type} '{op.name}' failed: {exc}", code="EEXEC_KERNEL", op_name=op.name
            ) from exc

    @staticmethod
    def _coerce_feed(op: Operation, value: Any) -> np.ndarray:
        arr = np.array(value)
        if op.dtype is None or arr.dtype == op.dtype.numpy:
            return arr
        if not np.can_cast(arr.dtype, op.dtype.numpy, casting="same_kind"):
            raise ExecutionError(
                f"Cannot feed {arr.dtype.name} value to '{op.name}' of type "
                f"{op.dtype.value}",
                code="EEXEC_FEED_DTYPE",
                op_name=op.name,
            )
        return arr.astype(op.dtype.numpy)
