from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lazygraph.attrs import AttrValue, DType, coerce_attr
from lazygraph.engine.reference.schema import check_operation
from lazygraph.errors import BuildError


@dataclass(eq=False)
class Output:
    op: Operation
    index: int = 0

    @property
    def name(self) -> str:
        return f"{self.op.name}:{self.index}"

    @property
    def dtype(self) -> DType | None:
        return self.op.dtype

    def __repr__(self) -> str:
        return f"<Output {self.name} type={self.op.type}>"


@dataclass(eq=False)
class Operation:
    name: str
    type: str
    inputs: list[Output]
    attributes: dict[str, AttrValue]
    graph: Graph = field(repr=False)
    dtype: DType | None = None
    index: int = 0
    num_outputs: int = 1

    def output(self, slot: int) -> Output:
        if not 0 <= slot < self.num_outputs:
            raise BuildError(
                f"Operation '{self.name}' has no output slot {slot}",
                code="EBUILD_OUTPUT",
                op_name=self.name,
            )
        return Output(self, slot)

    def attr(self, name: str, default: Any = None) -> Any:
        value = self.attributes.get(name)
        return default if value is None else value.value


class OperationBuilder:
    """Accumulates attributes and inputs; the graph only changes on build()."""

    def __init__(self, graph: Graph, op_type: str, name: str) -> None:
        self._graph = graph
        self._op_type = op_type
        self._name = name
        self._attrs: dict[str, AttrValue] = {}
        self._inputs: list[Output] = []
        self._built = False

    def set_attr(self, name: str, value: Any) -> OperationBuilder:
        try:
            self._attrs[name] = coerce_attr(value)
        except TypeError as exc:
            raise BuildError(
                f"Attribute '{name}' of '{self._name}': {exc}",
                code="EBUILD_ATTR_KIND",
                op_name=self._name,
            ) from exc
        return self

    def add_input(self, output: Any) -> OperationBuilder:
        if not isinstance(output, Output):
            raise BuildError(
                f"Input to '{self._name}' is not an output reference: {output!r}",
                code="EBUILD_INPUT",
                op_name=self._name,
            )
        if output.op.graph is not self._graph:
            raise BuildError(
                f"Input '{output.name}' to '{self._name}' belongs to another graph",
                code="EBUILD_FOREIGN_INPUT",
                op_name=self._name,
            )
        self._inputs.append(output)
        return self

    def build(self) -> Operation:
        if self._built:
            raise BuildError(
                f"Builder for '{self._name}' was already finalized",
                code="EBUILD_FINALIZED",
                op_name=self._name,
            )
        if self._name in self._graph.operations:
            raise BuildError(
                f"Duplicate operation name '{self._name}'",
                code="EBUILD_DUP_NAME",
                op_name=self._name,
            )
        dtype = check_operation(self._op_type, self._name, self._attrs, self._inputs)
        op = Operation(
            name=self._name,
            type=self._op_type,
            inputs=list(self._inputs),
            attributes=dict(self._attrs),
            graph=self._graph,
            dtype=dtype,
            index=len(self._graph.operations),
        )
        self._graph.operations[op.name] = op
        self._built = True
        return op


@dataclass(eq=False)
class Graph:
    operations: dict[str, Operation] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def op_builder(self, op_type: str, name: str) -> OperationBuilder:
        return OperationBuilder(self, op_type, name)

    def operation(self, name: str) -> Operation | None:
        return self.operations.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.operations

    def __len__(self) -> int:
        return len(self.operations)

    def __iter__(self):
        return iter(self.operations.values())


def execution_plan(
    fetches: list[Operation], fed: set[str], ref_inputs: dict[str, set[int]]
) -> list[Operation]:
    """
    Return the operations needed to compute ``fetches`` in dependency order.
    Fed operations are treated as sources; reference inputs (e.g. the
    variable slot of Assign) are not evaluated.
    """
    needed: dict[str, Operation] = {}
    stack = list(fetches)
    while stack:
        op = stack.pop()
        if op.name in needed:
            continue
        needed[op.name] = op
        if op.name in fed:
            continue
        skip = ref_inputs.get(op.type, set())
        for slot, inp in enumerate(op.inputs):
            if slot not in skip and inp.op.name not in needed:
                stack.append(inp.op)
    # Graphs are append-only and inputs must exist before a consumer is built,
    # so creation order is a valid topological order.
    return sorted(needed.values(), key=lambda op: op.index)
