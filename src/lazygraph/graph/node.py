"""
Deferred nodes: an expression tree describing operations that are only
materialized when resolved against a graph.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Union

from lazygraph.attrs import AttrValue, DType, coerce_attr
from lazygraph.engine.base import GraphHandle, OutputHandle
from lazygraph.errors import BuildError
from lazygraph.graph.context import GraphBuildContext, get_default_context
from lazygraph.utils import get_logger

logger = get_logger(__name__)

Input = Union["DeferredNode", OutputHandle]


@dataclass
class OpProfile:
    operation: str
    node_name: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    inputs: list[Input] = field(default_factory=list)

    def merged(self, overrides: Mapping[str, Any]) -> OpProfile:
        """Shallow merge; ``attributes`` overrides are merged key by key."""
        updates = dict(overrides)
        if "attributes" in updates:
            updates["attributes"] = {**self.attributes, **updates["attributes"]}
        if "inputs" in updates:
            updates["inputs"] = list(updates["inputs"])
        return replace(self, **updates)


class DeferredNode:
    """
    A not-yet-built operation. ``resolve(graph)`` (or calling the node)
    appends a brand-new operation, plus any deferred inputs, to the graph on
    every call and returns its output slot 0.
    """

    def __init__(self, profile: OpProfile, context: GraphBuildContext | None = None) -> None:
        self.profile = profile
        self.context = context

    @property
    def operation(self) -> str:
        return self.profile.operation

    @property
    def node_name(self) -> str | None:
        return self.profile.node_name

    @property
    def inputs(self) -> list[Input]:
        return self.profile.inputs

    @property
    def attributes(self) -> dict[str, Any]:
        return self.profile.attributes

    def resolve(self, graph: GraphHandle | None = None) -> OutputHandle:
        return Resolver(graph, self.context).resolve(self)

    def __call__(self, graph: GraphHandle | None = None) -> OutputHandle:
        return self.resolve(graph)

    def walk(self) -> Iterator[DeferredNode]:
        """Pre-order traversal over distinct deferred nodes, without recursion."""
        seen: set[int] = set()
        stack: list[DeferredNode] = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            for inp in reversed(node.inputs):
                if isinstance(inp, DeferredNode):
                    stack.append(inp)

    def describe(self) -> str:
        return f"{self.operation}({self.node_name})" if self.node_name else self.operation

    def __repr__(self) -> str:
        return f"<DeferredNode {self.describe()} inputs={len(self.inputs)}>"

    def __add__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.add(self, other)

    def __radd__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.add(other, self)

    def __sub__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.sub(self, other)

    def __rsub__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.sub(other, self)

    def __mul__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.mult(self, other)

    def __rmul__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.mult(other, self)

    def __truediv__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.div(self, other)

    def __rtruediv__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.div(other, self)

    def __pow__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.pow(self, other)

    def __rpow__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.pow(other, self)

    def __matmul__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.matmul(self, other)

    def __rmatmul__(self, other: Any) -> DeferredNode:
        from lazygraph.ops import math

        return math.matmul(other, self)

    def __neg__(self) -> DeferredNode:
        from lazygraph.ops import math

        return math.neg(self)


def build(profile: OpProfile, context: GraphBuildContext | None = None) -> DeferredNode:
    """Wrap a profile in a deferred node. Nothing is validated here."""
    return DeferredNode(profile, context)


class Resolver:
    """
    One resolution pass. Each distinct deferred node reachable from the root
    is materialized once per pass; a new pass builds everything again.
    """

    def __init__(
        self, graph: GraphHandle | None = None, context: GraphBuildContext | None = None
    ) -> None:
        self.context = context or get_default_context()
        self.graph = graph if graph is not None else self.context.graph
        self.outputs: dict[int, OutputHandle] = {}
        # requested node name -> name actually given in this pass
        self.renamed: dict[str, str] = {}
        self._pinned: list[DeferredNode] = []

    def output_for(self, node: DeferredNode) -> OutputHandle | None:
        return self.outputs.get(id(node))

    def feed_name(self, key: str | DeferredNode) -> str | None:
        """Translate a feed key to the operation name built in this pass."""
        if isinstance(key, DeferredNode):
            output = self.output_for(key)
            return None if output is None else output.op.name
        return self.renamed.get(key, key)

    def resolve(self, root: DeferredNode | OutputHandle) -> OutputHandle:
        if not isinstance(root, DeferredNode):
            return root
        created = 0
        with self.context.lock:
            stack: list[tuple[DeferredNode, bool]] = [(root, False)]
            while stack:
                node, expanded = stack.pop()
                if id(node) in self.outputs:
                    continue
                if expanded:
                    self.outputs[id(node)] = self._materialize(node)
                    self._pinned.append(node)
                    created += 1
                    continue
                stack.append((node, True))
                for inp in reversed(node.inputs):
                    if isinstance(inp, DeferredNode) and id(inp) not in self.outputs:
                        stack.append((inp, False))
        output = self.outputs[id(root)]
        logger.debug("resolved %s as '%s' (%d new operation(s))", root.describe(), output.op.name, created)
        return output

    def _materialize(self, node: DeferredNode) -> OutputHandle:
        profile = node.profile
        name = self.context.names.allocate(self.graph, profile.operation, profile.node_name)
        if profile.node_name is not None and name != profile.node_name:
            self.renamed[profile.node_name] = name
        builder = self.graph.op_builder(profile.operation, name)
        for key, value in profile.attributes.items():
            try:
                attr = coerce_attr(value)
            except TypeError as exc:
                raise BuildError(
                    f"Attribute '{key}' of '{name}': {exc}", code="EBUILD_ATTR_KIND", op_name=name
                ) from exc
            builder = builder.set_attr(key, attr)
        for inp in profile.inputs:
            if isinstance(inp, DeferredNode):
                builder = builder.add_input(self.outputs[id(inp)])
            else:
                builder = builder.add_input(inp)
        return builder.build().output(0)


_DTYPE_PASSTHROUGH = frozenset(
    {
        "Abs",
        "Add",
        "Assign",
        "Div",
        "Identity",
        "MatMul",
        "Mean",
        "Mul",
        "Neg",
        "Pow",
        "Sigmoid",
        "Sub",
        "Sum",
        "Tanh",
        "Transpose",
    }
)


def static_dtype(value: Any) -> DType | None:
    """Best-effort element type of a node, read from its profile without building."""
    current = value
    while True:
        if isinstance(current, DeferredNode):
            dtype = current.attributes.get("dtype")
            if dtype is not None:
                raw = dtype.value if isinstance(dtype, AttrValue) else dtype
                try:
                    return DType.parse(raw)
                except (TypeError, ValueError):
                    return None
            if current.operation == "Size":
                return DType.INT32
            if current.operation in _DTYPE_PASSTHROUGH and current.inputs:
                current = current.inputs[0]
                continue
            return None
        dtype = getattr(current, "dtype", None)
        return dtype if isinstance(dtype, DType) else None
