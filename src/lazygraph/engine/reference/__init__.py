"""In-process numpy engine used for execution and tests."""

from __future__ import annotations

import numpy as np

from lazygraph.engine.base import EngineCapabilities
from lazygraph.engine.reference.graph import Graph, Operation, OperationBuilder, Output
from lazygraph.engine.reference.schema import OpSchema, get_schema, op_types
from lazygraph.engine.reference.session import Runner, Session
from lazygraph.engine.registry import register_engine


class NumpyEngine:
    name = "numpy"

    def capabilities(self) -> EngineCapabilities:
        return EngineCapabilities(
            name=self.name,
            op_types=op_types(),
            metadata={"numpy": np.__version__},
        )

    def new_graph(self) -> Graph:
        return Graph()

    def new_session(self, graph: Graph) -> Session:
        if not isinstance(graph, Graph):
            raise TypeError(f"NumpyEngine cannot run graphs of type {type(graph).__name__}")
        return Session(graph)


@register_engine("numpy")
def _create_numpy_engine() -> NumpyEngine:
    return NumpyEngine()


__all__ = [
    "NumpyEngine",
    "Graph",
    "Operation",
    "OperationBuilder",
    "Output",
    "OpSchema",
    "Runner",
    "Session",
    "get_schema",
    "op_types",
]
