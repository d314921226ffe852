from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lazygraph.attrs import DType
from lazygraph.errors import EncodingError, ProgramError
from lazygraph.graph.context import GraphBuildContext
from lazygraph.graph.node import DeferredNode
from lazygraph.ops.math import COMBINATORS
from lazygraph.ops.primitives import assign, constant, placeholder, variable
from lazygraph.parsers.base import Parser
from lazygraph.runtime.runner import session_run
from lazygraph.utils import get_logger

logger = get_logger(__name__)

_PRIMITIVES = ("constant", "placeholder", "variable", "assign")


@dataclass
class Program:
    context: GraphBuildContext
    nodes: dict[str, DeferredNode] = field(default_factory=dict)
    targets: list[DeferredNode] = field(default_factory=list)
    feed: dict[str, Any] = field(default_factory=dict)

    def run(self, feed: dict[str, Any] | None = None) -> Any:
        """
        Execute the targets in a fresh session; ``feed`` extends the program's
        feeds. Keys naming a node id feed that node, and only when a target
        uses it; other keys are passed on as operation names.
        """
        reachable = {id(node) for target in self.targets for node in target.walk()}
        feed_map: dict[Any, Any] = {}
        for key, value in {**self.feed, **(feed or {})}.items():
            node = self.nodes.get(key)
            if node is None:
                feed_map[key] = value
            elif id(node) in reachable:
                feed_map[node] = value
            else:
                logger.debug("feed '%s' is not used by the run targets", key)
        return session_run(self.targets, feed_map=feed_map, context=self.context)


class ProgramParser(Parser):
    """
    Parse a JSON graph program:

        {"nodes": [{"id": "x", "op": "placeholder", "dtype": "float64", "name": "x"},
                   {"id": "w", "op": "variable", "value": 2.0},
                   {"id": "y", "op": "mult", "args": ["w", "x"]}],
         "run": ["y"],
         "feed": {"x": 3.0}}

    String arguments refer to earlier node ids; anything else is a literal.
    ``run`` defaults to the last node.
    """

    def __init__(self, context: GraphBuildContext | None = None) -> None:
        self._context = context

    def parse(self, source: Any) -> Program:
        doc = self._load(source)
        context = self._context or GraphBuildContext()
        program = Program(context=context)

        entries = doc.get("nodes")
        if not isinstance(entries, list) or not entries:
            raise ProgramError("Program needs a non-empty 'nodes' list", code="EPROGRAM_NODES")
        for idx, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ProgramError(f"Node {idx} must be an object", code="EPROGRAM_NODE")
            node_id = entry.get("id")
            if not isinstance(node_id, str) or not node_id:
                raise ProgramError(f"Node {idx} needs a string 'id'", code="EPROGRAM_NODE")
            if node_id in program.nodes:
                raise ProgramError(f"Duplicate node id '{node_id}'", code="EPROGRAM_DUP_ID")
            try:
                program.nodes[node_id] = self._build_node(entry, program.nodes, context)
            except (EncodingError, ValueError, TypeError) as exc:
                raise ProgramError(f"Node '{node_id}': {exc}") from exc

        run_ids = doc.get("run") or [entries[-1]["id"]]
        if isinstance(run_ids, str):
            run_ids = [run_ids]
        for node_id in run_ids:
            program.targets.append(self._ref(node_id, program.nodes))

        feed = doc.get("feed") or {}
        if not isinstance(feed, dict):
            raise ProgramError("'feed' must be an object", code="EPROGRAM_FEED")
        program.feed = dict(feed)
        return program

    def _build_node(
        self,
        entry: dict[str, Any],
        nodes: dict[str, DeferredNode],
        context: GraphBuildContext,
    ) -> DeferredNode:
        op = entry.get("op")
        name = entry.get("name")
        dtype = entry.get("dtype")
        if op == "constant":
            return constant(
                self._require(entry, "value"),
                dtype=DType.parse(dtype) if dtype else None,
                node_name=name,
                context=context,
            )
        if op == "placeholder":
            if not dtype:
                raise ProgramError("placeholder needs a 'dtype'", code="EPROGRAM_FIELD")
            shape = entry.get("shape")
            return placeholder(
                DType.parse(dtype),
                node_name=name,
                shape=tuple(shape) if shape is not None else None,
                context=context,
            )
        if op == "variable":
            attributes = {"dtype": DType.parse(dtype)} if dtype else None
            return variable(
                self._require(entry, "value"),
                node_name=name,
                attributes=attributes,
                context=context,
            )
        args = [self._arg(a, nodes) for a in entry.get("args", [])]
        params = entry.get("params") or {}
        if op == "assign":
            if len(args) != 2:
                raise ProgramError("assign takes two args", code="EPROGRAM_ARGS")
            return assign(args[0], args[1], context=context)
        combinator = COMBINATORS.get(op) if isinstance(op, str) else None
        if combinator is None:
            known = ", ".join(list(_PRIMITIVES) + sorted(COMBINATORS))
            raise ProgramError(f"Unknown op '{op}' (known: {known})", code="EPROGRAM_OP")
        if not args:
            raise ProgramError(f"'{op}' needs at least one arg", code="EPROGRAM_ARGS")
        return combinator(*args, context=context, **params)

    @staticmethod
    def _require(entry: dict[str, Any], key: str) -> Any:
        if key not in entry:
            raise ProgramError(
                f"'{entry.get('op')}' node '{entry.get('id')}' needs '{key}'",
                code="EPROGRAM_FIELD",
            )
        return entry[key]

    def _arg(self, value: Any, nodes: dict[str, DeferredNode]) -> Any:
        if isinstance(value, str):
            return self._ref(value, nodes)
        return value

    @staticmethod
    def _ref(node_id: Any, nodes: dict[str, DeferredNode]) -> DeferredNode:
        node = nodes.get(node_id) if isinstance(node_id, str) else None
        if node is None:
            raise ProgramError(f"Unknown node reference '{node_id}'", code="EPROGRAM_REF")
        return node

    @staticmethod
    def _load(source: Any) -> dict[str, Any]:
        if isinstance(source, dict):
            return source
        if isinstance(source, (str, Path)):
            path = Path(source)
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise ProgramError(f"Cannot read program {path}: {exc}", code="EPROGRAM_IO") from exc
            try:
                doc = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ProgramError(f"Invalid JSON in {path}: {exc}", code="EPROGRAM_JSON") from exc
            if not isinstance(doc, dict):
                raise ProgramError("Program must be a JSON object", code="EPROGRAM_JSON")
            return doc
        raise TypeError("Unsupported program source type")
