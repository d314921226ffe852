"""
Executing deferred nodes.

``session_run`` is the top-level entry point. Each call runs in three phases:

1. every variable initializer registered in the build context is resolved
   and executed, in declaration order, on every call;
2. all but the last of the requested nodes are executed for effect;
3. the last node is executed and its tensor decoded into a host value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from contextlib import nullcontext
from typing import Any, Union

from lazygraph.codec import decode, encode
from lazygraph.engine.base import GraphHandle, OutputHandle, RunnerHandle, SessionHandle
from lazygraph.errors import ExecutionError
from lazygraph.graph.context import GraphBuildContext, get_default_context
from lazygraph.graph.node import DeferredNode, Resolver
from lazygraph.utils import get_logger

logger = get_logger(__name__)

FeedKey = Union[str, DeferredNode]
FeedMap = Mapping[FeedKey, Any]


def session(
    graph: GraphHandle | None = None, context: GraphBuildContext | None = None
) -> SessionHandle:
    """Open a session over ``graph`` (default: the context's graph)."""
    ctx = context or get_default_context()
    return ctx.new_session(graph)


def feed(runner: RunnerHandle, feed_map: Mapping[str, Any]) -> RunnerHandle:
    """Bind each name in ``feed_map`` to its encoded value."""
    for name, value in feed_map.items():
        runner = runner.feed(name, encode(value))
    return runner


def run(runner: RunnerHandle, name: str) -> Sequence[Any]:
    return runner.fetch(name).run()


def global_variables_initializer(context: GraphBuildContext | None = None) -> list[DeferredNode]:
    return (context or get_default_context()).variable_initializers()


def _check_node_feeds(feed_map: FeedMap | None, resolvers: Sequence[Resolver]) -> None:
    """Every node-keyed feed must reach a node that is being run."""
    for key in feed_map or {}:
        if not isinstance(key, DeferredNode):
            continue
        if not any(r.output_for(key) is not None for r in resolvers):
            raise ExecutionError(
                f"Feed key {key.describe()} is not part of the nodes being run",
                code="EEXEC_FEED",
            )


def _execute(
    session: SessionHandle,
    output: OutputHandle,
    resolver: Resolver | None,
    feed_map: FeedMap | None,
) -> Any:
    names: dict[str, Any] = {}
    for key, value in (feed_map or {}).items():
        if resolver is not None:
            name = resolver.feed_name(key)
        elif isinstance(key, str):
            name = key
        else:
            name = None
        if name is None:
            # keyed by a node that another step resolved
            continue
        names[name] = value
    runner = feed(session.runner(), names)
    return run(runner, output.op.name)[0]


def run_one(
    graph: GraphHandle,
    session: SessionHandle,
    node: DeferredNode | OutputHandle,
    feed_map: FeedMap | None = None,
    context: GraphBuildContext | None = None,
) -> Any:
    """
    Resolve ``node`` against ``graph``, run it in ``session`` and return the
    raw (undecoded) result tensor.
    """
    if isinstance(node, DeferredNode):
        resolver = Resolver(graph, context or node.context)
        output = resolver.resolve(node)
    else:
        resolver = None
        output = node
    _check_node_feeds(feed_map, [resolver] if resolver is not None else [])
    return _execute(session, output, resolver, feed_map)


def flatten(ops: Iterable[Any]) -> list[Any]:
    """Flatten arbitrarily nested lists/tuples of nodes, preserving order."""
    flat: list[Any] = []
    stack = [iter(ops)]
    while stack:
        try:
            item = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        if isinstance(item, (list, tuple)):
            stack.append(iter(item))
        else:
            flat.append(item)
    return flat


def session_run(
    ops: Iterable[Any],
    graph: GraphHandle | None = None,
    session: SessionHandle | None = None,
    *,
    feed_map: FeedMap | None = None,
    context: GraphBuildContext | None = None,
    initialize: bool = True,
) -> Any:
    """
    Run a list of nodes and return the decoded value of the last one.

    Every registered variable initializer runs first, on every call, so
    repeated calls reset variables to their initial values. Pass
    ``initialize=False`` with a session you keep between calls to skip that.
    Without ``session`` a fresh one is opened over the graph and closed before
    returning.
    """
    flat = flatten(ops)
    if not flat:
        raise ValueError("session_run() needs at least one node to run")
    ctx = context or get_default_context()
    if graph is None:
        graph = session.graph if session is not None else ctx.graph

    with nullcontext(session) if session is not None else ctx.new_session(graph) as sess:
        if initialize:
            initializers = ctx.variable_initializers()
            logger.debug("initializing %d variable(s)", len(initializers))
            for init in initializers:
                run_one(graph, sess, init, context=ctx)

        # Build every node before executing any, so that feed names refer to
        # operations that already exist when each node runs.
        resolved: list[tuple[OutputHandle, Resolver | None]] = []
        for node in flat:
            if isinstance(node, DeferredNode):
                resolver = Resolver(graph, ctx)
                resolved.append((resolver.resolve(node), resolver))
            else:
                resolved.append((node, None))
        _check_node_feeds(feed_map, [r for _, r in resolved if r is not None])

        *effects, last = resolved
        for step, (output, resolver) in enumerate(effects):
            logger.debug("running step %d/%d '%s'", step + 1, len(resolved), output.op.name)
            _execute(sess, output, resolver, feed_map)

        output, resolver = last
        logger.debug("running final step '%s'", output.op.name)
        return decode(_execute(sess, output, resolver, feed_map))


def with_session(*ops: Any, **kwargs: Any) -> Any:
    """``session_run`` over the positional nodes."""
    return session_run(list(ops), **kwargs)
