"""Lazy computation-graph construction and execution."""

from lazygraph.attrs import AttrKind, AttrValue, DType
from lazygraph.errors import (
    BuildError,
    EncodingError,
    EngineNotFoundError,
    ExecutionError,
    LazyGraphError,
    ProgramError,
)
from lazygraph.graph import (
    DeferredNode,
    GraphBuildContext,
    OpProfile,
    build,
    default_graph,
    get_default_context,
    reset_default_context,
)
from lazygraph.ops import (
    abs,
    add,
    assign,
    constant,
    div,
    dot,
    matmul,
    mean,
    minus,
    mult,
    n_args,
    neg,
    placeholder,
    plus,
    pow,
    sigmoid,
    size,
    sub,
    sum,
    tanh,
    times,
    transpose,
    variable,
)
from lazygraph.runtime import (
    feed,
    global_variables_initializer,
    run,
    run_one,
    session,
    session_run,
    with_session,
)

__version__ = "0.1.0"

__all__ = [
    "AttrKind",
    "AttrValue",
    "DType",
    "BuildError",
    "EncodingError",
    "EngineNotFoundError",
    "ExecutionError",
    "LazyGraphError",
    "ProgramError",
    "DeferredNode",
    "GraphBuildContext",
    "OpProfile",
    "build",
    "default_graph",
    "get_default_context",
    "reset_default_context",
    "abs",
    "add",
    "assign",
    "constant",
    "div",
    "dot",
    "matmul",
    "mean",
    "minus",
    "mult",
    "n_args",
    "neg",
    "placeholder",
    "plus",
    "pow",
    "sigmoid",
    "size",
    "sub",
    "sum",
    "tanh",
    "times",
    "transpose",
    "variable",
    "feed",
    "global_variables_initializer",
    "run",
    "run_one",
    "session",
    "session_run",
    "with_session",
]
