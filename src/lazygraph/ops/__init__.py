"""Primitive constructors and operator combinators."""

from .math import (
    COMBINATORS,
    abs,
    add,
    div,
    dot,
    matmul,
    mean,
    minus,
    mult,
    n_args,
    neg,
    plus,
    pow,
    sigmoid,
    size,
    sub,
    sum,
    tanh,
    times,
    transpose,
)
from .primitives import as_input, assign, constant, is_graph_value, placeholder, variable

__all__ = [
    "COMBINATORS",
    "abs",
    "add",
    "as_input",
    "assign",
    "constant",
    "div",
    "dot",
    "is_graph_value",
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
]
