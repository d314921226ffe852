"""
Arithmetic and reduction combinators.

Each combinator builds exactly one operation whose inputs are the operands in
order. Host values are wrapped with ``constant``. ``n_args`` lifts a binary
combinator to any number of operands by folding from the left.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from lazygraph.graph.context import GraphBuildContext
from lazygraph.graph.node import DeferredNode, OpProfile, build
from lazygraph.ops.primitives import as_input, constant

BinaryOp = Callable[..., DeferredNode]


def _context_of(
    context: GraphBuildContext | None, *operands: Any
) -> GraphBuildContext | None:
    if context is not None:
        return context
    for operand in operands:
        if isinstance(operand, DeferredNode) and operand.context is not None:
            return operand.context
    return None


def _binary(
    op_type: str,
    a: Any,
    b: Any,
    context: GraphBuildContext | None = None,
    attributes: dict[str, Any] | None = None,
) -> DeferredNode:
    ctx = _context_of(context, a, b)
    left = as_input(a, like=b, context=ctx)
    right = as_input(b, like=a, context=ctx)
    return build(OpProfile(op_type, attributes=attributes or {}, inputs=[left, right]), ctx)


def _unary(op_type: str, a: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    ctx = _context_of(context, a)
    return build(OpProfile(op_type, inputs=[as_input(a, context=ctx)]), ctx)


def add(a: Any, b: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _binary("Add", a, b, context)


def sub(a: Any, b: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _binary("Sub", a, b, context)


def mult(a: Any, b: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _binary("Mul", a, b, context)


def div(a: Any, b: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    """Element-wise division; integer operands truncate toward zero."""
    return _binary("Div", a, b, context)


def pow(a: Any, b: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _binary("Pow", a, b, context)


def matmul(
    a: Any,
    b: Any,
    context: GraphBuildContext | None = None,
    transpose_a: bool = False,
    transpose_b: bool = False,
) -> DeferredNode:
    attributes: dict[str, Any] = {}
    if transpose_a:
        attributes["transpose_a"] = True
    if transpose_b:
        attributes["transpose_b"] = True
    return _binary("MatMul", a, b, context, attributes)


dot = matmul


def tanh(a: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _unary("Tanh", a, context)


def sigmoid(a: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _unary("Sigmoid", a, context)


def abs(a: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _unary("Abs", a, context)


def neg(a: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _unary("Neg", a, context)


def size(a: Any, context: GraphBuildContext | None = None) -> DeferredNode:
    return _unary("Size", a, context)


def _reduction(
    op_type: str,
    t: Any,
    axis: Any,
    keep_dims: bool,
    context: GraphBuildContext | None,
) -> DeferredNode:
    ctx = _context_of(context, t, axis)
    attributes: dict[str, Any] = {"keep_dims": True} if keep_dims else {}
    inputs = [as_input(t, context=ctx), as_input(axis, context=ctx)]
    return build(OpProfile(op_type, attributes=attributes, inputs=inputs), ctx)


def sum(
    t: Any,
    axis: Any = 0,
    keep_dims: bool = False,
    context: GraphBuildContext | None = None,
) -> DeferredNode:
    return _reduction("Sum", t, axis, keep_dims, context)


def mean(
    t: Any,
    axis: Any = 0,
    keep_dims: bool = False,
    context: GraphBuildContext | None = None,
) -> DeferredNode:
    return _reduction("Mean", t, axis, keep_dims, context)


def transpose(
    t: Any,
    perm: Any = None,
    context: GraphBuildContext | None = None,
) -> DeferredNode:
    """Permute dimensions; swaps the two axes of a matrix by default."""
    ctx = _context_of(context, t, perm)
    if perm is None:
        perm = constant([1, 0], context=ctx)
    inputs = [as_input(t, context=ctx), as_input(perm, context=ctx)]
    return build(OpProfile("Transpose", inputs=inputs), ctx)


def n_args(func: BinaryOp) -> Callable[..., DeferredNode]:
    """
    Lift a binary combinator to a variadic one:
    ``f*(x1, x2, ..., xn) == f(...f(f(x1, x2), x3)..., xn)``.
    The fold is a plain loop, so the argument count is unbounded.
    """

    def variadic(*args: Any, context: GraphBuildContext | None = None) -> DeferredNode:
        if not args:
            raise TypeError(f"{func.__name__}() needs at least one operand")
        if len(args) == 1:
            return as_input(args[0], context=_context_of(context, args[0]))
        result = args[0]
        for arg in args[1:]:
            if context is None:
                result = func(result, arg)
            else:
                result = func(result, arg, context=context)
        return result

    variadic.__name__ = f"{func.__name__}_n"
    variadic.__qualname__ = variadic.__name__
    variadic.__doc__ = f"Left fold of ``{func.__name__}`` over one or more operands."
    return variadic


plus = n_args(add)
times = n_args(mult)
minus = n_args(sub)

COMBINATORS: dict[str, Callable[..., DeferredNode]] = {
    "add": add,
    "sub": sub,
    "mult": mult,
    "div": div,
    "pow": pow,
    "matmul": matmul,
    "dot": dot,
    "tanh": tanh,
    "sigmoid": sigmoid,
    "abs": abs,
    "neg": neg,
    "size": size,
    "sum": sum,
    "mean": mean,
    "transpose": transpose,
    "plus": plus,
    "times": times,
    "minus": minus,
}
