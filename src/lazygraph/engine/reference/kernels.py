from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np

from lazygraph.errors import ExecutionError

if TYPE_CHECKING:
    from lazygraph.engine.reference.graph import Operation
    from lazygraph.engine.reference.session import Session

Kernel = Callable[["Operation", list[np.ndarray], "Session"], np.ndarray]

_REGISTRY: dict[str, Kernel] = {}


def register_kernel(op_type: str) -> Callable[[Kernel], Kernel]:
    def wrapper(fn: Kernel) -> Kernel:
        _REGISTRY[op_type] = fn
        return fn

    return wrapper


def get_kernel(op_type: str) -> Kernel | None:
    return _REGISTRY.get(op_type)


def _variable_key(op: Operation) -> str:
    return op.attr("shared_name") or op.name


def _axes(axis: np.ndarray) -> int | tuple[int, ...]:
    if axis.ndim == 0:
        return int(axis)
    return tuple(int(a) for a in axis.reshape(-1))


@register_kernel("Const")
def const(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.array(op.attr("value"), dtype=op.dtype.numpy if op.dtype else None)


@register_kernel("Placeholder")
def placeholder(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    raise ExecutionError(
        f"You must feed a value for placeholder '{op.name}'",
        code="EEXEC_FEED_MISSING",
        op_name=op.name,
    )


@register_kernel("Variable")
def variable(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    value = session.read_variable(_variable_key(op))
    if value is None:
        raise ExecutionError(
            f"Attempting to use uninitialized variable '{op.name}'",
            code="EEXEC_UNINITIALIZED",
            op_name=op.name,
        )
    return value.copy()


@register_kernel("Assign")
def assign(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    var_op = op.inputs[0].op
    value = inputs[1]
    expected = var_op.attr("shape")
    if op.attr("validate_shape", True) and expected is not None:
        if tuple(value.shape) != tuple(expected):
            raise ExecutionError(
                f"Assign '{op.name}': shape {tuple(value.shape)} does not match "
                f"variable shape {tuple(expected)}",
                code="EEXEC_SHAPE",
                op_name=op.name,
            )
    session.write_variable(_variable_key(var_op), value)
    return value.copy()


@register_kernel("Identity")
def identity(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return inputs[0]


@register_kernel("Add")
def add(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.add(inputs[0], inputs[1])


@register_kernel("Sub")
def sub(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.subtract(inputs[0], inputs[1])


@register_kernel("Mul")
def mul(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.multiply(inputs[0], inputs[1])


@register_kernel("Div")
def div(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    a, b = inputs
    if np.issubdtype(a.dtype, np.integer) and np.issubdtype(b.dtype, np.integer):
        if np.any(b == 0):
            raise ExecutionError(
                f"Integer division by zero in '{op.name}'",
                code="EEXEC_KERNEL",
                op_name=op.name,
            )
        # integer division truncates toward zero
        quotient = np.abs(a) // np.abs(b)
        return (np.sign(a) * np.sign(b) * quotient).astype(np.result_type(a, b))
    return np.true_divide(a, b)


@register_kernel("Pow")
def pow_(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.power(inputs[0], inputs[1])


@register_kernel("MatMul")
def matmul(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    a, b = inputs
    if a.ndim != 2 or b.ndim != 2:
        raise ExecutionError(
            f"MatMul '{op.name}' requires rank-2 inputs, got {a.ndim} and {b.ndim}",
            code="EEXEC_SHAPE",
            op_name=op.name,
        )
    if op.attr("transpose_a", False):
        a = a.T
    if op.attr("transpose_b", False):
        b = b.T
    return np.matmul(a, b)


@register_kernel("Sum")
def sum_(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    x, axis = inputs
    keep = bool(op.attr("keep_dims", False))
    return np.asarray(np.sum(x, axis=_axes(axis), keepdims=keep), dtype=x.dtype)


@register_kernel("Mean")
def mean(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    x, axis = inputs
    keep = bool(op.attr("keep_dims", False))
    # integer inputs keep their dtype; the fractional part is dropped
    return np.asarray(np.mean(x, axis=_axes(axis), keepdims=keep)).astype(x.dtype)


@register_kernel("Transpose")
def transpose(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    x, perm = inputs
    return np.transpose(x, axes=[int(p) for p in perm.reshape(-1)])


@register_kernel("Tanh")
def tanh(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.tanh(inputs[0])


@register_kernel("Sigmoid")
def sigmoid(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    x = inputs[0]
    return (1.0 / (1.0 + np.exp(-x))).astype(x.dtype)


@register_kernel("Abs")
def abs_(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.abs(inputs[0])


@register_kernel("Neg")
def neg(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.negative(inputs[0])


@register_kernel("Size")
def size(op: Operation, inputs: list[np.ndarray], session: Session) -> np.ndarray:
    return np.array(inputs[0].size, dtype=np.int32)
