from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np

from lazygraph.attrs import AttrValue, DType, coerce_attr
from lazygraph.codec import data_type, encode, shape
from lazygraph.engine.base import OutputHandle
from lazygraph.graph.context import GraphBuildContext, get_default_context
from lazygraph.graph.node import DeferredNode, OpProfile, build, static_dtype


def is_graph_value(value: Any) -> bool:
    """True for values that can be used as an operation input without wrapping."""
    return isinstance(value, (DeferredNode, OutputHandle))


def constant(
    value: Any,
    dtype: DType | str | None = None,
    node_name: str | None = None,
    context: GraphBuildContext | None = None,
) -> DeferredNode:
    """Encode ``value`` now; build a ``Const`` operation on resolution."""
    tensor = encode(value)
    if dtype is not None:
        tensor = tensor.astype(DType.parse(dtype).numpy)
    return build(
        OpProfile(
            operation="Const",
            node_name=node_name,
            attributes={
                "dtype": AttrValue.dtype(data_type(tensor)),
                "value": AttrValue.tensor(tensor),
            },
        ),
        context,
    )


def placeholder(
    dtype: DType | str,
    node_name: str | None = None,
    shape: tuple[int, ...] | None = None,
    context: GraphBuildContext | None = None,
) -> DeferredNode:
    attributes: dict[str, Any] = {"dtype": AttrValue.dtype(dtype)}
    if shape is not None:
        attributes["shape"] = AttrValue.shape(shape)
    return build(OpProfile("Placeholder", node_name, attributes), context)


def assign(
    var: Any,
    value: Any,
    context: GraphBuildContext | None = None,
) -> DeferredNode:
    if not is_graph_value(value):
        value = constant(value, context=context)
    return build(OpProfile("Assign", inputs=[var, value]), context)


def variable(
    value: Any,
    node_name: str | None = None,
    attributes: Mapping[str, Any] | None = None,
    context: GraphBuildContext | None = None,
) -> DeferredNode:
    """
    Declare a variable initialized to ``value``.

    The shape and dtype attributes come from the encoded value; ``attributes``
    overrides them. Every operation built from the returned node shares one
    storage slot (its ``shared_name``, unique per declaration unless
    ``attributes`` sets one). An ``Assign`` to the initial value is
    appended to the context's variable registry; that registration is never
    undone.
    """
    ctx = context or get_default_context()
    tensor = encode(value)
    defaults: dict[str, Any] = {
        "shape": AttrValue.shape(shape(tensor)),
        "dtype": AttrValue.dtype(data_type(tensor)),
        "shared_name": AttrValue.string(
            ctx.names.unique(node_name) if node_name else ctx.names.fresh("Variable")
        ),
    }
    profile = OpProfile("Variable", node_name, defaults)
    if attributes:
        overrides = dict(attributes)
        if "dtype" in overrides:
            dtype = _dtype_of(overrides["dtype"])
            overrides["dtype"] = AttrValue.dtype(dtype)
            tensor = tensor.astype(dtype.numpy)
        profile = profile.merged({"attributes": overrides})
    var = build(profile, ctx)
    ctx.declare_variable(var, assign(var, constant(tensor, context=ctx), context=ctx))
    return var


def _dtype_of(value: Any) -> DType:
    attr = coerce_attr(value) if not isinstance(value, str) else AttrValue.dtype(value)
    return DType.parse(attr.value)


def as_input(
    value: Any,
    like: Any = None,
    context: GraphBuildContext | None = None,
) -> Any:
    """
    Return graph values unchanged and wrap host values with ``constant``.
    A host value takes the element type of ``like`` when that type is known
    and the cast stays within the same kind.
    """
    if is_graph_value(value):
        return value
    tensor = encode(value)
    target = static_dtype(like) if like is not None else None
    if target is not None and np.can_cast(tensor.dtype, target.numpy, casting="same_kind"):
        return constant(tensor, dtype=target, context=context)
    return constant(tensor, context=context)
