"""Declared operation schemas of the reference engine."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from lazygraph.attrs import AttrKind, AttrValue, DType
from lazygraph.errors import BuildError

if TYPE_CHECKING:
    from lazygraph.engine.reference.graph import Output


@dataclass(frozen=True)
class OpSchema:
    op_type: str
    num_inputs: int
    attrs: dict[str, AttrKind] = field(default_factory=dict)
    required: frozenset[str] = frozenset()
    # "attr": output dtype is the ``dtype`` attribute
    # "same": all typed inputs must agree, output takes their dtype
    # "first": output takes the dtype of input 0
    # any DType value: fixed output dtype
    dtype_rule: str = "same"
    # input slots consumed by reference rather than by value
    ref_inputs: frozenset[int] = frozenset()
    # inputs must have a floating-point dtype
    float_inputs: bool = False


_SCHEMAS: dict[str, OpSchema] = {}


def register_schema(schema: OpSchema) -> OpSchema:
    _SCHEMAS[schema.op_type] = schema
    return schema


def get_schema(op_type: str) -> OpSchema | None:
    return _SCHEMAS.get(op_type)


def op_types() -> list[str]:
    return sorted(_SCHEMAS)


def ref_input_map() -> dict[str, set[int]]:
    return {k: set(s.ref_inputs) for k, s in _SCHEMAS.items() if s.ref_inputs}


register_schema(
    OpSchema(
        "Const",
        0,
        {"dtype": AttrKind.TYPE, "value": AttrKind.TENSOR},
        frozenset({"dtype", "value"}),
        dtype_rule="attr",
    )
)
register_schema(
    OpSchema(
        "Placeholder",
        0,
        {"dtype": AttrKind.TYPE, "shape": AttrKind.SHAPE},
        frozenset({"dtype"}),
        dtype_rule="attr",
    )
)
register_schema(
    OpSchema(
        "Variable",
        0,
        {
            "dtype": AttrKind.TYPE,
            "shape": AttrKind.SHAPE,
            "shared_name": AttrKind.STRING,
            "container": AttrKind.STRING,
        },
        frozenset({"dtype", "shape"}),
        dtype_rule="attr",
    )
)
register_schema(
    OpSchema(
        "Assign",
        2,
        {"validate_shape": AttrKind.SCALAR, "use_locking": AttrKind.SCALAR},
        ref_inputs=frozenset({0}),
    )
)
register_schema(OpSchema("Identity", 1, dtype_rule="first"))
for _op in ("Add", "Sub", "Mul", "Div", "Pow"):
    register_schema(OpSchema(_op, 2))
register_schema(
    OpSchema(
        "MatMul",
        2,
        {"transpose_a": AttrKind.SCALAR, "transpose_b": AttrKind.SCALAR},
    )
)
for _op in ("Sum", "Mean"):
    register_schema(OpSchema(_op, 2, {"keep_dims": AttrKind.SCALAR}, dtype_rule="first"))
register_schema(OpSchema("Transpose", 2, dtype_rule="first"))
for _op in ("Tanh", "Sigmoid"):
    register_schema(OpSchema(_op, 1, dtype_rule="first", float_inputs=True))
for _op in ("Abs", "Neg"):
    register_schema(OpSchema(_op, 1, dtype_rule="first"))
register_schema(OpSchema("Size", 1, dtype_rule=DType.INT32.value))


def check_operation(
    op_type: str,
    name: str,
    attrs: dict[str, AttrValue],
    inputs: Sequence[Output],
) -> DType | None:
    """
    Validate an operation against its schema and return its output dtype
    (None when it cannot be known before execution).
    """
    schema = get_schema(op_type)
    if schema is None:
        raise BuildError(
            f"Unknown operation type '{op_type}'", code="EBUILD_UNKNOWN_OP", op_name=name
        )
    if len(inputs) != schema.num_inputs:
        raise BuildError(
            f"{op_type} '{name}' expects {schema.num_inputs} inputs, got {len(inputs)}",
            code="EBUILD_ARITY",
            op_name=name,
        )
    for attr_name, value in attrs.items():
        kind = schema.attrs.get(attr_name)
        if kind is None:
            raise BuildError(
                f"{op_type} '{name}' has no attribute '{attr_name}'",
                code="EBUILD_ATTR_UNKNOWN",
                op_name=name,
            )
        if value.kind is not kind:
            raise BuildError(
                f"Attribute '{attr_name}' of {op_type} '{name}' must be "
                f"{kind.value}, got {value.kind.value}",
                code="EBUILD_ATTR_KIND",
                op_name=name,
            )
    missing = sorted(schema.required - set(attrs))
    if missing:
        raise BuildError(
            f"{op_type} '{name}' is missing required attribute(s): {', '.join(missing)}",
            code="EBUILD_ATTR_MISSING",
            op_name=name,
        )
    for slot in schema.ref_inputs:
        if inputs[slot].op.type != "Variable":
            raise BuildError(
                f"{op_type} '{name}' input {slot} must be a Variable, "
                f"got {inputs[slot].op.type}",
                code="EBUILD_REF",
                op_name=name,
            )
    if schema.float_inputs:
        for inp in inputs:
            if inp.dtype is not None and not np.issubdtype(inp.dtype.numpy, np.floating):
                raise BuildError(
                    f"{op_type} '{name}' needs floating-point inputs, got {inp.dtype.value}",
                    code="EBUILD_DTYPE",
                    op_name=name,
                )
    return _output_dtype(schema, name, attrs, inputs)


def _output_dtype(
    schema: OpSchema,
    name: str,
    attrs: dict[str, AttrValue],
    inputs: Sequence[Output],
) -> DType | None:
    rule = schema.dtype_rule
    if rule == "attr":
        return attrs["dtype"].value
    if rule == "first":
        return inputs[0].dtype if inputs else None
    if rule == "same":
        known = [i.dtype for i in inputs if i.dtype is not None]
        if any(d is not known[0] for d in known[1:]):
            types = ", ".join(d.value for d in known)
            raise BuildError(
                f"{schema.op_type} '{name}' input dtypes differ: {types}",
                code="EBUILD_DTYPE",
                op_name=name,
            )
        return known[0] if known else None
    return DType(rule)
