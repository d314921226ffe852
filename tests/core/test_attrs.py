from __future__ import annotations

import numpy as np
import pytest

from lazygraph.attrs import AttrKind, AttrValue, DType, coerce_attr


def test_coerce_attr_tags_each_kind() -> None:
    assert coerce_attr(DType.INT32).kind is AttrKind.TYPE
    assert coerce_attr(np.zeros(2)).kind is AttrKind.TENSOR
    assert coerce_attr("name").kind is AttrKind.STRING
    assert coerce_attr(True).kind is AttrKind.SCALAR
    assert coerce_attr(np.int64(3)).value == 3
    assert coerce_attr((2, 3)).kind is AttrKind.SHAPE

    tagged = AttrValue.shape([2, 3])
    assert coerce_attr(tagged) is tagged
    assert tagged.value == (2, 3)


def test_coerce_attr_rejects_values_outside_domain() -> None:
    with pytest.raises(TypeError):
        coerce_attr(object())
    with pytest.raises(TypeError):
        coerce_attr([1, 2])


def test_dtype_parse_accepts_names_and_numpy_types() -> None:
    assert DType.parse("FLOAT32") is DType.FLOAT32
    assert DType.parse(np.int16) is DType.INT16
    assert DType.INT64.numpy == np.dtype("int64")
    with pytest.raises(ValueError):
        DType.from_numpy(np.complex64)
