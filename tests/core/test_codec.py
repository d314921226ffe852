from __future__ import annotations

import numpy as np
import pytest

from lazygraph.attrs import DType
from lazygraph.codec import data_type, decode, encode, shape
from lazygraph.errors import EncodingError


def test_encode_scalar_and_nested_lists() -> None:
    scalar = encode(5)
    assert shape(scalar) == ()
    assert data_type(scalar) is DType.INT64

    matrix = encode([[1.0, 2.0], [3.0, 4.0]])
    assert shape(matrix) == (2, 2)
    assert data_type(matrix) is DType.FLOAT64

    assert data_type(encode(True)) is DType.BOOL


def test_encode_does_not_alias_caller_buffer() -> None:
    arr = np.array([1, 2, 3])
    tensor = encode(arr)
    arr[0] = 99
    assert tensor[0] == 1


@pytest.mark.parametrize("value", [None, "text", {"a": 1}, [1, [2, 3]]])
def test_encode_rejects_unrepresentable_values(value: object) -> None:
    with pytest.raises(EncodingError) as exc:
        encode(value)
    assert exc.value.code.startswith("EENCODE")


def test_encode_rejects_unsupported_element_type() -> None:
    with pytest.raises(EncodingError) as exc:
        encode(1 + 2j)
    assert exc.value.code == "EENCODE_DTYPE"


def test_decode_returns_plain_python_values() -> None:
    value = decode(np.array(3))
    assert value == 3 and isinstance(value, int)
    assert decode(np.array([[1, 2], [3, 4]])) == [[1, 2], [3, 4]]
    assert decode(np.float64(0.5)) == 0.5
