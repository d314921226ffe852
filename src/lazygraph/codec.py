"""Conversion between host (Python / numpy) values and engine tensors."""

from __future__ import annotations

from typing import Any

import numpy as np

from lazygraph.attrs import DType
from lazygraph.errors import EncodingError


def encode(value: Any) -> np.ndarray:
    """
    Encode a host value as a tensor.
    Scalars become 0-d arrays, nested sequences become n-d arrays. The result
    never aliases the caller's buffer.
    """
    if value is None:
        raise EncodingError("Cannot encode None as a tensor")
    if isinstance(value, (str, bytes, dict, set)):
        raise EncodingError(f"Cannot encode {type(value).__name__} as a tensor")
    try:
        arr = np.array(value)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Cannot encode value as a tensor: {exc}") from exc
    try:
        DType.from_numpy(arr.dtype)
    except ValueError:
        raise EncodingError(
            f"Unsupported element type '{arr.dtype.name}'", code="EENCODE_DTYPE"
        ) from None
    return arr


def decode(tensor: np.ndarray) -> Any:
    """Decode a tensor back into plain Python scalars / nested lists."""
    arr = np.asarray(tensor)
    if arr.ndim == 0:
        return arr.item()
    return arr.tolist()


def data_type(tensor: np.ndarray) -> DType:
    return DType.from_numpy(np.asarray(tensor).dtype)


def shape(tensor: np.ndarray) -> tuple[int, ...]:
    return tuple(int(d) for d in np.asarray(tensor).shape)
