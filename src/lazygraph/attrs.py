"""Typed attribute values and data-type tags shared by builders and engines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np


class DType(str, Enum):
    FLOAT16 = "float16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    BOOL = "bool"

    @property
    def numpy(self) -> np.dtype:
        return np.dtype(self.value)

    @classmethod
    def from_numpy(cls, dtype: Any) -> DType:
        name = np.dtype(dtype).name
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unsupported dtype '{name}'") from None

    @classmethod
    def parse(cls, value: DType | str | Any) -> DType:
        if isinstance(value, DType):
            return value
        if isinstance(value, str):
            return cls(value.lower())
        return cls.from_numpy(value)


class AttrKind(str, Enum):
    SCALAR = "scalar"
    TENSOR = "tensor"
    SHAPE = "shape"
    TYPE = "type"
    STRING = "string"


@dataclass(frozen=True, eq=False)
class AttrValue:
    """A closed tagged union of the attribute values an operation may carry."""

    kind: AttrKind
    value: Any

    @classmethod
    def scalar(cls, value: bool | int | float) -> AttrValue:
        return cls(AttrKind.SCALAR, value)

    @classmethod
    def tensor(cls, value: np.ndarray) -> AttrValue:
        return cls(AttrKind.TENSOR, value)

    @classmethod
    def shape(cls, dims: tuple[int, ...] | list[int]) -> AttrValue:
        return cls(AttrKind.SHAPE, tuple(int(d) for d in dims))

    @classmethod
    def dtype(cls, dtype: DType | str) -> AttrValue:
        return cls(AttrKind.TYPE, DType.parse(dtype))

    @classmethod
    def string(cls, value: str) -> AttrValue:
        return cls(AttrKind.STRING, value)

    def __repr__(self) -> str:
        if self.kind is AttrKind.TENSOR:
            arr = self.value
            return f"AttrValue(tensor, dtype={arr.dtype.name}, shape={arr.shape})"
        return f"AttrValue({self.kind.value}, {self.value!r})"


def coerce_attr(value: Any) -> AttrValue:
    """
    Tag a raw attribute value with its kind.
    Raises TypeError for values outside the attribute domain.
    """
    if isinstance(value, AttrValue):
        return value
    if isinstance(value, DType):
        return AttrValue.dtype(value)
    if isinstance(value, np.ndarray):
        return AttrValue.tensor(value)
    if isinstance(value, str):
        return AttrValue.string(value)
    if isinstance(value, (bool, int, float, np.generic)):
        return AttrValue.scalar(value.item() if isinstance(value, np.generic) else value)
    if isinstance(value, tuple) and all(isinstance(d, int) for d in value):
        return AttrValue.shape(value)
    raise TypeError(f"Unsupported attribute value of type {type(value).__name__}")
