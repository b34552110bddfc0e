"""Element data types, storage kinds and comparison operators."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union

import numpy as np


class PrimitiveType(enum.Enum):
    """Machine-level element types, identified by numpy kind and byte width."""

    UINT64 = ("u", 8)
    UINT32 = ("u", 4)
    UINT8 = ("u", 1)
    INT64 = ("i", 8)
    INT32 = ("i", 4)
    INT8 = ("i", 1)
    FLOAT64 = ("f", 8)
    FLOAT32 = ("f", 4)

    @property
    def size(self) -> int:
        """Width of one element in bytes."""
        return self.value[1]

    @property
    def is_float(self) -> bool:
        return self.value[0] == "f"

    @property
    def numpy_dtype(self) -> np.dtype:
        """Little-endian numpy dtype holding this primitive."""
        kind, width = self.value
        return np.dtype(f"<{kind}{width}")


class Storage(enum.Enum):
    """Where the data of a container lives."""

    HOST = "HOST"
    DEVICE = "DEVICE"
    MANAGED = "MANAGED"
    PINNED = "PINNED"


class Comparator(enum.Enum):
    """Comparison operators, valued by their display symbol."""

    GREATER_THAN = ">"
    LESS_THAN = "<"
    EQUALS = "="
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN_OR_EQUAL = "<="
    NOT_EQUALS = "!="
    BETWEEN = "[..)"
    IS_IN = "∈"
    IS_NOT_IN = "!∈"
    INSIDE = "(..)"
    OUTSIDE = "<>"

    @property
    def symbol(self) -> str:
        return self.value


@dataclass(frozen=True)
class DType:
    """A named element type backed by a primitive type."""

    name: str
    prim_type: PrimitiveType

    @property
    def size(self) -> int:
        return self.prim_type.size

    @property
    def numpy_dtype(self) -> np.dtype:
        return self.prim_type.numpy_dtype

    def from_bytes(self, data: bytes) -> np.generic:
        """Decode one element from its little-endian bytes."""
        if len(data) != self.size:
            raise ValueError(
                f"expected {self.size} bytes for {self.name}, got {len(data)}"
            )
        return np.frombuffer(bytes(data), dtype=self.numpy_dtype)[0]

    def convert(self, value: Any) -> np.generic:
        """Return value as a scalar of this type, raising if it cannot be one.

        numpy scalars must already be of this primitive type; plain Python
        numbers are accepted when they fit.
        """
        scalar_type = self.numpy_dtype.type
        if isinstance(value, (bool, np.bool_)):
            raise TypeError(f"cannot convert a boolean to {self.name}")
        if isinstance(value, np.generic):
            if prim_type_of(value) != self.prim_type:
                raise TypeError(
                    f"cannot convert {value.dtype.name} value to {self.name}"
                )
            return value
        if isinstance(value, int):
            if not self.prim_type.is_float:
                limits = np.iinfo(self.numpy_dtype)
                if not limits.min <= value <= limits.max:
                    raise OverflowError(f"{value} does not fit in {self.name}")
            return scalar_type(value)
        if isinstance(value, float):
            if not self.prim_type.is_float:
                raise TypeError(f"cannot convert a float to {self.name}")
            return scalar_type(value)
        raise TypeError(f"cannot convert {type(value).__name__} to {self.name}")


uint64 = DType("uint64", PrimitiveType.UINT64)
uint32 = DType("uint32", PrimitiveType.UINT32)
uint8 = DType("uint8", PrimitiveType.UINT8)
int64 = DType("int64", PrimitiveType.INT64)
int32 = DType("int32", PrimitiveType.INT32)
int8 = DType("int8", PrimitiveType.INT8)
float64 = DType("float64", PrimitiveType.FLOAT64)
float32 = DType("float32", PrimitiveType.FLOAT32)

default_dtype = float64

DTYPES: dict[str, DType] = {
    dt.name: dt
    for dt in (uint64, uint32, uint8, int64, int32, int8, float64, float32)
}

_BY_PRIM: dict[PrimitiveType, DType] = {dt.prim_type: dt for dt in DTYPES.values()}
_BY_KIND: dict[tuple[str, int], PrimitiveType] = {p.value: p for p in PrimitiveType}


def size_of(dtype: Union[DType, PrimitiveType]) -> int:
    """Width in bytes of one element of the given type."""
    if isinstance(dtype, (DType, PrimitiveType)):
        return dtype.size
    raise TypeError("Invalid type")


def prim_type_of(value: Any) -> PrimitiveType:
    """Primitive type of a scalar: numpy scalars by their dtype, int as INT64, float as FLOAT64."""
    if isinstance(value, (bool, np.bool_)):
        raise TypeError("Unknown type")
    if isinstance(value, np.generic):
        try:
            return _BY_KIND[(value.dtype.kind, value.dtype.itemsize)]
        except KeyError:
            raise TypeError(f"Unknown type: {value.dtype.name}") from None
    if isinstance(value, int):
        return PrimitiveType.INT64
    if isinstance(value, float):
        return PrimitiveType.FLOAT64
    raise TypeError(f"Unknown type: {type(value).__name__}")


def dtype_from_prim_type(prim_type: PrimitiveType) -> DType:
    """The standard dtype for a primitive type."""
    try:
        return _BY_PRIM[prim_type]
    except KeyError:
        raise ValueError("Invalid primitive type") from None


def any_to_bytes(value: Any) -> tuple[bytes, PrimitiveType]:
    """Encode a scalar as little-endian bytes along with its primitive type."""
    prim = prim_type_of(value)
    scalar = dtype_from_prim_type(prim).convert(value)
    return np.asarray(scalar, dtype=prim.numpy_dtype).tobytes(), prim


def max_value(dtype: DType) -> np.generic:
    """Largest finite value representable by the dtype."""
    npd = dtype.numpy_dtype
    limit = np.finfo(npd).max if dtype.prim_type.is_float else np.iinfo(npd).max
    return npd.type(limit)


def dtype_from_name(name: str) -> DType:
    """Look up a dtype by its name, e.g. "int32"."""
    try:
        return DTYPES[name]
    except KeyError:
        raise ValueError(f"unknown dtype name: {name!r}") from None


def storage_from_name(name: str) -> Storage:
    """Look up a storage kind by its name, e.g. "HOST"."""
    try:
        return Storage[name]
    except KeyError:
        raise ValueError(f"unknown storage name: {name!r}") from None