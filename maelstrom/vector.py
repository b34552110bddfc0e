"""Typed one-dimensional array with an explicit storage kind and capacity."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, Union

import numpy as np

from maelstrom.datatype import (
    DType,
    Storage,
    any_to_bytes,
    default_dtype,
    dtype_from_prim_type,
    prim_type_of,
)

_DEFAULT_STREAM = None


def _as_array(data: Any, dtype: DType) -> np.ndarray:
    """Turn bytes, a numpy array or an iterable of scalars into an array of dtype."""
    npd = dtype.numpy_dtype
    if isinstance(data, (bytes, bytearray, memoryview)):
        raw = bytes(data)
        if len(raw) % dtype.size:
            raise ValueError(
                f"{len(raw)} bytes is not a whole number of {dtype.name} elements"
            )
        return np.frombuffer(raw, dtype=npd)
    if isinstance(data, np.ndarray):
        if data.ndim != 1:
            raise ValueError("data must be one-dimensional")
        if data.dtype != npd:
            raise TypeError(f"array of {data.dtype.name} cannot hold {dtype.name} data")
        return data
    if isinstance(data, Vector):
        return _as_array(data.data, dtype)
    return np.array([dtype.convert(value) for value in data], dtype=npd)


class Vector:
    """A growable typed array that either owns its data or views someone else's."""

    def __init__(
        self,
        mem_type: Storage = Storage.DEVICE,
        dtype: DType = default_dtype,
        data: Any = None,
        size: Optional[int] = None,
        view: bool = False,
    ) -> None:
        self._mem_type = mem_type
        self._dtype = dtype
        self._view = view
        self._stream = _DEFAULT_STREAM
        self.name = ""

        if size is not None and size < 0:
            raise ValueError("size must be non-negative")

        if data is None:
            if view:
                raise ValueError("a view needs data to view")
            count = size or 0
            self._buf = np.zeros(count, dtype=dtype.numpy_dtype)
            self._size = count
            return

        if view:
            if not isinstance(data, np.ndarray) or data.ndim != 1:
                raise TypeError("only a one-dimensional numpy array can be viewed")
            if data.dtype != dtype.numpy_dtype:
                raise TypeError(
                    f"array of {data.dtype.name} cannot be viewed as {dtype.name}"
                )
            source = data
        else:
            source = _as_array(data, dtype)

        count = len(source) if size is None else size
        if count > len(source):
            raise ValueError(f"size {count} exceeds the {len(source)} elements provided")
        self._buf = source[:count] if view else source[:count].copy()
        self._size = count

    @classmethod
    def _wrap(cls, mem_type: Storage, dtype: DType, buf: np.ndarray, view: bool) -> "Vector":
        vec = cls.__new__(cls)
        vec._mem_type = mem_type
        vec._dtype = dtype
        vec._view = view
        vec._stream = _DEFAULT_STREAM
        vec.name = ""
        vec._buf = buf
        vec._size = len(buf)
        return vec

    # -- properties -------------------------------------------------------

    @property
    def dtype(self) -> DType:
        return self._dtype

    @property
    def mem_type(self) -> Storage:
        return self._mem_type

    @property
    def stream(self) -> Any:
        return self._stream

    @property
    def is_view(self) -> bool:
        return self._view

    @property
    def reserved_size(self) -> int:
        """Number of elements the vector can hold without reallocating."""
        return len(self._buf)

    @property
    def empty(self) -> bool:
        return self._size == 0

    @property
    def data(self) -> np.ndarray:
        """numpy view of the filled elements."""
        return self._buf[: self._size]

    # -- ownership --------------------------------------------------------

    def copy(self, view: bool = False) -> "Vector":
        """A view over this vector's data, or an owned copy of it."""
        buf = self.data if view else self.data.copy()
        vec = Vector._wrap(self._mem_type, self._dtype, buf, view)
        vec._stream = self._stream
        return vec

    def own(self) -> None:
        """Take ownership of the viewed data."""
        if not self._view:
            raise RuntimeError("Vector already owns data!")
        self._view = False

    def disown(self) -> None:
        """Stop owning the data; the vector becomes a view."""
        if self._view:
            raise RuntimeError("Vector does not own data!")
        self._view = True

    # -- capacity ---------------------------------------------------------

    def _grow_to(self, capacity: int) -> None:
        buf = np.zeros(capacity, dtype=self._dtype.numpy_dtype)
        buf[: self._size] = self.data
        self._buf = buf

    def reserve(self, n: int) -> None:
        """Make room for at least n elements without changing the size."""
        if self._view:
            raise RuntimeError("Cannot reserve memory in a view!")
        if n > len(self._buf):
            self._grow_to(n)

    def resize(self, n: int) -> None:
        """Change the number of elements; new elements are zero."""
        if n < 0:
            raise ValueError("size must be non-negative")
        if n > len(self._buf):
            if self._view:
                raise RuntimeError("Cannot grow a view!")
            self._grow_to(n)
        elif n > self._size:
            self._buf[self._size : n] = 0
        self._size = n

    def shrink_to_fit(self) -> None:
        """Release reserved space beyond the filled elements."""
        if self._view:
            raise RuntimeError("Cannot shrink a view!")
        if self._size == len(self._buf):
            return
        self._buf = self.data.copy()

    def clear(self) -> None:
        """Remove every element and release reserved space."""
        if self._view:
            raise RuntimeError("Cannot clear a view!")
        self._buf = np.zeros(0, dtype=self._dtype.numpy_dtype)
        self._size = 0

    # -- modification -----------------------------------------------------

    def insert(
        self,
        ix_start: int,
        new_elements: "Vector",
        add_ix_start: int = 0,
        add_ix_end: Optional[int] = None,
    ) -> None:
        """Insert new_elements[add_ix_start:add_ix_end] at position ix_start."""
        if add_ix_end is None:
            add_ix_end = len(new_elements)

        if len(new_elements) == 0:
            if add_ix_end - add_ix_start > 0:
                raise ValueError("Invalid range in new elements (empty vector)")
            return

        if self._view:
            raise RuntimeError("Cannot insert into a view!")
        if new_elements is self or (
            self._size > 0 and np.may_share_memory(self._buf, new_elements._buf)
        ):
            raise ValueError("Inserted vector cannot be same vector!")
        if self._dtype.prim_type != new_elements.dtype.prim_type:
            raise TypeError("Data type of inserting vector must match!")
        if add_ix_end < add_ix_start or add_ix_start < 0:
            raise ValueError("Invalid range in new elements")
        if add_ix_end > len(new_elements):
            raise IndexError("range end is past the end of the new elements")
        if not 0 <= ix_start <= self._size:
            raise IndexError(f"insert position {ix_start} out of range")

        insert_size = add_ix_end - add_ix_start
        old_size = self._size
        new_size = old_size + insert_size

        if new_size > len(self._buf):
            buf = np.zeros(new_size, dtype=self._dtype.numpy_dtype)
            buf[:ix_start] = self._buf[:ix_start]
        else:
            buf = self._buf

        buf[ix_start + insert_size : new_size] = self._buf[ix_start:old_size]
        buf[ix_start : ix_start + insert_size] = new_elements._buf[add_ix_start:add_ix_end]

        self._buf = buf
        self._size = new_size

    def extend(self, new_elements: "Vector") -> None:
        """Append all elements of new_elements."""
        self.insert(self._size, new_elements, 0, len(new_elements))

    def erase(self, i: int) -> None:
        """Remove the element at index i."""
        if self._view:
            raise RuntimeError("Cannot erase from a view!")
        self._check_index(i)
        self._buf[i : self._size - 1] = self._buf[i + 1 : self._size]
        self._size -= 1

    # -- access -----------------------------------------------------------

    def _check_index(self, i: int) -> None:
        if not 0 <= i < self._size:
            raise IndexError(f"index {i} out of range for vector of size {self._size}")

    def get(self, i: int) -> np.generic:
        """The element at index i, as a numpy scalar."""
        self._check_index(i)
        return self._buf[i]

    def __getitem__(self, i: Union[int, slice]) -> Any:
        if isinstance(i, slice):
            return Vector._wrap(self._mem_type, self._dtype, self.data[i].copy(), False)
        if i < 0:
            i += self._size
        return self.get(i)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[np.generic]:
        return iter(self.data)

    def tolist(self) -> list:
        """Elements as plain Python numbers."""
        return self.data.tolist()

    def __repr__(self) -> str:
        return f"Vector({self._mem_type.name}, {self._dtype.name}, {self.tolist()})"

    # -- streams ----------------------------------------------------------

    def set_stream(self, stream: Any) -> None:
        self._stream = stream

    def clear_stream(self) -> None:
        """Restore the default stream."""
        self._stream = _DEFAULT_STREAM

    # -- conversion -------------------------------------------------------

    def astype(self, new_dtype: DType) -> "Vector":
        """A copy with every element converted to new_dtype."""
        converted = self.data.astype(new_dtype.numpy_dtype)
        return Vector._wrap(self._mem_type, new_dtype, converted, False)

    def to(self, new_mem_type: Storage) -> "Vector":
        """A copy of this vector in the given storage."""
        return Vector._wrap(new_mem_type, self._dtype, self.data.copy(), False)

    # -- arithmetic -------------------------------------------------------

    def _math(self, other: "Vector", op: str) -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        if len(other) != self._size:
            raise ValueError("vectors must have the same size")
        if other.dtype.prim_type != self._dtype.prim_type:
            raise TypeError("vectors must have the same data type")
        a, b = self.data, other.data
        if op == "+":
            result = a + b
        elif op == "-":
            result = a - b
        elif op == "*":
            result = a * b
        elif self._dtype.prim_type.is_float:
            with np.errstate(divide="ignore", invalid="ignore"):
                result = a / b
        else:
            if np.any(b == 0):
                raise ZeroDivisionError("integer division by zero")
            quotient = np.floor_divide(a, b)
            remainder = a - quotient * b
            result = quotient + ((remainder != 0) & ((a < 0) != (b < 0)))
        result = np.asarray(result).astype(self._dtype.numpy_dtype, copy=False)
        return Vector._wrap(self._mem_type, self._dtype, result, False)

    def __add__(self, other: "Vector") -> "Vector":
        return self._math(other, "+")

    def __sub__(self, other: "Vector") -> "Vector":
        return self._math(other, "-")

    def __mul__(self, other: "Vector") -> "Vector":
        return self._math(other, "*")

    def __truediv__(self, other: "Vector") -> "Vector":
        """Elementwise division; integer types truncate toward zero."""
        return self._math(other, "/")


def make_vector_like(vec: Vector) -> Vector:
    """A new empty vector with the storage and dtype of vec."""
    return Vector(vec.mem_type, vec.dtype)


def make_vector_from_anys(
    mem_type: Storage, anys: Iterable[Any], dtype: Optional[DType] = None
) -> Vector:
    """Build a vector from scalars; the dtype is taken from the first one if not given."""
    values = list(anys)
    if not values:
        return Vector(mem_type, dtype if dtype is not None else default_dtype)
    if dtype is None:
        dtype = dtype_from_prim_type(prim_type_of(values[0]))

    chunks = []
    for k, value in enumerate(values):
        raw, prim = any_to_bytes(value)
        if prim != dtype.prim_type:
            raise TypeError(f"Type mismatch in array at index {k}")
        chunks.append(raw)
    return Vector(mem_type, dtype, b"".join(chunks))


def as_host_vector(vec: Vector) -> Vector:
    """A view of vec if it lives on the host, otherwise a host copy."""
    if vec.mem_type == Storage.HOST:
        return vec.copy(view=True)
    return vec.to(Storage.HOST)


def as_device_vector(vec: Vector) -> Vector:
    """A view of vec if it lives on the device, otherwise a device copy."""
    if vec.mem_type == Storage.DEVICE:
        return vec.copy(view=True)
    return vec.to(Storage.DEVICE)


def as_primitive_vector(vec: Vector, view: bool = True) -> Vector:
    """vec reinterpreted with the standard dtype of its primitive type."""
    prim_dtype = dtype_from_prim_type(vec.dtype.prim_type)
    buf = vec.data if view else vec.data.copy()
    return Vector._wrap(vec.mem_type, prim_dtype, buf, view)