"""Hash table mapping typed keys to typed values, driven by vectors."""

from __future__ import annotations

from typing import Any

import numpy as np

from maelstrom.datatype import DType, Storage, max_value, uint8
from maelstrom.vector import Vector

_SUPPORTED_STORAGE = (Storage.HOST, Storage.DEVICE, Storage.MANAGED)


class HashTable:
    """A key-value table whose keys and values are set and read in batches."""

    def __init__(
        self,
        mem_type: Storage,
        key_dtype: DType,
        val_dtype: DType,
        initial_size: int = 62,
    ) -> None:
        if mem_type not in _SUPPORTED_STORAGE:
            raise ValueError("Unsupported memory type for hash table")
        if initial_size < 0:
            raise ValueError("initial size must be non-negative")
        self._mem_type = mem_type
        self._key_dtype = key_dtype
        self._val_dtype = val_dtype
        self._initial_size = initial_size
        self._table: dict[Any, Any] = {}

    @property
    def mem_type(self) -> Storage:
        return self._mem_type

    @property
    def key_dtype(self) -> DType:
        return self._key_dtype

    @property
    def val_dtype(self) -> DType:
        return self._val_dtype

    @property
    def initial_size(self) -> int:
        return self._initial_size

    def _check_lookup_keys(self, keys: Vector) -> None:
        if self._mem_type == Storage.HOST and keys.mem_type == Storage.DEVICE:
            raise RuntimeError("can't use device array to access host hash table")
        if keys.dtype != self._key_dtype:
            raise RuntimeError("key dtype must match!")

    def _vector(self, dtype: DType, values: list) -> Vector:
        return Vector(self._mem_type, dtype, np.array(values, dtype=dtype.numpy_dtype))

    def set(self, keys: Vector, vals: Vector) -> None:
        """Store each value under its key, replacing any value already there."""
        if self._mem_type == Storage.HOST and (
            keys.mem_type == Storage.DEVICE or vals.mem_type == Storage.DEVICE
        ):
            raise ValueError("can't use device array to set host hash table")
        if keys.dtype != self._key_dtype:
            raise ValueError(
                f"key dtype must match! (got {keys.dtype.name} "
                f"but expected {self._key_dtype.name})"
            )
        if vals.dtype != self._val_dtype:
            raise ValueError(
                f"val dtype must match! (got {vals.dtype.name} "
                f"but expected {self._val_dtype.name})"
            )
        if len(keys) != len(vals):
            raise ValueError("number of keys must match number of values for insert!")
        self._table.update(zip(keys.tolist(), vals.tolist()))

    def get(self, keys: Vector) -> Vector:
        """Values for the keys; a missing key yields val_not_found()."""
        self._check_lookup_keys(keys)
        missing = self.val_not_found().item()
        return self._vector(
            self._val_dtype, [self._table.get(k, missing) for k in keys.tolist()]
        )

    def remove(self, keys: Vector) -> None:
        """Remove the keys and their values; absent keys are ignored."""
        self._check_lookup_keys(keys)
        for k in keys.tolist():
            self._table.pop(k, None)

    def contains(self, keys: Vector) -> Vector:
        """A uint8 vector holding 1 where the key is present and 0 where not."""
        self._check_lookup_keys(keys)
        return self._vector(uint8, [int(k in self._table) for k in keys.tolist()])

    def keys(self) -> Vector:
        return self._vector(self._key_dtype, list(self._table.keys()))

    def values(self) -> Vector:
        return self._vector(self._val_dtype, list(self._table.values()))

    def items(self) -> tuple[Vector, Vector]:
        """Keys and values, in matching order."""
        return self.keys(), self.values()

    def __len__(self) -> int:
        return len(self._table)

    def key_not_found(self) -> np.generic:
        return max_value(self._key_dtype)

    def val_not_found(self) -> np.generic:
        return max_value(self._val_dtype)