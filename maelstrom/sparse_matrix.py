"""Sparse matrices in COO, CSR and CSC layouts built on vectors."""

from __future__ import annotations

import abc
import enum
from typing import Any, Optional

import numpy as np

from maelstrom.datatype import DType, max_value, uint64
from maelstrom.vector import Vector


class SparseMatrixFormat(enum.IntEnum):
    COO = 0
    CSR = 1
    CSC = 2


class SparseMatrix(abc.ABC):
    """Interface shared by sparse matrix implementations."""

    @abc.abstractmethod
    def has_values(self) -> bool: ...

    @abc.abstractmethod
    def has_relations(self) -> bool: ...

    @abc.abstractmethod
    def num_nonzero(self) -> int: ...

    @abc.abstractmethod
    def sort(self, return_perm: bool = False) -> Vector: ...

    @abc.abstractmethod
    def sort_values(self, return_perm: bool = False) -> Vector: ...

    @abc.abstractmethod
    def get_entries_1d(self, ix_1d: Vector) -> tuple: ...

    @abc.abstractmethod
    def get_1d_index_from_2d_index(self, ix_r, ix_c, index_not_found=None) -> Vector: ...

    @abc.abstractmethod
    def query_adjacency(self, ix, rel_types, return_inner=True, return_values=False,
                        return_relations=False, return_1d_index_as_values=False) -> tuple: ...

    @abc.abstractmethod
    def to_csr(self) -> None: ...

    @abc.abstractmethod
    def to_csc(self) -> None: ...

    @abc.abstractmethod
    def to_coo(self) -> None: ...


def _idx(vec: Vector) -> np.ndarray:
    return vec.data.astype(np.int64)


class BasicSparseMatrix(SparseMatrix):
    """Sparse matrix holding row, column, value and relation vectors."""

    def __init__(
        self,
        rows: Vector,
        cols: Vector,
        values: Optional[Vector] = None,
        relations: Optional[Vector] = None,
        fmt: SparseMatrixFormat = SparseMatrixFormat.COO,
        num_rows: int = 0,
        num_cols: int = 0,
        sorted: bool = False,
    ) -> None:
        self._row = rows
        self._col = cols
        self._val = values if values is not None else Vector(rows.mem_type)
        self._rel = relations if relations is not None else Vector(rows.mem_type)
        self._format = SparseMatrixFormat(fmt)
        self._n_rows = num_rows
        self._n_cols = num_cols
        self._sorted = sorted
        self.clear_stream()

    @classmethod
    def from_matrix(cls, other: "BasicSparseMatrix") -> "BasicSparseMatrix":
        """A copy of another sparse matrix."""
        return cls(other.row.copy(), other.col.copy(), other.val.copy(), other.rel.copy(),
                   other.format, other.num_rows, other.num_cols, other.is_sorted)

    # -- properties -------------------------------------------------------

    row = property(lambda self: self._row)
    col = property(lambda self: self._col)
    val = property(lambda self: self._val)
    rel = property(lambda self: self._rel)
    format = property(lambda self: self._format)
    num_rows = property(lambda self: self._n_rows)
    num_cols = property(lambda self: self._n_cols)
    is_sorted = property(lambda self: self._sorted)
    stream = property(lambda self: self._stream)

    def has_values(self) -> bool:
        return not self._val.empty

    def has_relations(self) -> bool:
        return not self._rel.empty

    def num_nonzero(self) -> int:
        if self._format == SparseMatrixFormat.CSR:
            return len(self._col)
        return len(self._row)

    # -- helpers ----------------------------------------------------------

    def _vec(self, dtype: DType, arr) -> Vector:
        v = Vector(self._row.mem_type, dtype, np.asarray(arr).astype(dtype.numpy_dtype))
        v.set_stream(self._stream)
        return v

    def _empty(self, dtype: DType) -> Vector:
        return self._vec(dtype, np.zeros(0))

    def _permute(self, perm: np.ndarray, *, row=True, col=True) -> None:
        if row:
            self._row = self._vec(self._row.dtype, self._row.data[perm])
        if col:
            self._col = self._vec(self._col.dtype, self._col.data[perm])
        if self.has_values():
            self._val = self._vec(self._val.dtype, self._val.data[perm])
        if self.has_relations():
            self._rel = self._vec(self._rel.dtype, self._rel.data[perm])

    def _segment_perm(self, offsets: np.ndarray, inner: np.ndarray) -> np.ndarray:
        parts = [
            start + np.argsort(inner[start:end], kind="stable")
            for start, end in zip(offsets[:-1], offsets[1:])
        ]
        return np.concatenate(parts) if parts else np.zeros(0, dtype=np.int64)

    # -- sorting ----------------------------------------------------------

    def sort(self, return_perm: bool = False) -> Vector:
        """Sort row then col (COO), col within rows (CSR) or row within cols (CSC)."""
        perm_out = self._empty(uint64)
        if self._format == SparseMatrixFormat.COO:
            perm = np.lexsort((self._col.data, self._row.data))
            self._permute(perm)
            if return_perm:
                perm_out = self._vec(uint64, perm)
        elif self._format == SparseMatrixFormat.CSR:
            perm = self._segment_perm(_idx(self._row), self._col.data)
            self._permute(perm, row=False)
        else:
            perm = self._segment_perm(_idx(self._col), self._row.data)
            self._permute(perm, col=False)
        self._sorted = True
        return perm_out

    def sort_values(self, return_perm: bool = False) -> Vector:
        """Sort a COO matrix by its values; the matrix is then not considered sorted."""
        if self._format != SparseMatrixFormat.COO:
            raise RuntimeError("sort_values is only valid for COO matrices")
        if not self.has_values():
            raise RuntimeError("matrix has no values to sort by")
        perm = np.argsort(self._val.data, kind="stable")
        self._permute(perm)
        self._sorted = False
        return self._vec(uint64, perm) if return_perm else self._empty(uint64)

    # -- 1d access --------------------------------------------------------

    def _check_1d(self, ix: np.ndarray) -> None:
        if np.any((ix < 0) | (ix >= self.num_nonzero())):
            raise IndexError("1d index out of range")

    def get_rows_1d(self, ix_1d: Vector) -> Vector:
        ix = _idx(ix_1d)
        self._check_1d(ix)
        if self._format == SparseMatrixFormat.CSR:
            rows = np.searchsorted(_idx(self._row), ix, side="right") - 1
            return self._vec(self._row.dtype, rows)
        return self._vec(self._row.dtype, self._row.data[ix])

    def get_cols_1d(self, ix_1d: Vector) -> Vector:
        ix = _idx(ix_1d)
        self._check_1d(ix)
        if self._format == SparseMatrixFormat.CSC:
            cols = np.searchsorted(_idx(self._col), ix, side="right") - 1
            return self._vec(self._col.dtype, cols)
        return self._vec(self._col.dtype, self._col.data[ix])

    def get_values_1d(self, ix_1d: Vector) -> Vector:
        if not self.has_values():
            return self._empty(self._val.dtype)
        ix = _idx(ix_1d)
        self._check_1d(ix)
        return self._vec(self._val.dtype, self._val.data[ix])

    def get_relations_1d(self, ix_1d: Vector) -> Vector:
        if not self.has_relations():
            return self._empty(self._rel.dtype)
        ix = _idx(ix_1d)
        self._check_1d(ix)
        return self._vec(self._rel.dtype, self._rel.data[ix])

    def get_entries_1d(self, ix_1d: Vector) -> tuple[Vector, Vector, Vector, Vector]:
        """(rows, cols, values, relations) at the 1d indices."""
        return (self.get_rows_1d(ix_1d), self.get_cols_1d(ix_1d),
                self.get_values_1d(ix_1d), self.get_relations_1d(ix_1d))

    # -- 2d access --------------------------------------------------------

    def _find(self, r: int, c: int) -> int:
        if self._format == SparseMatrixFormat.COO:
            hits = np.nonzero((self._row.data == r) & (self._col.data == c))[0]
            return int(hits[0]) if len(hits) else -1
        if self._format == SparseMatrixFormat.CSR:
            offsets, inner, outer, target = _idx(self._row), self._col.data, r, c
        else:
            offsets, inner, outer, target = _idx(self._col), self._row.data, c, r
        if not 0 <= outer < len(offsets) - 1:
            return -1
        start, end = offsets[outer], offsets[outer + 1]
        hits = np.nonzero(inner[start:end] == target)[0]
        return int(start + hits[0]) if len(hits) else -1

    def _positions(self, ix_r: Vector, ix_c: Vector) -> list[int]:
        if len(ix_r) != len(ix_c):
            raise ValueError("row and column index vectors must have the same size")
        return [self._find(r, c) for r, c in zip(ix_r.tolist(), ix_c.tolist())]

    def get_1d_index_from_2d_index(self, ix_r: Vector, ix_c: Vector,
                                   index_not_found: Any = None) -> Vector:
        """1d index of each (row, col); missing entries get index_not_found."""
        dtype = self._row.dtype
        missing = max_value(dtype) if index_not_found is None else dtype.convert(index_not_found)
        result = [missing if p < 0 else p for p in self._positions(ix_r, ix_c)]
        return self._vec(dtype, np.array(result, dtype=dtype.numpy_dtype))

    def _found_2d(self, ix_r: Vector, ix_c: Vector, source: Vector) -> tuple[Vector, Vector]:
        found = [(k, p) for k, p in enumerate(self._positions(ix_r, ix_c)) if p >= 0]
        origin = [k for k, _ in found]
        picked = source.data[np.array([p for _, p in found], dtype=np.int64)]
        return self._vec(uint64, origin), self._vec(source.dtype, picked)

    def get_values_2d(self, ix_r: Vector, ix_c: Vector) -> tuple[Vector, Vector]:
        """Originating indices and values of the entries that exist."""
        if not self.has_values():
            raise RuntimeError("matrix has no values")
        return self._found_2d(ix_r, ix_c, self._val)

    def get_relations_2d(self, ix_r: Vector, ix_c: Vector) -> tuple[Vector, Vector]:
        """Originating indices and relations of the entries that exist."""
        if not self.has_relations():
            raise RuntimeError("matrix has no relations")
        return self._found_2d(ix_r, ix_c, self._rel)

    def get_1d_index_from_value(self, query_val: Vector) -> Vector:
        """1d index of an entry holding each value; missing values get uint64 max."""
        if not self.has_values():
            raise RuntimeError("matrix has no values")
        first: dict = {}
        for k, v in enumerate(self._val.tolist()):
            first.setdefault(v, k)
        missing = int(max_value(uint64))
        return self._vec(uint64, np.array([first.get(v, missing) for v in query_val.tolist()],
                                          dtype=np.uint64))

    # -- adjacency --------------------------------------------------------

    def _adjacency(self, ix: Vector, rel_types: Vector):
        if self._format == SparseMatrixFormat.COO:
            raise RuntimeError("adjacency queries are invalid for COO matrices")
        if self._format == SparseMatrixFormat.CSR:
            offsets, inner = _idx(self._row), self._col
        else:
            offsets, inner = _idx(self._col), self._row
        wanted = set(rel_types.tolist()) if rel_types is not None else set()
        if wanted and not self.has_relations():
            raise RuntimeError("matrix has no relations to filter by")
        rels = self._rel.data
        for k, i in enumerate(ix.tolist()):
            if not 0 <= i < len(offsets) - 1:
                raise IndexError(f"index {i} out of range")
            span = np.arange(offsets[i], offsets[i + 1])
            if wanted:
                span = span[np.isin(rels[span], list(wanted))]
            yield k, span, inner

    def query_adjacency(self, ix: Vector, rel_types: Vector, return_inner: bool = True,
                        return_values: bool = False, return_relations: bool = False,
                        return_1d_index_as_values: bool = False):
        """(origin, inner, values, relations) for the rows (CSR) or columns (CSC) in ix."""
        origin, positions = [], []
        inner = self._col if self._format == SparseMatrixFormat.CSR else self._row
        for k, span, inner in self._adjacency(ix, rel_types):
            origin.extend([k] * len(span))
            positions.extend(span.tolist())
        pos = np.array(positions, dtype=np.int64)
        inner_out = self._vec(inner.dtype, inner.data[pos]) if return_inner else self._empty(inner.dtype)
        if return_values and return_1d_index_as_values:
            vals_out = self._vec(uint64, pos)
        elif return_values and self.has_values():
            vals_out = self._vec(self._val.dtype, self._val.data[pos])
        else:
            vals_out = self._empty(self._val.dtype)
        if return_relations and self.has_relations():
            rels_out = self._vec(self._rel.dtype, self._rel.data[pos])
        else:
            rels_out = self._empty(self._rel.dtype)
        return self._vec(uint64, origin), inner_out, vals_out, rels_out

    def nnz_i(self, ix: Vector, rel_types: Vector) -> tuple[Vector, Vector]:
        """Indices into ix and nonzero counts, omitting empty rows/columns."""
        found = [(k, len(span)) for k, span, _ in self._adjacency(ix, rel_types) if len(span)]
        return (self._vec(uint64, [k for k, _ in found]),
                self._vec(uint64, [n for _, n in found]))

    # -- modification -----------------------------------------------------

    def set(self, new_rows: Vector, new_num_rows: int, new_cols: Vector, new_num_cols: int,
            new_vals: Optional[Vector] = None, new_rels: Optional[Vector] = None) -> None:
        """Add entries (row, col) with optional values and relations."""
        n = len(new_rows)
        if len(new_cols) != n:
            raise ValueError("rows and cols must have the same size")
        has_new_vals = new_vals is not None and not new_vals.empty
        has_new_rels = new_rels is not None and not new_rels.empty
        for given, size in ((has_new_vals, new_vals), (has_new_rels, new_rels)):
            if given and len(size) != n:
                raise ValueError("values and relations must match the number of entries")
        nnz = self.num_nonzero()
        if nnz > 0 and has_new_vals != self.has_values():
            raise ValueError("values must be given if and only if the matrix has values")
        if nnz > 0 and has_new_rels != self.has_relations():
            raise ValueError("relations must be given if and only if the matrix has relations")

        fmt = self._format
        self.to_coo()
        self._row = self._vec(self._row.dtype, np.concatenate(
            [self._row.data, new_rows.data.astype(self._row.dtype.numpy_dtype)]))
        self._col = self._vec(self._col.dtype, np.concatenate(
            [self._col.data, new_cols.data.astype(self._col.dtype.numpy_dtype)]))
        if has_new_vals:
            dt = self._val.dtype if nnz else new_vals.dtype
            self._val = self._vec(dt, np.concatenate(
                [self._val.data.astype(dt.numpy_dtype), new_vals.data.astype(dt.numpy_dtype)]))
        if has_new_rels:
            dt = self._rel.dtype if nnz else new_rels.dtype
            self._rel = self._vec(dt, np.concatenate(
                [self._rel.data.astype(dt.numpy_dtype), new_rels.data.astype(dt.numpy_dtype)]))
        self._n_rows = new_num_rows
        self._n_cols = new_num_cols
        self._sorted = False
        if fmt == SparseMatrixFormat.CSR:
            self.to_csr()
        elif fmt == SparseMatrixFormat.CSC:
            self.to_csc()

    def set_values(self, new_values: Optional[Vector]) -> None:
        """Replace the values; an empty vector removes them."""
        if new_values is None:
            new_values = Vector(self._row.mem_type)
        if not new_values.empty and len(new_values) != self.num_nonzero():
            raise ValueError("Size of new values does not match number of nonzero elements!")
        self._val = new_values
        self._val.set_stream(self._stream)

    # -- format conversion ------------------------------------------------

    def to_coo(self) -> None:
        if self._format == SparseMatrixFormat.CSR:
            offsets = _idx(self._row)
            expanded = np.repeat(np.arange(len(offsets) - 1), np.diff(offsets))
            self._row = self._vec(self._row.dtype, expanded)
        elif self._format == SparseMatrixFormat.CSC:
            offsets = _idx(self._col)
            expanded = np.repeat(np.arange(len(offsets) - 1), np.diff(offsets))
            self._col = self._vec(self._col.dtype, expanded)
            self._sorted = False
        self._format = SparseMatrixFormat.COO

    def _compress(self, outer: Vector, inner: Vector, n_outer: int) -> tuple[Vector, np.ndarray]:
        perm = np.lexsort((inner.data, outer.data))
        keys = _idx(outer)[perm]
        n = max(n_outer, int(keys.max()) + 1 if len(keys) else 0)
        offsets = np.concatenate([[0], np.cumsum(np.bincount(keys, minlength=n))])
        return self._vec(outer.dtype, offsets), perm

    def to_csr(self) -> None:
        if self._format == SparseMatrixFormat.CSR:
            return
        self.to_coo()
        offsets, perm = self._compress(self._row, self._col, self._n_rows)
        self._permute(perm, row=False)
        self._row = offsets
        self._format = SparseMatrixFormat.CSR
        self._sorted = True

    def to_csc(self) -> None:
        if self._format == SparseMatrixFormat.CSC:
            return
        self.to_coo()
        offsets, perm = self._compress(self._col, self._row, self._n_cols)
        self._permute(perm, col=False)
        self._col = offsets
        self._format = SparseMatrixFormat.CSC
        self._sorted = True

    # -- streams ----------------------------------------------------------

    def set_stream(self, stream: Any) -> None:
        self._stream = stream
        for v in (self._row, self._col, self._val, self._rel):
            v.set_stream(stream)

    def clear_stream(self) -> None:
        for v in (self._row, self._col, self._val, self._rel):
            v.clear_stream()
        self._stream = self._row.stream