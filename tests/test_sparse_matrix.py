import numpy as np
import pytest

from maelstrom.datatype import Storage, float64, int32, uint8
from maelstrom.sparse_matrix import BasicSparseMatrix, SparseMatrixFormat
from maelstrom.vector import Vector

ROW = [0, 2, 6, 7, 9, 13, 16]
COL = [1, 3, 0, 2, 4, 5, 0, 1, 2, 1, 2, 3, 4, 0, 2, 5]
REL = [1, 2, 0, 2, 4, 2, 0, 1, 2, 1, 2, 3, 4, 0, 4, 4]


def v(dtype, values):
    return Vector(Storage.MANAGED, dtype, values)


def make(n=5):
    return BasicSparseMatrix(v(int32, ROW), v(int32, COL), Vector(), v(uint8, REL),
                             SparseMatrixFormat.CSR, n, n, True)


def test_basic_properties():
    m = make()
    assert m.is_sorted
    assert m.format == SparseMatrixFormat.CSR
    assert m.has_relations()
    assert not m.has_values()
    assert m.num_rows == 5 and m.num_cols == 5
    assert m.num_nonzero() == 16


def test_index_and_entries():
    m = make()
    ix_r = [0, 0, 1, 2, 3, 4, 5, 1, 1]
    ix_c = [0, 1, 0, 0, 2, 5, 0, 4, 5]
    r = m.get_1d_index_from_2d_index(v(int32, ix_r), v(int32, ix_c), -2)
    assert r.tolist() == [-2, 0, 2, 6, 8, -2, 13, 4, 5]

    keep = [k for k, x in enumerate(r.tolist()) if x != -2]
    sel = v(int32, [r.tolist()[k] for k in keep])
    rows, cols, vals, rels = m.get_entries_1d(sel)
    assert rows.tolist() == [ix_r[k] for k in keep]
    assert cols.tolist() == [ix_c[k] for k in keep]
    assert rels.tolist() == [1, 0, 0, 2, 0, 4, 2]
    assert vals.empty


def test_query_adjacency():
    m = make()
    origin, inner, _, rel = m.query_adjacency(
        v(int32, [1, 1, 3, 3, 4, 5]), v(uint8, [0, 2]), True, False, True)
    assert origin.tolist() == [0, 0, 0, 1, 1, 1, 2, 3, 4, 5]
    assert rel.tolist() == [0, 2, 2, 0, 2, 2, 2, 2, 2, 0]
    assert inner.tolist() == [0, 2, 5, 0, 2, 5, 2, 2, 2, 0]


def test_nnz_i():
    m = make()
    idx, counts = m.nnz_i(v(int32, [0, 1, 3]), v(uint8, [0]))
    assert idx.tolist() == [1]
    assert counts.tolist() == [1]


def test_conversion():
    m = make(6)
    m.to_coo()
    assert m.row.tolist() == [0, 0, 1, 1, 1, 1, 2, 3, 3, 4, 4, 4, 4, 5, 5, 5]
    m.to_csc()
    assert m.row.tolist() == [1, 2, 5, 0, 3, 4, 1, 3, 4, 5, 0, 4, 1, 4, 1, 5]
    assert m.col.tolist() == [0, 3, 6, 10, 12, 14, 16]
    m.to_csr()
    assert m.row.tolist() == ROW
    assert m.col.tolist() == COL
    assert m.rel.tolist() == REL


def test_coo_adjacency_raises():
    m = make(6)
    m.to_coo()
    with pytest.raises(RuntimeError):
        m.query_adjacency(v(int32, [0]), v(uint8, []))


def test_set_values_size_mismatch():
    m = make()
    with pytest.raises(ValueError):
        m.set_values(v(float64, [1.0, 2.0]))
    m.set_values(v(float64, [float(k) for k in range(16)]))
    assert m.has_values()


def test_coo_sort_returns_perm():
    m = BasicSparseMatrix(v(int32, [2, 0, 1]), v(int32, [0, 1, 2]), v(float64, [3.0, 1.0, 2.0]),
                          None, SparseMatrixFormat.COO, 3, 3)
    perm = m.sort(return_perm=True)
    assert perm.tolist() == [1, 2, 0]
    assert m.row.tolist() == [0, 1, 2]
    assert m.val.tolist() == [1.0, 2.0, 3.0]
    assert m.is_sorted


def test_values_2d_and_from_value():
    m = BasicSparseMatrix(v(int32, [0, 1, 2]), v(int32, [1, 2, 0]), v(float64, [5.0, 6.0, 7.0]),
                          None, SparseMatrixFormat.COO, 3, 3)
    origin, vals = m.get_values_2d(v(int32, [1, 0, 2]), v(int32, [2, 0, 0]))
    assert origin.tolist() == [0, 2]
    assert vals.tolist() == [6.0, 7.0]
    assert m.get_1d_index_from_value(v(float64, [7.0])).tolist() == [2]


def test_set_adds_entries():
    m = BasicSparseMatrix(v(int32, [0, 1, 2]), v(int32, [0, 1]), None, None,
                          SparseMatrixFormat.CSR, 2, 2, True)
    m.set(v(int32, [0]), 2, v(int32, [1]), 2)
    assert m.row.tolist() == [0, 2, 3]
    assert m.col.tolist() == [0, 1, 1]
    assert np.array_equal(m.get_1d_index_from_2d_index(v(int32, [0]), v(int32, [1])).data, [1])