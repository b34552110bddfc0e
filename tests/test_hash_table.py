import pytest

from maelstrom.datatype import Storage, float64, int32, int64, max_value, uint8
from maelstrom.hash_table import HashTable
from maelstrom.vector import Vector


def _vec(mem, dtype, values):
    return Vector(mem, dtype, values)


@pytest.fixture
def table():
    t = HashTable(Storage.HOST, int32, float64)
    t.set(_vec(Storage.HOST, int32, [3, 7, 11]), _vec(Storage.HOST, float64, [0.5, 1.5, 2.5]))
    return t


def test_set_and_get_round_trip(table):
    out = table.get(_vec(Storage.HOST, int32, [11, 3, 7]))
    assert out.tolist() == [2.5, 0.5, 1.5]
    assert out.dtype == float64
    assert out.mem_type == Storage.HOST


def test_missing_key_gives_not_found_value(table):
    out = table.get(_vec(Storage.HOST, int32, [3, 99]))
    assert out.tolist() == [0.5, max_value(float64).item()]
    assert table.val_not_found() == max_value(float64)


def test_not_found_markers():
    t = HashTable(Storage.MANAGED, int64, uint8)
    assert t.val_not_found() == 255
    assert t.key_not_found() == max_value(int64)


def test_contains(table):
    out = table.contains(_vec(Storage.HOST, int32, [7, 8, 3]))
    assert out.tolist() == [1, 0, 1]
    assert out.dtype == uint8


def test_len_and_overwrite(table):
    assert len(table) == 3
    table.set(_vec(Storage.HOST, int32, [7]), _vec(Storage.HOST, float64, [9.0]))
    assert len(table) == 3
    assert table.get(_vec(Storage.HOST, int32, [7])).tolist() == [9.0]


def test_remove(table):
    table.remove(_vec(Storage.HOST, int32, [7, 1000]))
    assert len(table) == 2
    assert table.contains(_vec(Storage.HOST, int32, [7])).tolist() == [0]


def test_items_are_consistent(table):
    keys, values = table.items()
    assert sorted(keys.tolist()) == [3, 7, 11]
    assert table.get(keys).tolist() == values.tolist()
    assert table.keys().tolist() == keys.tolist()
    assert table.values().tolist() == values.tolist()


def test_empty_table_items():
    t = HashTable(Storage.DEVICE, int32, int32)
    keys, values = t.items()
    assert len(keys) == 0 and len(values) == 0
    assert keys.mem_type == Storage.DEVICE


def test_unsupported_storage():
    with pytest.raises(ValueError):
        HashTable(Storage.PINNED, int32, int32)


def test_set_key_dtype_mismatch(table):
    with pytest.raises(ValueError, match="key dtype must match"):
        table.set(_vec(Storage.HOST, int64, [1]), _vec(Storage.HOST, float64, [1.0]))


def test_set_val_dtype_mismatch(table):
    with pytest.raises(ValueError, match="val dtype must match"):
        table.set(_vec(Storage.HOST, int32, [1]), _vec(Storage.HOST, int32, [1]))


def test_set_size_mismatch(table):
    with pytest.raises(ValueError, match="number of keys"):
        table.set(_vec(Storage.HOST, int32, [1, 2]), _vec(Storage.HOST, float64, [1.0]))


def test_host_table_rejects_device_vectors(table):
    with pytest.raises(ValueError):
        table.set(_vec(Storage.DEVICE, int32, [1]), _vec(Storage.HOST, float64, [1.0]))
    with pytest.raises(RuntimeError):
        table.get(_vec(Storage.DEVICE, int32, [1]))
    with pytest.raises(RuntimeError):
        table.remove(_vec(Storage.DEVICE, int32, [1]))


def test_lookup_key_dtype_mismatch(table):
    with pytest.raises(RuntimeError):
        table.contains(_vec(Storage.HOST, int64, [3]))
    with pytest.raises(RuntimeError):
        table.get(_vec(Storage.HOST, int64, [3]))