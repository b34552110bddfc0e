import numpy as np
import pytest

from maelstrom import datatype as dt
from maelstrom.datatype import (
    Comparator,
    DType,
    PrimitiveType,
    Storage,
    any_to_bytes,
    dtype_from_name,
    dtype_from_prim_type,
    max_value,
    prim_type_of,
    size_of,
    storage_from_name,
)

ALL_DTYPES = [dt.uint64, dt.uint32, dt.uint8, dt.int64, dt.int32, dt.int8, dt.float64, dt.float32]
NAMES = ["uint64", "uint32", "uint8", "int64", "int32", "int8", "float64", "float32"]


@pytest.mark.parametrize("name", NAMES)
def test_dtype_from_name_round_trip(name):
    found = dtype_from_name(name)
    assert found.name == name
    assert dtype_from_prim_type(found.prim_type) == found


def test_dtype_from_name_unknown():
    with pytest.raises(ValueError):
        dtype_from_name("complex128")


@pytest.mark.parametrize("name", ["HOST", "DEVICE", "MANAGED", "PINNED"])
def test_storage_from_name(name):
    assert storage_from_name(name) is Storage[name]
    assert storage_from_name(name).value == name


def test_storage_from_name_unknown():
    with pytest.raises(ValueError):
        storage_from_name("REMOTE")


@pytest.mark.parametrize(
    "value, expected",
    [
        (np.uint64(3), PrimitiveType.UINT64),
        (np.uint32(3), PrimitiveType.UINT32),
        (np.uint8(3), PrimitiveType.UINT8),
        (np.int64(-3), PrimitiveType.INT64),
        (np.int32(-3), PrimitiveType.INT32),
        (np.int8(-3), PrimitiveType.INT8),
        (np.float64(0.5), PrimitiveType.FLOAT64),
        (np.float32(0.5), PrimitiveType.FLOAT32),
        (7, PrimitiveType.INT64),
        (2.5, PrimitiveType.FLOAT64),
    ],
)
def test_prim_type_of(value, expected):
    assert prim_type_of(value) is expected


@pytest.mark.parametrize("value", [True, np.bool_(False), "x", np.float16(1.0), None])
def test_prim_type_of_unknown(value):
    with pytest.raises(TypeError):
        prim_type_of(value)


def test_pinned_sizes():
    assert size_of(dt.uint64) == 8
    assert size_of(PrimitiveType.UINT8) == 1


def test_size_of_invalid():
    with pytest.raises(TypeError):
        size_of("uint64")


@pytest.mark.parametrize("dtype", ALL_DTYPES)
def test_any_to_bytes_round_trip(dtype):
    value = dtype.numpy_dtype.type(5)
    data, prim = any_to_bytes(value)
    assert prim is dtype.prim_type
    assert len(data) == size_of(dtype)
    assert dtype.from_bytes(data) == value


def test_any_to_bytes_is_little_endian():
    data, prim = any_to_bytes(np.int32(1))
    assert data == b"\x01\x00\x00\x00"
    assert prim is PrimitiveType.INT32


def test_any_to_bytes_python_int_too_large():
    with pytest.raises(OverflowError):
        any_to_bytes(2**70)


def test_from_bytes_wrong_length():
    with pytest.raises(ValueError):
        dt.int32.from_bytes(b"\x00\x00")


@pytest.mark.parametrize("dtype", ALL_DTYPES)
def test_max_value(dtype):
    top = max_value(dtype)
    assert prim_type_of(top) is dtype.prim_type
    if dtype.prim_type.is_float:
        assert top == np.finfo(dtype.numpy_dtype).max
    else:
        assert top == np.iinfo(dtype.numpy_dtype).max


def test_max_value_round_trips_through_bytes():
    top = max_value(dt.uint64)
    data, _ = any_to_bytes(top)
    assert dt.uint64.from_bytes(data) == top


def test_dtype_equality():
    assert DType("uint64", PrimitiveType.UINT64) == dt.uint64
    assert not (DType("other", PrimitiveType.UINT64) == dt.uint64)
    assert DType("uint64", PrimitiveType.UINT32) != dt.uint64


def test_default_dtype_is_float64():
    assert dtype_from_name("float64") == dt.default_dtype
    assert size_of(dt.default_dtype) == 8
    assert prim_type_of(max_value(dt.default_dtype)) is PrimitiveType.FLOAT64


def test_comparator_symbols():
    assert Comparator.BETWEEN.symbol == "[..)"
    assert Comparator.NOT_EQUALS.symbol == "!="
    assert Comparator("∈") is Comparator.IS_IN


def test_convert_accepts_fitting_int():
    value = dt.uint8.convert(7)
    assert value == 7
    assert prim_type_of(value) is PrimitiveType.UINT8


def test_convert_rejects_out_of_range():
    with pytest.raises(OverflowError):
        dt.uint8.convert(300)
    with pytest.raises(OverflowError):
        dt.uint32.convert(-1)


def test_convert_rejects_mismatched_numpy_scalar():
    with pytest.raises(TypeError):
        dt.uint8.convert(np.int32(3))


def test_convert_rejects_float_for_integer():
    with pytest.raises(TypeError):
        dt.int32.convert(1.5)


def test_convert_float_type():
    value = dt.float32.convert(0.25)
    assert prim_type_of(value) is PrimitiveType.FLOAT32
    assert value == np.float32(0.25)