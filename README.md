# maelstrom

This package provides typed one-dimensional vectors, hash tables and sparse
matrices. Each one carries an explicit element type and a storage kind. The
data is held in numpy arrays.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## What the package does not do

There are four storage kinds: `HOST`, `DEVICE`, `MANAGED` and `PINNED`. They
are labels only. All data lives in ordinary memory. No work runs on a GPU or
on any other accelerator.

Streams are not executed either. A stream is an opaque value that is stored
on a container and read back. The default stream is `None`.

The package provides containers and nothing more. It does not include:

- stand-alone algorithms, such as filtering, reductions, searching or
  prefix sums;
- a command-line program.

## Data types: `maelstrom.datatype`

This module defines the following:

- `PrimitiveType` covers `UINT64`, `UINT32`, `UINT8`, `INT64`, `INT32`,
  `INT8`, `FLOAT64` and `FLOAT32`. Each has `.size` (the width in bytes),
  `.is_float` and `.numpy_dtype`.
- `DType` is a frozen dataclass with a `name` and a `prim_type`. It also
  provides:
  - `size` and `numpy_dtype`;
  - `from_bytes(data)`, which decodes one little-endian element;
  - `convert(value)`, which checks a value and returns it as a scalar of the
    type. It raises `TypeError` or `OverflowError` when the value does not
    fit.
- The ready-made dtypes are `uint64`, `uint32`, `uint8`, `int64`, `int32`,
  `int8`, `float64` and `float32`. `default_dtype` is `float64`, and `DTYPES`
  maps each name to its dtype.
- `Storage` is one of `HOST`, `DEVICE`, `MANAGED` or `PINNED`.
- `Comparator` is a comparison operator. Its `.symbol` attribute gives the
  operator's symbol, for example `">="` or `"∈"`.

The module also has these functions:

- `size_of(dtype)` returns the width in bytes of a `DType` or a
  `PrimitiveType`.
- `prim_type_of(value)` works on numpy scalars, which are classified by
  their dtype. A Python `int` is `INT64` and a Python `float` is `FLOAT64`.
  Booleans are rejected.
- `dtype_from_prim_type(prim_type)` returns the standard dtype for a
  primitive type.
- `any_to_bytes(value)` returns `(little-endian bytes, PrimitiveType)`.
- `max_value(dtype)` returns the largest finite value of the dtype.
- `dtype_from_name(name)` and `storage_from_name(name)` raise `ValueError`
  for an unknown name.

## Vectors: `maelstrom.vector`

A `Vector(mem_type, dtype, data, size, view)` is a typed, growable array.

- `data` may be bytes, a one-dimensional numpy array, another `Vector` or an
  iterable of scalars.
- `size` limits how many elements are taken from `data`.
- With `view=True` the vector wraps a one-dimensional numpy array of the
  matching dtype, and the two share their memory.
- With `data=None` the vector holds `size` zeros.

```python
from maelstrom.datatype import Storage, int32, float64
from maelstrom.vector import Vector

a = Vector(Storage.HOST, int32, [1, 2, 3])
b = Vector(Storage.HOST, int32, [10, 20, 30])

print((a + b).tolist())          # [11, 22, 33]

a.extend(b)
print(len(a), a[4])              # 6 20

on_device = a.to(Storage.DEVICE)
as_float = a.astype(float64)
```

### Properties

- `dtype` and `mem_type`.
- `data`, a numpy view of the filled elements.
- `empty`, `is_view`, `reserved_size` and `stream`.
- `name`, a free-form string.

### Element access

- `get(i)`, indexing, slicing, iteration, `len()` and `tolist()`.
- Negative indices count from the end.
- Slicing returns an owned copy.

### Modification

- `insert(ix_start, new_elements, add_ix_start, add_ix_end)` copies in a
  range of another vector. The other vector must have the same primitive
  type and must not share memory with this vector.
- `extend(new_elements)` and `erase(i)` add and remove elements.
- `reserve(n)`, `resize(n)`, `shrink_to_fit()` and `clear()` manage the
  size and the reserved space.
- Views cannot be grown, shrunk, cleared or inserted into.

### Ownership

- `own()` and `disown()` switch between owning the data and being a view.
- `copy(view)` returns a view when `view` is true and an owned copy
  otherwise.

### Arithmetic

- `+`, `-`, `*` and `/` work element-wise.
- Both vectors must have the same size and the same primitive type.
- Integer division truncates toward zero. An integer division by zero
  raises `ZeroDivisionError`.

### Conversion and streams

- `astype(new_dtype)` and `to(new_mem_type)` return copies.
- `set_stream(stream)` and `clear_stream()` set and clear the stream value.

### Functions

- `make_vector_like(vec)` returns an empty vector with the same storage and
  dtype as `vec`.
- `make_vector_from_anys(mem_type, anys, dtype=None)` takes its dtype from
  the first value if `dtype` is not given. Every value must have the dtype's
  primitive type, so plain `int` values only match `int64`. Otherwise it
  raises `TypeError`.
- `as_host_vector(vec)` and `as_device_vector(vec)` return a view when `vec`
  is already in that storage, and a copy otherwise.
- `as_primitive_vector(vec, view=True)` relabels `vec` with the standard
  dtype of its primitive type.

## Hash tables: `maelstrom.hash_table`

`HashTable(mem_type, key_dtype, val_dtype, initial_size=62)` maps keys to
values in batches given as vectors.

- The supported storages are `HOST`, `DEVICE` and `MANAGED`.
- A `HOST` table does not accept `DEVICE` vectors.
- The key and value vectors must have the table's dtypes.

```python
from maelstrom.datatype import Storage, int32
from maelstrom.hash_table import HashTable
from maelstrom.vector import Vector

table = HashTable(Storage.HOST, int32, int32)
table.set(Vector(Storage.HOST, int32, [1, 2]), Vector(Storage.HOST, int32, [10, 20]))

query = Vector(Storage.HOST, int32, [2, 3])
print(table.get(query).tolist())       # [20, 2147483647]
print(table.contains(query).tolist())  # [1, 0]
table.remove(query)
print(len(table))                      # 1
```

### Methods

- `set(keys, vals)` replaces any values that are already stored.
- `get(keys)` gives the value `val_not_found()` for a missing key. This is
  the maximum value of the value dtype.
- `contains(keys)` returns a `uint8` vector of 0/1 flags.
- `remove(keys)` ignores keys that are absent.
- `keys()`, `values()` and `items()` return the contents.
- `key_not_found()` and `val_not_found()` return the missing-entry markers.

## Sparse matrices: `maelstrom.sparse_matrix`

`BasicSparseMatrix(rows, cols, values, relations, fmt, num_rows, num_cols, sorted)`
stores a matrix in one of the formats of `SparseMatrixFormat`: `COO`, `CSR`
or `CSC`.

- In CSR, `rows` holds row offsets. In CSC, `cols` holds column offsets.
- `values` and `relations` are optional. An empty vector, or `None`, means
  none.
- `SparseMatrix` is the abstract interface that it implements.

```python
from maelstrom.datatype import Storage, int32, uint8
from maelstrom.sparse_matrix import BasicSparseMatrix, SparseMatrixFormat
from maelstrom.vector import Vector

row_ptr = Vector(Storage.HOST, int32, [0, 2, 3, 4])
col = Vector(Storage.HOST, int32, [1, 2, 0, 1])
rel = Vector(Storage.HOST, uint8, [0, 1, 1, 0])

matrix = BasicSparseMatrix(row_ptr, col, None, rel,
                           SparseMatrixFormat.CSR, 3, 3, True)
matrix.to_coo()
print(matrix.row.tolist())   # [0, 0, 1, 2]
matrix.to_csc()
```

### Properties

`row`, `col`, `val`, `rel`, `format`, `num_rows`, `num_cols`, `is_sorted`
and `stream`.

### Information

`has_values()`, `has_relations()` and `num_nonzero()`.

### Sorting

- `sort(return_perm)` sorts by row and then column for COO. For CSR it sorts
  the columns within each row, and for CSC the rows within each column. The
  permutation is returned only for COO.
- `sort_values(return_perm)` sorts a COO matrix by its values. Afterwards
  the matrix is no longer marked as sorted.

### Lookup by position

These take 1d positions:

- `get_entries_1d`
- `get_rows_1d`
- `get_cols_1d`
- `get_values_1d`
- `get_relations_1d`

### Lookup by row and column

- `get_1d_index_from_2d_index(ix_r, ix_c, index_not_found)` finds entries by
  row and column. A missing entry gets `index_not_found`, or the maximum of
  the row dtype when that is not given.
- `get_values_2d` and `get_relations_2d` return the originating indices and
  the data of the entries that exist.
- `get_1d_index_from_value(query_val)` returns the position of the first
  entry that holds each value.

### Adjacency

These work on CSR and CSC only:

- `query_adjacency(ix, rel_types, return_inner, return_values, return_relations, return_1d_index_as_values)`
  returns `(origin, inner, values, relations)` for the rows (CSR) or columns
  (CSC) in `ix`. When `rel_types` is not empty, only those relations are
  kept.
- `nnz_i(ix, rel_types)` returns the non-zero count for each row or column.
  Empty rows and columns are left out.

### Modification

- `set(new_rows, new_num_rows, new_cols, new_num_cols, new_vals, new_rels)`
  appends entries and keeps the current format.
- `set_values(new_values)` replaces the values. An empty vector removes
  them.

### Conversion and streams

- `to_coo()`, `to_csr()` and `to_csc()` convert between formats.
- `set_stream(stream)` and `clear_stream()` apply to all four vectors.

### Copying

`BasicSparseMatrix.from_matrix(other)` copies another matrix.

## Distributed environment: `maelstrom.dist`

This module records the world size, rank and communicators of the process.
It uses a `DistEnv` dataclass.

- `dist_init(world_size, rank, comms)` sets these values. It may be called
  only once, until `dist_reset()`.
- `get_world_size()` and `get_rank()` return 0 before `dist_init`.
- `get_comms()` raises `RuntimeError` when no communicators were given.

## Running the tests

```
pytest
```