"""Typed vectors, hash tables and sparse matrices with explicit dtypes and storage kinds."""

__version__ = "0.1.0"
__all__ = ["datatype", "dist", "vector", "hash_table", "sparse_matrix"]