"""
Persistence module.

Key-value storage for products and their sub-collections, with in-memory
and SQLite backends.
"""
