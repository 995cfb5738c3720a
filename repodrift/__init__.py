"""
repodrift: find drift between two copies of a codebase.

Walks two directory trees, pairs files by relative path and scores
each common file by line diff.
"""

__version__ = "1.0.0"
