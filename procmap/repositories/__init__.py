"""
Repository layer for data access.

Dispatches records to stored procedures so callers never write binding code.
"""
