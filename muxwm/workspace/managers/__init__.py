"""Data access managers for the workspace store.

Each module provides functions that encapsulate one store operation.
Managers accept a ``Session`` already inside a transaction, never commit,
return ORM rows and raise domain exceptions from ``muxwm.workspace.errors``.
Transaction boundaries and store-error translation are the repository's
responsibility.
"""
