"""Adapters - I/O implementations of ports."""

from .json_store import JsonPlanStore, StoreError

__all__ = [
    "JsonPlanStore",
    "StoreError",
]
