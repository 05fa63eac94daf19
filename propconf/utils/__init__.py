"""Utility helpers for property loading."""

from .converter import flatten, to_property_map, to_property_value
from .locks import ReadWriteLock

__all__ = ["ReadWriteLock", "flatten", "to_property_map", "to_property_value"]
