"""Schema and settings models."""

from .schemas import HotReloadSettings, LoadType, ResolverSettings, Schema

__all__ = ["HotReloadSettings", "LoadType", "ResolverSettings", "Schema"]
