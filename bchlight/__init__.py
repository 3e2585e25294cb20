"""Header stores, filter storage, checkpoints, block notification values and caches for a light Bitcoin Cash client."""

__version__ = "0.1.0"