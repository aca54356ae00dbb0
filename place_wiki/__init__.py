"""Place -> Wikipedia primary article resolver and POI pool."""

__version__ = "0.1.0"
