"""brickdb input models: dialects, filters, limits and connection settings."""
from brickdb.schema.dialect import Dialect
from brickdb.schema.filters import (
    FilterEntry,
    FilterInput,
    KeyedPredicate,
    RawPredicate,
    normalize_filter,
)
from brickdb.schema.limits import LimitSpec
from brickdb.schema.settings import ConnectionSettings

__all__ = [
    "ConnectionSettings",
    "Dialect",
    "FilterEntry",
    "FilterInput",
    "KeyedPredicate",
    "LimitSpec",
    "RawPredicate",
    "normalize_filter",
]
