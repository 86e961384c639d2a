from . import (
    canon,
    exceptions,
    types,
    config,
    utils,
    validate,
    tariffs,
    baseline,
    align,
    savings,
    ingest,
)

__all__ = [
    "canon",
    "exceptions",
    "types",
    "config",
    "utils",
    "validate",
    "tariffs",
    "baseline",
    "align",
    "savings",
    "ingest",
]
