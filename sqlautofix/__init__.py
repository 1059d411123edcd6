"""sqlautofix - deterministic auto-correction for hand-typed SQL."""

__version__ = "0.1.0"
