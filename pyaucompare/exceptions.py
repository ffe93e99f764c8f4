"""
Exception types raised by pyaucompare.

Both subclass ValueError so callers that already guard API calls with
``except ValueError`` keep working.
"""


class InvalidArgumentError(ValueError):
    """Raised for malformed call-site arguments (e.g. a wrong-size compare_values)."""


class SchemaError(ValueError):
    """Raised when a required column is absent from the dataset or has an unusable type."""
