from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a calculator receives a value outside its documented range."""


class NotFoundError(LookupError):
    """Raised when a taxonomy lookup has no matching occupation."""
