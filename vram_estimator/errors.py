"""Shared exception types for the estimator."""


class InvalidInputError(ValueError):
    """Raised when a caller supplies a value the estimator cannot work with.

    Carries *field* (the offending argument name) and the rejected *value* so
    a form can highlight exactly what to fix.
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class UnknownPrecisionError(KeyError):
    """Raised when a precision key has no bytes-per-element entry.

    This is a catalog integrity problem, not a user error: every member of
    ``Precision`` must be present in the lookup table.
    """

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"No bytes-per-element entry for precision {key!r}")


class UnsupportedConfig(Exception):
    """Raised when a HuggingFace config lacks the fields needed for a preset."""

    def __init__(self, hf_id: str, details: str) -> None:
        self.hf_id = hf_id
        self.details = details
        super().__init__(f"Unsupported config for {hf_id}: {details}")
