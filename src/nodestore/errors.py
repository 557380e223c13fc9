"""
Error types raised by nodestore.

Predicate resolution errors are split by who is at fault: IllegalUsageError
and TypeResolutionError point at a misconfigured endpoint, PredicateBuildError
at bad client input.
"""


class IllegalUsageError(TypeError):
    """A view parameter carries predicate metadata but is not a predicate type."""


class TypeResolutionError(TypeError):
    """No concrete domain type could be derived for a predicate."""


class PredicateBuildError(ValueError):
    """A required query parameter could not be converted to its field type."""

    def __init__(self, parameter: str, value: str, reason: str = None):
        self.parameter = parameter
        self.value = value
        message = f"Invalid value {value!r} for parameter {parameter!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BadRequestAlertError(Exception):
    """Client error on an entity endpoint, reported with alert headers."""

    def __init__(self, message: str, entity_name: str, error_key: str):
        super().__init__(message)
        self.message = message
        self.entity_name = entity_name
        self.error_key = error_key


class DownloadFailedError(Exception):
    """An object storage request came back with a failing HTTP status."""

    def __init__(self, status_code: int = 500, status_text: str = "UNKNOWN"):
        super().__init__(f"Download failed with status {status_code} ({status_text})")
        self.status_code = status_code
        self.status_text = status_text

    @classmethod
    def from_response(cls, response: dict | None) -> "DownloadFailedError":
        """Build the error from a boto3 response dict."""
        metadata = (response or {}).get("ResponseMetadata") or {}
        status_code = metadata.get("HTTPStatusCode")
        if status_code is None:
            return cls()
        headers = metadata.get("HTTPHeaders") or {}
        return cls(status_code=status_code, status_text=headers.get("status", "UNKNOWN"))
