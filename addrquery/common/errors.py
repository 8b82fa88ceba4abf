"""Domain errors and failure typing."""


class QueryError(Exception):
    """Base class for query engine failures."""

    error_code = "QUERY_ERROR"


class ConfigError(QueryError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ValidationError(QueryError):
    """Raised for structurally invalid requests, before any store access."""

    error_code = "VALIDATION_ERROR"


class GeometryParseError(ValidationError):
    """Raised when a WKT region cannot be parsed."""

    error_code = "GEOMETRY_PARSE_ERROR"

    def __init__(self, message: str, fragment: str | None = None) -> None:
        super().__init__(message if fragment is None else f"{message}: {fragment!r}")
        self.fragment = fragment


class InvalidCursorError(ValidationError):
    """Raised when a pagination cursor does not decode to a record key."""

    error_code = "INVALID_CURSOR"


class StoreOperationError(QueryError):
    """Raised when a store fetch fails; carries the query kind."""

    error_code = "STORE_ERROR"

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} query failed: {message}")
        self.operation = operation
