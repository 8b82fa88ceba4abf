"""Application constants."""

ADDRESS_PROPERTY_FIELDS = (
    "hash",
    "number",
    "street",
    "unit",
    "city",
    "district",
    "region",
    "postcode",
    "id",
)
SEARCH_FIELDS = ("street", "number", "postcode", "city")
LIST_FILTER_FIELDS = ("city", "street", "postcode", "district", "region")
COMMANDS = ("search", "within", "near", "stats")

DEFAULT_SEARCH_LIMIT = 100
DEFAULT_BATCH_SIZE = 500
DEFAULT_MAX_DISTANCE_M = 1000.0

EXIT_SUCCESS = 0
EXIT_REQUEST_ERROR = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "request_id",
    "operation",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
