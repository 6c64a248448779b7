"""Application constants."""

USER_AGENT = "report-reconcile/1.0 (+reporting; contact: configured-email)"
SUPPORTED_SOURCES = ("report", "sistrix", "geo_ai")
STAGES = (
    "fetch",
    "reconcile",
)
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "source",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)

DEFAULT_WRAPPER_FIELD = "data"
TOTAL_SENTINEL = "TOTAL"
EMPTY_BATCH_MESSAGE = "no data received"

# Percentage change is round(ratio * scale) / 10. Domain visibility yields a
# one-decimal percentage; brand visibility has always been shown at a tenth of
# that. Kept apart until product decides which one is intended.
CHANGE_DIVISOR = 10
DOMAIN_VISIBILITY_CHANGE_SCALE = 1000
BRAND_VISIBILITY_CHANGE_SCALE = 100

KEYWORD_STATUSES = ("improved", "dropped", "new", "lost")
