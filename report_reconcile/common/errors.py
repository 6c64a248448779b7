"""Domain errors and failure typing.

Every error carries an ``error_code`` that ends up in the JSON log stream.
Record-level problems in a batch are never raised; they are counted and
dropped by the reconcile core.
"""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ContractError(PipelineError):
    """Raised when an assembled bundle breaks its shape guarantees."""

    error_code = "CONTRACT_ERROR"


class StageError(PipelineError):
    """Raised for stage failures that should halt in strict mode."""

    error_code = "STAGE_ERROR"


class HttpRequestError(StageError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class FetchCancelledError(StageError):
    """Raised inside a fetch whose client was cancelled or superseded."""

    error_code = "FETCH_CANCELLED"
