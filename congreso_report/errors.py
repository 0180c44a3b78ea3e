"""Report errors and failure typing."""


class ReportError(Exception):
    """Base class for report failures."""

    error_code = "REPORT_ERROR"


class ConfigError(ReportError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class DataSourceError(ReportError):
    """Raised when a source table cannot be read."""

    error_code = "DATA_SOURCE_ERROR"


class AggregateComputationError(ReportError):
    """Raised when an aggregate cannot be computed; no partial payload is returned."""

    error_code = "AGGREGATE_ERROR"

    def __init__(self, operation: str, message: str = "") -> None:
        self.operation = operation
        super().__init__(message or f"{operation} failed")
