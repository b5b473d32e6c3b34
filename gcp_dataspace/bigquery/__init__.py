"""BigQuery data addresses, validation and client creation."""

from .data_address import BigQueryDataAddress, BigQueryTarget
from .factory import BigQueryFactory
from .params import BigQueryRequestParams, BigQueryRequestParamsProvider
from .validation import ValidationResult, Violation, validate_source_address

__all__ = [
    "BigQueryDataAddress",
    "BigQueryFactory",
    "BigQueryRequestParams",
    "BigQueryRequestParamsProvider",
    "BigQueryTarget",
    "ValidationResult",
    "Violation",
    "validate_source_address",
]
