"""Public interface for the ``finance_summary`` package.

Re-exports the engine entry points, models, configuration, storage adapters
and error types as the stable import surface. No runtime logic lives here.
"""

from .aggregator import aggregate
from .api import SummaryRefresher, compute_summary, load_summary
from .config import SummaryConfig, SummaryLabels
from .errors import (
    ConfigError,
    FinanceSummaryError,
    InvalidRecordError,
    MalformedPayloadError,
)
from .loader import ParsedRecords, load_records, parse_records, storage_key
from .models import (
    AggregationResult,
    DashboardSummary,
    DisplayRecord,
    Highlight,
    HighlightSummary,
    TransactionRecord,
    TransactionType,
    UserIdentity,
)
from .presenter import (
    format_amount,
    format_day_month,
    format_list_date,
    present_highlights,
    present_records,
)
from .storage import InMemoryStore, JsonFileStore, KeyValueStore, SqlKeyValueStore

__all__ = [
    # API
    "compute_summary",
    "load_summary",
    "SummaryRefresher",
    # Stages
    "storage_key",
    "parse_records",
    "load_records",
    "ParsedRecords",
    "aggregate",
    "present_highlights",
    "present_records",
    "format_amount",
    "format_list_date",
    "format_day_month",
    # Models / types
    "TransactionType",
    "TransactionRecord",
    "UserIdentity",
    "AggregationResult",
    "DisplayRecord",
    "Highlight",
    "HighlightSummary",
    "DashboardSummary",
    # Configuration
    "SummaryConfig",
    "SummaryLabels",
    # Storage
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "SqlKeyValueStore",
    # Errors
    "FinanceSummaryError",
    "ConfigError",
    "MalformedPayloadError",
    "InvalidRecordError",
]
