"""Core components shared across the cec-conformance engine."""

from cec_conformance.core.classification import Classification, ReplyKind, classify
from cec_conformance.core.constants import (
    # Timeouts
    DEFAULT_LONG_TIMEOUT_S,
    DEFAULT_REPLY_TIMEOUT_MS,
    RECORD_REPLY_TIMEOUT_MS,
    REPLY_WARN_THRESHOLD_MS,
)
from cec_conformance.core.errors import (
    BusPresenceViolation,
    CecError,
    DuplicateTestCaseError,
    OperatorInputError,
    ProtocolViolation,
    TransportError,
)
from cec_conformance.core.models import Frame, TimerEntry
from cec_conformance.core.types import CaseResult, ReportStatus, RunReport, Verdict

__all__ = [
    # Constants
    "DEFAULT_REPLY_TIMEOUT_MS",
    "RECORD_REPLY_TIMEOUT_MS",
    "REPLY_WARN_THRESHOLD_MS",
    "DEFAULT_LONG_TIMEOUT_S",
    # Errors
    "CecError",
    "ProtocolViolation",
    "BusPresenceViolation",
    "OperatorInputError",
    "DuplicateTestCaseError",
    "TransportError",
    # Models
    "Frame",
    "TimerEntry",
    # Types
    "Verdict",
    "ReportStatus",
    "CaseResult",
    "RunReport",
    # Classification
    "ReplyKind",
    "Classification",
    "classify",
]
