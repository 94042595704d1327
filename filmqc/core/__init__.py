# filmqc/core/__init__.py
# Core diagnostic types and the event log.
# Authoritative import source: filmqc.core.diagnostic_layer

from filmqc.core.diagnostic_layer import (
    Diagnosis,
    DiagnosticError,
    ProcessType,
    Severity,
    diagnose,
    get_knowledge_base,
)
from filmqc.core.logging_layer import Event, EventFilter, EventLogger, LoggingError

__all__ = [
    "Diagnosis",
    "DiagnosticError",
    "ProcessType",
    "Severity",
    "diagnose",
    "get_knowledge_base",
    "Event",
    "EventFilter",
    "EventLogger",
    "LoggingError",
]
