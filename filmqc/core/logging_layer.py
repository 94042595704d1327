# filmqc/core/logging_layer.py
# Logging Layer -- event record of every diagnosis run
#
# Scope: Event-sourced logging of diagnoses and rejected inputs.
# Zero tolerance for lost events. No file IO. No global mutable state.
# All timestamps are caller-supplied. All hashes are deterministic.
#
# Canonical import:
#   from filmqc.core.logging_layer import EventLogger, Event, EventFilter
#
# Dependencies: filmqc.core.diagnostic_layer (for payload shapes only)
# Prohibited: datetime.now(), uuid, random, file IO, global mutable state

# ===========================================================================
# SECTION 1 -- STDLIB IMPORTS
# ===========================================================================

import hashlib
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

# ===========================================================================
# SECTION 2 -- DIAGNOSTIC LAYER DEPENDENCY
# ===========================================================================

from filmqc.core.diagnostic_layer import DiagnosticError, Diagnosis, ProcessType

# ===========================================================================
# SECTION 3 -- CONSTANTS
# ===========================================================================

# Logged in place of a non-finite float; the event itself is never dropped.
_NAN_SENTINEL: str = "NaN_DETECTED"
_INF_SENTINEL: str = "Inf_DETECTED"

_HASH_SEP: str = "|"

EVENT_DIAGNOSIS: str = "DIAGNOSIS"
EVENT_REJECTED: str = "REJECTED"

# ===========================================================================
# SECTION 4 -- DATACLASSES: Event, EventFilter
# ===========================================================================

@dataclass
class Event:
    """
    Record of a single logged event.

    Fields
    ------
    id        : Deterministic string identifier derived from instance counter.
    type      : Category string (DIAGNOSIS, REJECTED, ...).
    timestamp : Caller-supplied datetime. Never generated internally.
    data      : Sanitized payload. NaN/Inf values replaced with sentinel
                strings at every nesting level.
    hash      : SHA-256 hex digest over (id, type, timestamp, data).
    """
    id: str
    type: str
    timestamp: datetime
    data: Dict[str, Any]
    hash: str


@dataclass
class EventFilter:
    """
    Filter specification for EventLogger.query_events().

    All fields are optional. Omitted fields apply no constraint.

    Fields
    ------
    event_type : Only events whose .type equals this value.
    process    : Only events whose payload names this process ("c41"/"bw").
    start_time : Only events with timestamp >= start_time.
    end_time   : Only events with timestamp <= end_time.
    limit      : At most this many events, oldest first.
    """
    event_type: Optional[str] = None
    process: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    limit: Optional[int] = None


# ===========================================================================
# SECTION 5 -- INTERNAL HELPERS
# ===========================================================================

def _sanitize_numeric(value: Any) -> Any:
    """Replace float NaN or Inf with the matching sentinel string."""
    if isinstance(value, float):
        if math.isnan(value):
            return _NAN_SENTINEL
        if math.isinf(value):
            return _INF_SENTINEL
    return value


def _sanitize_data(data: Any) -> Any:
    """
    Return a sanitized copy of a payload.

    Dicts, lists and tuples are walked recursively (tuples come back as
    lists). The original object is not mutated.
    """
    if isinstance(data, dict):
        return {k: _sanitize_data(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_sanitize_data(v) for v in data]
    return _sanitize_numeric(data)


def _compute_hash(
    event_id: str,
    event_type: str,
    timestamp: datetime,
    data: Dict[str, Any],
) -> str:
    """
    Compute a deterministic SHA-256 hex digest for an event.

    Preimage, in fixed order:
        event_id + SEP + event_type + SEP + timestamp.isoformat() + SEP
        + repr(sorted(data.items()))

    Returns a 64-character lowercase hex string.
    """
    sorted_items: str = repr(sorted(data.items()))
    preimage: str = (
        event_id
        + _HASH_SEP
        + event_type
        + _HASH_SEP
        + timestamp.isoformat()
        + _HASH_SEP
        + sorted_items
    )
    return hashlib.sha256(preimage.encode("ascii", errors="replace")).hexdigest()


def _make_event_id(counter: int) -> str:
    """Format: "EVT-{counter:016d}"."""
    return "EVT-{:016d}".format(counter)


def _process_value(process: Any) -> str:
    if isinstance(process, ProcessType):
        return process.value
    return str(process)


def _reading_payload(reading: Any) -> Any:
    to_dict = getattr(reading, "to_dict", None)
    if to_dict is not None:
        return to_dict()
    if isinstance(reading, dict):
        return dict(reading)
    return repr(reading)


# ===========================================================================
# SECTION 6 -- EventLogger
# ===========================================================================

class EventLogger:
    """
    Event-sourced record of diagnosis runs.

    Storage
    -------
    Events are held in an instance-level list (_store). No file IO.
    No global state. Each EventLogger instance is fully independent.

    Determinism guarantees
    ----------------------
    - Timestamps are caller-supplied; never generated internally.
    - Event IDs are derived from a monotonic counter (_counter).
    - Hashes depend only on the four explicit event fields.

    Zero lost events
    ----------------
    log_event() raises LoggingError on any failure condition instead of
    silently discarding the event. Callers must handle or propagate.
    """

    def __init__(self) -> None:
        self._store: List[Event] = []
        self._counter: int = 0

    # -----------------------------------------------------------------------
    # SECTION 6.1 -- log_event
    # -----------------------------------------------------------------------

    def log_event(self, event_type: str, data: Dict[str, Any], timestamp: datetime) -> str:
        """
        Record one event atomically. Return the assigned event ID.

        Parameters
        ----------
        event_type : Non-empty string categorising the event.
        data       : Key-value payload. Float values are sanitized; all
                     other values are stored as-is.
        timestamp  : Caller-supplied datetime. Must not be None.

        Raises
        ------
        LoggingError : If event_type is empty, data is not a dict, or
                       timestamp is missing or not a datetime.
        """
        if not event_type:
            raise LoggingError("event_type must be a non-empty string")
        if not isinstance(data, dict):
            raise LoggingError("data must be a dict; got: {}".format(type(data)))
        if timestamp is None:
            raise LoggingError("timestamp must be caller-supplied; None is not permitted")
        if not isinstance(timestamp, datetime):
            raise LoggingError(
                "timestamp must be a datetime instance; got: {}".format(type(timestamp))
            )

        self._counter += 1
        event_id: str = _make_event_id(self._counter)
        sanitized: Dict[str, Any] = _sanitize_data(data)
        event_hash: str = _compute_hash(event_id, event_type, timestamp, sanitized)

        self._store.append(
            Event(
                id=event_id,
                type=event_type,
                timestamp=timestamp,
                data=sanitized,
                hash=event_hash,
            )
        )
        return event_id

    # -----------------------------------------------------------------------
    # SECTION 6.2 -- log_diagnosis / log_rejection
    # -----------------------------------------------------------------------

    def log_diagnosis(
        self,
        process: Any,
        reading: Any,
        diagnosis: Diagnosis,
        timestamp: datetime,
        notes: str = "",
    ) -> str:
        """
        Log one completed diagnosis as a DIAGNOSIS event.

        Payload: process, overall status, problem names and severities,
        the raw reading and the deviations.

        Raises
        ------
        LoggingError : If diagnosis is not a Diagnosis or timestamp is invalid.
        """
        if not isinstance(diagnosis, Diagnosis):
            raise LoggingError(
                "diagnosis must be a Diagnosis instance; got: {}".format(type(diagnosis))
            )
        data: Dict[str, Any] = {
            "process": _process_value(process),
            "status": diagnosis.status.overall.value,
            "problems": [p.name for p in diagnosis.problems],
            "severities": [p.severity.value for p in diagnosis.problems],
            "reading": _reading_payload(reading),
            "deviations": diagnosis.deviations.to_dict(),
            "notes": notes,
        }
        return self.log_event(EVENT_DIAGNOSIS, data, timestamp)

    def log_rejection(self, error: DiagnosticError, timestamp: datetime) -> str:
        """Log an input the diagnostic layer refused, as a REJECTED event."""
        if not isinstance(error, DiagnosticError):
            raise LoggingError(
                "error must be a DiagnosticError instance; got: {}".format(type(error))
            )
        data: Dict[str, Any] = {
            "error": type(error).__name__,
            "field_name": error.field_name,
            "value": repr(error.value),
            "message": error.message,
        }
        return self.log_event(EVENT_REJECTED, data, timestamp)

    # -----------------------------------------------------------------------
    # SECTION 6.3 -- query_events
    # -----------------------------------------------------------------------

    def query_events(self, filter: EventFilter) -> List[Event]:
        """
        Return events matching the filter, oldest first.

        Filtering order: event_type, process, start_time, end_time, limit.

        Raises
        ------
        LoggingError : If filter is None.
        """
        if filter is None:
            raise LoggingError("filter must not be None")

        results: List[Event] = []
        for event in self._store:
            if filter.event_type is not None and event.type != filter.event_type:
                continue
            if filter.process is not None and event.data.get("process") != filter.process:
                continue
            if filter.start_time is not None and event.timestamp < filter.start_time:
                continue
            if filter.end_time is not None and event.timestamp > filter.end_time:
                continue
            results.append(event)

        if filter.limit is not None:
            results = results[: filter.limit]

        return results

    # -----------------------------------------------------------------------
    # SECTION 6.4 -- get_event_stream
    # -----------------------------------------------------------------------

    def get_event_stream(self, start_time: datetime) -> Iterator[Event]:
        """
        Yield events in insertion order from start_time (inclusive).

        Raises
        ------
        LoggingError : If start_time is None or not a datetime instance.
        """
        if start_time is None:
            raise LoggingError("start_time must be caller-supplied; None is not permitted")
        if not isinstance(start_time, datetime):
            raise LoggingError(
                "start_time must be a datetime instance; got: {}".format(type(start_time))
            )
        for event in self._store:
            if event.timestamp >= start_time:
                yield event

    # -----------------------------------------------------------------------
    # SECTION 6.5 -- event_count
    # -----------------------------------------------------------------------

    def event_count(self) -> int:
        return len(self._store)


# ===========================================================================
# SECTION 7 -- EXCEPTIONS
# ===========================================================================

class LoggingError(Exception):
    """
    Raised by EventLogger when an invariant is violated.

    Never silently swallowed. Every call site must handle LoggingError or
    let it propagate.
    """
