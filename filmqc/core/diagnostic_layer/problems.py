# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/problems.py
# =============================================================================
#
# SCOPE
# -----
# Problem: one finding in a Diagnosis.
#
# A Problem selected from the catalog holds the FaultRecord itself in
# `fault` and copies its display text; the record is shared, never
# modified. Synthetic problems (generic developer activity, colour spread,
# process OK) carry fault=None.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .domain import Severity
from .knowledge_base import FaultRecord


@dataclass(frozen=True)
class Problem:
    severity:   Severity
    name:       str
    cause:      str
    action:     str
    manual_ref: str = ""
    fault:      Optional[FaultRecord] = None
    details:    Optional[str] = None

    @property
    def fault_id(self) -> Optional[int]:
        return self.fault.id if self.fault is not None else None

    @classmethod
    def from_fault(
        cls,
        record:   FaultRecord,
        severity: Severity,
        details:  Optional[str] = None,
    ) -> "Problem":
        """Tag a catalog record with the severity it was selected at."""
        return cls(
            severity=severity,
            name=record.name,
            cause=record.cause,
            action=record.action,
            manual_ref=record.manual_ref,
            fault=record,
            details=details,
        )

    def to_dict(self) -> dict:
        return {
            "severity":   self.severity.value,
            "name":       self.name,
            "cause":      self.cause,
            "action":     self.action,
            "manual_ref": self.manual_ref,
            "fault_id":   self.fault_id,
            "details":    self.details,
        }


PROCESS_OK: Problem = Problem(
    severity=Severity.OK,
    name="Process within limits",
    cause="",
    action="Continue normal operation",
)


__all__ = [
    "Problem",
    "PROCESS_OK",
]
