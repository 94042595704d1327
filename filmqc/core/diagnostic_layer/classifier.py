# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/classifier.py
# =============================================================================
#
# SCOPE
# -----
# Two-tier tolerance classification of a deviation.
#
# C-41 SWEEP ORDER
# ----------------
#   dmin r, g, b  ->  ld r, g, b  ->  hdld r, g, b
#
# overall is the worst level seen anywhere in the sweep. CONTROL dominates
# ACTION; once reached it is never lowered by a later, smaller breach.
# Every breach is itemised in details, in sweep order, whatever overall
# already is.
#
# B&W
# ---
# One combined check over ld and hdld. No itemised details.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .deviation import BWDeviation, C41Deviation
from .domain import CHANNELS, ProcessType, Severity
from .exceptions import ValidationError
from .tolerances import DEFAULT_TOLERANCES, ToleranceConfig


@dataclass(frozen=True)
class ToleranceViolation:
    patch:   str
    channel: str
    value:   float
    level:   Severity

    def to_dict(self) -> dict:
        return {
            "patch":   self.patch,
            "channel": self.channel,
            "value":   self.value,
            "level":   self.level.value,
        }


@dataclass(frozen=True)
class ToleranceStatus:
    """
    overall:  Severity.OK, ACTION or CONTROL.
    details:  ordered violations; always empty for B&W.
    """

    overall: Severity
    details: Tuple[ToleranceViolation, ...] = ()

    def to_dict(self) -> dict:
        return {
            "overall": self.overall.value,
            "details": [v.to_dict() for v in self.details],
        }


def _worst(current: Severity, candidate: Severity) -> Severity:
    return candidate if candidate.rank > current.rank else current


def _classify_c41(deviation: C41Deviation, tolerances: ToleranceConfig) -> ToleranceStatus:
    tol = tolerances.c41
    overall = Severity.OK
    details: List[ToleranceViolation] = []

    for patch, band in (("dmin", tol.dmin), ("ld", tol.ld), ("hdld", tol.hdld)):
        densities = getattr(deviation, patch)
        for channel in CHANNELS:
            value = getattr(densities, channel)
            level = band.level(value)
            if level is Severity.OK:
                continue
            overall = _worst(overall, level)
            details.append(ToleranceViolation(patch, channel, value, level))

    return ToleranceStatus(overall=overall, details=tuple(details))


def _classify_bw(deviation: BWDeviation, tolerances: ToleranceConfig) -> ToleranceStatus:
    tol = tolerances.bw
    overall = _worst(tol.ld.level(deviation.ld), tol.hdld.level(deviation.hdld))
    return ToleranceStatus(overall=overall)


def classify_tolerances(
    deviation,
    process:    ProcessType,
    tolerances: ToleranceConfig = DEFAULT_TOLERANCES,
) -> ToleranceStatus:
    """
    Classify a deviation against the process's action / control bands.

    Raises ValidationError when the deviation does not belong to process.
    """
    if process == ProcessType.C41 and isinstance(deviation, C41Deviation):
        return _classify_c41(deviation, tolerances)
    if process == ProcessType.BW and isinstance(deviation, BWDeviation):
        return _classify_bw(deviation, tolerances)
    raise ValidationError(
        field_name="deviation",
        value=type(deviation).__name__,
        constraint="must be a deviation of process " + repr(getattr(process, "value", process)),
    )


__all__ = [
    "ToleranceViolation",
    "ToleranceStatus",
    "classify_tolerances",
]
