# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/trend.py
# Authority: Ilford FPC Fault Finder ("Gradual Drift Down")
# =============================================================================
#
# SCOPE
# -----
# Downward drift check for B&W control strips (catalog fault 106).
#
# Input is the caller's history of earlier strips, oldest first, read
# against the same reference as the current strip. The current strip is
# appended and the last `drift_window` strips are kept. With fewer than
# `drift_min_readings` strips the check does not run.
#
# For the ld and hdld deviation series a least-squares line is fitted
# against the strip index. A slope at or below -drift_slope (x100 density
# per strip) on either series is a downward drift.
#
# The check is advisory (WARNING) and is consulted only when none of the
# level rules (101-105) fired for the current strip.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .domain import BWReading, Severity
from .exceptions import ValidationError
from .knowledge_base import DEFAULT_KNOWLEDGE_BASE, KnowledgeBase
from .problems import Problem
from .tolerances import DEFAULT_TOLERANCES, ToleranceConfig


_SLOPE_DECIMALS: int = 6


@dataclass(frozen=True)
class DriftSlopes:
    ld:       float
    hdld:     float
    readings: int


def _slope(series: np.ndarray) -> float:
    x = np.arange(series.size, dtype=float)
    slope = np.polyfit(x, series, 1)[0]
    return float(np.round(slope, _SLOPE_DECIMALS))


def compute_drift_slopes(
    history:    Sequence[BWReading],
    current:    BWReading,
    reference:  BWReading,
    tolerances: ToleranceConfig = DEFAULT_TOLERANCES,
) -> Optional[DriftSlopes]:
    """
    Return per-strip slopes of the ld and hdld deviations over the drift
    window, or None when the window holds too few strips.
    """
    for i, item in enumerate(history):
        if not isinstance(item, BWReading):
            raise ValidationError(
                field_name="history[" + str(i) + "]",
                value=type(item).__name__,
                constraint="must be a BWReading",
            )

    tol = tolerances.bw
    window = (list(history) + [current])[-tol.drift_window:]
    if len(window) < tol.drift_min_readings:
        return None

    ld_dev = np.array([r.ld - reference.ld for r in window], dtype=float)
    hdld_dev = np.array([r.hdld() - reference.hdld() for r in window], dtype=float)
    return DriftSlopes(ld=_slope(ld_dev), hdld=_slope(hdld_dev), readings=len(window))


def match_bw_drift(
    history:        Sequence[BWReading],
    current:        BWReading,
    reference:      BWReading,
    tolerances:     ToleranceConfig = DEFAULT_TOLERANCES,
    knowledge_base: KnowledgeBase = DEFAULT_KNOWLEDGE_BASE,
) -> Optional[Problem]:
    slopes = compute_drift_slopes(history, current, reference, tolerances)
    if slopes is None:
        return None

    limit = -tolerances.bw.drift_slope
    if slopes.ld > limit and slopes.hdld > limit:
        return None

    details = (
        "LD deviation slope {:+.2f}, HD-LD deviation slope {:+.2f} per reading "
        "over {} readings".format(slopes.ld, slopes.hdld, slopes.readings)
    )
    return Problem.from_fault(knowledge_base.get(106), Severity.WARNING, details=details)


__all__ = [
    "DriftSlopes",
    "compute_drift_slopes",
    "match_bw_drift",
]
