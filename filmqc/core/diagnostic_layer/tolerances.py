# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/tolerances.py
# Authority: Kodak Z-131 (Process C-41) / Ilford FPC control procedures
# =============================================================================
#
# SCOPE
# -----
# Action / control tolerance bands, x100 density units.
#
#   C-41   dmin      +-0.03 / +-0.05
#          ld        +-0.06 / +-0.08
#          hdld      +-0.07 / +-0.09
#          dmaxb_yb  +0.10  / +0.12   (retained silver; one-sided)
#          spread    0.09             (HD-LD colour balance spread)
#   B&W    ld        +-0.06 / +-0.10
#          hdld      +-0.06 / +-0.10
#          fog       +0.03            (D-min rise for contamination)
#          drift     slope <= -0.01 per reading over >= 4 of the last 5
#
# These constants are built once at import into DEFAULT_TOLERANCES and
# are never mutated. Custom bands are built by constructing new frozen
# instances, never by editing these.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field

from .domain import Severity
from .exceptions import ToleranceConsistencyError, ValidationError


def _check_threshold(field_name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            field_name=field_name,
            value=value,
            constraint="must be an integer",
        )
    if value < 0:
        raise ValidationError(
            field_name=field_name,
            value=value,
            constraint="must be >= 0",
        )


# =============================================================================
# SECTION 1 -- TOLERANCE BAND
# =============================================================================

@dataclass(frozen=True)
class ToleranceBand:
    """
    Two-tier tolerance for one quantity.

    Breaches are strict: a deviation exactly at a threshold is inside it.
    one_sided bands compare the signed value (only positive excursions
    count); two-sided bands compare the magnitude.
    """

    name:      str
    action:    int
    control:   int
    one_sided: bool = False

    def __post_init__(self) -> None:
        _check_threshold(self.name + ".action", self.action)
        _check_threshold(self.name + ".control", self.control)
        if self.action > self.control:
            raise ToleranceConsistencyError(self.name, self.action, self.control)

    def level(self, value: float) -> Severity:
        """Return CONTROL, ACTION or OK for a deviation."""
        magnitude = value if self.one_sided else abs(value)
        if magnitude > self.control:
            return Severity.CONTROL
        if magnitude > self.action:
            return Severity.ACTION
        return Severity.OK


# =============================================================================
# SECTION 2 -- PER-PROCESS TOLERANCE SETS
# =============================================================================

@dataclass(frozen=True)
class C41Tolerances:
    dmin:     ToleranceBand = field(default_factory=lambda: ToleranceBand("dmin", 3, 5))
    ld:       ToleranceBand = field(default_factory=lambda: ToleranceBand("ld", 6, 8))
    hdld:     ToleranceBand = field(default_factory=lambda: ToleranceBand("hdld", 7, 9))
    dmaxb_yb: ToleranceBand = field(
        default_factory=lambda: ToleranceBand("dmaxb_yb", 10, 12, one_sided=True)
    )
    spread:   int = 9

    def __post_init__(self) -> None:
        _check_threshold("spread", self.spread)


@dataclass(frozen=True)
class BWTolerances:
    """
    B&W bands plus the contamination fog threshold and the drift rule.

    drift_slope is the magnitude of the per-reading decline (x100 density)
    that counts as a downward drift.
    """

    ld:                 ToleranceBand = field(default_factory=lambda: ToleranceBand("ld", 6, 10))
    hdld:               ToleranceBand = field(default_factory=lambda: ToleranceBand("hdld", 6, 10))
    fog:                int = 3
    drift_window:       int = 5
    drift_min_readings: int = 4
    drift_slope:        float = 1.0

    def __post_init__(self) -> None:
        _check_threshold("fog", self.fog)
        _check_threshold("drift_window", self.drift_window)
        _check_threshold("drift_min_readings", self.drift_min_readings)
        if self.drift_min_readings < 2:
            raise ValidationError(
                field_name="drift_min_readings",
                value=self.drift_min_readings,
                constraint="must be >= 2 (a slope needs two points)",
            )
        if self.drift_min_readings > self.drift_window:
            raise ValidationError(
                field_name="drift_min_readings",
                value=self.drift_min_readings,
                constraint="must be <= drift_window (" + str(self.drift_window) + ")",
            )
        if not self.drift_slope > 0:
            raise ValidationError(
                field_name="drift_slope",
                value=self.drift_slope,
                constraint="must be > 0",
            )


@dataclass(frozen=True)
class ToleranceConfig:
    c41: C41Tolerances = field(default_factory=C41Tolerances)
    bw:  BWTolerances = field(default_factory=BWTolerances)


DEFAULT_TOLERANCES: ToleranceConfig = ToleranceConfig()


__all__ = [
    "ToleranceBand",
    "C41Tolerances",
    "BWTolerances",
    "ToleranceConfig",
    "DEFAULT_TOLERANCES",
]
