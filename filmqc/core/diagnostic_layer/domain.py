# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/domain.py
# Authority: Kodak Z-131 (Process C-41) / Ilford FPC control procedures
# =============================================================================
#
# SCOPE
# -----
# Frozen domain dataclasses for control-strip inputs.
#
#   ProcessType       -- c41 | bw
#   Severity          -- ok | warning | action | control
#   ChannelDensities  -- one patch measured through r, g, b filters
#   C41Reading        -- dmax, hd, ld, dmin (ChannelDensities) + yellow_b
#   BWReading         -- dmax, hd, ld, dmin (scalars)
#
# A reference strip has exactly the shape of a reading of the same process,
# so the reading classes double as reference classes.
#
# All densities are x100-scaled optical densities (0.45 D is stored as 45).
#
# VALIDATION PHILOSOPHY
# ---------------------
# Validation is fail-fast, in this fixed order per field:
#
#   V1  Type        -- must be a real number; bool is rejected.
#                      Raises ValidationError(field_name, value, constraint).
#   V2  Finiteness  -- math.isfinite. Raises NumericalError.
#   V3  Shape       -- every patch and channel present (from_mapping only).
#                      Raises ValidationError naming the dotted field.
#
# There is NO silent coercion. A missing field is never read as 0 or NaN.
# =============================================================================

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .exceptions import NumericalError, ValidationError


CHANNELS: Tuple[str, ...] = ("r", "g", "b")
PATCHES:  Tuple[str, ...] = ("dmax", "hd", "ld", "dmin")


# =============================================================================
# SECTION 1 -- ENUMERATIONS
# =============================================================================

class ProcessType(str, Enum):
    """
    Film process under control. Inherits from str for clean serialisation,
    so ProcessType.C41 == "c41" is True.

    C41 -- colour-negative process, three-channel densitometry.
    BW  -- black-and-white process, visual (single-channel) densitometry.
    """
    C41 = "c41"
    BW  = "bw"


class Severity(str, Enum):
    """
    Severity attached to a tolerance check or a diagnosed problem.

    OK       -- within limits.
    WARNING  -- advisory finding (colour spread, slow drift).
    ACTION   -- outside the action limit; correct before the next run.
    CONTROL  -- outside the control limit; stop and correct now.
    """
    OK      = "ok"
    WARNING = "warning"
    ACTION  = "action"
    CONTROL = "control"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: Dict[Severity, int] = {
    Severity.OK:      0,
    Severity.WARNING: 1,
    Severity.ACTION:  2,
    Severity.CONTROL: 3,
}


# =============================================================================
# SECTION 2 -- INTERNAL VALIDATION HELPERS
# =============================================================================

def _check_density(field_name: str, value: Any) -> None:
    """V1 + V2: value must be a finite real number (not bool)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(
            field_name=field_name,
            value=value,
            constraint="must be a real number",
        )
    try:
        finite = math.isfinite(value)
    except OverflowError:
        # int too large for a float
        finite = False
    if not finite:
        raise NumericalError(field_name=field_name, value=value)


def _require_mapping(field_name: str, data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError(
            field_name=field_name,
            value=data,
            constraint="must be a mapping",
        )
    return data


def _require_key(data: Mapping[str, Any], key: str, prefix: str) -> Any:
    """V3: the key must be present and not None."""
    field_name = prefix + "." + key
    if key not in data or data[key] is None:
        raise ValidationError(
            field_name=field_name,
            value=None,
            constraint="is required",
        )
    return data[key]


# =============================================================================
# SECTION 3 -- CHANNEL DENSITIES
# =============================================================================

@dataclass(frozen=True)
class ChannelDensities:
    """
    Red, green and blue status-M densities of one control-strip patch.

    Also used for per-channel deviations, where values may be negative.
    """

    r: float
    g: float
    b: float

    def __post_init__(self) -> None:
        for channel in CHANNELS:
            _check_density(channel, getattr(self, channel))

    @classmethod
    def from_mapping(cls, data: Any, prefix: str) -> "ChannelDensities":
        """Build from {'r': .., 'g': .., 'b': ..}, naming failures by prefix."""
        data = _require_mapping(prefix, data)
        values = []
        for channel in CHANNELS:
            value = _require_key(data, channel, prefix)
            _check_density(prefix + "." + channel, value)
            values.append(value)
        return cls(*values)

    def values(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def mean(self) -> float:
        return (self.r + self.g + self.b) / 3

    def to_dict(self) -> Dict[str, float]:
        return {"r": self.r, "g": self.g, "b": self.b}


# =============================================================================
# SECTION 4 -- C-41 READING
# =============================================================================

@dataclass(frozen=True)
class C41Reading:
    """
    One C-41 control strip read on a colour densitometer.

    yellow_b is the blue density of the silver-free yellow reference patch.
    It is optional: when a reference strip lacks it, blue D-min stands in
    for the retained-silver baseline.
    """

    dmax:     ChannelDensities
    hd:       ChannelDensities
    ld:       ChannelDensities
    dmin:     ChannelDensities
    yellow_b: Optional[float] = None

    def __post_init__(self) -> None:
        for patch in PATCHES:
            value = getattr(self, patch)
            if not isinstance(value, ChannelDensities):
                raise ValidationError(
                    field_name=patch,
                    value=value,
                    constraint="must be a ChannelDensities instance",
                )
        if self.yellow_b is not None:
            _check_density("yellow_b", self.yellow_b)

    @classmethod
    def from_mapping(cls, data: Any, name: str = "reading") -> "C41Reading":
        """
        Parse the JSON shape {dmax:{r,g,b}, hd:{..}, ld:{..}, dmin:{..},
        yellow_b?}. Unknown keys are ignored.
        """
        data = _require_mapping(name, data)
        patches = {
            patch: ChannelDensities.from_mapping(
                _require_key(data, patch, name), name + "." + patch
            )
            for patch in PATCHES
        }
        yellow_b = data.get("yellow_b")
        if yellow_b is not None:
            _check_density(name + ".yellow_b", yellow_b)
        return cls(yellow_b=yellow_b, **patches)

    def hdld(self) -> ChannelDensities:
        """HD minus LD per channel: the contrast indicator."""
        return ChannelDensities(
            r=self.hd.r - self.ld.r,
            g=self.hd.g - self.ld.g,
            b=self.hd.b - self.ld.b,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {patch: getattr(self, patch).to_dict() for patch in PATCHES}
        if self.yellow_b is not None:
            out["yellow_b"] = self.yellow_b
        return out


# =============================================================================
# SECTION 5 -- B&W READING
# =============================================================================

@dataclass(frozen=True)
class BWReading:
    """One black-and-white control strip, visual densities."""

    dmax: float
    hd:   float
    ld:   float
    dmin: float

    def __post_init__(self) -> None:
        for patch in PATCHES:
            _check_density(patch, getattr(self, patch))

    @classmethod
    def from_mapping(cls, data: Any, name: str = "reading") -> "BWReading":
        """Parse the JSON shape {dmax, hd, ld, dmin}."""
        data = _require_mapping(name, data)
        values = {}
        for patch in PATCHES:
            value = _require_key(data, patch, name)
            _check_density(name + "." + patch, value)
            values[patch] = value
        return cls(**values)

    def hdld(self) -> float:
        return self.hd - self.ld

    def to_dict(self) -> Dict[str, float]:
        return {patch: getattr(self, patch) for patch in PATCHES}


_READING_TYPES = {
    ProcessType.C41: C41Reading,
    ProcessType.BW:  BWReading,
}


def reading_type_for(process: ProcessType) -> type:
    """Return the reading class that carries measurements for process."""
    return _READING_TYPES[process]


def parse_reading(process: ProcessType, data: Any, name: str = "reading"):
    """
    Return data as a reading of the given process.

    Reading instances of the right class pass through untouched; mappings
    are parsed with full shape validation; anything else is rejected.
    """
    reading_cls = _READING_TYPES[process]
    if isinstance(data, reading_cls):
        return data
    if isinstance(data, (C41Reading, BWReading)):
        raise ValidationError(
            field_name=name,
            value=type(data).__name__,
            constraint="must be a " + reading_cls.__name__ + " for process " + process.value,
        )
    return reading_cls.from_mapping(data, name=name)


# =============================================================================
# SECTION 6 -- MODULE __all__
# =============================================================================

__all__ = [
    "CHANNELS",
    "PATCHES",
    "ProcessType",
    "Severity",
    "ChannelDensities",
    "C41Reading",
    "BWReading",
    "reading_type_for",
    "parse_reading",
]
