# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/deviation.py
# =============================================================================
#
# SCOPE
# -----
# Deviation of a control strip from its reference strip.
#
#   every patch field   = reading - reference
#   hdld                = (reading.hd - reading.ld) - (reference.hd - reference.ld)
#
# All fields are zero exactly when reading and reference agree field by
# field. Shape is checked before any arithmetic.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .domain import BWReading, C41Reading, ChannelDensities
from .exceptions import ValidationError


@dataclass(frozen=True)
class C41Deviation:
    dmax: ChannelDensities
    hd:   ChannelDensities
    ld:   ChannelDensities
    dmin: ChannelDensities
    hdld: ChannelDensities

    def to_dict(self) -> dict:
        return {
            "dmax": self.dmax.to_dict(),
            "hd":   self.hd.to_dict(),
            "ld":   self.ld.to_dict(),
            "dmin": self.dmin.to_dict(),
            "hdld": self.hdld.to_dict(),
        }


@dataclass(frozen=True)
class BWDeviation:
    dmax: float
    hd:   float
    ld:   float
    dmin: float
    hdld: float

    def to_dict(self) -> dict:
        return {
            "dmax": self.dmax,
            "hd":   self.hd,
            "ld":   self.ld,
            "dmin": self.dmin,
            "hdld": self.hdld,
        }


Deviation = Union[C41Deviation, BWDeviation]


def _subtract(a: ChannelDensities, b: ChannelDensities) -> ChannelDensities:
    return ChannelDensities(r=a.r - b.r, g=a.g - b.g, b=a.b - b.b)


def _check_same_shape(reading, reference) -> None:
    if not isinstance(reading, (C41Reading, BWReading)):
        raise ValidationError(
            field_name="reading",
            value=type(reading).__name__,
            constraint="must be a C41Reading or BWReading",
        )
    if type(reference) is not type(reading):
        raise ValidationError(
            field_name="reference",
            value=type(reference).__name__,
            constraint="must have the same shape as the reading ("
            + type(reading).__name__ + ")",
        )


def compute_deviations(reading, reference) -> Deviation:
    """
    Return reading - reference, plus the HD-LD contrast deviation.

    Pure function. Raises ValidationError when reading and reference are
    not readings of the same process.
    """
    _check_same_shape(reading, reference)

    if isinstance(reading, C41Reading):
        return C41Deviation(
            dmax=_subtract(reading.dmax, reference.dmax),
            hd=_subtract(reading.hd, reference.hd),
            ld=_subtract(reading.ld, reference.ld),
            dmin=_subtract(reading.dmin, reference.dmin),
            hdld=_subtract(reading.hdld(), reference.hdld()),
        )

    return BWDeviation(
        dmax=reading.dmax - reference.dmax,
        hd=reading.hd - reference.hd,
        ld=reading.ld - reference.ld,
        dmin=reading.dmin - reference.dmin,
        hdld=reading.hdld() - reference.hdld(),
    )


__all__ = [
    "C41Deviation",
    "BWDeviation",
    "Deviation",
    "compute_deviations",
]
