import pytest
from filmqc.core.diagnostic_layer import (
    BWReading,
    C41Reading,
    ChannelDensities,
)


# Reference strip values (x100 density), loosely after a Kodak C-41
# reference strip: blue dmax 280, yellow patch 100 -> dmaxb_yb = 180.
C41_REFERENCE_DATA = {
    "dmax": {"r": 200, "g": 250, "b": 280},
    "hd":   {"r": 120, "g": 160, "b": 190},
    "ld":   {"r": 60,  "g": 80,  "b": 90},
    "dmin": {"r": 25,  "g": 60,  "b": 80},
    "yellow_b": 100,
}

# B&W reference: hdld = 146 - 50 = 96.
BW_REFERENCE_DATA = {"dmax": 170, "hd": 146, "ld": 50, "dmin": 30}


@pytest.fixture
def c41_reference() -> C41Reading:
    """Reference C-41 strip with a yellow patch reading."""
    return C41Reading.from_mapping(C41_REFERENCE_DATA, name="reference")


@pytest.fixture
def c41_reference_no_yellow() -> C41Reading:
    """Reference C-41 strip without yellow_b: blue D-min stands in."""
    ref = C41Reading.from_mapping(C41_REFERENCE_DATA, name="reference")
    return C41Reading(dmax=ref.dmax, hd=ref.hd, ld=ref.ld, dmin=ref.dmin)


@pytest.fixture
def bw_reference() -> BWReading:
    return BWReading(**BW_REFERENCE_DATA)


def shift_c41(
    ref: C41Reading,
    dmax=(0, 0, 0),
    hd=(0, 0, 0),
    ld=(0, 0, 0),
    dmin=(0, 0, 0),
    yellow_b="same",
) -> C41Reading:
    """
    Build a reading offset from ref by per-channel (r, g, b) deltas.

    yellow_b="same" copies the reference value; None drops it.
    """
    def _add(base: ChannelDensities, delta) -> ChannelDensities:
        return ChannelDensities(r=base.r + delta[0], g=base.g + delta[1], b=base.b + delta[2])

    return C41Reading(
        dmax=_add(ref.dmax, dmax),
        hd=_add(ref.hd, hd),
        ld=_add(ref.ld, ld),
        dmin=_add(ref.dmin, dmin),
        yellow_b=ref.yellow_b if yellow_b == "same" else yellow_b,
    )


def shift_bw(ref: BWReading, dmax=0, hd=0, ld=0, dmin=0) -> BWReading:
    return BWReading(
        dmax=ref.dmax + dmax,
        hd=ref.hd + hd,
        ld=ref.ld + ld,
        dmin=ref.dmin + dmin,
    )


def bw_with_deviation(ref: BWReading, ld_dev=0, hdld_dev=0, dmin_dev=0) -> BWReading:
    """B&W reading whose ld, hdld and dmin deviations are exactly as given."""
    return shift_bw(ref, ld=ld_dev, hd=ld_dev + hdld_dev, dmin=dmin_dev)


@pytest.fixture
def c41_shift():
    """The shift_c41 builder, for tests that derive readings from a reference."""
    return shift_c41


@pytest.fixture
def bw_dev():
    """The bw_with_deviation builder."""
    return bw_with_deviation
