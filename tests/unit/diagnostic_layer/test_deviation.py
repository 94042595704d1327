import pytest

from filmqc.core.diagnostic_layer import (
    BWDeviation,
    C41Deviation,
    ChannelDensities,
    ValidationError,
    compute_deviations,
)


class TestC41Deviation:

    def test_zero_when_reading_equals_reference(self, c41_reference):
        dev = compute_deviations(c41_reference, c41_reference)
        zero = ChannelDensities(0, 0, 0)
        assert isinstance(dev, C41Deviation)
        assert (dev.dmax, dev.hd, dev.ld, dev.dmin, dev.hdld) == (zero,) * 5

    def test_per_channel_difference(self, c41_reference, c41_shift):
        reading = c41_shift(c41_reference, dmax=(1, -2, 3), dmin=(0, 4, -5))
        dev = compute_deviations(reading, c41_reference)
        assert dev.dmax == ChannelDensities(1, -2, 3)
        assert dev.dmin == ChannelDensities(0, 4, -5)

    def test_hdld_is_contrast_difference(self, c41_reference, c41_shift):
        # hd up 10, ld up 4 on red -> hdld.r = +6
        reading = c41_shift(c41_reference, hd=(10, 0, 0), ld=(4, 0, -3))
        dev = compute_deviations(reading, c41_reference)
        assert dev.hdld == ChannelDensities(6, 0, 3)

    def test_to_dict_shape(self, c41_reference):
        out = compute_deviations(c41_reference, c41_reference).to_dict()
        assert set(out) == {"dmax", "hd", "ld", "dmin", "hdld"}
        assert out["hdld"] == {"r": 0, "g": 0, "b": 0}

    def test_yellow_b_does_not_enter_deviation(self, c41_reference, c41_shift):
        reading = c41_shift(c41_reference, yellow_b=50)
        dev = compute_deviations(reading, c41_reference)
        assert dev.dmax == ChannelDensities(0, 0, 0)


class TestBWDeviation:

    def test_scalar_fields(self, bw_reference, bw_dev):
        reading = bw_dev(bw_reference, ld_dev=-3, hdld_dev=5, dmin_dev=2)
        dev = compute_deviations(reading, bw_reference)
        assert isinstance(dev, BWDeviation)
        assert dev.ld == -3
        assert dev.hdld == 5
        assert dev.dmin == 2
        assert dev.hd == 2

    def test_to_dict(self, bw_reference):
        out = compute_deviations(bw_reference, bw_reference).to_dict()
        assert out == {"dmax": 0, "hd": 0, "ld": 0, "dmin": 0, "hdld": 0}


class TestShapeMismatch:

    def test_reference_of_other_process(self, c41_reference, bw_reference):
        with pytest.raises(ValidationError) as info:
            compute_deviations(c41_reference, bw_reference)
        assert info.value.field_name == "reference"
        assert "C41Reading" in info.value.constraint

    def test_reading_not_a_reading(self, bw_reference):
        with pytest.raises(ValidationError) as info:
            compute_deviations({"ld": 1}, bw_reference)
        assert info.value.field_name == "reading"

    def test_inputs_not_mutated(self, c41_reference, c41_shift):
        reading = c41_shift(c41_reference, ld=(5, 5, 5))
        before = reading.to_dict()
        compute_deviations(reading, c41_reference)
        assert reading.to_dict() == before
