import pytest

from filmqc.core.diagnostic_layer import (
    BWDeviation,
    ChannelDensities,
    C41Deviation,
    ProcessType,
    Severity,
    ToleranceConfig,
    ToleranceStatus,
    ValidationError,
    classify_tolerances,
)
from filmqc.core.diagnostic_layer.tolerances import C41Tolerances, ToleranceBand


def _c41_dev(dmin=(0, 0, 0), ld=(0, 0, 0), hdld=(0, 0, 0)) -> C41Deviation:
    zero = ChannelDensities(0, 0, 0)
    return C41Deviation(
        dmax=zero,
        hd=zero,
        ld=ChannelDensities(*ld),
        dmin=ChannelDensities(*dmin),
        hdld=ChannelDensities(*hdld),
    )


def _bw_dev(ld=0, hdld=0, dmin=0) -> BWDeviation:
    return BWDeviation(dmax=0, hd=ld + hdld, ld=ld, dmin=dmin, hdld=hdld)


# =============================================================================
# SECTION 1 -- C-41 sweep
# =============================================================================

class TestC41Classification:

    def test_all_zero_is_ok(self):
        status = classify_tolerances(_c41_dev(), ProcessType.C41)
        assert status == ToleranceStatus(overall=Severity.OK, details=())

    def test_values_on_action_threshold_are_ok(self):
        status = classify_tolerances(_c41_dev(dmin=(3, -3, 3), ld=(6, 6, -6), hdld=(7, -7, 7)), "c41")
        assert status.overall is Severity.OK
        assert status.details == ()

    def test_single_action_breach(self):
        status = classify_tolerances(_c41_dev(ld=(0, -7, 0)), ProcessType.C41)
        assert status.overall is Severity.ACTION
        assert len(status.details) == 1
        v = status.details[0]
        assert (v.patch, v.channel, v.value, v.level) == ("ld", "g", -7, Severity.ACTION)

    def test_control_dominates_later_action(self):
        status = classify_tolerances(_c41_dev(dmin=(6, 0, 0), ld=(0, 7, 0)), ProcessType.C41)
        assert status.overall is Severity.CONTROL
        assert [(v.patch, v.channel, v.level) for v in status.details] == [
            ("dmin", "r", Severity.CONTROL),
            ("ld", "g", Severity.ACTION),
        ]

    def test_later_control_escalates_earlier_action(self):
        status = classify_tolerances(_c41_dev(ld=(7, 0, 0), hdld=(0, 0, 10)), ProcessType.C41)
        assert status.overall is Severity.CONTROL
        assert [v.level for v in status.details] == [Severity.ACTION, Severity.CONTROL]

    def test_sweep_order_dmin_ld_hdld_then_rgb(self):
        status = classify_tolerances(
            _c41_dev(dmin=(0, 0, 4), ld=(9, 0, 0), hdld=(0, 8, 0)),
            ProcessType.C41,
        )
        assert [(v.patch, v.channel) for v in status.details] == [
            ("dmin", "b"),
            ("ld", "r"),
            ("hdld", "g"),
        ]

    def test_every_breach_recorded(self):
        status = classify_tolerances(_c41_dev(dmin=(6, 6, 6), ld=(7, 7, 7)), ProcessType.C41)
        assert len(status.details) == 6

    def test_custom_bands(self):
        tight = ToleranceConfig(c41=C41Tolerances(ld=ToleranceBand("ld", 2, 4)))
        status = classify_tolerances(_c41_dev(ld=(3, 0, 0)), ProcessType.C41, tight)
        assert status.overall is Severity.ACTION

    def test_to_dict(self):
        status = classify_tolerances(_c41_dev(dmin=(-6, 0, 0)), ProcessType.C41)
        assert status.to_dict() == {
            "overall": "control",
            "details": [{"patch": "dmin", "channel": "r", "value": -6, "level": "control"}],
        }


# =============================================================================
# SECTION 2 -- B&W combined check
# =============================================================================

class TestBWClassification:

    @pytest.mark.parametrize(
        "ld, hdld, expected",
        [
            (0, 0, Severity.OK),
            (6, -6, Severity.OK),
            (7, 0, Severity.ACTION),
            (0, -8, Severity.ACTION),
            (10, 10, Severity.ACTION),
            (11, 0, Severity.CONTROL),
            (3, -11, Severity.CONTROL),
        ],
    )
    def test_overall(self, ld, hdld, expected):
        status = classify_tolerances(_bw_dev(ld=ld, hdld=hdld), ProcessType.BW)
        assert status.overall is expected

    def test_no_details(self):
        status = classify_tolerances(_bw_dev(ld=20, hdld=20), ProcessType.BW)
        assert status.details == ()

    def test_dmin_not_classified(self):
        assert classify_tolerances(_bw_dev(dmin=50), ProcessType.BW).overall is Severity.OK


class TestProcessMismatch:

    def test_bw_deviation_as_c41(self):
        with pytest.raises(ValidationError) as info:
            classify_tolerances(_bw_dev(), ProcessType.C41)
        assert info.value.field_name == "deviation"

    def test_c41_deviation_as_bw(self):
        with pytest.raises(ValidationError):
            classify_tolerances(_c41_dev(), ProcessType.BW)
