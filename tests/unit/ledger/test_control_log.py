from datetime import date

import pytest

from filmqc.core.diagnostic_layer import (
    BWReading,
    C41Reading,
    ChannelDensities,
    ProcessType,
)
from filmqc.ledger import (
    ControlLog,
    ControlSheet,
    LedgerError,
    LogEntry,
    column_to_letter,
    monthly_sheet_name,
)


_NOV = date(2025, 11, 14)


def _bw(ld: float = 50, hd: float = 146) -> BWReading:
    return BWReading(dmax=170, hd=hd, ld=ld, dmin=30)


def _c41() -> C41Reading:
    return C41Reading(
        dmax=ChannelDensities(200, 250, 280),
        hd=ChannelDensities(120, 160, 190),
        ld=ChannelDensities(60, 80, 90),
        dmin=ChannelDensities(25, 60, 80),
        yellow_b=100,
    )


# =============================================================================
# SECTION 1 -- Layout helpers
# =============================================================================

class TestMonthlySheetName:

    @pytest.mark.parametrize(
        "month, expected",
        [(1, "Jan 2025"), (6, "June 2025"), (7, "July 2025"), (9, "Sept 2025"), (11, "Nov 2025")],
    )
    def test_names(self, month, expected):
        assert monthly_sheet_name(date(2025, month, 1)) == expected


class TestColumnToLetter:

    @pytest.mark.parametrize(
        "column, expected",
        [(1, "A"), (7, "G"), (26, "Z"), (27, "AA"), (28, "AB"), (30, "AD"), (52, "AZ"), (53, "BA")],
    )
    def test_letters(self, column, expected):
        assert column_to_letter(column) == expected

    @pytest.mark.parametrize("column", [0, -1, 1.5, True])
    def test_invalid(self, column):
        with pytest.raises(ValueError):
            column_to_letter(column)


# =============================================================================
# SECTION 2 -- Writing
# =============================================================================

class TestLogReadingBW:

    def test_first_row_is_data_start(self):
        log = ControlLog(ProcessType.BW)
        assert log.log_reading(LogEntry(when=_NOV, reading=_bw(), notes="tank 2")) == ("Nov 2025", 5)

    def test_row_layout(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw(), notes="tank 2"))
        sheet = log.get_sheet("Nov 2025")
        assert [sheet.get(5, c) for c in range(1, 8)] == [
            "tank 2", "2025-11-14", 170, 146, 50, 30, "=D5-E5",
        ]

    def test_rows_append(self):
        log = ControlLog(ProcessType.BW)
        rows = [log.log_reading(LogEntry(when=_NOV, reading=_bw()))[1] for _ in range(3)]
        assert rows == [5, 6, 7]
        assert log.get_sheet("Nov 2025").get(7, 7) == "=D7-E7"

    def test_first_empty_date_cell_is_reused(self):
        log = ControlLog(ProcessType.BW)
        for _ in range(3):
            log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        log.get_sheet("Nov 2025").set(6, 2, "")
        assert log.log_reading(LogEntry(when=_NOV, reading=_bw()))[1] == 6

    def test_months_get_separate_sheets(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        assert log.log_reading(LogEntry(when=date(2025, 12, 1), reading=_bw())) == ("Dec 2025", 5)
        assert log.sheet_names() == ["Nov 2025", "Dec 2025"]

    def test_basic_headers_without_template(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        sheet = log.get_sheet("Nov 2025")
        assert sheet.get(3, 2) == "Date"
        assert sheet.get(3, 7) == "HD-LD"

    def test_template_copied(self):
        blank = ControlSheet(name="BLANK", cells={(2, 3): 170, (3, 2): "Date (template)"})
        log = ControlLog(ProcessType.BW, [blank])
        log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        sheet = log.get_sheet("Nov 2025")
        assert sheet.get(3, 2) == "Date (template)"
        assert sheet.get(2, 3) == 170
        assert blank.get(5, 2) is None

    def test_no_notes_leaves_cell_empty(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        assert log.get_sheet("Nov 2025").get(5, 1) is None

    def test_status_and_summary_columns(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw(), status="action", summary="Contrast Too Low"))
        sheet = log.get_sheet("Nov 2025")
        assert [sheet.get(5, c) for c in (8, 9)] == ["action", "Contrast Too Low"]
        assert [sheet.get(3, c) for c in (8, 9)] == ["Status", "Problems"]

    def test_undiagnosed_entry_leaves_status_empty(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        sheet = log.get_sheet("Nov 2025")
        assert sheet.is_empty(5, 8) and sheet.is_empty(5, 9)


class TestLogReadingC41:

    def test_raw_and_chart_columns(self):
        log = ControlLog(ProcessType.C41)
        assert log.log_reading(LogEntry(when=_NOV, reading=_c41(), notes="n")) == ("Nov 2025", 5)
        sheet = log.get_sheet("Nov 2025")
        assert sheet.get(5, 1) == "n"
        assert sheet.get(5, 3) == "2025-11-14"
        assert [sheet.get(5, c) for c in range(5, 17)] == [
            200, 250, 280, 120, 160, 190, 60, 80, 90, 25, 60, 80,
        ]
        assert sheet.get(5, 18) == "2025-11-14"
        assert [sheet.get(5, c) for c in range(19, 31)] == [
            200, 250, 280, 60, 80, 100, 60, 80, 90, 25, 60, 80,
        ]

    def test_status_and_summary_after_chart_side(self):
        log = ControlLog(ProcessType.C41)
        log.log_reading(LogEntry(when=_NOV, reading=_c41(), status="ok", summary="Process within limits"))
        sheet = log.get_sheet("Nov 2025")
        assert [sheet.get(5, c) for c in (31, 32)] == ["ok", "Process within limits"]

    def test_basic_headers(self):
        log = ControlLog(ProcessType.C41)
        log.log_reading(LogEntry(when=_NOV, reading=_c41()))
        assert log.get_sheet("Nov 2025").get(1, 14) == "D-min"


class TestLogReadingErrors:

    def test_wrong_process(self):
        log = ControlLog(ProcessType.C41)
        with pytest.raises(LedgerError, match="bw strip in a c41"):
            log.log_reading(LogEntry(when=_NOV, reading=_bw()))

    def test_entry_needs_date(self):
        with pytest.raises(LedgerError, match="date"):
            LogEntry(when="2025-11-14", reading=_bw())  # type: ignore[arg-type]

    def test_entry_needs_reading(self):
        with pytest.raises(LedgerError, match="reading"):
            LogEntry(when=_NOV, reading={"ld": 1})  # type: ignore[arg-type]

    def test_entry_status_must_be_text(self):
        with pytest.raises(LedgerError, match="status"):
            LogEntry(when=_NOV, reading=_bw(), status=None)  # type: ignore[arg-type]

    def test_log_needs_process_type(self):
        with pytest.raises(LedgerError):
            ControlLog("bw")  # type: ignore[arg-type]

    def test_duplicate_sheet_names(self):
        with pytest.raises(LedgerError, match="duplicate"):
            ControlLog(ProcessType.BW, [ControlSheet("Nov 2025"), ControlSheet("Nov 2025")])


# =============================================================================
# SECTION 3 -- Reading back
# =============================================================================

class TestRecentReadings:

    def test_oldest_first_last_count(self):
        log = ControlLog(ProcessType.BW)
        for ld in (54, 52, 50, 48, 46):
            log.log_reading(LogEntry(when=_NOV, reading=_bw(ld=ld)))
        assert [r.ld for r in log.recent_readings(3, _NOV)] == [50, 48, 46]

    def test_fewer_rows_than_count(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw(ld=54)))
        assert log.recent_readings(4, _NOV) == [_bw(ld=54)]

    def test_no_sheet_for_month(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        assert log.recent_readings(4, date(2025, 10, 1)) == []

    def test_zero_count(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        assert log.recent_readings(0, _NOV) == []

    def test_negative_count(self):
        with pytest.raises(LedgerError):
            ControlLog(ProcessType.BW).recent_readings(-1, _NOV)

    def test_c41_round_trip_drops_yellow_b(self):
        log = ControlLog(ProcessType.C41)
        log.log_reading(LogEntry(when=_NOV, reading=_c41()))
        (reading,) = log.recent_readings(1, _NOV)
        assert reading.dmax == _c41().dmax
        assert reading.dmin == _c41().dmin
        assert reading.yellow_b is None

    def test_incomplete_row(self):
        log = ControlLog(ProcessType.BW)
        log.log_reading(LogEntry(when=_NOV, reading=_bw()))
        log.get_sheet("Nov 2025").set(5, 5, "")
        with pytest.raises(LedgerError, match="row 5"):
            log.recent_readings(1, _NOV)
