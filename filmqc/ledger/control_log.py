# filmqc/ledger/control_log.py
# ControlLog -- monthly control-strip workbook for one process.
#
# A ControlLog holds named sheets of sparse (row, col) -> value cells.
# Each strip is written to the sheet for the month of its date. A missing
# monthly sheet is copied from the "BLANK" template sheet when the
# workbook has one, otherwise it is created with basic headers.
#
# All dates are caller-supplied; nothing here reads the clock.
# No file IO: persistence lives in filmqc/ledger/storage.py.

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from filmqc.core.diagnostic_layer import (
    BWReading,
    C41Reading,
    ChannelDensities,
    DiagnosticError,
    ProcessType,
)
from filmqc.ledger.layout import (
    BASIC_HEADERS,
    BW_LAYOUT,
    C41_LAYOUT,
    TEMPLATE_SHEET,
    column_to_letter,
    monthly_sheet_name,
)


Reading = Union[C41Reading, BWReading]
Cell = Tuple[int, int]


class LedgerError(Exception):
    """Raised when the control log cannot accept or return a strip."""


# ===========================================================================
# SECTION 1 -- ENTRY
# ===========================================================================

@dataclass(frozen=True)
class LogEntry:
    """
    One strip to be written: its date, raw reading and free-text notes.

    status and summary carry the diagnosis outcome ("ok", "action", ...
    and the problems summary line); left blank when not diagnosed.
    """
    when: date
    reading: Reading
    notes: str = ""
    status: str = ""
    summary: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.when, date):
            raise LedgerError(
                "when must be a date instance; got: {}".format(type(self.when))
            )
        if not isinstance(self.reading, (C41Reading, BWReading)):
            raise LedgerError(
                "reading must be a C41Reading or BWReading; got: {}".format(type(self.reading))
            )
        for name in ("notes", "status", "summary"):
            if not isinstance(getattr(self, name), str):
                raise LedgerError(
                    "{} must be a string; got: {!r}".format(name, getattr(self, name))
                )

    @property
    def process(self) -> ProcessType:
        return ProcessType.C41 if isinstance(self.reading, C41Reading) else ProcessType.BW


# ===========================================================================
# SECTION 2 -- SHEET
# ===========================================================================

@dataclass
class ControlSheet:
    name: str
    cells: Dict[Cell, Any] = field(default_factory=dict)

    def get(self, row: int, col: int) -> Any:
        return self.cells.get((row, col))

    def set(self, row: int, col: int, value: Any) -> None:
        self.cells[(row, col)] = value

    def is_empty(self, row: int, col: int) -> bool:
        value = self.cells.get((row, col))
        return value is None or value == ""

    def last_row(self) -> int:
        """Highest row holding any cell, 0 for an empty sheet."""
        return max((row for row, _ in self.cells), default=0)

    def copy(self, name: str) -> "ControlSheet":
        return ControlSheet(name=name, cells=dict(self.cells))


# ===========================================================================
# SECTION 3 -- WORKBOOK
# ===========================================================================

class ControlLog:
    """
    Workbook of monthly sheets for one process.

    Sheets are kept in insertion order. The template sheet, when present,
    is never written to.
    """

    def __init__(
        self,
        process: ProcessType,
        sheets: Optional[List[ControlSheet]] = None,
    ) -> None:
        if not isinstance(process, ProcessType):
            raise LedgerError(
                "process must be a ProcessType; got: {!r}".format(process)
            )
        self.process: ProcessType = process
        self._sheets: Dict[str, ControlSheet] = {}
        for sheet in sheets or []:
            if sheet.name in self._sheets:
                raise LedgerError("duplicate sheet name: {!r}".format(sheet.name))
            self._sheets[sheet.name] = sheet

    @property
    def _layout(self):
        return C41_LAYOUT if self.process is ProcessType.C41 else BW_LAYOUT

    def __iter__(self) -> Iterator[ControlSheet]:
        return iter(self._sheets.values())

    def __len__(self) -> int:
        return len(self._sheets)

    def sheet_names(self) -> List[str]:
        return list(self._sheets)

    def get_sheet(self, name: str) -> Optional[ControlSheet]:
        return self._sheets.get(name)

    def get_or_create_sheet(self, name: str) -> ControlSheet:
        sheet = self._sheets.get(name)
        if sheet is not None:
            return sheet
        template = self._sheets.get(TEMPLATE_SHEET)
        if template is not None:
            sheet = template.copy(name)
        else:
            sheet = ControlSheet(name=name)
            for (row, col), text in BASIC_HEADERS[self.process].items():
                sheet.set(row, col, text)
        self._sheets[name] = sheet
        return sheet

    def next_empty_row(self, sheet: ControlSheet) -> int:
        """First row from the data start whose date cell is empty."""
        start = self._layout.data_start_row
        last = sheet.last_row()
        if last < start:
            return start
        for row in range(start, last + 1):
            if sheet.is_empty(row, self._layout.date_col):
                return row
        return last + 1

    # -----------------------------------------------------------------------
    # SECTION 3.1 -- write
    # -----------------------------------------------------------------------

    def log_reading(self, entry: LogEntry) -> Tuple[str, int]:
        """
        Write one strip to its monthly sheet. Return (sheet_name, row).

        Raises
        ------
        LedgerError : If the entry belongs to the other process.
        """
        if not isinstance(entry, LogEntry):
            raise LedgerError("entry must be a LogEntry; got: {}".format(type(entry)))
        if entry.process is not self.process:
            raise LedgerError(
                "cannot log a {} strip in a {} control log".format(
                    entry.process.value, self.process.value
                )
            )

        name = monthly_sheet_name(entry.when)
        sheet = self.get_or_create_sheet(name)
        row = self.next_empty_row(sheet)
        if self.process is ProcessType.C41:
            _write_c41_row(sheet, row, entry)
        else:
            _write_bw_row(sheet, row, entry)
        return name, row

    # -----------------------------------------------------------------------
    # SECTION 3.2 -- read
    # -----------------------------------------------------------------------

    def recent_readings(self, count: int, when: date) -> List[Reading]:
        """
        Last `count` strips logged in the month of `when`, oldest first.

        Returns an empty list when the month has no sheet or no strips.

        Raises
        ------
        LedgerError : If count is negative or a logged row is incomplete.
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise LedgerError("count must be a non-negative integer; got: {!r}".format(count))
        sheet = self._sheets.get(monthly_sheet_name(when))
        if sheet is None or count == 0:
            return []

        layout = self._layout
        rows = [
            row
            for row in range(layout.data_start_row, sheet.last_row() + 1)
            if not sheet.is_empty(row, layout.date_col)
        ]
        if self.process is ProcessType.C41:
            return [_read_c41_row(sheet, row) for row in rows[-count:]]
        return [_read_bw_row(sheet, row) for row in rows[-count:]]


# ===========================================================================
# SECTION 4 -- ROW CODECS
# ===========================================================================

def _write_channels(sheet: ControlSheet, row: int, start_col: int, densities: ChannelDensities) -> None:
    for offset, value in enumerate(densities.values()):
        sheet.set(row, start_col + offset, value)


def _write_c41_row(sheet: ControlSheet, row: int, entry: LogEntry) -> None:
    cfg = C41_LAYOUT
    reading = entry.reading
    day = entry.when.isoformat()

    sheet.set(row, cfg.date_col, day)
    _write_channels(sheet, row, cfg.dmax_start_col, reading.dmax)
    _write_channels(sheet, row, cfg.hd_start_col, reading.hd)
    _write_channels(sheet, row, cfg.ld_start_col, reading.ld)
    _write_channels(sheet, row, cfg.dmin_start_col, reading.dmin)

    # Chart side: HD-LD of the strip in place of raw HD.
    sheet.set(row, cfg.chart_date_col, day)
    _write_channels(sheet, row, cfg.chart_dmax_col, reading.dmax)
    _write_channels(sheet, row, cfg.chart_hdld_col, reading.hdld())
    _write_channels(sheet, row, cfg.chart_ld_col, reading.ld)
    _write_channels(sheet, row, cfg.chart_dmin_col, reading.dmin)

    if entry.notes:
        sheet.set(row, cfg.notes_col, entry.notes)
    _write_outcome(sheet, row, cfg, entry)


def _write_bw_row(sheet: ControlSheet, row: int, entry: LogEntry) -> None:
    cfg = BW_LAYOUT
    reading = entry.reading

    if entry.notes:
        sheet.set(row, cfg.notes_col, entry.notes)
    sheet.set(row, cfg.date_col, entry.when.isoformat())
    sheet.set(row, cfg.dmax_col, reading.dmax)
    sheet.set(row, cfg.hd_col, reading.hd)
    sheet.set(row, cfg.ld_col, reading.ld)
    sheet.set(row, cfg.dmin_col, reading.dmin)
    sheet.set(
        row,
        cfg.hdld_col,
        "=" + column_to_letter(cfg.hd_col) + str(row) + "-" + column_to_letter(cfg.ld_col) + str(row),
    )
    _write_outcome(sheet, row, cfg, entry)


def _write_outcome(sheet: ControlSheet, row: int, cfg, entry: LogEntry) -> None:
    if entry.status:
        sheet.set(row, cfg.status_col, entry.status)
    if entry.summary:
        sheet.set(row, cfg.summary_col, entry.summary)


def _read_channels(sheet: ControlSheet, row: int, start_col: int) -> ChannelDensities:
    return ChannelDensities(
        r=sheet.get(row, start_col),
        g=sheet.get(row, start_col + 1),
        b=sheet.get(row, start_col + 2),
    )


def _read_c41_row(sheet: ControlSheet, row: int) -> C41Reading:
    cfg = C41_LAYOUT
    try:
        return C41Reading(
            dmax=_read_channels(sheet, row, cfg.dmax_start_col),
            hd=_read_channels(sheet, row, cfg.hd_start_col),
            ld=_read_channels(sheet, row, cfg.ld_start_col),
            dmin=_read_channels(sheet, row, cfg.dmin_start_col),
        )
    except DiagnosticError as exc:
        raise LedgerError(
            "sheet {!r} row {} is not a complete C-41 strip: {}".format(sheet.name, row, exc.message)
        ) from exc


def _read_bw_row(sheet: ControlSheet, row: int) -> BWReading:
    cfg = BW_LAYOUT
    try:
        return BWReading(
            dmax=sheet.get(row, cfg.dmax_col),
            hd=sheet.get(row, cfg.hd_col),
            ld=sheet.get(row, cfg.ld_col),
            dmin=sheet.get(row, cfg.dmin_col),
        )
    except DiagnosticError as exc:
        raise LedgerError(
            "sheet {!r} row {} is not a complete B&W strip: {}".format(sheet.name, row, exc.message)
        ) from exc
