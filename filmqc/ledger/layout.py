# filmqc/ledger/layout.py
# Sheet layouts for the monthly control-log workbooks.
#
# C-41 sheet (one per month, e.g. "Nov 2025"):
#   Row 1-4: headers / reference values. Row 5+: one strip per row.
#   A=Notes, C=Date, E-G=D-max RGB, H-J=HD RGB, K-M=LD RGB, N-P=D-min RGB.
#   Chart side: R=Date, S-U=D-max RGB, V-X=HD-LD RGB, Y-AA=LD RGB,
#   AB-AD=D-min RGB. AE=Status, AF=Problems summary.
#
# B&W sheet:
#   Row 5+: A=Notes, B=Date, C=D-max, D=HD, E=LD, F=D-min,
#   G=HD-LD written as a formula over D and E, H=Status, I=Problems summary.
#
# Columns are 1-based throughout, as in any spreadsheet.

from dataclasses import dataclass
from datetime import date
from typing import Dict, Tuple

from filmqc.core.diagnostic_layer import ProcessType


MONTH_NAMES: Tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "June",
    "July", "Aug", "Sept", "Oct", "Nov", "Dec",
)

TEMPLATE_SHEET: str = "BLANK"


@dataclass(frozen=True)
class C41Layout:
    data_start_row:  int = 5
    notes_col:       int = 1
    date_col:        int = 3
    dmax_start_col:  int = 5
    hd_start_col:    int = 8
    ld_start_col:    int = 11
    dmin_start_col:  int = 14
    chart_date_col:  int = 18
    chart_dmax_col:  int = 19
    chart_hdld_col:  int = 22
    chart_ld_col:    int = 25
    chart_dmin_col:  int = 28
    status_col:      int = 31
    summary_col:     int = 32


@dataclass(frozen=True)
class BWLayout:
    data_start_row: int = 5
    notes_col:      int = 1
    date_col:       int = 2
    dmax_col:       int = 3
    hd_col:         int = 4
    ld_col:         int = 5
    dmin_col:       int = 6
    hdld_col:       int = 7
    status_col:     int = 8
    summary_col:    int = 9


C41_LAYOUT: C41Layout = C41Layout()
BW_LAYOUT: BWLayout = BWLayout()

# (row, col) -> header text for a sheet created without a template.
BASIC_HEADERS: Dict[ProcessType, Dict[Tuple[int, int], str]] = {
    ProcessType.C41: {
        (1, 1): "Notes",
        (1, 3): "Date",
        (1, 5): "D-max",
        (1, 8): "HD",
        (1, 11): "LD",
        (1, 14): "D-min",
        (1, 31): "Status",
        (1, 32): "Problems",
    },
    ProcessType.BW: {
        (3, 1): "Notes",
        (3, 2): "Date",
        (3, 3): "D-max",
        (3, 4): "HD",
        (3, 5): "LD",
        (3, 6): "D-min",
        (3, 7): "HD-LD",
        (3, 8): "Status",
        (3, 9): "Problems",
    },
}


def monthly_sheet_name(when: date) -> str:
    """ "Nov 2025", "June 2025", "Sept 2024" ... """
    return MONTH_NAMES[when.month - 1] + " " + str(when.year)


def column_to_letter(column: int) -> str:
    """1 -> "A", 26 -> "Z", 27 -> "AA", 30 -> "AD"."""
    if isinstance(column, bool) or not isinstance(column, int) or column < 1:
        raise ValueError("column must be a positive integer; got: {!r}".format(column))
    letters = ""
    while column > 0:
        column, rem = divmod(column - 1, 26)
        letters = chr(rem + 65) + letters
    return letters
