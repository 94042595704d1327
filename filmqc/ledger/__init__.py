from filmqc.ledger.layout import (
    BW_LAYOUT,
    C41_LAYOUT,
    MONTH_NAMES,
    TEMPLATE_SHEET,
    column_to_letter,
    monthly_sheet_name,
)
from filmqc.ledger.control_log import (
    ControlLog,
    ControlSheet,
    LedgerError,
    LogEntry,
)
from filmqc.ledger.storage import (
    STORAGE_FORMAT_VERSION,
    load_control_log,
    save_control_log,
)

__all__ = [
    # Layout
    "MONTH_NAMES",
    "TEMPLATE_SHEET",
    "C41_LAYOUT",
    "BW_LAYOUT",
    "monthly_sheet_name",
    "column_to_letter",
    # Workbook
    "LedgerError",
    "LogEntry",
    "ControlSheet",
    "ControlLog",
    # Persistence
    "STORAGE_FORMAT_VERSION",
    "save_control_log",
    "load_control_log",
]
