# filmqc/ledger/storage.py
# JSON persistence for ControlLog workbooks.
#
# File layout:
#   {
#     "format_version": "1",
#     "process":        "c41" | "bw",
#     "sheet_count":    N,
#     "sheets": [ {"name": "...", "cells": [[row, col, value], ...]}, ... ]
#   }
#
# Cells are written sorted by (row, col) so that identical workbooks give
# byte-identical files. On load every header field is checked; any
# mismatch or malformed cell is DATA_CORRUPTION and raises LedgerError.

import json
from pathlib import Path
from typing import Any, List

from filmqc.core.diagnostic_layer import ProcessType
from filmqc.ledger.control_log import ControlLog, ControlSheet, LedgerError


STORAGE_FORMAT_VERSION: str = "1"


def _serialize_sheet(sheet: ControlSheet) -> dict:
    return {
        "name":  sheet.name,
        "cells": [[row, col, value] for (row, col), value in sorted(sheet.cells.items())],
    }


def _load_sheet(d: Any, index: int) -> ControlSheet:
    if not isinstance(d, dict) or not isinstance(d.get("name"), str):
        raise LedgerError(
            f"DATA_CORRUPTION: sheet #{index} has no name."
        )
    sheet = ControlSheet(name=d["name"])
    for cell in d.get("cells", []):
        if (
            not isinstance(cell, list)
            or len(cell) != 3
            or not all(isinstance(x, int) and not isinstance(x, bool) and x >= 1 for x in cell[:2])
        ):
            raise LedgerError(
                f"DATA_CORRUPTION: malformed cell {cell!r} in sheet '{sheet.name}'."
            )
        row, col, value = cell
        sheet.set(row, col, value)
    return sheet


def save_control_log(log: ControlLog, filepath: Path) -> Path:
    """
    Write log to filepath as JSON. Parent directories are created.
    Returns the path written.
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    sheets = [_serialize_sheet(s) for s in log]
    payload = {
        "format_version": STORAGE_FORMAT_VERSION,
        "process":        log.process.value,
        "sheet_count":    len(sheets),
        "sheets":         sheets,
    }
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    return filepath


def load_control_log(filepath: Path) -> ControlLog:
    """
    Load a ControlLog written by save_control_log.

    Raises
    ------
    LedgerError : If the file is missing, is not valid JSON, or fails any
                  header or cell check.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise LedgerError(f"INTEGRITY_FAILURE: control log not found: {filepath}")

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as exc:
        raise LedgerError(
            f"DATA_CORRUPTION: failed to load control log {filepath}: {exc}"
        ) from exc

    if not isinstance(payload, dict):
        raise LedgerError("DATA_CORRUPTION: control log root must be an object.")
    if payload.get("format_version") != STORAGE_FORMAT_VERSION:
        raise LedgerError(
            f"DATA_CORRUPTION: format_version mismatch. "
            f"File: {payload.get('format_version')}, "
            f"Expected: {STORAGE_FORMAT_VERSION}."
        )
    try:
        process = ProcessType(payload.get("process"))
    except ValueError:
        raise LedgerError(
            f"DATA_CORRUPTION: unrecognized process '{payload.get('process')}'."
        ) from None

    raw_sheets = payload.get("sheets", [])
    if not isinstance(raw_sheets, list) or payload.get("sheet_count") != len(raw_sheets):
        raise LedgerError(
            f"DATA_CORRUPTION: sheet_count={payload.get('sheet_count')} "
            f"does not match the sheets stored."
        )

    sheets: List[ControlSheet] = [_load_sheet(d, i) for i, d in enumerate(raw_sheets)]
    return ControlLog(process, sheets)
