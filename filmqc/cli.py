# filmqc/cli.py
# Command-line entry point.
#
# Diagnose one strip:
#   python -m filmqc.cli diagnose --process c41 \
#       --reading strip.json --reference reference.json
#
# Diagnose a B&W strip, append it to the monthly control log and use the
# month's earlier strips as drift history. The row records the diagnosis
# status and problems summary next to the raw densities:
#   python -m filmqc.cli diagnose --process bw \
#       --reading strip.json --reference reference.json \
#       --ledger bw_log.json --date 2025-11-14 --notes "tank 2"
#
# List the fault catalog:
#   python -m filmqc.cli catalog [--process bw]
#
# EXIT CODES:
#   0  -- Diagnosis (or catalog) printed to stdout as JSON.
#   2  -- Usage error (argparse).
#   3  -- CONTRACT_VIOLATION: the diagnostic layer rejected the input.
#   4  -- DATA_CORRUPTION or IO failure: input file or control log unusable.

import argparse
import json
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from filmqc.core.diagnostic_layer import (
    DEFAULT_CONFIG,
    DiagnosticError,
    ProcessType,
    diagnose,
    get_knowledge_base,
    parse_reading,
)
from filmqc.core.logging_layer import EventLogger, LoggingError
from filmqc.ledger import (
    ControlLog,
    LedgerError,
    LogEntry,
    load_control_log,
    save_control_log,
)
from filmqc.report import catalog_to_dicts, diagnosis_to_dict, problems_summary


EXIT_OK: int = 0
EXIT_CONTRACT_VIOLATION: int = 3
EXIT_DATA_FAILURE: int = 4


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Film process-control diagnostics for C-41 and B&W control strips.",
        prog="python -m filmqc.cli",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    diag = sub.add_parser("diagnose", help="Diagnose one control strip.")
    diag.add_argument(
        "--process",
        required=True,
        choices=[p.value for p in ProcessType],
        help="Process the strip was run through.",
    )
    diag.add_argument("--reading", required=True, help="Path to the strip reading JSON.")
    diag.add_argument("--reference", required=True, help="Path to the reference strip JSON.")
    diag.add_argument(
        "--history",
        default=None,
        help="Path to a JSON list of earlier B&W readings, oldest first.",
    )
    diag.add_argument(
        "--ledger",
        default=None,
        help="Path to a control log JSON file. Created if missing.",
    )
    diag.add_argument(
        "--date",
        default=None,
        type=date.fromisoformat,
        help="Strip date (YYYY-MM-DD). Required with --ledger.",
    )
    diag.add_argument("--notes", default="", help="Free-text notes for the control log.")

    cat = sub.add_parser("catalog", help="Print the fault catalog.")
    cat.add_argument(
        "--process",
        default=None,
        choices=[p.value for p in ProcessType],
        help="Only list faults for this process.",
    )
    return parser


def _load_json(path: str) -> Any:
    """Read a JSON file. Raises LedgerError on IO or parse failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        raise LedgerError(f"DATA_CORRUPTION: cannot read JSON from {path}: {exc}") from exc


def _open_ledger(path: Path, process: ProcessType) -> ControlLog:
    if not path.exists():
        return ControlLog(process)
    log = load_control_log(path)
    if log.process is not process:
        raise LedgerError(
            f"DATA_CORRUPTION: control log {path} is for process "
            f"'{log.process.value}', not '{process.value}'."
        )
    return log


def _run_diagnose(args: argparse.Namespace, events: EventLogger) -> int:
    process = ProcessType(args.process)
    if args.ledger is not None and args.date is None:
        sys.stderr.write("CONTRACT_VIOLATION: --date is required with --ledger\n")
        return EXIT_CONTRACT_VIOLATION

    try:
        reading = _load_json(args.reading)
        reference = _load_json(args.reference)
        history: Optional[List[Any]] = None
        if args.history is not None:
            history = _load_json(args.history)
            if not isinstance(history, list):
                raise LedgerError(f"DATA_CORRUPTION: {args.history} must hold a JSON list.")
        log: Optional[ControlLog] = None
        if args.ledger is not None:
            log = _open_ledger(Path(args.ledger), process)
            if history is None and process is ProcessType.BW:
                count = DEFAULT_CONFIG.tolerances.bw.drift_window - 1
                history = log.recent_readings(count, args.date)
    except LedgerError as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_DATA_FAILURE

    try:
        diagnosis = diagnose(process, reading, reference, history=history)
        parsed = parse_reading(process, reading)
    except DiagnosticError as exc:
        events.log_rejection(exc, _now())
        sys.stderr.write(f"CONTRACT_VIOLATION: {exc.message}\n")
        return EXIT_CONTRACT_VIOLATION

    event_id = events.log_diagnosis(process, parsed, diagnosis, _now(), notes=args.notes)
    result = diagnosis_to_dict(diagnosis)
    result["event_id"] = event_id

    if log is not None:
        try:
            entry = LogEntry(
                when=args.date,
                reading=parsed,
                notes=args.notes,
                status=diagnosis.status.overall.value,
                summary=problems_summary(diagnosis),
            )
            sheet, row = log.log_reading(entry)
            save_control_log(log, Path(args.ledger))
        except (LedgerError, OSError) as exc:
            sys.stderr.write(f"DATA_CORRUPTION: control log not updated: {exc}\n")
            return EXIT_DATA_FAILURE
        result["ledger"] = {"sheet": sheet, "row": row}

    print(json.dumps(result, indent=2))
    return EXIT_OK


def _run_catalog(args: argparse.Namespace) -> int:
    process = ProcessType(args.process) if args.process is not None else None
    print(json.dumps(catalog_to_dicts(get_knowledge_base(), process=process), indent=2))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse argv, run the command and return its exit code.

    Usage errors exit through argparse with code 2.
    """
    args = _build_parser().parse_args(argv)
    if args.command == "catalog":
        return _run_catalog(args)
    try:
        return _run_diagnose(args, EventLogger())
    except LoggingError as exc:
        sys.stderr.write(f"HARNESS_INTERNAL_ERROR: event log rejected the run: {exc}\n")
        return EXIT_DATA_FAILURE


if __name__ == "__main__":
    sys.exit(main())
