#!/usr/bin/env python3
# =============================================================================
# filmqc -- CI CHECKS RUNNER
# File:   scripts/run_ci_checks.py
# =============================================================================
#
# PURPOSE
# -------
# Runs the CI gate in two sequential stages:
#   Stage 1: pytest (all tests + coverage enforcement >= 90%)
#   Stage 2: CLI smoke test (catalog listing through the module entry point)
#
# Exit codes:
#   0 -- All stages passed.
#   1 -- Stage 1 (pytest) failed.
#   2 -- Stage 2 (CLI smoke) failed.
#
# Usage:
#   python scripts/run_ci_checks.py
# =============================================================================

from __future__ import annotations

import subprocess
import sys
import pathlib

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
_REPO_ROOT = pathlib.Path(__file__).parent.parent
_PYTHON    = sys.executable


def _separator(char: str = "=", width: int = 72) -> str:
    return char * width


def _run(cmd: list[str], label: str) -> int:
    """
    Run a subprocess command, stream stdout/stderr live, return exit code.
    """
    print(_separator())
    print(f"CI STAGE: {label}")
    print(f"CMD:      {' '.join(cmd)}")
    print(_separator("-"))
    sys.stdout.flush()

    proc = subprocess.run(
        cmd,
        cwd=str(_REPO_ROOT),
    )
    return proc.returncode


def _fail(stage: str, rc: int, code: int) -> int:
    print(_separator())
    print(f"CI RESULT: FAIL  [stage={stage}  exit_code={rc}]")
    print(f"Merge BLOCKED: {stage} stage did not pass.")
    print(_separator())
    sys.stdout.flush()
    return code


def main() -> int:
    print(_separator())
    print("filmqc CI GATE -- starting")
    print(_separator())
    sys.stdout.flush()

    # ------------------------------------------------------------------
    # Stage 1: pytest
    # Coverage is enforced on the filmqc package only.
    # ------------------------------------------------------------------
    pytest_rc = _run(
        [
            _PYTHON, "-m", "pytest",
            "--cov=filmqc",
            "--cov-report=term-missing",
            "--cov-fail-under=90",
        ],
        "pytest (tests + coverage >= 90%)",
    )
    if pytest_rc != 0:
        return _fail("pytest", pytest_rc, 1)

    print(_separator("-"))
    print("CI STAGE pytest: PASS")
    sys.stdout.flush()

    # ------------------------------------------------------------------
    # Stage 2: CLI smoke
    # The catalog must list through the installed module entry point.
    # ------------------------------------------------------------------
    cli_rc = _run(
        [_PYTHON, "-m", "filmqc.cli", "catalog"],
        "CLI smoke (fault catalog)",
    )
    if cli_rc != 0:
        return _fail("cli", cli_rc, 2)

    print(_separator("-"))
    print("CI STAGE cli: PASS")

    print(_separator())
    print("CI RESULT: PASS  [stages=pytest,cli]")
    print("Merge permitted.")
    print(_separator())
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
