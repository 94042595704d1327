# tests/test_cli.py
# End-to-end contract of the command-line entry point: files in, JSON and
# exit code out.

import json

import pytest

from filmqc.cli import EXIT_CONTRACT_VIOLATION, EXIT_DATA_FAILURE, EXIT_OK, main
from filmqc.ledger import load_control_log


BW_REFERENCE = {"dmax": 170, "hd": 146, "ld": 50, "dmin": 30}
C41_REFERENCE = {
    "dmax": {"r": 200, "g": 250, "b": 280},
    "hd":   {"r": 120, "g": 160, "b": 190},
    "ld":   {"r": 60,  "g": 80,  "b": 90},
    "dmin": {"r": 25,  "g": 60,  "b": 80},
    "yellow_b": 100,
}


def _bw(ld_dev=0, hdld_dev=0):
    return {"dmax": 170, "hd": 146 + ld_dev + hdld_dev, "ld": 50 + ld_dev, "dmin": 30}


@pytest.fixture
def write_json(tmp_path):
    def _write(name, payload):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)
    return _write


def _run(capsys, argv):
    rc = main(argv)
    captured = capsys.readouterr()
    return rc, captured.out, captured.err


class TestDiagnose:

    def test_c41_ok(self, capsys, write_json):
        ref = write_json("ref.json", C41_REFERENCE)
        rc, out, _ = _run(capsys, ["diagnose", "--process", "c41", "--reading", ref, "--reference", ref])
        assert rc == EXIT_OK
        result = json.loads(out)
        assert result["summary"] == "Process within limits"
        assert result["status"]["overall"] == "ok"
        assert result["event_id"] == "EVT-0000000000000001"

    def test_bw_contrast_low(self, capsys, write_json):
        rc, out, _ = _run(capsys, [
            "diagnose", "--process", "bw",
            "--reading", write_json("r.json", _bw(hdld_dev=-8)),
            "--reference", write_json("ref.json", BW_REFERENCE),
        ])
        assert rc == EXIT_OK
        assert [p["fault_id"] for p in json.loads(out)["problems"]] == [103]

    def test_bw_history_file(self, capsys, write_json):
        rc, out, _ = _run(capsys, [
            "diagnose", "--process", "bw",
            "--reading", write_json("r.json", _bw(ld_dev=-2)),
            "--reference", write_json("ref.json", BW_REFERENCE),
            "--history", write_json("h.json", [_bw(ld_dev=4), _bw(ld_dev=2), _bw()]),
        ])
        assert rc == EXIT_OK
        assert json.loads(out)["problems"][0]["fault_id"] == 106

    def test_missing_field_is_contract_violation(self, capsys, write_json):
        reading = dict(BW_REFERENCE)
        del reading["ld"]
        rc, out, err = _run(capsys, [
            "diagnose", "--process", "bw",
            "--reading", write_json("r.json", reading),
            "--reference", write_json("ref.json", BW_REFERENCE),
        ])
        assert rc == EXIT_CONTRACT_VIOLATION
        assert out == ""
        assert "reading.ld" in err

    def test_density_too_large_for_float_is_contract_violation(self, capsys, write_json):
        rc, out, err = _run(capsys, [
            "diagnose", "--process", "bw",
            "--reading", write_json("r.json", dict(BW_REFERENCE, ld=10 ** 400)),
            "--reference", write_json("ref.json", BW_REFERENCE),
        ])
        assert rc == EXIT_CONTRACT_VIOLATION
        assert out == ""
        assert "reading.ld" in err

    def test_history_with_c41_is_contract_violation(self, capsys, write_json):
        ref = write_json("ref.json", C41_REFERENCE)
        rc, _, _ = _run(capsys, [
            "diagnose", "--process", "c41", "--reading", ref, "--reference", ref,
            "--history", write_json("h.json", [C41_REFERENCE]),
        ])
        assert rc == EXIT_CONTRACT_VIOLATION

    def test_unreadable_file(self, capsys, tmp_path, write_json):
        rc, _, err = _run(capsys, [
            "diagnose", "--process", "bw",
            "--reading", str(tmp_path / "missing.json"),
            "--reference", write_json("ref.json", BW_REFERENCE),
        ])
        assert rc == EXIT_DATA_FAILURE
        assert "DATA_CORRUPTION" in err

    def test_history_must_be_list(self, capsys, write_json):
        ref = write_json("ref.json", BW_REFERENCE)
        rc, _, _ = _run(capsys, [
            "diagnose", "--process", "bw", "--reading", ref, "--reference", ref,
            "--history", write_json("h.json", {"ld": 1}),
        ])
        assert rc == EXIT_DATA_FAILURE

    def test_unknown_process_is_usage_error(self, write_json):
        ref = write_json("ref.json", BW_REFERENCE)
        with pytest.raises(SystemExit) as info:
            main(["diagnose", "--process", "e6", "--reading", ref, "--reference", ref])
        assert info.value.code == 2


class TestDiagnoseWithLedger:

    def _argv(self, write_json, ledger, ld_dev, day="2025-11-14"):
        return [
            "diagnose", "--process", "bw",
            "--reading", write_json("r.json", _bw(ld_dev=ld_dev)),
            "--reference", write_json("ref.json", BW_REFERENCE),
            "--ledger", ledger, "--date", day, "--notes", "tank 2",
        ]

    def test_creates_ledger_and_reports_row(self, capsys, tmp_path, write_json):
        ledger = str(tmp_path / "bw_log.json")
        rc, out, _ = _run(capsys, self._argv(write_json, ledger, 0))
        assert rc == EXIT_OK
        assert json.loads(out)["ledger"] == {"sheet": "Nov 2025", "row": 5}
        assert load_control_log(tmp_path / "bw_log.json").get_sheet("Nov 2025").get(5, 1) == "tank 2"

    def test_ledger_history_feeds_drift(self, capsys, tmp_path, write_json):
        ledger = str(tmp_path / "bw_log.json")
        for ld_dev in (4, 2, 0):
            assert _run(capsys, self._argv(write_json, ledger, ld_dev))[0] == EXIT_OK
        rc, out, _ = _run(capsys, self._argv(write_json, ledger, -2))
        result = json.loads(out)
        assert rc == EXIT_OK
        assert result["problems"][0]["fault_id"] == 106
        assert result["ledger"]["row"] == 8

    def test_row_records_status_and_summary(self, capsys, tmp_path, write_json):
        ledger = tmp_path / "bw_log.json"
        _run(capsys, self._argv(write_json, str(ledger), 0))
        rc, out, _ = _run(capsys, [
            "diagnose", "--process", "bw",
            "--reading", write_json("r.json", _bw(hdld_dev=-8)),
            "--reference", write_json("ref.json", BW_REFERENCE),
            "--ledger", str(ledger), "--date", "2025-11-15",
        ])
        result = json.loads(out)
        assert rc == EXIT_OK

        sheet = load_control_log(ledger).get_sheet("Nov 2025")
        assert (sheet.get(5, 8), sheet.get(5, 9)) == ("ok", "Process within limits")
        assert (sheet.get(6, 8), sheet.get(6, 9)) == (result["status"]["overall"], result["summary"])
        assert sheet.get(6, 9) == "Contrast Too Low"

    def test_date_required(self, capsys, tmp_path, write_json):
        ref = write_json("ref.json", BW_REFERENCE)
        rc, _, err = _run(capsys, [
            "diagnose", "--process", "bw", "--reading", ref, "--reference", ref,
            "--ledger", str(tmp_path / "log.json"),
        ])
        assert rc == EXIT_CONTRACT_VIOLATION
        assert "--date" in err

    def test_ledger_of_other_process(self, capsys, tmp_path, write_json):
        ledger = str(tmp_path / "log.json")
        _run(capsys, self._argv(write_json, ledger, 0))
        c41 = write_json("c41.json", C41_REFERENCE)
        rc, _, _ = _run(capsys, [
            "diagnose", "--process", "c41", "--reading", c41, "--reference", c41,
            "--ledger", ledger, "--date", "2025-11-14",
        ])
        assert rc == EXIT_DATA_FAILURE

    def test_rejected_strip_not_logged(self, capsys, tmp_path, write_json):
        ledger = tmp_path / "log.json"
        reading = dict(BW_REFERENCE, ld=None)
        rc, _, _ = _run(capsys, [
            "diagnose", "--process", "bw",
            "--reading", write_json("r.json", reading),
            "--reference", write_json("ref.json", BW_REFERENCE),
            "--ledger", str(ledger), "--date", "2025-11-14",
        ])
        assert rc == EXIT_CONTRACT_VIOLATION
        assert not ledger.exists()


class TestCatalog:

    def test_full_catalog(self, capsys):
        rc, out, _ = _run(capsys, ["catalog"])
        assert rc == EXIT_OK
        assert len(json.loads(out)) == 33

    def test_bw_only(self, capsys):
        rc, out, _ = _run(capsys, ["catalog", "--process", "bw"])
        assert [d["id"] for d in json.loads(out)] == [101, 102, 103, 104, 105, 106]
