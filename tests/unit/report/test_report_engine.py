import json

import pytest

from filmqc.core.diagnostic_layer import (
    DEFAULT_KNOWLEDGE_BASE,
    BWReading,
    C41Reading,
    ProcessType,
    diagnose,
)
from filmqc.report import (
    catalog_to_dicts,
    diagnosis_to_dict,
    fault_to_dict,
    problems_summary,
)


_C41_REF = C41Reading.from_mapping(
    {
        "dmax": {"r": 200, "g": 250, "b": 280},
        "hd":   {"r": 120, "g": 160, "b": 190},
        "ld":   {"r": 60,  "g": 80,  "b": 90},
        "dmin": {"r": 25,  "g": 60,  "b": 80},
        "yellow_b": 100,
    }
)
_BW_REF = BWReading(dmax=170, hd=146, ld=50, dmin=30)


def _c41_multi_fault():
    # retained silver (22), Part C high (14), fixer dilute (26), spread warning
    data = _C41_REF.to_dict()
    data["hd"]["b"] += 12
    data["dmin"]["r"] += 6
    data["dmin"]["g"] += 6
    data["yellow_b"] = 85
    return diagnose("c41", data, _C41_REF)


class TestProblemsSummary:

    def test_ok(self):
        assert problems_summary(diagnose("bw", _BW_REF, _BW_REF)) == "Process within limits"

    def test_joined_in_order(self):
        assert problems_summary(_c41_multi_fault()) == (
            "Bleach Too Dilute; Developer Mix Error - Part C High; "
            "Fixer Too Dilute; Color Balance Spread Exceeded"
        )

    def test_rejects_non_diagnosis(self):
        with pytest.raises(TypeError):
            problems_summary({"problems": []})  # type: ignore[arg-type]


class TestDiagnosisToDict:

    def test_c41_keys(self):
        out = diagnosis_to_dict(_c41_multi_fault())
        assert set(out) == {
            "process", "status", "problems", "summary", "deviations", "hdld",
            "dmaxb_yb", "color_spread",
        }
        assert out["process"] == "c41"
        assert out["dmaxb_yb"] == {"value": 15, "limit": 12}
        assert out["color_spread"] == {"value": 12, "limit": 9, "exceeded": True}

    def test_problem_fields(self):
        first = diagnosis_to_dict(_c41_multi_fault())["problems"][0]
        assert first["severity"] == "control"
        assert first["fault_id"] == 22
        assert set(first) == {"severity", "name", "cause", "action", "manual_ref", "fault_id", "details"}

    def test_bw_has_no_c41_extras(self):
        out = diagnosis_to_dict(diagnose("bw", _BW_REF, _BW_REF))
        assert "dmaxb_yb" not in out
        assert "color_spread" not in out
        assert out["hdld"] == 96
        assert out["status"] == {"overall": "ok", "details": []}

    def test_is_json_serializable(self):
        text = json.dumps(diagnosis_to_dict(_c41_multi_fault()))
        assert json.loads(text)["summary"].startswith("Bleach Too Dilute")


class TestCatalog:

    def test_all_faults_in_id_order(self):
        out = catalog_to_dicts()
        assert [d["id"] for d in out] == sorted(DEFAULT_KNOWLEDGE_BASE.ids())
        assert len(out) == 33

    def test_one_process(self):
        out = catalog_to_dicts(DEFAULT_KNOWLEDGE_BASE, process=ProcessType.BW)
        assert [d["id"] for d in out] == [101, 102, 103, 104, 105, 106]

    def test_fault_fields(self):
        d = fault_to_dict(DEFAULT_KNOWLEDGE_BASE.get(103))
        assert d["process"] == "bw"
        assert d["pattern"] == [
            {"quantity": "ld", "channel": "", "direction": "normal"},
            {"quantity": "hdld", "channel": "", "direction": "low"},
        ]
        assert d["manual_ref"] == "Ilford FPC Fault Finder"
