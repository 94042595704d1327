# filmqc/report/engine.py
# External report layer.
# Sits outside filmqc/core/; nothing in the core imports from here.
#
# DETERMINISM GUARANTEE:
#   No file I/O. No logging. No environment variable access.
#   No global mutable state. Output is a pure function of inputs.
#
# PURPOSE:
#   Renders a Diagnosis and the fault catalog as JSON-ready dicts for the
#   CLI and any presentation layer. No diagnostic logic is reimplemented
#   here; every value is read from the objects the core returns.
#
# Standard import pattern:
#   from filmqc.report.engine import diagnosis_to_dict, problems_summary

from typing import Optional

from filmqc.core.diagnostic_layer import (
    DEFAULT_KNOWLEDGE_BASE,
    Diagnosis,
    FaultRecord,
    KnowledgeBase,
    ProcessType,
)


def problems_summary(diagnosis: Diagnosis) -> str:
    """
    One-line human-readable summary of the problems list.

    "Process within limits" when nothing fired, otherwise the problem
    names joined by "; " in diagnosis order.
    """
    if not isinstance(diagnosis, Diagnosis):
        raise TypeError(
            f"diagnosis must be a Diagnosis instance. Received: {type(diagnosis).__name__}"
        )
    return "; ".join(p.name for p in diagnosis.problems)


def diagnosis_to_dict(diagnosis: Diagnosis) -> dict[str, object]:
    """
    Render a Diagnosis as a JSON-ready dict.

    Returns
    -------
    dict[str, object]
          "process"      -- "c41" or "bw".
          "status"       -- {"overall", "details"}.
          "problems"     -- ordered list of problem dicts.
          "summary"      -- problems_summary(diagnosis).
          "deviations"   -- per-patch deviation values.
          "hdld"         -- HD-LD of the reading.
        C-41 only:
          "dmaxb_yb"     -- {"value", "limit"}.
          "color_spread" -- {"value", "limit", "exceeded"}.

    Raises
    ------
    TypeError
        If diagnosis is not a Diagnosis.
    """
    summary = problems_summary(diagnosis)
    hdld = diagnosis.hdld
    out: dict[str, object] = {
        "process": diagnosis.process.value,
        "status": diagnosis.status.to_dict(),
        "problems": [p.to_dict() for p in diagnosis.problems],
        "summary": summary,
        "deviations": diagnosis.deviations.to_dict(),
        "hdld": hdld.to_dict() if hasattr(hdld, "to_dict") else hdld,
    }
    if diagnosis.dmaxb_yb is not None:
        out["dmaxb_yb"] = diagnosis.dmaxb_yb.to_dict()
    if diagnosis.color_spread is not None:
        out["color_spread"] = diagnosis.color_spread.to_dict()
    return out


def fault_to_dict(record: FaultRecord) -> dict[str, object]:
    return {
        "id": record.id,
        "name": record.name,
        "process": record.process.value,
        "signature": record.signature,
        "pattern": [
            {"quantity": t.quantity, "channel": t.channel, "direction": t.direction}
            for t in record.pattern
        ],
        "cause": record.cause,
        "action": record.action,
        "manual_ref": record.manual_ref,
    }


def catalog_to_dicts(
    knowledge_base: KnowledgeBase = DEFAULT_KNOWLEDGE_BASE,
    process: Optional[ProcessType] = None,
) -> list[dict[str, object]]:
    """Every fault definition in id order, optionally for one process only."""
    records = knowledge_base if process is None else knowledge_base.for_process(process)
    return [fault_to_dict(r) for r in sorted(records, key=lambda r: r.id)]
