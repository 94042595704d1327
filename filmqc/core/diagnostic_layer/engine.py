# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/engine.py
# =============================================================================
#
# SCOPE
# -----
# Orchestration: one call in, one Diagnosis out.
#
#   diagnose(process, reading, reference, history=None)
#   diagnose_c41(reading, reference)
#   diagnose_bw(reading, reference, history=())
#   get_knowledge_base()
#
# No thresholds and no pattern logic live here; everything is delegated
# to deviation.py, classifier.py, matchers.py and trend.py.
#
# C-41 PROBLEM ORDER (fixed, observable)
# --------------------------------------
#   retained silver -> developer -> fixer -> colour spread -> OK fallback
#
# B&W PROBLEM ORDER
# -----------------
#   first-match level rule -> drift (only if no level rule fired and
#   history was supplied) -> OK fallback
#
# CONFIGURATION
# -------------
# DEFAULT_CONFIG bundles the tolerance bands and the fault catalog. It is
# built once at import and passed by reference into every call; nothing
# is re-derived per call. Pure, deterministic, non-mutating.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple, Union

from .classifier import ToleranceStatus, classify_tolerances
from .deviation import BWDeviation, C41Deviation, compute_deviations
from .domain import (
    BWReading,
    C41Reading,
    ChannelDensities,
    ProcessType,
    parse_reading,
)
from .exceptions import UnsupportedProcessError, ValidationError
from .knowledge_base import DEFAULT_KNOWLEDGE_BASE, KnowledgeBase
from .matchers import (
    ColorSpread,
    RetainedSilverSummary,
    compute_retained_silver,
    evaluate_color_spread,
    match_bw_pattern,
    match_color_spread,
    match_developer_pattern,
    match_fixer_pattern,
    match_retained_silver,
)
from .problems import PROCESS_OK, Problem
from .tolerances import DEFAULT_TOLERANCES, ToleranceConfig
from .trend import match_bw_drift


# =============================================================================
# SECTION 1 -- CONFIGURATION AND OUTPUT CONTRACT
# =============================================================================

@dataclass(frozen=True)
class DiagnosticConfig:
    tolerances:     ToleranceConfig = field(default_factory=lambda: DEFAULT_TOLERANCES)
    knowledge_base: KnowledgeBase = field(default_factory=lambda: DEFAULT_KNOWLEDGE_BASE)


DEFAULT_CONFIG: DiagnosticConfig = DiagnosticConfig()


@dataclass(frozen=True)
class Diagnosis:
    """
    Immutable result of one diagnostic call.

    Attributes:
        process:       The process diagnosed.
        deviations:    C41Deviation or BWDeviation.
        status:        Tolerance classification (overall + details).
        problems:      Ordered, never empty. A single PROCESS_OK entry when
                       no rule fired.
        hdld:          HD-LD of the reading itself (per channel for C-41).
        dmaxb_yb:      C-41 only: retained-silver deviation and its limit.
        color_spread:  C-41 only: HD-LD spread and its limit.
    """

    process:      ProcessType
    deviations:   Union[C41Deviation, BWDeviation]
    status:       ToleranceStatus
    problems:     Tuple[Problem, ...]
    hdld:         Union[ChannelDensities, float]
    dmaxb_yb:     Optional[RetainedSilverSummary] = None
    color_spread: Optional[ColorSpread] = None

    @property
    def is_ok(self) -> bool:
        return self.problems == (PROCESS_OK,)


def _or_ok(problems: List[Problem]) -> Tuple[Problem, ...]:
    return tuple(problems) if problems else (PROCESS_OK,)


def _coerce_process(process: Any) -> ProcessType:
    if isinstance(process, ProcessType):
        return process
    try:
        return ProcessType(process)
    except ValueError:
        raise UnsupportedProcessError(process, [p.value for p in ProcessType]) from None


# =============================================================================
# SECTION 2 -- C-41
# =============================================================================

def diagnose_c41(
    reading:   Union[C41Reading, Any],
    reference: Union[C41Reading, Any],
    config:    DiagnosticConfig = DEFAULT_CONFIG,
) -> Diagnosis:
    """
    Diagnose one C-41 control strip.

    reading and reference may be C41Reading instances or JSON-shaped
    mappings. Raises ValidationError on malformed or mismatched input.
    """
    reading = parse_reading(ProcessType.C41, reading, name="reading")
    reference = parse_reading(ProcessType.C41, reference, name="reference")
    tolerances = config.tolerances
    kb = config.knowledge_base

    deviations = compute_deviations(reading, reference)
    status = classify_tolerances(deviations, ProcessType.C41, tolerances)

    problems: List[Problem] = []

    dmaxb_yb_dev = compute_retained_silver(reading, reference)
    silver = match_retained_silver(dmaxb_yb_dev, deviations, tolerances, kb)
    if silver is not None:
        problems.append(silver)

    problems.extend(match_developer_pattern(deviations, kb))
    problems.extend(match_fixer_pattern(deviations, kb))

    spread = evaluate_color_spread(deviations, tolerances)
    spread_problem = match_color_spread(spread)
    if spread_problem is not None:
        problems.append(spread_problem)

    return Diagnosis(
        process=ProcessType.C41,
        deviations=deviations,
        status=status,
        problems=_or_ok(problems),
        hdld=reading.hdld(),
        dmaxb_yb=RetainedSilverSummary(
            value=dmaxb_yb_dev,
            limit=tolerances.c41.dmaxb_yb.control,
        ),
        color_spread=spread,
    )


# =============================================================================
# SECTION 3 -- B&W
# =============================================================================

def diagnose_bw(
    reading:   Union[BWReading, Any],
    reference: Union[BWReading, Any],
    history:   Sequence[Union[BWReading, Any]] = (),
    config:    DiagnosticConfig = DEFAULT_CONFIG,
) -> Diagnosis:
    """
    Diagnose one B&W control strip.

    history holds earlier strips, oldest first, read against the same
    reference; it only feeds the drift check.
    """
    reading = parse_reading(ProcessType.BW, reading, name="reading")
    reference = parse_reading(ProcessType.BW, reference, name="reference")
    past = [
        parse_reading(ProcessType.BW, item, name="history[" + str(i) + "]")
        for i, item in enumerate(history)
    ]
    tolerances = config.tolerances
    kb = config.knowledge_base

    deviations = compute_deviations(reading, reference)
    status = classify_tolerances(deviations, ProcessType.BW, tolerances)

    problems: List[Problem] = []
    level = match_bw_pattern(deviations, tolerances, kb)
    if level is not None:
        problems.append(level)
    elif past:
        drift = match_bw_drift(past, reading, reference, tolerances, kb)
        if drift is not None:
            problems.append(drift)

    return Diagnosis(
        process=ProcessType.BW,
        deviations=deviations,
        status=status,
        problems=_or_ok(problems),
        hdld=reading.hdld(),
    )


# =============================================================================
# SECTION 4 -- PUBLIC ENTRY POINTS
# =============================================================================

def diagnose(
    process:   Union[ProcessType, str],
    reading:   Any,
    reference: Any,
    history:   Optional[Sequence[Any]] = None,
    config:    DiagnosticConfig = DEFAULT_CONFIG,
) -> Diagnosis:
    """
    Dispatch to the C-41 or B&W path.

    Raises:
        UnsupportedProcessError: process is not 'c41' or 'bw'.
        ValidationError:         malformed reading / reference, or a
                                 history passed for C-41.
    """
    kind = _coerce_process(process)
    history = tuple(history) if history is not None else ()
    if kind is ProcessType.C41:
        if history:
            raise ValidationError(
                field_name="history",
                value=len(history),
                constraint="is only supported for process 'bw'",
            )
        return diagnose_c41(reading, reference, config=config)
    return diagnose_bw(reading, reference, history=history, config=config)


def get_knowledge_base(config: DiagnosticConfig = DEFAULT_CONFIG) -> KnowledgeBase:
    """Read-only fault catalog, for displaying every known fault."""
    return config.knowledge_base


__all__ = [
    "DiagnosticConfig",
    "DEFAULT_CONFIG",
    "Diagnosis",
    "diagnose",
    "diagnose_c41",
    "diagnose_bw",
    "get_knowledge_base",
]
