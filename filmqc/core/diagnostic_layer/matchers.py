# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/matchers.py
# Authority: Kodak Z-131 Diagnostic Charts 1-22 / Ilford FPC Fault Finder
# =============================================================================
#
# SCOPE
# -----
# Pattern matchers that select catalog records from a deviation.
#
# EVALUATION STYLE
# ----------------
# Two kinds of rule set live here and must not be confused:
#
#   First match (exactly one or none):
#     match_retained_silver   -- poor aeration -> underreplenished -> dilute
#     match_bw_pattern        -- 101 -> 102 -> 103 -> 104 -> 105 -> none
#
#   Independent battery (zero, one or several):
#     match_developer_pattern -- underactive, overactive, Part A, Part C
#     match_fixer_pattern     -- dilute, low pH
#     match_color_spread      -- HD-LD spread over the limit
#
# Every comparison is strict: a deviation equal to a threshold does not
# fire. The default branches are written as explicit else cases.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .deviation import BWDeviation, C41Deviation
from .domain import C41Reading, Severity
from .knowledge_base import DEFAULT_KNOWLEDGE_BASE, KnowledgeBase
from .problems import Problem
from .tolerances import DEFAULT_TOLERANCES, ToleranceConfig


# Retained silver: leuco-cyan signature and blue D-min rise.
_SILVER_AERATION_HDLD:   int = -5
_SILVER_DMIN_BLUE_RISE:  int = 3

# Developer activity, on channel-averaged deviations.
_ACTIVITY_DMAX:          int = 8
_ACTIVITY_HD:            int = 8
_ACTIVITY_LD:            int = 4
_ACTIVITY_DMIN_NORMAL:   int = 3

# Developer mix errors, on per-channel HD-LD deviations.
_MIX_DOMINANT_HDLD:      int = 10
_MIX_QUIET_HDLD:         int = 6

# Fixer.
_FIXER_DMIN_RISE:        int = 5
_FIXER_DMIN_BLUE_QUIET:  int = 3
_FIXER_PH_RED_HDLD:      int = -8
_FIXER_PH_QUIET_HDLD:    int = 4


# =============================================================================
# SECTION 1 -- RETAINED SILVER
# =============================================================================

@dataclass(frozen=True)
class RetainedSilverSummary:
    """
    value:  (reading.dmax.b - reading.yellow_b) minus the reference figure;
            None when the reading carries no yellow_b.
    limit:  the control threshold reported next to the value.
    """

    value: Optional[float]
    limit: int

    def to_dict(self) -> dict:
        return {"value": self.value, "limit": self.limit}


def compute_retained_silver(reading: C41Reading, reference: C41Reading) -> Optional[float]:
    """
    Return the retained-silver deviation, or None without a reading yellow_b.

    The reference falls back to its blue D-min when it has no yellow_b.
    """
    if reading.yellow_b is None:
        return None
    dmaxb_yb = reading.dmax.b - reading.yellow_b
    ref_yellow = reference.yellow_b if reference.yellow_b is not None else reference.dmin.b
    return dmaxb_yb - (reference.dmax.b - ref_yellow)


def match_retained_silver(
    dmaxb_yb_dev:   Optional[float],
    deviation:      C41Deviation,
    tolerances:     ToleranceConfig = DEFAULT_TOLERANCES,
    knowledge_base: KnowledgeBase = DEFAULT_KNOWLEDGE_BASE,
) -> Optional[Problem]:
    """Select exactly one bleach fault when retained silver is flagged."""
    if dmaxb_yb_dev is None:
        return None
    if not dmaxb_yb_dev > tolerances.c41.dmaxb_yb.action:
        return None

    hdld = deviation.hdld
    if hdld.r < _SILVER_AERATION_HDLD and hdld.b < _SILVER_AERATION_HDLD:
        fault_id = 24    # poor aeration
    elif deviation.dmin.b > _SILVER_DMIN_BLUE_RISE:
        fault_id = 23    # underreplenished
    else:
        fault_id = 22    # too dilute
    return Problem.from_fault(knowledge_base.get(fault_id), Severity.CONTROL)


# =============================================================================
# SECTION 2 -- DEVELOPER
# =============================================================================

_DEVELOPER_UNDERACTIVE = Problem(
    severity=Severity.ACTION,
    name="Developer Underactive",
    cause="Temperature too low, time too short, or developer diluted",
    action=(
        "Check developer temperature (aim 37.8 C). Check time (aim 3:15). "
        "Check specific gravity; a diluted tank may need replacing."
    ),
    manual_ref="Charts 1-3, 11, 17",
)

_DEVELOPER_OVERACTIVE = Problem(
    severity=Severity.ACTION,
    name="Developer Overactive",
    cause="Temperature too high, time too long, or developer over-concentrated",
    action=(
        "Check developer temperature (aim 37.8 C). Check time (aim 3:15). If "
        "over-concentrated by evaporation, add water (at most 5% of tank volume)."
    ),
    manual_ref="Charts 1-2, 11, 18",
)


def match_developer_pattern(
    deviation:      C41Deviation,
    knowledge_base: KnowledgeBase = DEFAULT_KNOWLEDGE_BASE,
) -> Tuple[Problem, ...]:
    """
    Run the four developer checks. They are independent: each may add one
    problem, in the order underactive, overactive, Part A, Part C.
    """
    problems: List[Problem] = []
    kb = knowledge_base

    avg_dmax = deviation.dmax.mean()
    avg_hd = deviation.hd.mean()
    avg_ld = deviation.ld.mean()
    avg_dmin = deviation.dmin.mean()
    hdld = deviation.hdld
    dmin = deviation.dmin

    # 1. Underactive: everything low.
    if avg_dmax < -_ACTIVITY_DMAX and avg_hd < -_ACTIVITY_HD and avg_ld < -_ACTIVITY_LD:
        if abs(avg_dmin) < _ACTIVITY_DMIN_NORMAL:
            problems.append(_DEVELOPER_UNDERACTIVE)
        elif avg_dmin < -_ACTIVITY_DMIN_NORMAL:
            problems.append(Problem.from_fault(kb.get(7), Severity.ACTION))

    # 2. Overactive: everything high.
    if avg_dmax > _ACTIVITY_DMAX and avg_hd > _ACTIVITY_HD and avg_ld > _ACTIVITY_LD:
        if abs(avg_dmin) < _ACTIVITY_DMIN_NORMAL:
            problems.append(_DEVELOPER_OVERACTIVE)
        elif avg_dmin > _ACTIVITY_DMIN_NORMAL:
            if dmin.r > dmin.g and dmin.r > dmin.b:
                problems.append(Problem.from_fault(kb.get(21), Severity.CONTROL))
            else:
                problems.append(Problem.from_fault(kb.get(20), Severity.CONTROL))

    # 3. Part A: red HD-LD alone.
    if (
        abs(hdld.r) > _MIX_DOMINANT_HDLD
        and abs(hdld.g) < _MIX_QUIET_HDLD
        and abs(hdld.b) < _MIX_QUIET_HDLD
    ):
        fault_id = 10 if hdld.r > 0 else 9
        problems.append(Problem.from_fault(kb.get(fault_id), Severity.ACTION))

    # 4. Part C: blue HD-LD with red quiet.
    if abs(hdld.b) > _MIX_DOMINANT_HDLD and abs(hdld.r) < _MIX_QUIET_HDLD:
        fault_id = 13 if hdld.b < 0 else 14
        problems.append(Problem.from_fault(kb.get(fault_id), Severity.ACTION))

    return tuple(problems)


# =============================================================================
# SECTION 3 -- FIXER
# =============================================================================

def match_fixer_pattern(
    deviation:      C41Deviation,
    knowledge_base: KnowledgeBase = DEFAULT_KNOWLEDGE_BASE,
) -> Tuple[Problem, ...]:
    """Two independent fixer checks: dilution, then low pH."""
    problems: List[Problem] = []
    dmin = deviation.dmin
    hdld = deviation.hdld

    if (
        dmin.r > _FIXER_DMIN_RISE
        and dmin.g > _FIXER_DMIN_RISE
        and abs(dmin.b) < _FIXER_DMIN_BLUE_QUIET
    ):
        problems.append(Problem.from_fault(knowledge_base.get(26), Severity.ACTION))

    if (
        hdld.r < _FIXER_PH_RED_HDLD
        and abs(hdld.g) < _FIXER_PH_QUIET_HDLD
        and abs(hdld.b) < _FIXER_PH_QUIET_HDLD
    ):
        problems.append(Problem.from_fault(knowledge_base.get(27), Severity.ACTION))

    return tuple(problems)


# =============================================================================
# SECTION 4 -- COLOUR SPREAD
# =============================================================================

@dataclass(frozen=True)
class ColorSpread:
    value:    float
    limit:    int
    exceeded: bool

    def to_dict(self) -> dict:
        return {"value": self.value, "limit": self.limit, "exceeded": self.exceeded}


def evaluate_color_spread(
    deviation:  C41Deviation,
    tolerances: ToleranceConfig = DEFAULT_TOLERANCES,
) -> ColorSpread:
    """Spread between the most widely separated HD-LD channel deviations."""
    values = deviation.hdld.values()
    spread = max(values) - min(values)
    limit = tolerances.c41.spread
    return ColorSpread(value=spread, limit=limit, exceeded=spread > limit)


def match_color_spread(spread: ColorSpread) -> Optional[Problem]:
    if not spread.exceeded:
        return None
    return Problem(
        severity=Severity.WARNING,
        name="Color Balance Spread Exceeded",
        cause="HD-LD channels have moved apart; colour balance is off",
        action="Check for contamination or mix errors. See diagnostic charts E.",
        details="Spread of " + _fmt(spread.value) + " exceeds limit of " + str(spread.limit),
    )


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return "{:.2f}".format(value)


# =============================================================================
# SECTION 5 -- B&W
# =============================================================================

def match_bw_pattern(
    deviation:      BWDeviation,
    tolerances:     ToleranceConfig = DEFAULT_TOLERANCES,
    knowledge_base: KnowledgeBase = DEFAULT_KNOWLEDGE_BASE,
) -> Optional[Problem]:
    """First-match chain over ld, hdld and dmin deviations."""
    tol = tolerances.bw
    ld_limit = tol.ld.action
    hdld_limit = tol.hdld.action
    ld = deviation.ld
    hdld = deviation.hdld

    if ld < -ld_limit and hdld < -hdld_limit:
        fault_id, severity = 101, Severity.ACTION      # underactive
    elif ld > ld_limit and hdld > hdld_limit:
        fault_id, severity = 102, Severity.ACTION      # overactive
    elif abs(ld) <= ld_limit and hdld < -hdld_limit:
        fault_id, severity = 103, Severity.ACTION      # contrast low
    elif abs(ld) <= ld_limit and hdld > hdld_limit:
        fault_id, severity = 104, Severity.ACTION      # contrast high
    elif deviation.dmin > tol.fog and ld > ld_limit:
        fault_id, severity = 105, Severity.CONTROL     # contamination
    else:
        return None
    return Problem.from_fault(knowledge_base.get(fault_id), severity)


__all__ = [
    "RetainedSilverSummary",
    "compute_retained_silver",
    "match_retained_silver",
    "match_developer_pattern",
    "match_fixer_pattern",
    "ColorSpread",
    "evaluate_color_spread",
    "match_color_spread",
    "match_bw_pattern",
]
