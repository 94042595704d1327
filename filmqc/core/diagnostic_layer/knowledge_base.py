# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/knowledge_base.py
# Authority: Kodak Z-131 Process C-41 manual, Diagnostic Charts 1-22;
#            Ilford FPC Fault Finder
# =============================================================================
#
# SCOPE
# -----
# The static fault catalog: 27 C-41 records (ids 1-27) and 6 B&W records
# (ids 101-106), held in one immutable id-indexed KnowledgeBase.
#
# Records are data, not behaviour. There is one FaultRecord type; no fault
# kind subclasses it. Matchers look records up by id and attach a severity
# by wrapping them in a Problem (see matchers.py); a record is never copied
# or modified.
#
# PATTERN TERMS
# -------------
# Each record documents its chart signature as PatternTerm triples:
#   quantity   dmax | hd | ld | dmin | hdld | dmaxb_yb | trend
#   channel    r | g | b, or "" for scalar quantities
#   direction  low | slight_low | very_low | normal |
#              high | slight_high | very_high | gradual_decline
# Terms are descriptive (for display next to the chart reference); the
# matchers encode the decision thresholds.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Tuple

from .domain import CHANNELS, ProcessType
from .exceptions import UnknownFaultError


# =============================================================================
# SECTION 1 -- RECORD TYPES
# =============================================================================

@dataclass(frozen=True)
class PatternTerm:
    quantity:  str
    channel:   str
    direction: str


@dataclass(frozen=True)
class FaultRecord:
    """
    One catalog entry.

    id          -- stable integer id (1-27 C-41, 101-106 B&W).
    name        -- short display name.
    process     -- the process this fault belongs to.
    signature   -- machine-friendly label of the density pattern.
    pattern     -- descriptive PatternTerm tuple.
    cause       -- probable root cause.
    action      -- corrective action.
    manual_ref  -- chart / page citation.
    """

    id:         int
    name:       str
    process:    ProcessType
    signature:  str
    pattern:    Tuple[PatternTerm, ...]
    cause:      str
    action:     str
    manual_ref: str


def _uniform(quantity: str, direction: str) -> Tuple[PatternTerm, ...]:
    return tuple(PatternTerm(quantity, channel, direction) for channel in CHANNELS)


def _channels(quantity: str, **directions: str) -> Tuple[PatternTerm, ...]:
    return tuple(
        PatternTerm(quantity, channel, directions[channel])
        for channel in CHANNELS
        if channel in directions
    )


def _scalar(quantity: str, direction: str) -> Tuple[PatternTerm, ...]:
    return (PatternTerm(quantity, "", direction),)


def _c41(fault_id, name, signature, pattern, cause, action, manual_ref) -> FaultRecord:
    return FaultRecord(fault_id, name, ProcessType.C41, signature, pattern, cause, action, manual_ref)


def _bw(fault_id, name, signature, pattern, cause, action) -> FaultRecord:
    return FaultRecord(
        fault_id, name, ProcessType.BW, signature, pattern, cause, action,
        "Ilford FPC Fault Finder",
    )


_ALL_LOW_DMIN_NORMAL = (
    _uniform("dmax", "low") + _uniform("hd", "low")
    + _uniform("ld", "low") + _uniform("dmin", "normal")
)
_ALL_HIGH_DMIN_NORMAL = (
    _uniform("dmax", "high") + _uniform("hd", "high")
    + _uniform("ld", "high") + _uniform("dmin", "normal")
)


# =============================================================================
# SECTION 2 -- C-41 CATALOG (Kodak Z-131, Charts 1-22)
# =============================================================================

C41_FAULTS: Tuple[FaultRecord, ...] = (
    _c41(
        1, "Developer Temperature Too Low", "all_low_uniform",
        _ALL_LOW_DMIN_NORMAL,
        "Developer temperature below 37.8 C (100 F)",
        "Check developer temperature with an accurate thermometer. Verify the "
        "temperature control unit is working. Adjust to 37.8 C +-0.15 C.",
        "Chart 1, Page 5-29",
    ),
    _c41(
        2, "Developer Temperature Too High", "all_high_uniform",
        _ALL_HIGH_DMIN_NORMAL,
        "Developer temperature above 37.8 C (100 F)",
        "Check developer temperature with an accurate thermometer. Look for "
        "intermittent electrical or tempered-water-flow problems. Adjust to "
        "37.8 C +-0.15 C.",
        "Chart 1, Page 5-29",
    ),
    _c41(
        3, "Developer Time Too Short", "all_low_uniform",
        _ALL_LOW_DMIN_NORMAL,
        "Developer time below 3 minutes 15 seconds",
        "Time the developer step with a stopwatch. Check for electrical-load "
        "variations and motor-temperature differences. Verify transport. "
        "Aim: 3:15.",
        "Chart 2, Page 5-30",
    ),
    _c41(
        4, "Developer Time Too Long", "all_high_uniform",
        _ALL_HIGH_DMIN_NORMAL,
        "Developer time exceeds 3 minutes 15 seconds",
        "Time the developer step with a stopwatch. Check rack threading. "
        "Adjust time to aim (3:15), counting the recommended drain time as "
        "developer time.",
        "Chart 2, Page 5-30",
    ),
    _c41(
        5, "Developer Agitation Too Low", "hd_affected_more",
        _uniform("dmax", "low") + _uniform("hd", "low")
        + _uniform("ld", "slight_low") + _uniform("dmin", "normal"),
        "Insufficient developer agitation; by-products are not being removed",
        "Dip and dunk: check the nitrogen burst cycle (2 s burst, 8 s rest) and "
        "that bubbles are about 4 mm across. Check recirculation for kinked "
        "lines or a plugged sparger. Solution rise should be about 1.5 cm "
        "during the burst.",
        "Chart 3, Page 5-31",
    ),
    _c41(
        6, "Developer Agitation Too High", "hd_affected_more_high",
        _uniform("dmax", "high") + _uniform("hd", "high")
        + _uniform("ld", "slight_high") + _uniform("dmin", "normal"),
        "Excessive agitation causing oxidation and foaming",
        "Reduce agitation. For burst agitation verify the 10 s cycle (2 s "
        "burst, 8 s rest) and that solution rise does not exceed 1.5 cm.",
        "Chart 3, Page 5-31",
    ),
    _c41(
        7, "Developer Underreplenished", "all_low_including_dmin",
        _uniform("dmax", "low") + _uniform("hd", "low")
        + _uniform("ld", "low") + _uniform("dmin", "low"),
        "Developer replenishment rate too low",
        "Check the replenishment rate setting and pump. Add 25 mL of properly "
        "mixed developer replenisher per litre of tank solution. Recirculate "
        "15 minutes before running a control strip.",
        "Charts 4-5, Pages 5-32/33",
    ),
    _c41(
        8, "Developer Overreplenished", "all_high_including_dmin",
        _uniform("dmax", "high") + _uniform("hd", "high")
        + _uniform("ld", "high") + _uniform("dmin", "high"),
        "Developer replenishment rate too high",
        "Check the replenishment rate. Add 1 part Developer Starter to 4 parts "
        "water at 25 mL per litre of tank solution. Recirculate 15 minutes "
        "before testing.",
        "Charts 4-5, Pages 5-32/33",
    ),
    _c41(
        9, "Developer Mix Error - Part A Low", "red_hdld_most_affected_low",
        _channels("hdld", r="low", g="slight_low", b="low") + _uniform("ld", "normal"),
        "Not enough Part A used in developer mix",
        "Check mixing procedures. Unless the exact amount omitted is known, "
        "replace the developer. Part A mainly affects red HD densities.",
        "Chart 6, Page 5-34",
    ),
    _c41(
        10, "Developer Mix Error - Part A High", "red_hdld_high_blue_low",
        _channels("hdld", r="high", g="slight_high", b="low") + _uniform("ld", "normal"),
        "Too much Part A used in developer mix",
        "Check mixing procedures. Unless the exact amount is known, replace the "
        "developer. Excess Part A raises red HD sharply and lowers blue.",
        "Chart 6, Page 5-34",
    ),
    _c41(
        11, "Developer Mix Error - Part B Low", "all_high_hdld_most",
        _uniform("dmax", "high") + _uniform("hdld", "high") + _uniform("ld", "high"),
        "Not enough Part B used; developer too active",
        "Check mixing procedures. Part B is a restrainer. Replace the developer; "
        "correction is difficult without chemical analysis.",
        "Chart 7, Page 5-35",
    ),
    _c41(
        12, "Developer Mix Error - Part B High", "all_low_hdld_most",
        _uniform("dmax", "low") + _uniform("hdld", "low") + _uniform("ld", "low"),
        "Too much Part B used; developer restrained",
        "Check mixing procedures. Excess Part B reduces activity. Replace the "
        "developer.",
        "Chart 7, Page 5-35",
    ),
    _c41(
        13, "Developer Mix Error - Part C Low", "blue_hdld_most_affected_low",
        _channels("hdld", r="low", g="low", b="very_low") + _uniform("ld", "low"),
        "Not enough Part C used in developer mix",
        "Check mixing procedures. Part C mainly affects blue densities. Replace "
        "the developer.",
        "Chart 8, Page 5-36",
    ),
    _c41(
        14, "Developer Mix Error - Part C High", "green_blue_high_red_normal",
        _channels("hdld", r="normal", g="high", b="high")
        + _channels("ld", r="normal", g="high", b="high"),
        "Too much Part C used in developer mix",
        "Check mixing procedures. Excess Part C raises green and blue densities. "
        "Replace the developer.",
        "Chart 8, Page 5-36",
    ),
    _c41(
        15, "Developer Starter - Too Little", "all_high_fresh_tank",
        _uniform("dmax", "high") + _uniform("hd", "high")
        + _uniform("ld", "high") + _uniform("dmin", "slight_high"),
        "Fresh developer tank has too little starter; too active",
        "Add developer starter in 11 mL/L steps. Recirculate 15 minutes before "
        "testing. Starter brings fresh developer down to seasoned activity.",
        "Charts 9-10, Pages 5-37/38",
    ),
    _c41(
        16, "Developer Starter - Too Much", "all_low_fresh_tank",
        _uniform("dmax", "low") + _uniform("hd", "low")
        + _uniform("ld", "low") + _uniform("dmin", "slight_low"),
        "Fresh developer tank has too much starter; restrained",
        "Add 39 mL developer replenisher and 13 mL water per litre of tank "
        "solution. Recirculate 15 minutes before testing.",
        "Charts 9-10, Pages 5-37/38",
    ),
    _c41(
        17, "Developer Too Dilute", "all_low_dmin_normal",
        _ALL_LOW_DMIN_NORMAL,
        "Developer diluted by too much water in the mix or excessive "
        "evaporation top-off",
        "Check specific gravity with a hydrometer; replace the tank solution if "
        "diluted. Top off evaporation with water daily at start-up, not during "
        "processing.",
        "Chart 11, Page 5-39",
    ),
    _c41(
        18, "Developer Too Concentrated", "all_high_dmin_normal",
        _ALL_HIGH_DMIN_NORMAL,
        "Developer over-concentrated by evaporation or too little water in the "
        "mix",
        "Check specific gravity. Add water (at most 5% of tank volume) if "
        "over-concentrated. Top off daily at start-up. Use floating lids on "
        "replenisher tanks.",
        "Chart 11, Page 5-39",
    ),
    _c41(
        19, "Developer Oxidation", "gradual_decline_all",
        _uniform("dmax", "low") + _uniform("hdld", "low")
        + _uniform("ld", "low") + _uniform("dmin", "normal"),
        "Aerial oxidation from air leaks, low utilisation or excessive "
        "agitation",
        "Use floating lids on developer replenisher tanks. Check the "
        "recirculation line for air leaks. Turn the tank over at least once "
        "every 4 weeks. Check for excessive burst agitation.",
        "Chart 12, Page 5-40",
    ),
    _c41(
        20, "Developer Contaminated with Bleach", "dmin_ld_high_hdld_low",
        _uniform("dmin", "high") + _uniform("ld", "high") + _uniform("hdld", "low"),
        "Bleach contamination causing chemical fog",
        "STOP PROCESSING. Very small amounts cause major problems. Look for "
        "bleach splashing into the developer and contaminated leader cards. "
        "Dump the developer, rinse the tank thoroughly and mix fresh solution.",
        "Chart 13, Page 5-41",
    ),
    _c41(
        21, "Developer Contaminated with Fixer", "all_high_dmin_red_highest",
        _uniform("dmax", "high") + _uniform("hd", "high") + _uniform("ld", "high")
        + _channels("dmin", r="high", g="very_high", b="high")
        + _uniform("hdld", "high"),
        "Fixer contamination causing chemical fog; red D-min rises noticeably",
        "STOP PROCESSING. Look for mixing equipment not properly cleaned and "
        "contaminated leader cards. Dump the developer, rinse the tank "
        "thoroughly and mix fresh solution.",
        "Chart 14, Page 5-42",
    ),
    _c41(
        22, "Bleach Too Dilute", "retained_silver_high",
        _scalar("dmaxb_yb", "high")
        + _channels("hdld", r="normal", g="normal", b="slight_low"),
        "Bleach diluted by developer carryover or a mix error; retained silver",
        "Check squeegees for developer carryover. Add Bleach Regenerator "
        "Concentrate (30 mL) and Starter (15 mL) per litre. Rebleach and refix "
        "affected film.",
        "Chart 15, Page 5-43",
    ),
    _c41(
        23, "Bleach Underreplenished", "retained_silver_blue_dmin_up",
        _scalar("dmaxb_yb", "high")
        + _channels("hdld", r="normal", g="normal", b="slight_low")
        + _channels("dmin", b="slight_high"),
        "Bleach replenishment too low to offset developer carryover",
        "Check the replenishment rate and pump settings. Check developer exit "
        "squeegees. Add Bleach Parts A and B per litre of tank solution. "
        "Rebleach affected film.",
        "Charts 16-17, Pages 5-44/45",
    ),
    _c41(
        24, "Bleach Poor Aeration", "retained_silver_leuco_cyan",
        _scalar("dmaxb_yb", "high")
        + _channels("hdld", r="low", g="normal", b="low"),
        "Inadequate bleach aeration; retained silver and leuco-cyan dye",
        "Check air bubbling in the bleach tank: supply adequate, tubing clear, "
        "distributor not clogged. Rebleach affected film in known good bleach, "
        "then complete the remaining steps.",
        "Charts 18-19, Pages 5-46/47",
    ),
    _c41(
        25, "Bleach Stain", "green_magenta_stain",
        _channels("dmin", r="normal", g="high", b="normal")
        + _channels("ld", r="normal", g="high", b="normal"),
        "Developer by-product in the bleach causing magenta stain, usually "
        "from under-aeration",
        "Correct the aeration problem. Part or all of the bleach tank may need "
        "dumping. An activated carbon filter in recirculation may help if "
        "staining is slight.",
        "Chart 20, Page 5-48",
    ),
    _c41(
        26, "Fixer Too Dilute", "red_green_dmin_ld_high",
        _channels("dmin", r="high", g="high", b="normal")
        + _channels("ld", r="high", g="high", b="normal"),
        "Fixer diluted; retained silver halide and sensitizing dye, D-min may "
        "look milky",
        "Check for excessive wash carryover, underreplenishment or fixer "
        "sulfurisation. Refix and rewash affected film. Replace the fixer if "
        "sulfurised.",
        "Chart 21, Page 5-49",
    ),
    _c41(
        27, "Fixer pH Too Low", "leuco_cyan_red_low",
        _channels("hdld", r="low", g="normal", b="normal")
        + _channels("ld", r="low", g="normal", b="normal"),
        "Fixer pH too low causing leuco-cyan dye, often from a malfunctioning "
        "electrolytic silver recovery unit",
        "Check the silver recovery unit. Replace the fixer with fresh solution. "
        "Reprocess affected film from the bleach step. Hold pH at 6.5 +-0.5 in "
        "closed-loop systems.",
        "Chart 22, Page 5-50",
    ),
)


# =============================================================================
# SECTION 3 -- B&W CATALOG (Ilford FPC)
# =============================================================================

BW_FAULTS: Tuple[FaultRecord, ...] = (
    _bw(
        101, "Developer Underactive", "ld_low_hdld_low",
        _scalar("ld", "low") + _scalar("hdld", "low"),
        "Developer activity too low: temperature low, time short, dilution, "
        "exhaustion or underreplenishment",
        "Check temperature (aim depends on developer) and time. Check the "
        "replenishment rate; add fresh developer or replenisher if "
        "replenishing. Check specific gravity and pH.",
    ),
    _bw(
        102, "Developer Overactive", "ld_high_hdld_high",
        _scalar("ld", "high") + _scalar("hdld", "high"),
        "Developer activity too high: temperature high, time long, "
        "over-concentration or over-replenishment",
        "Check temperature and time. With fresh chemistry, confirm the starter "
        "amount. Check the replenishment rate. Replace some developer with "
        "water if over-concentrated.",
    ),
    _bw(
        103, "Contrast Too Low", "ld_normal_hdld_low",
        _scalar("ld", "normal") + _scalar("hdld", "low"),
        "Low HD-LD: low contrast from developer exhaustion, "
        "underreplenishment or a temperature/time problem",
        "Check developer activity. Increase development time slightly if the "
        "process is otherwise stable. Check replenishment; fresh developer may "
        "be needed if exhausted.",
    ),
    _bw(
        104, "Contrast Too High", "ld_normal_hdld_high",
        _scalar("ld", "normal") + _scalar("hdld", "high"),
        "High HD-LD: high contrast from over-development or a developer "
        "problem",
        "Reduce development time slightly. Check for over-concentration from "
        "evaporation. Check that temperature is not high.",
    ),
    _bw(
        105, "Developer Contamination", "dmin_high_ld_high",
        _scalar("dmin", "high") + _scalar("ld", "high"),
        "Chemical fog, most likely fixer or stop bath carried into the "
        "developer",
        "STOP PROCESSING. Find the contamination source. Dump the developer, "
        "clean the tank thoroughly and mix fresh solution. Clean all racks and "
        "hangers.",
    ),
    _bw(
        106, "Gradual Drift Down", "trend_gradual_decline",
        _scalar("trend", "gradual_decline"),
        "LD and/or HD-LD declining over successive readings: developer "
        "becoming exhausted or underreplenished",
        "Check the replenishment rate. Top up with fresh developer. If "
        "replenishing, check concentration and rate. A partial tank dump and "
        "fresh solution may be needed.",
    ),
)


# =============================================================================
# SECTION 4 -- KNOWLEDGE BASE
# =============================================================================

class KnowledgeBase:
    """
    Immutable, id-indexed collection of FaultRecords.

    Built once from an iterable of records; the index is a read-only
    mapping proxy and no method mutates it. Iteration yields records in
    catalog order.
    """

    def __init__(self, records: Iterable[FaultRecord]) -> None:
        ordered = tuple(records)
        index = {}
        for record in ordered:
            if record.id in index:
                raise UnknownFaultError(record.id, reason="appears more than once in the catalog")
            index[record.id] = record
        self._records: Tuple[FaultRecord, ...] = ordered
        self._index: Mapping[int, FaultRecord] = MappingProxyType(index)

    def get(self, fault_id: int) -> FaultRecord:
        try:
            return self._index[fault_id]
        except KeyError:
            raise UnknownFaultError(fault_id) from None

    def for_process(self, process: ProcessType) -> Tuple[FaultRecord, ...]:
        return tuple(r for r in self._records if r.process == process)

    def ids(self) -> Tuple[int, ...]:
        return tuple(r.id for r in self._records)

    def __contains__(self, fault_id: object) -> bool:
        return fault_id in self._index

    def __iter__(self) -> Iterator[FaultRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return "KnowledgeBase(" + str(len(self._records)) + " records)"


DEFAULT_KNOWLEDGE_BASE: KnowledgeBase = KnowledgeBase(C41_FAULTS + BW_FAULTS)


__all__ = [
    "PatternTerm",
    "FaultRecord",
    "C41_FAULTS",
    "BW_FAULTS",
    "KnowledgeBase",
    "DEFAULT_KNOWLEDGE_BASE",
]
