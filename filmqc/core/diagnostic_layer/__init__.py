from .exceptions import (
    DiagnosticError,
    NumericalError,
    ToleranceConsistencyError,
    UnknownFaultError,
    UnsupportedProcessError,
    ValidationError,
)
from .domain import (
    CHANNELS,
    PATCHES,
    BWReading,
    C41Reading,
    ChannelDensities,
    ProcessType,
    Severity,
    parse_reading,
)
from .tolerances import (
    DEFAULT_TOLERANCES,
    BWTolerances,
    C41Tolerances,
    ToleranceBand,
    ToleranceConfig,
)
from .knowledge_base import (
    BW_FAULTS,
    C41_FAULTS,
    DEFAULT_KNOWLEDGE_BASE,
    FaultRecord,
    KnowledgeBase,
    PatternTerm,
)
from .deviation import (
    BWDeviation,
    C41Deviation,
    compute_deviations,
)
from .classifier import (
    ToleranceStatus,
    ToleranceViolation,
    classify_tolerances,
)
from .problems import (
    PROCESS_OK,
    Problem,
)
from .matchers import (
    ColorSpread,
    RetainedSilverSummary,
    match_bw_pattern,
    match_color_spread,
    match_developer_pattern,
    match_fixer_pattern,
    match_retained_silver,
)
from .trend import (
    DriftSlopes,
    compute_drift_slopes,
    match_bw_drift,
)
from .engine import (
    DEFAULT_CONFIG,
    DiagnosticConfig,
    Diagnosis,
    diagnose,
    diagnose_bw,
    diagnose_c41,
    get_knowledge_base,
)

__all__ = [
    # Exceptions
    "DiagnosticError",
    "ValidationError",
    "NumericalError",
    "UnsupportedProcessError",
    "ToleranceConsistencyError",
    "UnknownFaultError",
    # Enumerations
    "ProcessType",
    "Severity",
    # Domain dataclasses
    "CHANNELS",
    "PATCHES",
    "ChannelDensities",
    "C41Reading",
    "BWReading",
    "parse_reading",
    # Tolerances
    "ToleranceBand",
    "C41Tolerances",
    "BWTolerances",
    "ToleranceConfig",
    "DEFAULT_TOLERANCES",
    # Fault catalog
    "PatternTerm",
    "FaultRecord",
    "KnowledgeBase",
    "C41_FAULTS",
    "BW_FAULTS",
    "DEFAULT_KNOWLEDGE_BASE",
    # Deviation and classification
    "C41Deviation",
    "BWDeviation",
    "compute_deviations",
    "ToleranceViolation",
    "ToleranceStatus",
    "classify_tolerances",
    # Pattern matching
    "Problem",
    "PROCESS_OK",
    "RetainedSilverSummary",
    "ColorSpread",
    "match_retained_silver",
    "match_developer_pattern",
    "match_fixer_pattern",
    "match_color_spread",
    "match_bw_pattern",
    "DriftSlopes",
    "compute_drift_slopes",
    "match_bw_drift",
    # Orchestration
    "DiagnosticConfig",
    "DEFAULT_CONFIG",
    "Diagnosis",
    "diagnose",
    "diagnose_c41",
    "diagnose_bw",
    "get_knowledge_base",
]
