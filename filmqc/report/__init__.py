from .engine import (
    catalog_to_dicts,
    diagnosis_to_dict,
    fault_to_dict,
    problems_summary,
)

__all__ = [
    "diagnosis_to_dict",
    "problems_summary",
    "fault_to_dict",
    "catalog_to_dicts",
]
