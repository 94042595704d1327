# filmqc -- film process-control diagnostics.
#
# Canonical imports:
#   from filmqc.core.diagnostic_layer import diagnose, get_knowledge_base
#   from filmqc.report import diagnosis_to_dict
#   from filmqc.ledger import ControlLog, LogEntry

__version__ = "1.0.0"
