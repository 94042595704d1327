# =============================================================================
# filmqc -- DIAGNOSTIC LAYER
# File:   filmqc/core/diagnostic_layer/exceptions.py
# Authority: Kodak Z-131 (Process C-41) / Ilford FPC control procedures
# =============================================================================
#
# SCOPE
# -----
# Exception hierarchy for the diagnostic layer.
# All exceptions are pure value objects: no side effects, no logging,
# no external references, no I/O of any kind.
#
# EXCEPTION HIERARCHY
# -------------------
#   DiagnosticError(Exception)                  -- base; never raised directly
#     ValidationError(DiagnosticError)          -- missing field / type / shape
#       NumericalError(ValidationError)         -- NaN / Inf in a density field
#     UnsupportedProcessError(DiagnosticError)  -- process tag not c41 / bw
#     ToleranceConsistencyError(DiagnosticError)-- action band above control
#     UnknownFaultError(DiagnosticError)        -- catalog id lookup failure
#
# MESSAGE CONTRACT
# ----------------
# Every exception message is:
#   - Deterministic: identical inputs -> identical message string.
#   - Explicit: field name and violating value always included.
#   - ASCII-safe.
#   - Non-empty.
#
# No domain imports: exceptions must remain leaf dependencies.
# =============================================================================

from __future__ import annotations

from typing import Any, Iterable


# =============================================================================
# BASE EXCEPTION
# =============================================================================

class DiagnosticError(Exception):
    """
    Base class for all diagnostic layer exceptions.

    Never raised directly. Use a concrete subclass.

    Attributes:
        field_name:  Dotted name of the offending field (e.g. 'reading.dmax.r'),
                     or empty string if not applicable.
        value:       The offending value, or None if the violation is not
                     tied to a single value.
        message:     Human-readable description. Always non-empty.
    """

    def __init__(
        self,
        message:    str,
        field_name: str = "",
        value:      Any = None,
    ) -> None:
        if not isinstance(message, str) or not message:
            raise ValueError(
                "DiagnosticError: message must be a non-empty string"
            )
        if not isinstance(field_name, str):
            raise ValueError(
                "DiagnosticError: field_name must be a string"
            )
        super().__init__(message)
        self.field_name: str = field_name
        self.value:      Any = value
        self.message:    str = message

    def __repr__(self) -> str:
        return (
            self.__class__.__name__
            + "(field_name=" + repr(self.field_name)
            + ", value=" + repr(self.value)
            + ", message=" + repr(self.message)
            + ")"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DiagnosticError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.field_name == other.field_name
            and self.value == other.value
            and self.message == other.message
        )

    __hash__ = Exception.__hash__


# =============================================================================
# CONCRETE EXCEPTIONS
# =============================================================================

class ValidationError(DiagnosticError):
    """
    Raised when a reading, reference or call argument has the wrong shape.

    This covers:
      - A patch or channel missing from a JSON-shaped reading.
      - A density that is not a real number (bool is rejected too).
      - A reading and reference of different process shapes.
      - A reading history supplied for a process that does not use one.

    Message format:
        "ValidationError: field '<field_name>' violates constraint
         '<constraint>': got <value>."

    Args:
        field_name:  Dotted name of the offending field. Must be non-empty.
        value:       The offending value.
        constraint:  Human-readable constraint. Must be non-empty.
                     Examples:
                       "is required"
                       "must be a finite real number"
                       "must have the same shape as the reading (C41Reading)"
    """

    def __init__(
        self,
        field_name: str,
        value:      Any,
        constraint: str,
    ) -> None:
        if not field_name:
            raise ValueError(
                self.__class__.__name__ + ": field_name must be a non-empty string"
            )
        if not isinstance(constraint, str) or not constraint:
            raise ValueError(
                self.__class__.__name__ + ": constraint must be a non-empty string"
            )
        message = (
            self.__class__.__name__
            + ": field '"
            + field_name
            + "' violates constraint '"
            + constraint
            + "': got "
            + repr(value)
            + "."
        )
        super().__init__(message=message, field_name=field_name, value=value)
        self.constraint: str = constraint


class NumericalError(ValidationError):
    """
    Raised when a density field holds NaN or Inf.

    A subclass of ValidationError so callers that reject malformed input
    generically also reject non-finite densities. NaN never reaches the
    deviation arithmetic.
    """

    def __init__(self, field_name: str, value: float) -> None:
        super().__init__(
            field_name=field_name,
            value=value,
            constraint="must be finite (NaN and Inf are not permitted)",
        )


class UnsupportedProcessError(DiagnosticError):
    """
    Raised when a process tag is not one of the supported processes.

    No partial diagnosis is produced when this fires.

    Args:
        value:      The rejected process tag.
        supported:  The accepted tag values, listed in the message.
    """

    def __init__(self, value: Any, supported: Iterable[str]) -> None:
        supported_list = sorted(supported)
        message = (
            "UnsupportedProcessError: process "
            + repr(value)
            + " is not supported; expected one of "
            + repr(supported_list)
            + "."
        )
        super().__init__(message=message, field_name="process", value=value)
        self.supported: tuple = tuple(supported_list)


class ToleranceConsistencyError(DiagnosticError):
    """
    Raised when a tolerance band's action threshold exceeds its control
    threshold. Both thresholds are individually valid; together they
    would make the control level unreachable from the action level.
    """

    def __init__(self, band_name: str, action: int, control: int) -> None:
        if not band_name:
            raise ValueError(
                "ToleranceConsistencyError: band_name must be non-empty"
            )
        message = (
            "ToleranceConsistencyError: band '"
            + band_name
            + "' has action="
            + repr(action)
            + " above control="
            + repr(control)
            + "; action must be <= control."
        )
        super().__init__(message=message, field_name=band_name, value=action)
        self.action:  int = action
        self.control: int = control


class UnknownFaultError(DiagnosticError):
    """
    Raised by the knowledge base when a fault id is not in the catalog,
    or when a catalog is built with a duplicate id.
    """

    def __init__(self, fault_id: Any, reason: str = "is not in the catalog") -> None:
        message = (
            "UnknownFaultError: fault id "
            + repr(fault_id)
            + " "
            + reason
            + "."
        )
        super().__init__(message=message, field_name="fault_id", value=fault_id)


# =============================================================================
# MODULE __all__
# =============================================================================

__all__ = [
    "DiagnosticError",
    "ValidationError",
    "NumericalError",
    "UnsupportedProcessError",
    "ToleranceConsistencyError",
    "UnknownFaultError",
]
