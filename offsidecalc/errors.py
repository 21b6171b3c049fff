"""
Failure reasons and exceptions.

Numeric failures (degenerate lines, parallel lines, too little evidence, a
singular least-squares system) are never raised: the geometry functions return
``None`` and the reasons below are used when reporting why. Exceptions are
reserved for the detector collaborator and for caller mistakes.
"""

from __future__ import annotations

from enum import Enum


class FailureReason(str, Enum):
    DEGENERATE_LINE = "degenerate_line"
    NO_INTERSECTION = "no_intersection"
    INSUFFICIENT_EVIDENCE = "insufficient_evidence"
    SINGULAR_SYSTEM = "singular_system"


class OffsideCalcError(Exception):
    """
    Base class for errors raised by this package.
    """


class DetectionError(OffsideCalcError):
    """
    The line detector was unavailable or failed; no partial results exist.
    """


class DetectionInProgressError(OffsideCalcError):
    """
    A detection run was requested while another one is still in flight.
    """


class NoVanishingPointError(OffsideCalcError):
    """
    An operation needs a vanishing point but the scene has none.
    """
