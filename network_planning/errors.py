"""
Error classes for VPC network planning.

Planning errors are explicit, typed exceptions that the CLI and CDK app map to
a non-zero exit. All fatal errors follow the principle of "fail fast": they are
raised before any resource is declared and are never retried.

Naming problems are not errors. They are collected as NamingWarning records
on the tag plan and surfaced through the logger.
"""

from dataclasses import dataclass
from typing import Dict, Any


class PlanningError(Exception):
    """
    Base class for all fatal planning errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        details: Extra context (e.g. field-level validation errors)
    """

    def __init__(self, code: str, message: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


class ConfigError(PlanningError):
    """
    Raised when an environment configuration is malformed or incomplete.

    Details carry the field-level errors under the 'errors' key.
    """

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__('CONFIG_ERROR', message, details or {})


class TopologyError(PlanningError):
    """
    Raised when a structural precondition fails while planning.

    Example: no realized subnets belong to the layer selected for the
    transit gateway attachment.
    """

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__('TOPOLOGY_ERROR', message, details or {})


@dataclass(frozen=True)
class NamingWarning:
    """A subnet that could not be mapped back to a configured layer."""
    subnet_name: str
    message: str
