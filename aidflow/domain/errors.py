# SPDX-License-Identifier: Apache-2.0

"""
Workflow rejection types.

Business-rule failures are returned as ``WorkflowError`` values so callers
can branch on ``kind``. Lookups against the closed enums raise
``WorkflowConfigurationError`` subclasses, which indicate a defect in the
caller rather than a user mistake.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..models.enums import WorkflowErrorKind


USER_FACING_KINDS = frozenset({
    WorkflowErrorKind.INVALID_TRANSITION,
    WorkflowErrorKind.FORBIDDEN,
    WorkflowErrorKind.INCOMPLETE_DATA
})

GENERIC_ERROR_MESSAGE = "An internal error occurred while processing this request"


class WorkflowConfigurationError(ValueError):
    """Base class for lookups outside the closed workflow enums."""
    
    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.message = message
        self.value = value


class UnknownStatusError(WorkflowConfigurationError):
    """Raised when a value is not a known request status."""
    
    def __init__(self, value: Any):
        super().__init__(f"Unknown request status: {value!r}", value)


class UnknownActionError(WorkflowConfigurationError):
    """Raised when a value is not a known workflow action."""
    
    def __init__(self, value: Any):
        super().__init__(f"Unknown workflow action: {value!r}", value)


class UnknownRoleError(WorkflowConfigurationError):
    """Raised when a value is not a known user role."""
    
    def __init__(self, value: Any):
        super().__init__(f"Unknown user role: {value!r}", value)


class UnknownLookupError(WorkflowConfigurationError):
    """Raised when a value is not a known category, urgency or priority."""
    
    def __init__(self, table: str, value: Any):
        super().__init__(f"Unknown {table}: {value!r}", value)
        self.table = table


@dataclass
class WorkflowError:
    """Structured rejection of a workflow operation."""
    kind: WorkflowErrorKind
    message: str
    field: Optional[str] = None
    details: Dict[str, Any] = None
    
    def __post_init__(self):
        if self.details is None:
            self.details = {}
    
    @property
    def is_user_facing(self) -> bool:
        """Whether the message may be shown to end users."""
        return self.kind in USER_FACING_KINDS
    
    def user_message(self) -> str:
        """Message safe for display; internal defects are masked."""
        if self.is_user_facing:
            return self.message
        return GENERIC_ERROR_MESSAGE
    
    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API error payloads."""
        return {
            "kind": self.kind.value,
            "message": self.user_message(),
            "field": self.field,
            "details": dict(self.details) if self.is_user_facing else {}
        }
    
    @classmethod
    def invalid_transition(cls, message: str, **details: Any) -> "WorkflowError":
        return cls(WorkflowErrorKind.INVALID_TRANSITION, message, details=details)
    
    @classmethod
    def forbidden(cls, message: str, **details: Any) -> "WorkflowError":
        return cls(WorkflowErrorKind.FORBIDDEN, message, details=details)
    
    @classmethod
    def incomplete_data(cls, field_name: str, message: str, **details: Any) -> "WorkflowError":
        return cls(WorkflowErrorKind.INCOMPLETE_DATA, message, field=field_name, details=details)
    
    @classmethod
    def from_configuration_error(cls, error: WorkflowConfigurationError) -> "WorkflowError":
        """Convert a raised lookup failure into a rejection value."""
        if isinstance(error, UnknownStatusError):
            kind = WorkflowErrorKind.UNKNOWN_STATUS
        elif isinstance(error, UnknownActionError):
            kind = WorkflowErrorKind.UNKNOWN_ACTION
        elif isinstance(error, UnknownRoleError):
            # No rule grants anything to a role outside the enum
            kind = WorkflowErrorKind.FORBIDDEN
        else:
            kind = WorkflowErrorKind.UNKNOWN_VALUE
        return cls(kind, error.message, details={"value": repr(error.value)})
