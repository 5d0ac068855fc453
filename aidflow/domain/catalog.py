# SPDX-License-Identifier: Apache-2.0

"""
Status catalog and enum coercion helpers.

The coercion helpers are the single place where free-form values from the
API or presentation layers are turned into workflow enums; anything outside
the closed sets raises a ``WorkflowConfigurationError`` subclass.
"""

from typing import Any, FrozenSet, List

from ..models.entities import StatusInfo
from ..models.enums import (
    PriorityLevel,
    RequestCategory,
    RequestStatus,
    UrgencyLevel,
    UserRole,
    WorkflowAction
)
from .errors import (
    UnknownActionError,
    UnknownLookupError,
    UnknownRoleError,
    UnknownStatusError
)
from .tables import WorkflowTables


def coerce_status(value: Any) -> RequestStatus:
    """Convert a value to RequestStatus or raise UnknownStatusError."""
    try:
        return RequestStatus(value)
    except ValueError:
        raise UnknownStatusError(value) from None


def coerce_action(value: Any) -> WorkflowAction:
    """Convert a value to WorkflowAction or raise UnknownActionError."""
    try:
        return WorkflowAction(value)
    except ValueError:
        raise UnknownActionError(value) from None


def coerce_role(value: Any) -> UserRole:
    """Convert a value to UserRole or raise UnknownRoleError."""
    try:
        return UserRole(value)
    except ValueError:
        raise UnknownRoleError(value) from None


def coerce_category(value: Any) -> RequestCategory:
    try:
        return RequestCategory(value)
    except ValueError:
        raise UnknownLookupError("request category", value) from None


def coerce_urgency(value: Any) -> UrgencyLevel:
    try:
        return UrgencyLevel(value)
    except ValueError:
        raise UnknownLookupError("urgency level", value) from None


def coerce_priority(value: Any) -> PriorityLevel:
    if value is None:
        return PriorityLevel.NORMAL
    try:
        return PriorityLevel(value)
    except ValueError:
        raise UnknownLookupError("priority level", value) from None


class StatusCatalog:
    """Registry of request statuses with display metadata and lifecycle flags."""
    
    def __init__(self, tables: WorkflowTables):
        self.tables = tables
    
    def describe(self, status: Any) -> StatusInfo:
        """
        Look up the catalog entry for a status.
        
        Args:
            status: RequestStatus member or its string value
            
        Returns:
            StatusInfo with label, terminal and editable flags
            
        Raises:
            UnknownStatusError: If status is not a RequestStatus value
        """
        return self.tables.statuses[coerce_status(status)]
    
    def is_terminal(self, status: Any) -> bool:
        return self.describe(status).is_terminal
    
    def is_editable(self, status: Any) -> bool:
        return self.describe(status).is_editable
    
    def terminal_statuses(self) -> FrozenSet[RequestStatus]:
        """All statuses with no outgoing transitions."""
        return frozenset(
            status for status, info in self.tables.statuses.items() if info.is_terminal
        )
    
    def all_statuses(self) -> List[StatusInfo]:
        """Catalog entries in declaration order."""
        return [self.tables.statuses[status] for status in RequestStatus]
    
    def workflow_progress(self, status: Any) -> int:
        """
        Progress along the happy path as a percentage.
        
        Statuses off the draft -> submitted -> under_review -> approved -> paid
        path report 0.
        """
        status = coerce_status(status)
        path = self.tables.progress_path
        if status not in path:
            return 0
        return round(path.index(status) / (len(path) - 1) * 100)
