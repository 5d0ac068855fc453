# SPDX-License-Identifier: Apache-2.0

"""
Permission policy for role-based workflow actions.

This module contains pure authorization checks: a role may perform an
action when the role is in the action's allowed set and, for
status-restricted actions, the request is in one of the allowed statuses.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..models.entities import ActionRule
from ..models.enums import UserRole, WorkflowAction
from .catalog import StatusCatalog, coerce_action, coerce_role, coerce_status
from .tables import WorkflowTables

logger = logging.getLogger(__name__)


@dataclass
class AuthorizationResult:
    """Result of an authorization check."""
    allowed: bool
    reason: Optional[str] = None


class PermissionPolicy:
    """Maps (role, action, current status) to allowed or denied."""
    
    def __init__(self, tables: WorkflowTables, catalog: StatusCatalog):
        self.tables = tables
        self.catalog = catalog
    
    def rule_for(self, action: Any) -> ActionRule:
        """
        Look up the rule for an action.
        
        Raises:
            UnknownActionError: If action is not a WorkflowAction value
        """
        return self.tables.actions[coerce_action(action)]
    
    def check(self, role: Any, action: Any, current_status: Any = None) -> AuthorizationResult:
        """
        Check whether a role may perform an action in a status.
        
        Args:
            role: Acting user role
            action: Workflow action
            current_status: Request status; required for status-restricted actions
            
        Returns:
            AuthorizationResult indicating if the action is allowed
            
        Raises:
            UnknownActionError: If action is not a WorkflowAction value
            UnknownRoleError: If role is not a UserRole value
            UnknownStatusError: If current_status is given but unknown
        """
        rule = self.rule_for(action)
        role = coerce_role(role)
        
        if role not in rule.roles:
            return AuthorizationResult(
                allowed=False,
                reason=f"Role {role.value} may not {rule.description.lower()}"
            )
        
        if not rule.statuses:
            return AuthorizationResult(allowed=True)
        
        if current_status is None:
            return AuthorizationResult(
                allowed=False,
                reason=f"Action {rule.action.value} requires a request status"
            )
        
        status = coerce_status(current_status)
        if status not in rule.statuses:
            return AuthorizationResult(
                allowed=False,
                reason=f"Action {rule.action.value} is not allowed while request is {status.value}"
            )
        
        return AuthorizationResult(allowed=True)
    
    def can_perform(self, role: Any, action: Any, current_status: Any = None) -> bool:
        """Boolean form of ``check``."""
        return self.check(role, action, current_status).allowed
    
    def allowed_actions(self, role: Any, current_status: Any = None) -> List[WorkflowAction]:
        """
        Actions a role may perform, for gating UI affordances.
        
        Status-restricted actions are only listed when a status is given.
        """
        return [
            action for action in WorkflowAction
            if self.can_perform(role, action, current_status)
        ]
    
    def can_edit_request(self, role: Any, current_status: Any, is_owner: bool = False) -> bool:
        """
        Check if a role can edit request details.
        
        Applicants may only edit their own requests while editable; staff may
        edit any request that has not reached a terminal status.
        """
        role = coerce_role(role)
        info = self.catalog.describe(current_status)
        
        if role == UserRole.USER:
            return is_owner and info.is_editable
        
        return not info.is_terminal
    
    def actions_reaching(self, target_status: Any) -> List[WorkflowAction]:
        """Actions whose rule allows moving a request into ``target_status``."""
        target = coerce_status(target_status)
        return [
            rule.action for rule in self.tables.actions.values()
            if target in rule.target_statuses
        ]
    
    def get_action_description(self, action: Any) -> str:
        """Human-readable description for an action."""
        return self.rule_for(action).description
    
    def validate(self) -> Tuple[bool, Optional[str]]:
        """
        Check that every action has a rule and every rule is well formed.
        
        Returns:
            Tuple of (is_valid, error_message)
        """
        for action in WorkflowAction:
            rule = self.tables.actions.get(action)
            if rule is None:
                return False, f"No permission rule for action {action.value}"
            if not rule.roles:
                return False, f"Permission rule for {action.value} grants no roles"
            for status in rule.statuses | rule.target_statuses:
                if status not in self.tables.statuses:
                    return False, f"Permission rule for {action.value} references unknown status {status}"
            for target in rule.target_statuses:
                if rule.statuses and not any(
                    target in self.tables.transitions.get(source, frozenset())
                    for source in rule.statuses
                ):
                    return False, (
                        f"Permission rule for {action.value} targets {target.value}, "
                        f"which none of its statuses can reach"
                    )
        
        return True, None


def is_staff_role(role: Any) -> bool:
    """Check if a role belongs to program staff rather than applicants."""
    return coerce_role(role) != UserRole.USER
