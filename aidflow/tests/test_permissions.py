# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the role and status permission policy.
"""

import pytest
from dataclasses import replace
from types import MappingProxyType

from aidflow.domain.errors import UnknownActionError, UnknownRoleError
from aidflow.domain.permissions import PermissionPolicy, is_staff_role
from aidflow.models.entities import ActionRule
from aidflow.models.enums import RequestStatus, UserRole, WorkflowAction


class TestCanPerform:
    """Test conjunctive role and status checks."""
    
    def test_payment_requires_finance_role(self, policy):
        assert not policy.can_perform("user", "process_payment", "approved")
        assert policy.can_perform("finance_manager", "process_payment", "approved")
        assert policy.can_perform("admin", "process_payment", "partially_paid")
    
    def test_payment_requires_payable_status(self, policy):
        assert not policy.can_perform("finance_manager", "process_payment", "under_review")
    
    def test_submit_only_from_draft(self, policy):
        assert policy.can_perform(UserRole.USER, WorkflowAction.SUBMIT_REQUEST, RequestStatus.DRAFT)
        assert not policy.can_perform(UserRole.USER, WorkflowAction.SUBMIT_REQUEST, RequestStatus.SUBMITTED)
    
    def test_status_independent_actions(self, policy):
        assert policy.can_perform("user", "create_request")
        assert policy.can_perform("case_worker", "export_requests")
        assert not policy.can_perform("user", "export_requests")
    
    def test_status_restricted_action_without_status_denied(self, policy):
        result = policy.check("case_worker", "review_request")
        
        assert not result.allowed
        assert "requires a request status" in result.reason
    
    def test_denial_reasons(self, policy):
        role_denied = policy.check("user", "review_request", "under_review")
        status_denied = policy.check("case_worker", "review_request", "paid")
        
        assert role_denied.reason == "Role user may not review and approve/reject request"
        assert status_denied.reason == "Action review_request is not allowed while request is paid"
    
    def test_unknown_action_raises(self, policy):
        with pytest.raises(UnknownActionError):
            policy.can_perform("admin", "delete_everything", "draft")
    
    def test_unknown_role_raises(self, policy):
        with pytest.raises(UnknownRoleError):
            policy.can_perform("supervisor", "review_request", "under_review")


class TestPolicyQueries:
    """Test UI gating helpers."""
    
    def test_allowed_actions_for_applicant_draft(self, policy):
        actions = policy.allowed_actions("user", "draft")
        
        assert WorkflowAction.SUBMIT_REQUEST in actions
        assert WorkflowAction.CANCEL_REQUEST in actions
        assert WorkflowAction.UPLOAD_DOCUMENTS in actions
        assert WorkflowAction.REVIEW_REQUEST not in actions
    
    def test_allowed_actions_without_status(self, policy):
        actions = policy.allowed_actions("finance_manager")
        
        assert set(actions) == {
            WorkflowAction.VIEW_ALL_REQUESTS,
            WorkflowAction.VIEW_DASHBOARD_STATS,
            WorkflowAction.EXPORT_REQUESTS
        }
    
    def test_can_edit_request(self, policy):
        assert policy.can_edit_request("user", "draft", is_owner=True)
        assert policy.can_edit_request("user", "pending_docs", is_owner=True)
        assert not policy.can_edit_request("user", "draft", is_owner=False)
        assert not policy.can_edit_request("user", "under_review", is_owner=True)
        assert policy.can_edit_request("case_worker", "under_review")
        assert not policy.can_edit_request("admin", "paid")
    
    def test_actions_reaching(self, policy):
        assert policy.actions_reaching("pending_docs") == [WorkflowAction.REQUEST_DOCUMENTS]
        assert set(policy.actions_reaching("under_review")) == {
            WorkflowAction.ASSIGN_REQUEST,
            WorkflowAction.REVIEW_REQUEST,
            WorkflowAction.VERIFY_DOCUMENTS
        }
    
    def test_action_description(self, policy):
        assert policy.get_action_description("process_payment") == "Process payment to beneficiary"
    
    def test_is_staff_role(self):
        assert not is_staff_role("user")
        assert is_staff_role(UserRole.FINANCE_MANAGER)


class TestPolicySelfCheck:
    """Test startup validation of the action catalog."""
    
    def test_default_catalog_is_valid(self, policy):
        assert policy.validate() == (True, None)
    
    def test_missing_rule_detected(self, tables, catalog):
        actions = dict(tables.actions)
        del actions[WorkflowAction.ADD_COMMENT]
        policy = PermissionPolicy(replace(tables, actions=MappingProxyType(actions)), catalog)
        
        is_valid, error = policy.validate()
        
        assert not is_valid
        assert error == "No permission rule for action add_comment"
    
    def test_unreachable_target_detected(self, tables, catalog):
        actions = dict(tables.actions)
        actions[WorkflowAction.SUBMIT_REQUEST] = ActionRule(
            action=WorkflowAction.SUBMIT_REQUEST,
            description="Submit request for review",
            roles=frozenset({UserRole.USER}),
            statuses=frozenset({RequestStatus.DRAFT}),
            target_statuses=frozenset({RequestStatus.PAID})
        )
        policy = PermissionPolicy(replace(tables, actions=MappingProxyType(actions)), catalog)
        
        is_valid, error = policy.validate()
        
        assert not is_valid
        assert "targets paid" in error
