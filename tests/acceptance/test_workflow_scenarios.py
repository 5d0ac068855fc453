"""
Request lifecycle acceptance tests.

Walks assistance requests through the workflow the way the API and
presentation layers drive it: decide with the engine, then commit the
outcome with a version check.
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from bson import ObjectId

from aidflow.domain.workflow import WorkflowEngine
from aidflow.models import AssistanceRequest, TransitionCommand
from aidflow.models.enums import RejectionCategory, RequestStatus, WorkflowErrorKind


class TestRequestLifecycle:
    """Test end-to-end request journeys."""
    
    @pytest.fixture(autouse=True)
    def setup_lifecycle_test(self):
        """Set up engine and actors."""
        self.engine = WorkflowEngine()
        self.applicant_id = str(ObjectId())
        self.case_worker_id = str(ObjectId())
        self.finance_id = str(ObjectId())
        self.now = datetime(2025, 7, 21, 9, 0, tzinfo=timezone.utc)
        
        self.draft = AssistanceRequest(
            applicant_id=self.applicant_id,
            created_by=self.applicant_id,
            title="Emergency shelter after flood",
            category="emergency_assistance",
            urgency_level="critical",
            requested_amount=Decimal("3000")
        )
    
    def step(self, request, target, role, action, actor_id, hours=1, **command):
        """Decide and commit one transition, failing the test on rejection."""
        self.now += timedelta(hours=hours)
        outcome = self.engine.attempt_transition(
            request, target, role, action,
            command=TransitionCommand(**command), actor_id=actor_id, now=self.now
        )
        assert outcome.success, outcome.error
        return self.engine.apply(request, outcome)
    
    def test_happy_path_to_paid(self):
        """Test draft to paid with a partial payment."""
        request = self.step(self.draft, "submitted", "user", "submit_request", self.applicant_id,
                            base_user_score=40)
        assert request.eligibility_score == 70
        
        request = self.step(request, "under_review", "admin", "assign_request", str(ObjectId()),
                            assigned_to=self.case_worker_id)
        request = self.step(request, "approved", "case_worker", "review_request", self.case_worker_id,
                            approved_amount=Decimal("2500"))
        request = self.step(request, "partially_paid", "finance_manager", "process_payment", self.finance_id,
                            payment_amount=Decimal("1000"))
        request = self.step(request, "paid", "finance_manager", "process_payment", self.finance_id,
                            payment_amount=Decimal("1500"))
        
        assert request.status == RequestStatus.PAID
        assert request.paid_amount == request.approved_amount == Decimal("2500")
        assert request.version == 6
        assert [entry.status for entry in request.status_history] == [
            RequestStatus.SUBMITTED,
            RequestStatus.UNDER_REVIEW,
            RequestStatus.APPROVED,
            RequestStatus.PARTIALLY_PAID,
            RequestStatus.PAID
        ]
        assert not self.engine.is_overdue(request, now=self.now + timedelta(days=30))
        assert self.engine.available_transitions(request, "admin") == []
    
    def test_document_loop_then_rejection(self):
        """Test a request sent back for documents and then rejected."""
        request = self.step(self.draft, "submitted", "user", "submit_request", self.applicant_id)
        request = self.step(request, "pending_docs", "case_worker", "request_documents", self.case_worker_id)
        
        assert self.engine.permissions.can_edit_request("user", request.status, request.is_owned_by(self.applicant_id))
        
        request = self.step(request, "under_review", "case_worker", "verify_documents", self.case_worker_id,
                            assigned_to=self.case_worker_id)
        request = self.step(request, "rejected", "case_worker", "review_request", self.case_worker_id,
                            rejection_category=RejectionCategory.INSUFFICIENT_DOCUMENTS,
                            rejection_description="Flood damage report is missing")
        
        assert request.status == RequestStatus.REJECTED
        assert request.rejection_reason.description == "Flood damage report is missing"
        
        outcome = self.engine.attempt_transition(request, "under_review", "admin", "review_request")
        assert outcome.error.kind == WorkflowErrorKind.INVALID_TRANSITION
    
    def test_concurrent_decisions_lose_on_commit(self):
        """Test only one of two racing decisions can be committed."""
        submitted = self.step(self.draft, "submitted", "user", "submit_request", self.applicant_id)
        
        cancel = self.engine.attempt_transition(
            submitted, "cancelled", "user", "cancel_request",
            command=TransitionCommand(cancellation_reason="Found other support"),
            actor_id=self.applicant_id
        )
        assign = self.engine.attempt_transition(
            submitted, "under_review", "admin", "assign_request",
            command=TransitionCommand(assigned_to=self.case_worker_id)
        )
        assert cancel.success and assign.success
        
        cancelled = self.engine.apply(submitted, cancel)
        
        with pytest.raises(ValueError):
            self.engine.apply(cancelled, assign)


class TestSpecifiedScenarios:
    """Test the reference scenarios for the lifecycle engine."""
    
    @pytest.fixture(autouse=True)
    def setup_scenarios(self):
        self.engine = WorkflowEngine()
        self.applicant_id = str(ObjectId())
        self.case_worker_id = str(ObjectId())
        self.now = datetime(2025, 7, 21, 9, 0, tzinfo=timezone.utc)
    
    def make(self, status, **fields):
        data = {
            "applicant_id": self.applicant_id,
            "created_by": self.applicant_id,
            "status": status,
            "category": "housing_support",
            "requested_amount": Decimal("1000"),
        }
        if status != RequestStatus.DRAFT:
            data["submitted_at"] = self.now - timedelta(days=1)
        data.update(fields)
        return AssistanceRequest(**data)
    
    def test_draft_submission_succeeds(self):
        outcome = self.engine.attempt_transition(
            self.make(RequestStatus.DRAFT), "submitted", "user", "submit_request"
        )
        
        assert outcome.success
        assert outcome.status == RequestStatus.SUBMITTED
    
    def test_paid_request_is_final(self):
        request = self.make(RequestStatus.PAID, assigned_to=self.case_worker_id,
                            approved_amount=Decimal("1000"), paid_amount=Decimal("1000"))
        
        outcome = self.engine.attempt_transition(request, "under_review", "admin", "review_request")
        
        assert outcome.error.kind == WorkflowErrorKind.INVALID_TRANSITION
    
    def test_approval_without_amount_is_incomplete(self):
        request = self.make(RequestStatus.UNDER_REVIEW, assigned_to=self.case_worker_id)
        
        outcome = self.engine.attempt_transition(request, "approved", "case_worker", "review_request")
        
        assert outcome.error.kind == WorkflowErrorKind.INCOMPLETE_DATA
        assert outcome.error.field == "approved_amount"
        assert outcome.error.to_dict()["field"] == "approved_amount"
    
    def test_applicant_cannot_approve(self):
        request = self.make(RequestStatus.UNDER_REVIEW, assigned_to=self.case_worker_id)
        
        outcome = self.engine.attempt_transition(request, "approved", "user", "review_request")
        
        assert outcome.error.kind == WorkflowErrorKind.FORBIDDEN
        assert outcome.error.user_message() == outcome.error.message
    
    def test_emergency_critical_score(self):
        assert self.engine.eligibility.score(40, "emergency_assistance", "critical", 3000) == 70
    
    def test_routine_sla_breach(self):
        submitted_at = self.now - timedelta(days=10)
        
        assert self.engine.sla.is_overdue(submitted_at, "routine", "under_review", "normal", now=self.now)
        assert not self.engine.sla.is_overdue(submitted_at, "routine", "paid", "normal", now=self.now)
    
    @pytest.mark.parametrize("amount", ["1", "500", "1000"])
    def test_successful_approvals_keep_amount_invariant(self, amount):
        request = self.make(RequestStatus.UNDER_REVIEW, assigned_to=self.case_worker_id)
        
        outcome = self.engine.attempt_transition(
            request, "approved", "case_worker", "review_request",
            command=TransitionCommand(approved_amount=Decimal(amount))
        )
        
        assert outcome.success
        assert outcome.approved_amount <= request.requested_amount
