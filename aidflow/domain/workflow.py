# SPDX-License-Identifier: Apache-2.0

"""
Workflow engine for assistance request status transitions.

The engine is a pure decision function: it validates a requested transition
against the transition table, the permission policy and the data each target
status needs, and returns either the new status with its derived fields or a
structured rejection. It never persists anything. Callers commit the result
with a compare-and-swap on ``expected_version`` and emit any notifications
or audit entries themselves.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from opentelemetry import trace

from ..models.base import utc_now
from ..models.commands import TransitionCommand
from ..models.entities import AssistanceRequest, RejectionReason, StatusHistoryEntry
from ..models.enums import RequestStatus, WorkflowAction
from ..settings import Settings
from .catalog import StatusCatalog, coerce_action, coerce_role, coerce_status
from .eligibility import EligibilityScorer, to_decimal
from .errors import WorkflowConfigurationError, WorkflowError
from .permissions import PermissionPolicy, is_staff_role
from .sla import SLACalculator, as_utc
from .tables import WorkflowTables, build_default_tables
from .transitions import TransitionTable

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass
class TransitionOutcome:
    """Result of a transition attempt."""
    success: bool
    previous_status: Optional[RequestStatus] = None
    status: Optional[RequestStatus] = None
    error: Optional[WorkflowError] = None
    expected_version: Optional[int] = None
    decided_at: Optional[datetime] = None
    changed_by: Optional[str] = None
    approved_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    assigned_to: Optional[str] = None
    submitted_at: Optional[datetime] = None
    rejection_reason: Optional[RejectionReason] = None
    cancellation_reason: Optional[str] = None
    review_notes: Optional[str] = None
    eligibility_score: Optional[int] = None
    is_overdue: bool = False
    sla_deadline: Optional[datetime] = None
    requires_supervisor_approval: bool = False
    history_entry: Optional[StatusHistoryEntry] = None

    @classmethod
    def failure(cls, error: WorkflowError, previous_status: Optional[RequestStatus] = None) -> "TransitionOutcome":
        return cls(success=False, previous_status=previous_status, error=error)

    def changes(self) -> Dict[str, Any]:
        """Fields the caller writes back on success."""
        if not self.success:
            return {}
        return {
            "status": self.status,
            "approved_amount": self.approved_amount,
            "paid_amount": self.paid_amount,
            "assigned_to": self.assigned_to,
            "submitted_at": self.submitted_at,
            "rejection_reason": self.rejection_reason,
            "cancellation_reason": self.cancellation_reason,
            "review_notes": self.review_notes,
            "eligibility_score": self.eligibility_score,
            "updated_at": self.decided_at,
        }


class WorkflowEngine:
    """Orchestrates transition legality, authorization and data checks."""

    def __init__(self, tables: Optional[WorkflowTables] = None, settings: Optional[Settings] = None):
        self.tables = tables or build_default_tables(settings)
        self.catalog = StatusCatalog(self.tables)
        self.transitions = TransitionTable(self.tables, self.catalog)
        self.permissions = PermissionPolicy(self.tables, self.catalog)
        self.eligibility = EligibilityScorer(self.tables)
        self.sla = SLACalculator(self.tables, self.catalog)
        self.self_check()

    def self_check(self) -> None:
        """
        Validate the injected tables once at construction.

        Raises:
            WorkflowConfigurationError: If the graph or permission catalog is inconsistent
        """
        graph_ok, graph_errors = self.transitions.validate()
        if not graph_ok:
            raise WorkflowConfigurationError("; ".join(graph_errors))

        permissions_ok, permissions_error = self.permissions.validate()
        if not permissions_ok:
            raise WorkflowConfigurationError(permissions_error)

    def attempt_transition(
        self,
        request: AssistanceRequest,
        target_status: Any,
        acting_role: Any,
        action: Any,
        command: Optional[TransitionCommand] = None,
        actor_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> TransitionOutcome:
        """
        Decide whether a request may move to ``target_status``.

        Checks run in a fixed order so the same input always reports the
        same error: transition legality, then authorization, then the data
        the target status requires.

        Args:
            request: Current request snapshot
            target_status: Desired status
            acting_role: Role of the user attempting the transition
            action: Workflow action being performed
            command: Supporting data for the target status
            actor_id: ID of the acting user, recorded in history
            now: Decision time, defaults to the current UTC time

        Returns:
            TransitionOutcome with the new status and derived fields, or an error
        """
        command = command or TransitionCommand()
        now = as_utc(now) if now is not None else utc_now()

        with tracer.start_as_current_span("workflow.attempt_transition") as span:
            span.set_attributes({
                "request.id": request.id,
                "request.version": request.version,
                "workflow.from_status": str(getattr(request.status, "value", request.status)),
                "workflow.to_status": str(getattr(target_status, "value", target_status)),
                "workflow.role": str(getattr(acting_role, "value", acting_role)),
                "workflow.action": str(getattr(action, "value", action)),
            })

            outcome = self._decide(request, target_status, acting_role, action, command, actor_id, now)

            span.set_attribute("workflow.success", outcome.success)
            if outcome.success:
                logger.info(
                    "Transition accepted",
                    extra={
                        "request_id": request.id,
                        "from_status": outcome.previous_status.value,
                        "to_status": outcome.status.value,
                        "action": str(getattr(action, "value", action)),
                        "actor_id": actor_id
                    }
                )
            else:
                span.set_attribute("workflow.error_kind", outcome.error.kind.value)
                logger.warning(
                    "Transition rejected",
                    extra={
                        "request_id": request.id,
                        "error_kind": outcome.error.kind.value,
                        "error_field": outcome.error.field,
                        "error_message": outcome.error.message,
                        "actor_id": actor_id
                    }
                )

            return outcome

    def _decide(
        self,
        request: AssistanceRequest,
        target_status: Any,
        acting_role: Any,
        action: Any,
        command: TransitionCommand,
        actor_id: Optional[str],
        now: datetime
    ) -> TransitionOutcome:
        try:
            current = coerce_status(request.status)
            target = coerce_status(target_status)
            action = coerce_action(action)
        except WorkflowConfigurationError as e:
            return TransitionOutcome.failure(WorkflowError.from_configuration_error(e))

        # 1. Legality
        if not self.transitions.is_valid_transition(current, target):
            allowed = sorted(status.value for status in self.transitions.allowed_next(current))
            if self.catalog.is_terminal(current):
                message = f"Request is {current.value} and can no longer change status"
            else:
                message = f"Cannot move request from {current.value} to {target.value}"
            return TransitionOutcome.failure(
                WorkflowError.invalid_transition(message, allowed_next=allowed),
                current
            )

        # 2. Authorization
        try:
            role = coerce_role(acting_role)
        except WorkflowConfigurationError as e:
            return TransitionOutcome.failure(WorkflowError.from_configuration_error(e), current)

        authorization = self.permissions.check(role, action, current)
        if not authorization.allowed:
            return TransitionOutcome.failure(
                WorkflowError.forbidden(authorization.reason, role=role.value, action=action.value),
                current
            )

        rule = self.permissions.rule_for(action)
        if target not in rule.target_statuses:
            return TransitionOutcome.failure(
                WorkflowError.forbidden(
                    f"Action {action.value} cannot move a request to {target.value}",
                    action=action.value,
                    target=target.value
                ),
                current
            )

        if not is_staff_role(role) and actor_id is not None and not request.is_owned_by(actor_id):
            return TransitionOutcome.failure(
                WorkflowError.forbidden("Applicants may only act on their own requests", action=action.value),
                current
            )

        # 3. Data completeness
        changes, error = self._collect_changes(request, target, command, now)
        if error is not None:
            return TransitionOutcome.failure(error, current)

        # 4. Derived fields
        submitted_at = changes.get("submitted_at", request.submitted_at)
        approved_amount = changes.get("approved_amount", request.approved_amount)

        outcome = TransitionOutcome(
            success=True,
            previous_status=current,
            status=target,
            expected_version=request.version,
            decided_at=now,
            changed_by=actor_id,
            approved_amount=approved_amount,
            paid_amount=changes.get("paid_amount", request.paid_amount),
            assigned_to=changes.get("assigned_to", request.assigned_to),
            submitted_at=submitted_at,
            rejection_reason=changes.get("rejection_reason", request.rejection_reason),
            cancellation_reason=changes.get("cancellation_reason", request.cancellation_reason),
            review_notes=command.notes if command.notes is not None else request.review_notes,
            eligibility_score=changes.get("eligibility_score", request.eligibility_score),
            is_overdue=self.sla.is_overdue(
                submitted_at, request.urgency_level, target, request.priority, now=now
            ),
            sla_deadline=(
                self.sla.deadline(submitted_at, request.urgency_level, request.priority)
                if submitted_at is not None else None
            ),
            requires_supervisor_approval=(
                target == RequestStatus.APPROVED
                and self.eligibility.requires_supervisor_approval(approved_amount)
            ),
            history_entry=StatusHistoryEntry(
                status=target,
                previous_status=current,
                changed_at=now,
                changed_by=actor_id,
                role=role,
                action=action,
                reason=command.reason or self._default_reason(target, command),
                notes=command.notes
            )
        )
        return outcome

    def _collect_changes(
        self,
        request: AssistanceRequest,
        target: RequestStatus,
        command: TransitionCommand,
        now: datetime
    ) -> Tuple[Dict[str, Any], Optional[WorkflowError]]:
        """Validate target-specific data and return the field updates it implies."""
        changes: Dict[str, Any] = {}

        if target == RequestStatus.SUBMITTED:
            changes["submitted_at"] = now
            changes["eligibility_score"] = self.eligibility.score(
                command.base_user_score or 0,
                request.category,
                request.urgency_level,
                request.requested_amount
            )

        elif target == RequestStatus.UNDER_REVIEW:
            assignee = command.assigned_to or request.assigned_to
            if not assignee:
                return changes, WorkflowError.incomplete_data(
                    "assigned_to", "A case worker must be assigned before review starts"
                )
            changes["assigned_to"] = assignee

        elif target == RequestStatus.APPROVED:
            if command.approved_amount is None:
                return changes, WorkflowError.incomplete_data(
                    "approved_amount", "Approved amount is required to approve a request"
                )
            amount = to_decimal(command.approved_amount)
            if amount <= 0:
                return changes, WorkflowError.incomplete_data(
                    "approved_amount", "Approved amount must be greater than zero"
                )
            if amount > request.requested_amount:
                return changes, WorkflowError.incomplete_data(
                    "approved_amount",
                    "Approved amount cannot exceed requested amount",
                    requested_amount=str(request.requested_amount)
                )
            changes["approved_amount"] = amount

        elif target == RequestStatus.REJECTED:
            if command.rejection_category is None:
                return changes, WorkflowError.incomplete_data(
                    "rejection_category", "A rejection category is required"
                )
            if not (command.rejection_description or "").strip():
                return changes, WorkflowError.incomplete_data(
                    "rejection_description", "A rejection explanation is required"
                )
            changes["rejection_reason"] = RejectionReason(
                category=command.rejection_category,
                description=command.rejection_description
            )
            changes["approved_amount"] = None

        elif target == RequestStatus.CANCELLED:
            if not (command.cancellation_reason or "").strip():
                return changes, WorkflowError.incomplete_data(
                    "cancellation_reason", "A cancellation reason is required"
                )
            changes["cancellation_reason"] = command.cancellation_reason.strip()

        elif target == RequestStatus.EXPIRED:
            changes["approved_amount"] = None

        elif target in (RequestStatus.PARTIALLY_PAID, RequestStatus.PAID):
            error = self._check_payment(request, target, command)
            if error is not None:
                return changes, error
            changes["paid_amount"] = request.paid_amount + to_decimal(command.payment_amount)

        return changes, None

    def _check_payment(
        self,
        request: AssistanceRequest,
        target: RequestStatus,
        command: TransitionCommand
    ) -> Optional[WorkflowError]:
        if request.approved_amount is None:
            return WorkflowError.incomplete_data(
                "approved_amount", "Payment requires an approved amount"
            )
        if command.payment_amount is None:
            return WorkflowError.incomplete_data(
                "payment_amount", "Payment amount is required to record a payment"
            )

        payment = to_decimal(command.payment_amount)
        if payment <= 0:
            return WorkflowError.incomplete_data(
                "payment_amount", "Payment amount must be greater than zero"
            )

        total = request.paid_amount + payment
        outstanding = request.outstanding_amount()
        if total > request.approved_amount:
            return WorkflowError.incomplete_data(
                "payment_amount",
                "Payment exceeds the outstanding approved amount",
                outstanding_amount=str(outstanding)
            )
        if target == RequestStatus.PARTIALLY_PAID and total == request.approved_amount:
            return WorkflowError.incomplete_data(
                "payment_amount",
                "A payment settling the approved amount must mark the request as paid",
                outstanding_amount=str(outstanding)
            )
        if target == RequestStatus.PAID and total < request.approved_amount:
            return WorkflowError.incomplete_data(
                "payment_amount",
                "Payment must settle the outstanding approved amount",
                outstanding_amount=str(outstanding)
            )
        return None

    @staticmethod
    def _default_reason(target: RequestStatus, command: TransitionCommand) -> str:
        if target == RequestStatus.REJECTED and command.rejection_category is not None:
            return f"Request rejected: {command.rejection_category.value}"
        if target == RequestStatus.CANCELLED:
            return "Request cancelled"
        return f"Status changed to {target.value}"

    def apply(self, request: AssistanceRequest, outcome: TransitionOutcome) -> AssistanceRequest:
        """
        Build the updated request snapshot for a successful outcome.

        The input request is left untouched. The returned copy carries the
        new status, derived fields, history entry and an incremented version.

        Raises:
            ValueError: If the outcome failed or was decided against a different snapshot
        """
        if not outcome.success:
            raise ValueError("Cannot apply a rejected transition")
        if outcome.expected_version != request.version or outcome.previous_status != request.status:
            raise ValueError(
                f"Stale transition: decided against version {outcome.expected_version}, "
                f"request is at version {request.version}"
            )

        data = request.model_dump()
        data.update(outcome.changes())
        data["updated_by"] = outcome.changed_by or request.updated_by
        data["version"] = request.version + 1
        data["status_history"] = list(request.status_history) + [outcome.history_entry]

        return AssistanceRequest.model_validate(data)

    def available_transitions(
        self,
        request: AssistanceRequest,
        acting_role: Any
    ) -> List[Tuple[RequestStatus, WorkflowAction]]:
        """
        Legal and authorized next moves for a role, for gating UI affordances.

        Data completeness is not checked; the caller still gets an
        incomplete-data error if required fields are missing.
        """
        current = coerce_status(request.status)
        moves = []
        for target in sorted(self.transitions.allowed_next(current), key=list(RequestStatus).index):
            for action in self.permissions.actions_reaching(target):
                if self.permissions.can_perform(acting_role, action, current):
                    moves.append((target, action))
        return moves

    def is_overdue(self, request: AssistanceRequest, now: Optional[datetime] = None) -> bool:
        """Overdue flag for a stored request snapshot."""
        return self.sla.is_overdue(
            request.submitted_at, request.urgency_level, request.status, request.priority, now=now
        )
