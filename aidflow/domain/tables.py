# SPDX-License-Identifier: Apache-2.0

"""
Static lookup tables for the request workflow.

The tables are built once by ``build_default_tables`` and handed to each
component. Every map is a read-only ``MappingProxyType`` over frozen
records, so nothing downstream can mutate them.

Bonus weights, SLA hours and category limits come from the program's
business rules and are expected to change with policy; treat them as
configuration rather than engineering constants.
"""

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

from ..models.entities import (
    ActionRule,
    CategoryInfo,
    PriorityInfo,
    StatusInfo,
    UrgencyInfo
)
from ..models.enums import (
    PriorityLevel,
    RequestCategory,
    RequestStatus,
    UrgencyLevel,
    UserRole,
    WorkflowAction
)
from ..settings import Settings


S = RequestStatus
R = UserRole

STAFF_ROLES = frozenset({R.ADMIN, R.CASE_WORKER, R.FINANCE_MANAGER})
REVIEWER_ROLES = frozenset({R.ADMIN, R.CASE_WORKER})
ALL_ROLES = frozenset(R)

# Authoritative transition graph. approved -> rejected and approved -> expired
# cover funds clawed back or lapsing before disbursement.
TRANSITION_GRAPH = {
    S.DRAFT: (S.SUBMITTED, S.CANCELLED),
    S.SUBMITTED: (S.UNDER_REVIEW, S.PENDING_DOCS, S.CANCELLED, S.EXPIRED),
    S.UNDER_REVIEW: (S.APPROVED, S.REJECTED, S.PENDING_DOCS, S.EXPIRED),
    S.PENDING_DOCS: (S.UNDER_REVIEW, S.REJECTED, S.CANCELLED, S.EXPIRED),
    S.APPROVED: (S.PARTIALLY_PAID, S.PAID, S.REJECTED, S.EXPIRED),
    S.PARTIALLY_PAID: (S.PAID,),
    S.PAID: (),
    S.REJECTED: (),
    S.CANCELLED: (),
    S.EXPIRED: (),
}

STATUS_ROWS = (
    StatusInfo(status=S.DRAFT, label="Draft",
               description="Request is being prepared by the applicant",
               is_terminal=False, is_editable=True),
    StatusInfo(status=S.SUBMITTED, label="Submitted",
               description="Request has been submitted and awaiting assignment",
               is_terminal=False, is_editable=False),
    StatusInfo(status=S.UNDER_REVIEW, label="Under Review",
               description="Case worker is reviewing the request",
               is_terminal=False, is_editable=False),
    StatusInfo(status=S.PENDING_DOCS, label="Pending Documents",
               description="Additional documentation has been requested",
               is_terminal=False, is_editable=True),
    StatusInfo(status=S.APPROVED, label="Approved",
               description="Request has been approved and pending payment",
               is_terminal=False, is_editable=False),
    StatusInfo(status=S.PARTIALLY_PAID, label="Partially Paid",
               description="Partial payment has been processed",
               is_terminal=False, is_editable=False),
    StatusInfo(status=S.PAID, label="Paid",
               description="Full payment has been completed",
               is_terminal=True, is_editable=False),
    StatusInfo(status=S.REJECTED, label="Rejected",
               description="Request has been rejected",
               is_terminal=True, is_editable=False),
    StatusInfo(status=S.CANCELLED, label="Cancelled",
               description="Request was cancelled by the applicant",
               is_terminal=True, is_editable=False),
    StatusInfo(status=S.EXPIRED, label="Expired",
               description="Request has expired due to missed deadlines",
               is_terminal=True, is_editable=False),
)

CATEGORY_ROWS = (
    CategoryInfo(category=RequestCategory.EMERGENCY_ASSISTANCE, label="Emergency Assistance",
                 description="Urgent financial assistance for emergencies",
                 max_amount=Decimal("50000"), eligibility_bonus=15,
                 required_documents=("emergency_proof", "income_proof", "id_document")),
    CategoryInfo(category=RequestCategory.EDUCATIONAL_SUPPORT, label="Educational Support",
                 description="Support for educational expenses and fees",
                 max_amount=Decimal("30000"), eligibility_bonus=5,
                 required_documents=("enrollment_proof", "fee_schedule", "income_proof", "academic_records")),
    CategoryInfo(category=RequestCategory.MEDICAL_ASSISTANCE, label="Medical Assistance",
                 description="Assistance for medical treatments and healthcare",
                 max_amount=Decimal("100000"), eligibility_bonus=12,
                 required_documents=("medical_records", "doctor_referral", "treatment_plan", "income_proof")),
    CategoryInfo(category=RequestCategory.HOUSING_SUPPORT, label="Housing Support",
                 description="Support for housing and accommodation needs",
                 max_amount=Decimal("80000"), eligibility_bonus=8,
                 required_documents=("lease_agreement", "utility_bills", "income_proof", "family_composition")),
    CategoryInfo(category=RequestCategory.FOOD_ASSISTANCE, label="Food Assistance",
                 description="Food and nutrition support for households",
                 max_amount=Decimal("15000"), eligibility_bonus=10,
                 required_documents=("family_composition", "income_proof", "nutritional_assessment")),
    CategoryInfo(category=RequestCategory.EMPLOYMENT_SUPPORT, label="Employment Support",
                 description="Training and job-search support",
                 max_amount=Decimal("25000"), eligibility_bonus=3,
                 required_documents=("unemployment_proof", "training_enrollment", "skills_assessment")),
    CategoryInfo(category=RequestCategory.ELDERLY_CARE, label="Elderly Care",
                 description="Care support for elderly applicants",
                 max_amount=Decimal("40000"), eligibility_bonus=6,
                 required_documents=("age_verification", "care_assessment", "medical_records")),
    CategoryInfo(category=RequestCategory.DISABILITY_SUPPORT, label="Disability Support",
                 description="Support for applicants living with a disability",
                 max_amount=Decimal("60000"), eligibility_bonus=8,
                 required_documents=("disability_certificate", "medical_assessment", "care_plan")),
    CategoryInfo(category=RequestCategory.OTHER, label="Other",
                 description="Requests outside the standard programs",
                 max_amount=Decimal("20000"), eligibility_bonus=0,
                 required_documents=("supporting_documentation", "justification_letter")),
)

URGENCY_ROWS = (
    UrgencyInfo(level=UrgencyLevel.ROUTINE, label="Routine", rank=1, sla_hours=168, eligibility_bonus=0),
    UrgencyInfo(level=UrgencyLevel.IMPORTANT, label="Important", rank=2, sla_hours=72, eligibility_bonus=2),
    UrgencyInfo(level=UrgencyLevel.URGENT, label="Urgent", rank=3, sla_hours=24, eligibility_bonus=5),
    UrgencyInfo(level=UrgencyLevel.CRITICAL, label="Critical", rank=4, sla_hours=4, eligibility_bonus=10),
)

PRIORITY_ROWS = (
    PriorityInfo(level=PriorityLevel.LOW, label="Low", rank=1, sla_hours=240),
    PriorityInfo(level=PriorityLevel.NORMAL, label="Normal", rank=2, sla_hours=120),
    PriorityInfo(level=PriorityLevel.HIGH, label="High", rank=3, sla_hours=48),
    PriorityInfo(level=PriorityLevel.URGENT, label="Urgent", rank=4, sla_hours=24),
)

A = WorkflowAction

ACTION_ROWS = (
    ActionRule(action=A.CREATE_REQUEST, description="Create new request",
               roles=frozenset({R.USER})),
    ActionRule(action=A.SUBMIT_REQUEST, description="Submit request for review",
               roles=frozenset({R.USER}),
               statuses=frozenset({S.DRAFT}),
               target_statuses=frozenset({S.SUBMITTED})),
    ActionRule(action=A.VIEW_OWN_REQUESTS, description="View own requests",
               roles=frozenset({R.USER})),
    ActionRule(action=A.VIEW_ALL_REQUESTS, description="View all requests in system",
               roles=STAFF_ROLES),
    ActionRule(action=A.ASSIGN_REQUEST, description="Assign request to case worker",
               roles=REVIEWER_ROLES,
               statuses=frozenset({S.SUBMITTED, S.UNDER_REVIEW}),
               target_statuses=frozenset({S.UNDER_REVIEW})),
    ActionRule(action=A.REVIEW_REQUEST, description="Review and approve/reject request",
               roles=REVIEWER_ROLES,
               statuses=frozenset({S.SUBMITTED, S.UNDER_REVIEW, S.PENDING_DOCS, S.APPROVED}),
               target_statuses=frozenset({S.UNDER_REVIEW, S.APPROVED, S.REJECTED})),
    ActionRule(action=A.REQUEST_DOCUMENTS, description="Request additional documents",
               roles=REVIEWER_ROLES,
               statuses=frozenset({S.SUBMITTED, S.UNDER_REVIEW}),
               target_statuses=frozenset({S.PENDING_DOCS})),
    ActionRule(action=A.VERIFY_DOCUMENTS, description="Verify uploaded documents",
               roles=REVIEWER_ROLES,
               statuses=frozenset({S.UNDER_REVIEW, S.PENDING_DOCS}),
               target_statuses=frozenset({S.UNDER_REVIEW})),
    ActionRule(action=A.PROCESS_PAYMENT, description="Process payment to beneficiary",
               roles=frozenset({R.ADMIN, R.FINANCE_MANAGER}),
               statuses=frozenset({S.APPROVED, S.PARTIALLY_PAID}),
               target_statuses=frozenset({S.PARTIALLY_PAID, S.PAID})),
    ActionRule(action=A.CANCEL_REQUEST, description="Cancel the request",
               roles=frozenset({R.USER, R.ADMIN}),
               statuses=frozenset({S.DRAFT, S.SUBMITTED, S.UNDER_REVIEW, S.PENDING_DOCS}),
               target_statuses=frozenset({S.CANCELLED})),
    ActionRule(action=A.ADD_COMMENT, description="Add comment to request",
               roles=ALL_ROLES,
               statuses=frozenset({S.SUBMITTED, S.UNDER_REVIEW, S.PENDING_DOCS, S.APPROVED})),
    ActionRule(action=A.UPLOAD_DOCUMENTS, description="Upload supporting documents",
               roles=frozenset({R.USER, R.ADMIN, R.CASE_WORKER}),
               statuses=frozenset({S.DRAFT, S.PENDING_DOCS})),
    ActionRule(action=A.VIEW_DASHBOARD_STATS, description="View dashboard statistics",
               roles=STAFF_ROLES),
    ActionRule(action=A.EXPORT_REQUESTS, description="Export requests data",
               roles=STAFF_ROLES),
    ActionRule(action=A.EXPIRE_REQUEST, description="Expire a request past its deadline",
               roles=frozenset({R.ADMIN}),
               statuses=frozenset({S.SUBMITTED, S.UNDER_REVIEW, S.PENDING_DOCS, S.APPROVED}),
               target_statuses=frozenset({S.EXPIRED})),
)

# (exclusive upper bound, bonus); amounts at or above the last bound get nothing
AMOUNT_BONUS_TIERS = (
    (Decimal("5000"), 5),
    (Decimal("10000"), 2),
)

# Happy path used for progress display
PROGRESS_PATH = (S.DRAFT, S.SUBMITTED, S.UNDER_REVIEW, S.APPROVED, S.PAID)


@dataclass(frozen=True)
class WorkflowTables:
    """Read-only bundle of every lookup table the engine consults."""
    statuses: Mapping[RequestStatus, StatusInfo]
    transitions: Mapping[RequestStatus, FrozenSet[RequestStatus]]
    categories: Mapping[RequestCategory, CategoryInfo]
    urgencies: Mapping[UrgencyLevel, UrgencyInfo]
    priorities: Mapping[PriorityLevel, PriorityInfo]
    actions: Mapping[WorkflowAction, ActionRule]
    amount_bonus_tiers: Tuple[Tuple[Decimal, int], ...]
    progress_path: Tuple[RequestStatus, ...]
    supervisor_approval_threshold: Decimal
    minimum_eligibility_score: int
    maximum_eligibility_score: int = 100
    critical_estimate_buffer: float = 1.2
    default_estimate_buffer: float = 1.5


def _freeze(rows, key: str) -> Mapping:
    return MappingProxyType({getattr(row, key): row for row in rows})


def build_default_tables(settings: Optional[Settings] = None) -> WorkflowTables:
    """
    Build the workflow lookup tables.

    Args:
        settings: Runtime settings supplying the tunable thresholds

    Returns:
        Immutable WorkflowTables instance
    """
    settings = settings or Settings()

    return WorkflowTables(
        statuses=_freeze(STATUS_ROWS, "status"),
        transitions=MappingProxyType({
            status: frozenset(targets) for status, targets in TRANSITION_GRAPH.items()
        }),
        categories=_freeze(CATEGORY_ROWS, "category"),
        urgencies=_freeze(URGENCY_ROWS, "level"),
        priorities=_freeze(PRIORITY_ROWS, "level"),
        actions=_freeze(ACTION_ROWS, "action"),
        amount_bonus_tiers=AMOUNT_BONUS_TIERS,
        progress_path=PROGRESS_PATH,
        supervisor_approval_threshold=settings.supervisor_approval_threshold,
        minimum_eligibility_score=settings.minimum_eligibility_score
    )
