# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the assistance request workflow.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from .base import BaseEntity, LookupRecord, utc_now
from .enums import (
    RequestStatus,
    RequestCategory,
    UrgencyLevel,
    PriorityLevel,
    UserRole,
    WorkflowAction,
    RejectionCategory
)


AMOUNT_BEARING_STATUSES = frozenset({
    RequestStatus.APPROVED,
    RequestStatus.PARTIALLY_PAID,
    RequestStatus.PAID
})

ASSIGNED_STATUSES = frozenset({
    RequestStatus.UNDER_REVIEW,
    RequestStatus.APPROVED,
    RequestStatus.PARTIALLY_PAID,
    RequestStatus.PAID
})

# Statuses a request can hold without ever having been submitted
UNSUBMITTED_STATUSES = frozenset({
    RequestStatus.DRAFT,
    RequestStatus.CANCELLED
})


class StatusInfo(LookupRecord):
    """Display metadata and lifecycle flags for a request status."""
    
    status: RequestStatus
    label: str
    description: str
    is_terminal: bool
    is_editable: bool


class CategoryInfo(LookupRecord):
    """Program limits and scoring weight for a request category."""
    
    category: RequestCategory
    label: str
    description: str
    max_amount: Decimal = Field(..., gt=0)
    required_documents: Tuple[str, ...]
    eligibility_bonus: int


class UrgencyInfo(LookupRecord):
    """SLA and scoring weight for an urgency level."""
    
    level: UrgencyLevel
    label: str
    rank: int
    sla_hours: int = Field(..., gt=0)
    eligibility_bonus: int


class PriorityInfo(LookupRecord):
    """SLA for a staff queue priority."""
    
    level: PriorityLevel
    label: str
    rank: int
    sla_hours: int = Field(..., gt=0)


class ActionRule(LookupRecord):
    """
    Permission rule for a workflow action.
    
    An empty ``statuses`` set means the action does not depend on the
    request status. ``target_statuses`` lists the statuses the action may
    move a request into; actions with none never change status.
    """
    
    action: WorkflowAction
    description: str
    roles: frozenset[UserRole]
    statuses: frozenset[RequestStatus] = frozenset()
    target_statuses: frozenset[RequestStatus] = frozenset()


class RejectionReason(BaseModel):
    """Structured reason recorded when a request is rejected."""
    
    category: RejectionCategory = Field(..., description="Rejection category")
    description: str = Field(..., min_length=1, max_length=1000, description="Explanation shown to the applicant")
    
    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        """Validate rejection description."""
        if not v.strip():
            raise ValueError('Rejection description cannot be empty')
        return v.strip()


class StatusHistoryEntry(BaseModel):
    """One status change in the request timeline."""
    
    model_config = ConfigDict(frozen=True)
    
    status: RequestStatus = Field(..., description="Status entered")
    previous_status: Optional[RequestStatus] = Field(None, description="Status left")
    changed_at: datetime = Field(default_factory=utc_now, description="Change timestamp")
    changed_by: Optional[str] = Field(None, description="User ID who made the change")
    role: Optional[UserRole] = Field(None, description="Role the change was made under")
    action: Optional[WorkflowAction] = Field(None, description="Action that triggered the change")
    reason: Optional[str] = Field(None, description="Reason for the change")
    notes: Optional[str] = Field(None, description="Free-form reviewer notes")


class AssistanceRequest(BaseEntity):
    """Social-assistance request under workflow control."""
    
    applicant_id: str = Field(..., description="Applicant user ID")
    title: Optional[str] = Field(None, max_length=200, description="Short request title")
    status: RequestStatus = Field(default=RequestStatus.DRAFT, description="Workflow status")
    category: RequestCategory = Field(..., description="Assistance category")
    urgency_level: UrgencyLevel = Field(default=UrgencyLevel.ROUTINE, description="Declared urgency")
    priority: Optional[PriorityLevel] = Field(None, description="Staff queue priority")
    requested_amount: Decimal = Field(..., gt=0, description="Amount requested by the applicant")
    approved_amount: Optional[Decimal] = Field(None, gt=0, description="Amount approved by review")
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0, description="Amount disbursed so far")
    submitted_at: Optional[datetime] = Field(None, description="Submission timestamp")
    assigned_to: Optional[str] = Field(None, description="Assigned case worker user ID")
    rejection_reason: Optional[RejectionReason] = Field(None, description="Reason for rejection")
    cancellation_reason: Optional[str] = Field(None, max_length=500, description="Reason for cancellation")
    review_notes: Optional[str] = Field(None, description="Latest reviewer notes")
    eligibility_score: Optional[int] = Field(None, ge=0, le=100, description="Eligibility score at submission")
    status_history: List[StatusHistoryEntry] = Field(default_factory=list, description="Status timeline")
    version: int = Field(default=1, ge=1, description="Optimistic concurrency version")
    
    @model_validator(mode='after')
    def validate_status_invariants(self):
        """Validate status-dependent fields."""
        if self.approved_amount is not None:
            if self.status not in AMOUNT_BEARING_STATUSES:
                raise ValueError('approved_amount is only allowed once a request is approved')
            if self.approved_amount > self.requested_amount:
                raise ValueError('approved_amount cannot exceed requested_amount')
        
        if self.status in AMOUNT_BEARING_STATUSES and self.approved_amount is None:
            raise ValueError(f'approved_amount is required when status is {self.status.value}')
        
        if self.paid_amount > 0:
            if self.approved_amount is None or self.paid_amount > self.approved_amount:
                raise ValueError('paid_amount cannot exceed approved_amount')
        
        if self.status in ASSIGNED_STATUSES and not self.assigned_to:
            raise ValueError(f'assigned_to is required when status is {self.status.value}')
        
        if self.status not in UNSUBMITTED_STATUSES and self.submitted_at is None:
            raise ValueError(f'submitted_at is required when status is {self.status.value}')
        
        if self.status == RequestStatus.REJECTED and self.rejection_reason is None:
            raise ValueError('Rejection reason is required when status is rejected')
        
        if self.status == RequestStatus.CANCELLED and not self.cancellation_reason:
            raise ValueError('Cancellation reason is required when status is cancelled')
        
        return self
    
    def is_owned_by(self, user_id: Optional[str]) -> bool:
        """Check if the given user is the applicant."""
        return user_id is not None and user_id == self.applicant_id
    
    def outstanding_amount(self) -> Decimal:
        """Approved amount not yet disbursed."""
        if self.approved_amount is None:
            return Decimal("0")
        return self.approved_amount - self.paid_amount
