# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the assistance request workflow.
"""

from enum import Enum


class RequestStatus(str, Enum):
    """Assistance request workflow status enumeration."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    PENDING_DOCS = "pending_docs"
    APPROVED = "approved"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class RequestCategory(str, Enum):
    """Assistance program categories."""
    EMERGENCY_ASSISTANCE = "emergency_assistance"
    EDUCATIONAL_SUPPORT = "educational_support"
    MEDICAL_ASSISTANCE = "medical_assistance"
    HOUSING_SUPPORT = "housing_support"
    FOOD_ASSISTANCE = "food_assistance"
    EMPLOYMENT_SUPPORT = "employment_support"
    ELDERLY_CARE = "elderly_care"
    DISABILITY_SUPPORT = "disability_support"
    OTHER = "other"


class UrgencyLevel(str, Enum):
    """Applicant-declared urgency, ordered by severity."""
    ROUTINE = "routine"
    IMPORTANT = "important"
    URGENT = "urgent"
    CRITICAL = "critical"


class PriorityLevel(str, Enum):
    """Staff queue priority."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class UserRole(str, Enum):
    """Platform roles."""
    USER = "user"
    CASE_WORKER = "case_worker"
    FINANCE_MANAGER = "finance_manager"
    ADMIN = "admin"


class WorkflowAction(str, Enum):
    """Actions gated by the permission policy."""
    CREATE_REQUEST = "create_request"
    SUBMIT_REQUEST = "submit_request"
    VIEW_OWN_REQUESTS = "view_own_requests"
    VIEW_ALL_REQUESTS = "view_all_requests"
    ASSIGN_REQUEST = "assign_request"
    REVIEW_REQUEST = "review_request"
    REQUEST_DOCUMENTS = "request_documents"
    VERIFY_DOCUMENTS = "verify_documents"
    PROCESS_PAYMENT = "process_payment"
    CANCEL_REQUEST = "cancel_request"
    ADD_COMMENT = "add_comment"
    UPLOAD_DOCUMENTS = "upload_documents"
    VIEW_DASHBOARD_STATS = "view_dashboard_stats"
    EXPORT_REQUESTS = "export_requests"
    EXPIRE_REQUEST = "expire_request"


class RejectionCategory(str, Enum):
    """Reasons a request may be rejected."""
    INSUFFICIENT_DOCUMENTS = "insufficient_documents"
    NOT_ELIGIBLE = "not_eligible"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_REQUEST = "duplicate_request"
    POLICY_VIOLATION = "policy_violation"
    OTHER = "other"


class WorkflowErrorKind(str, Enum):
    """Kinds of workflow rejection."""
    UNKNOWN_STATUS = "unknown_status"
    UNKNOWN_ACTION = "unknown_action"
    INVALID_TRANSITION = "invalid_transition"
    FORBIDDEN = "forbidden"
    INCOMPLETE_DATA = "incomplete_data"
    UNKNOWN_VALUE = "unknown_value"
