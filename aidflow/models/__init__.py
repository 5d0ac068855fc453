# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the request workflow.
"""

# Base models
from .base import BaseEntity, LookupRecord, generate_object_id, utc_now

# Enumerations
from .enums import (
    RequestStatus,
    RequestCategory,
    UrgencyLevel,
    PriorityLevel,
    UserRole,
    WorkflowAction,
    RejectionCategory,
    WorkflowErrorKind
)

# Core entities
from .entities import (
    StatusInfo,
    CategoryInfo,
    UrgencyInfo,
    PriorityInfo,
    ActionRule,
    RejectionReason,
    StatusHistoryEntry,
    AssistanceRequest
)

# Commands
from .commands import TransitionCommand

__all__ = [
    # Base models
    "BaseEntity",
    "LookupRecord",
    "generate_object_id",
    "utc_now",
    
    # Enumerations
    "RequestStatus",
    "RequestCategory",
    "UrgencyLevel",
    "PriorityLevel",
    "UserRole",
    "WorkflowAction",
    "RejectionCategory",
    "WorkflowErrorKind",
    
    # Core entities
    "StatusInfo",
    "CategoryInfo",
    "UrgencyInfo",
    "PriorityInfo",
    "ActionRule",
    "RejectionReason",
    "StatusHistoryEntry",
    "AssistanceRequest",
    
    # Commands
    "TransitionCommand"
]
