# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Command models carrying the data that accompanies a transition attempt.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from .enums import RejectionCategory


class TransitionCommand(BaseModel):
    """
    Supporting data for a status transition.
    
    Which fields are required depends on the target status; the workflow
    engine reports missing ones as incomplete data rather than failing
    validation here.
    """
    
    model_config = ConfigDict(frozen=True)
    
    approved_amount: Optional[Decimal] = Field(None, description="Amount to approve")
    payment_amount: Optional[Decimal] = Field(None, description="Amount disbursed by this payment")
    assigned_to: Optional[str] = Field(None, description="Case worker to assign")
    rejection_category: Optional[RejectionCategory] = Field(None, description="Rejection category")
    rejection_description: Optional[str] = Field(None, max_length=1000, description="Rejection explanation")
    cancellation_reason: Optional[str] = Field(None, max_length=500, description="Reason for cancelling")
    notes: Optional[str] = Field(None, max_length=2000, description="Reviewer notes")
    reason: Optional[str] = Field(None, max_length=500, description="Free-form reason for the history entry")
    base_user_score: Optional[int] = Field(None, ge=0, le=100, description="Applicant baseline score used when scoring on submission")
