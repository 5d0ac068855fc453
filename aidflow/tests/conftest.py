# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from bson import ObjectId

from aidflow.domain.catalog import StatusCatalog
from aidflow.domain.eligibility import EligibilityScorer
from aidflow.domain.permissions import PermissionPolicy
from aidflow.domain.sla import SLACalculator
from aidflow.domain.tables import build_default_tables
from aidflow.domain.transitions import TransitionTable
from aidflow.domain.workflow import WorkflowEngine
from aidflow.models.entities import AMOUNT_BEARING_STATUSES, ASSIGNED_STATUSES, AssistanceRequest, RejectionReason
from aidflow.models.enums import RejectionCategory, RequestStatus
from aidflow.settings import Settings

# Set test environment
os.environ['ENVIRONMENT'] = 'test'


@pytest.fixture(scope="session")
def settings():
    """Default settings for testing."""
    return Settings(environment="test", otel_enabled=False)


@pytest.fixture(scope="session")
def tables(settings):
    """Workflow lookup tables."""
    return build_default_tables(settings)


@pytest.fixture
def catalog(tables):
    return StatusCatalog(tables)


@pytest.fixture
def transitions(tables, catalog):
    return TransitionTable(tables, catalog)


@pytest.fixture
def policy(tables, catalog):
    return PermissionPolicy(tables, catalog)


@pytest.fixture
def scorer(tables):
    return EligibilityScorer(tables)


@pytest.fixture
def sla(tables, catalog):
    return SLACalculator(tables, catalog)


@pytest.fixture
def engine(tables):
    """Workflow engine over the default tables."""
    return WorkflowEngine(tables)


@pytest.fixture
def applicant_id():
    return str(ObjectId())


@pytest.fixture
def case_worker_id():
    return str(ObjectId())


@pytest.fixture
def fixed_now():
    """Fixed decision time for deterministic SLA checks."""
    return datetime(2025, 7, 21, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_request(applicant_id, case_worker_id, fixed_now):
    """
    Factory for requests in any status.
    
    Fills in the fields each status requires so the model invariants hold.
    """
    def _make(status=RequestStatus.DRAFT, **overrides):
        status = RequestStatus(status)
        data = {
            "applicant_id": applicant_id,
            "created_by": applicant_id,
            "title": "Rent arrears after job loss",
            "status": status,
            "category": "housing_support",
            "urgency_level": "important",
            "requested_amount": Decimal("1000"),
        }
        
        if status != RequestStatus.DRAFT:
            data["submitted_at"] = fixed_now - timedelta(hours=1)
        if status in ASSIGNED_STATUSES:
            data["assigned_to"] = case_worker_id
        if status in AMOUNT_BEARING_STATUSES:
            data["approved_amount"] = Decimal("800")
        if status == RequestStatus.PARTIALLY_PAID:
            data["paid_amount"] = Decimal("300")
        if status == RequestStatus.PAID:
            data["paid_amount"] = Decimal("800")
        if status == RequestStatus.REJECTED:
            data["rejection_reason"] = RejectionReason(
                category=RejectionCategory.NOT_ELIGIBLE,
                description="Household income above program limit"
            )
        if status == RequestStatus.CANCELLED:
            data["cancellation_reason"] = "No longer needed"
        
        data.update(overrides)
        return AssistanceRequest(**data)
    
    return _make
