# SPDX-License-Identifier: Apache-2.0

"""
SLA deadline calculation.

The deadline uses the stricter of the urgency and priority SLAs. The
estimated completion date is a display-only forecast and is never used to
decide whether a request is overdue.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ..models.base import utc_now
from ..models.enums import UrgencyLevel
from .catalog import StatusCatalog, coerce_priority, coerce_urgency
from .tables import WorkflowTables


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class SLACalculator:
    """Deadline and overdue computations over the injected tables."""
    
    def __init__(self, tables: WorkflowTables, catalog: StatusCatalog):
        self.tables = tables
        self.catalog = catalog
    
    def sla_hours(self, urgency: Any, priority: Any = None) -> int:
        """Governing SLA in hours: the smaller of the two axes."""
        urgency_hours = self.tables.urgencies[coerce_urgency(urgency)].sla_hours
        priority_hours = self.tables.priorities[coerce_priority(priority)].sla_hours
        return min(urgency_hours, priority_hours)
    
    def deadline(self, submitted_at: datetime, urgency: Any, priority: Any = None) -> datetime:
        """
        SLA deadline for a request.
        
        Args:
            submitted_at: Submission timestamp
            urgency: Urgency level
            priority: Priority level, defaults to normal
            
        Returns:
            Timezone-aware deadline
        """
        return as_utc(submitted_at) + timedelta(hours=self.sla_hours(urgency, priority))
    
    def is_overdue(
        self,
        submitted_at: Optional[datetime],
        urgency: Any,
        current_status: Any,
        priority: Any = None,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Whether a request has passed its SLA deadline.
        
        Resolved requests are never overdue, and neither are requests that
        have not been submitted yet.
        """
        if self.catalog.is_terminal(current_status):
            return False
        if submitted_at is None:
            return False
        
        now = as_utc(now) if now is not None else utc_now()
        return now > self.deadline(submitted_at, urgency, priority)
    
    def time_remaining(
        self,
        submitted_at: Optional[datetime],
        urgency: Any,
        current_status: Any,
        priority: Any = None,
        now: Optional[datetime] = None
    ) -> Optional[timedelta]:
        """Time left before the deadline; negative once overdue, None when not tracked."""
        if self.catalog.is_terminal(current_status) or submitted_at is None:
            return None
        
        now = as_utc(now) if now is not None else utc_now()
        return self.deadline(submitted_at, urgency, priority) - now
    
    def estimated_completion(self, submitted_at: datetime, urgency: Any, priority: Any = None) -> datetime:
        """
        Forecast completion date for display.
        
        Averages the urgency and priority SLA hours and applies a buffer
        (1.2 for critical urgency, 1.5 otherwise).
        """
        urgency = coerce_urgency(urgency)
        urgency_hours = self.tables.urgencies[urgency].sla_hours
        priority_hours = self.tables.priorities[coerce_priority(priority)].sla_hours
        
        buffer = (
            self.tables.critical_estimate_buffer
            if urgency == UrgencyLevel.CRITICAL
            else self.tables.default_estimate_buffer
        )
        total_hours = (urgency_hours + priority_hours) / 2 * buffer
        
        return as_utc(submitted_at) + timedelta(hours=total_hours)
