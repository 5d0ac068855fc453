# SPDX-License-Identifier: Apache-2.0

"""
Eligibility scoring for assistance requests.

The score is an advisory signal combining the applicant's base score with
category, urgency and amount weights. It never gates a transition.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional, Tuple

from ..models.entities import AssistanceRequest, CategoryInfo, UrgencyInfo
from .catalog import coerce_category, coerce_urgency
from .tables import WorkflowTables


def to_decimal(value: Any) -> Decimal:
    """Convert a numeric value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass
class EligibilityAssessment:
    """Score plus the display signals derived alongside it."""
    score: int
    meets_minimum: bool
    requires_supervisor_approval: bool
    exceeds_category_maximum: bool
    missing_documents: List[str] = None
    
    def __post_init__(self):
        if self.missing_documents is None:
            self.missing_documents = []


class EligibilityScorer:
    """Pure eligibility score calculator over the injected tables."""
    
    def __init__(self, tables: WorkflowTables):
        self.tables = tables
    
    def category_info(self, category: Any) -> CategoryInfo:
        return self.tables.categories[coerce_category(category)]
    
    def urgency_info(self, urgency: Any) -> UrgencyInfo:
        return self.tables.urgencies[coerce_urgency(urgency)]
    
    def amount_bonus(self, requested_amount: Any) -> int:
        """Bonus for smaller requests: the first tier whose bound exceeds the amount."""
        amount = to_decimal(requested_amount)
        for upper_bound, bonus in self.tables.amount_bonus_tiers:
            if amount < upper_bound:
                return bonus
        return 0
    
    def score(self, base_user_score: Any, category: Any, urgency: Any, requested_amount: Any) -> int:
        """
        Compute the eligibility score for a request.
        
        Args:
            base_user_score: Applicant's baseline score
            category: Request category
            urgency: Declared urgency level
            requested_amount: Amount requested
            
        Returns:
            Integer score clamped to [0, 100]
        """
        total = to_decimal(base_user_score or 0)
        total += self.category_info(category).eligibility_bonus
        total += self.urgency_info(urgency).eligibility_bonus
        total += self.amount_bonus(requested_amount)
        
        clamped = min(max(total, Decimal(0)), Decimal(self.tables.maximum_eligibility_score))
        return int(clamped.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    
    def required_documents(self, category: Any) -> Tuple[str, ...]:
        """Supporting documents a category requires."""
        return self.category_info(category).required_documents
    
    def missing_documents(self, category: Any, provided: Iterable[str]) -> List[str]:
        """Required documents not present in ``provided``, in requirement order."""
        provided_set = set(provided or ())
        return [doc for doc in self.required_documents(category) if doc not in provided_set]
    
    def meets_minimum(self, score: int) -> bool:
        return score >= self.tables.minimum_eligibility_score
    
    def requires_supervisor_approval(self, amount: Any) -> bool:
        """Whether an amount is large enough to need supervisor sign-off."""
        return to_decimal(amount) > self.tables.supervisor_approval_threshold
    
    def exceeds_category_maximum(self, category: Any, amount: Any) -> bool:
        return to_decimal(amount) > self.category_info(category).max_amount
    
    def assess(
        self,
        request: AssistanceRequest,
        base_user_score: Any = 0,
        provided_documents: Optional[Iterable[str]] = None
    ) -> EligibilityAssessment:
        """
        Score a request and derive its display signals.
        
        Args:
            request: Request snapshot
            base_user_score: Applicant's baseline score
            provided_documents: Identifiers of documents already uploaded
            
        Returns:
            EligibilityAssessment for the request
        """
        amount = request.approved_amount or request.requested_amount
        score = self.score(base_user_score, request.category, request.urgency_level, request.requested_amount)
        
        return EligibilityAssessment(
            score=score,
            meets_minimum=self.meets_minimum(score),
            requires_supervisor_approval=self.requires_supervisor_approval(amount),
            exceeds_category_maximum=self.exceeds_category_maximum(request.category, request.requested_amount),
            missing_documents=self.missing_documents(request.category, provided_documents or ())
        )
