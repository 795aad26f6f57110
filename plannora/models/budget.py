"""
Budget insight schemas.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from plannora.models.common import CamelModel


class BudgetSuggestion(CamelModel):
    """Advice for a category that is not covered yet."""

    category: str
    suggestion: str
    min_price: float = Field(..., description="Cheapest known cost for the category")


class BudgetSummary(CamelModel):
    """Where an event (or collaboration) stands against its budget."""

    budget: float
    current_total: float
    budget_remaining: float
    percent_used: float
    is_over_budget: bool
    show_budget_alert: bool
    suggestions: List[BudgetSuggestion] = Field(default_factory=list)


class SelectionAction(str, Enum):
    ADD = "add"
    CHANGE = "change"
    REMOVE = "remove"


class BudgetImpact(CamelModel):
    """Effect of a provider selection change on the budget."""

    provider_id: str
    provider_name: str
    action: SelectionAction
    impact: str
    is_positive: bool
    offer_name: Optional[str] = None
