"""
Budget calculations for event plans and collaborations.

Everything here is a pure function over documents and the provider
catalog, so routers can call it directly and tests need no database.

A selected provider is stored on the event as::

    {"id", "name", "category", "image", "price", "originalPrice",
     "isPerPerson", "offerId", "offerName"}

where ``price`` is the effective cost (per-person offers already
multiplied by the guest count) and ``originalPrice`` is the offer price.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from plannora.models.budget import (
    BudgetImpact,
    BudgetSuggestion,
    BudgetSummary,
    SelectionAction,
)
from plannora.models.provider import Offer, Provider, ProviderCategory
from plannora.services import catalog

EVENT_ALERT_PERCENT = 90
COLLABORATION_ALERT_PERCENT = 80
ALTERNATIVE_PRICE_RATIO = 0.7
MAX_ALTERNATIVES = 3
MAX_COLLABORATION_SUGGESTIONS = 3
DEFAULT_VENDOR_PRICE = 1000

# (category, share of budget the cheapest option may take, advice)
CATEGORY_GUIDANCE = [
    (ProviderCategory.VENUE, 0.4, "Consider allocating 40-50% of your budget for a venue"),
    (ProviderCategory.CATERING, 0.3, "Plan around ${price} per person for catering"),
    (ProviderCategory.MUSIC, 0.15, "Music typically costs 10-15% of your total budget"),
    (ProviderCategory.PHOTOGRAPHY, 0.1, "Photography usually takes up 10-12% of your budget"),
]

_NUMBER = re.compile(r"\d+")


def format_money(amount: float) -> str:
    """Render an amount the way the UI shows it: 1500 -> '1,500'."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


# ============================================================================
# Event Budget
# ============================================================================


def calculate_total(selected: Iterable[Dict[str, Any]]) -> float:
    """Sum of the effective prices of the selected providers."""
    return sum(_number(item.get("price")) for item in selected)


def percent_of(total: float, budget: float) -> float:
    """Share of the budget used, 0 when no budget is set."""
    return total / budget * 100 if budget > 0 else 0.0


def generate_suggestions(
    budget: float,
    guest_count: int,
    selected: List[Dict[str, Any]],
) -> List[BudgetSuggestion]:
    """
    Advice for the core categories the plan does not cover yet.

    A category is flagged when even its cheapest provider would take more
    than the usual share of the budget.

    Args:
        budget: Event budget
        guest_count: Number of guests
        selected: Selected providers

    Returns:
        Suggestions in venue, catering, music, photography order
    """
    if budget <= 0 or guest_count <= 0:
        return []

    chosen = {item.get("category") for item in selected}
    suggestions = []

    for category, share, advice in CATEGORY_GUIDANCE:
        if category.value in chosen:
            continue
        cheapest = catalog.cheapest_price(category)
        if cheapest is None:
            continue

        cost = cheapest * guest_count if category == ProviderCategory.CATERING else cheapest
        if cost > budget * share:
            suggestions.append(
                BudgetSuggestion(
                    category=category.value,
                    suggestion=advice.format(price=format_money(cheapest)),
                    min_price=cost,
                )
            )

    return suggestions


def summarize_event(event: Dict[str, Any]) -> BudgetSummary:
    """
    Budget summary for an event document.

    Args:
        event: Event document

    Returns:
        BudgetSummary with totals, alert flag and suggestions
    """
    budget = _number(event.get("budget"))
    guest_count = int(_number(event.get("guestCount")))
    selected = event.get("selectedProviders") or []

    total = calculate_total(selected)
    percent = percent_of(total, budget)

    return BudgetSummary(
        budget=budget,
        current_total=total,
        budget_remaining=budget - total,
        percent_used=round(percent, 2),
        is_over_budget=budget > 0 and total > budget,
        show_budget_alert=bool(selected) and budget > 0 and percent > EVENT_ALERT_PERCENT,
        suggestions=generate_suggestions(budget, guest_count, selected),
    )


def find_alternatives(
    category: ProviderCategory,
    max_price: float,
    excluded_ids: Iterable[str] = (),
) -> List[Provider]:
    """
    Cheaper providers of the same category.

    Args:
        category: Category to search
        max_price: Highest acceptable base price
        excluded_ids: Provider ids to skip (typically those already selected)

    Returns:
        Up to three providers, best rated first
    """
    excluded = set(excluded_ids)
    candidates = [
        provider for provider in catalog.list_providers(category=category)
        if provider.price <= max_price and provider.id not in excluded
    ]
    candidates.sort(key=lambda provider: provider.rating, reverse=True)
    return candidates[:MAX_ALTERNATIVES]


def alternatives_for(event: Dict[str, Any], provider: Provider) -> List[Provider]:
    """
    Affordable alternatives for a provider that does not fit the budget.

    The provider's cost is taken from the event selection when present,
    otherwise from the catalog. Nothing is suggested when no budget is set
    or the provider fits into what remains of it.
    """
    budget = _number(event.get("budget"))
    selected = event.get("selectedProviders") or []
    selection = next((item for item in selected if item.get("id") == provider.id), None)

    if selection is not None:
        cost = _number(selection.get("price"))
        unit_price = _number(selection.get("originalPrice")) or cost
        remaining = budget - (calculate_total(selected) - cost)
    else:
        guest_count = int(_number(event.get("guestCount")))
        unit_price = provider.price
        cost = provider.price * guest_count if provider.is_per_person else provider.price
        remaining = budget - calculate_total(selected)

    if budget <= 0 or cost <= remaining:
        return []

    return find_alternatives(
        provider.category,
        unit_price * ALTERNATIVE_PRICE_RATIO,
        excluded_ids=[item.get("id") for item in selected],
    )


# ============================================================================
# Selection Changes
# ============================================================================


def build_selection(provider: Provider, offer: Offer, guest_count: int) -> Dict[str, Any]:
    """Selected-provider entry for an offer."""
    price = offer.price * guest_count if provider.is_per_person else offer.price
    return {
        "id": provider.id,
        "name": provider.name,
        "category": provider.category.value,
        "image": provider.image,
        "price": price,
        "originalPrice": offer.price,
        "isPerPerson": provider.is_per_person,
        "offerId": offer.id,
        "offerName": offer.name,
    }


def toggle_selection(
    event: Dict[str, Any],
    provider: Provider,
    offer: Offer,
) -> Tuple[List[Dict[str, Any]], Optional[BudgetImpact], List[Provider]]:
    """
    Apply an offer choice to the event's selection.

    Choosing the offer that is already selected removes the provider,
    choosing a different offer of a selected provider switches package,
    and anything else adds the provider.

    Args:
        event: Event document
        provider: Catalog provider
        offer: Chosen offer

    Returns:
        Tuple of (new selection list, budget impact or None, alternatives)
    """
    selected = [dict(item) for item in (event.get("selectedProviders") or [])]
    guest_count = int(_number(event.get("guestCount")))
    budget = _number(event.get("budget"))
    entry = build_selection(provider, offer, guest_count)
    label = f"{provider.name} - {offer.name}"

    existing = next((item for item in selected if item.get("id") == provider.id), None)

    if existing is not None and existing.get("offerId") == offer.id:
        selected = [item for item in selected if item.get("id") != provider.id]
        impact = BudgetImpact(
            provider_id=provider.id,
            provider_name=provider.name,
            action=SelectionAction.REMOVE,
            offer_name=offer.name,
            impact=(
                f"Removing {label} will free up "
                f"${format_money(_number(existing.get('price')))} from your budget."
            ),
            is_positive=True,
        )
        return selected, impact, []

    if existing is not None:
        existing.update(
            price=entry["price"],
            originalPrice=entry["originalPrice"],
            offerId=entry["offerId"],
            offerName=entry["offerName"],
        )
        impact = BudgetImpact(
            provider_id=provider.id,
            provider_name=provider.name,
            action=SelectionAction.CHANGE,
            offer_name=offer.name,
            impact=f"Changed {provider.name} package to {offer.name}.",
            is_positive=True,
        )
        return selected, impact, []

    new_total = calculate_total(selected) + entry["price"]
    remaining = budget - new_total
    selected.append(entry)

    if budget <= 0:
        return selected, None, []

    alternatives: List[Provider] = []
    if remaining < 0:
        message = f"Adding {label} will put you ${format_money(abs(remaining))} over budget."
        alternatives = find_alternatives(
            provider.category,
            offer.price * ALTERNATIVE_PRICE_RATIO,
            excluded_ids=[item.get("id") for item in selected],
        )
    else:
        message = f"Adding {label} will use {percent_of(new_total, budget):.1f}% of your budget."

    impact = BudgetImpact(
        provider_id=provider.id,
        provider_name=provider.name,
        action=SelectionAction.ADD,
        offer_name=offer.name,
        impact=message,
        is_positive=remaining >= 0,
    )
    return selected, impact, alternatives


def remove_selection(
    event: Dict[str, Any],
    provider_id: str,
) -> Tuple[List[Dict[str, Any]], Optional[BudgetImpact]]:
    """
    Drop a provider from the event's selection.

    Returns:
        Tuple of (new selection list, impact or None when it was not selected)
    """
    selected = list(event.get("selectedProviders") or [])
    existing = next((item for item in selected if item.get("id") == provider_id), None)
    if existing is None:
        return selected, None

    name = existing.get("name", provider_id)
    offer_name = existing.get("offerName")
    label = f"{name} - {offer_name}" if offer_name else name
    impact = BudgetImpact(
        provider_id=provider_id,
        provider_name=name,
        action=SelectionAction.REMOVE,
        offer_name=offer_name,
        impact=(
            f"Removing {label} will free up "
            f"${format_money(_number(existing.get('price')))} from your budget."
        ),
        is_positive=True,
    )
    return [item for item in selected if item.get("id") != provider_id], impact


# ============================================================================
# Collaboration Budget
# ============================================================================


def parse_price_range(price_range: Optional[str]) -> List[int]:
    """Numbers found in a price range label such as '$1,000 - $2,500'."""
    if not price_range:
        return []
    return [int(match) for match in _NUMBER.findall(price_range.replace(",", ""))]


def vendor_cost(vendor: Dict[str, Any]) -> float:
    """Estimated cost of a vendor: midpoint of its price range."""
    numbers = parse_price_range(vendor.get("priceRange"))
    if len(numbers) >= 2:
        return (numbers[0] + numbers[1]) / 2
    return DEFAULT_VENDOR_PRICE


def summarize_collaboration(
    budget: float,
    collaboration_vendors: List[Dict[str, Any]],
    directory: List[Dict[str, Any]],
) -> BudgetSummary:
    """
    Budget summary for a collaboration's shared vendor list.

    Only booked vendors count toward the total.

    Args:
        budget: Budget of the collaboration's event
        collaboration_vendors: Collaboration vendor entries with a populated ``vendor``
        directory: Vendor directory used for category suggestions

    Returns:
        BudgetSummary
    """
    booked = [entry for entry in collaboration_vendors if entry.get("status") == "booked"]
    total = sum(vendor_cost(entry.get("vendor") or {}) for entry in booked)
    percent = percent_of(total, budget)
    over = budget > 0 and total > budget

    booked_categories = {(entry.get("vendor") or {}).get("category") for entry in booked}
    suggestions = []
    for category in dict.fromkeys(vendor.get("category") for vendor in directory):
        if not category or category in booked_categories:
            continue
        prices = []
        for vendor in directory:
            if vendor.get("category") == category:
                numbers = parse_price_range(vendor.get("priceRange"))
                prices.append(numbers[0] if numbers else DEFAULT_VENDOR_PRICE)
        suggestions.append(
            BudgetSuggestion(
                category=category,
                suggestion=f"Consider adding {category} vendors to complete your event",
                min_price=min(prices),
            )
        )
        if len(suggestions) == MAX_COLLABORATION_SUGGESTIONS:
            break

    return BudgetSummary(
        budget=budget,
        current_total=total,
        budget_remaining=budget - total,
        percent_used=round(percent, 2),
        is_over_budget=over,
        show_budget_alert=percent > COLLABORATION_ALERT_PERCENT and not over,
        suggestions=suggestions,
    )
