"""Cost roll-ups for clients and projects over already-fetched subscription and lifetime deal rows."""

from typing import Any, Dict, Iterable, List, Optional

from bizsubs.core.billing import annual_equivalent, monthly_equivalent


def _is_active(row: Dict[str, Any]) -> bool:
    return row.get("status") == "active"


def rollup_costs(
    entities: Iterable[Dict[str, Any]],
    subscriptions: Iterable[Dict[str, Any]],
    lifetime_deals: Iterable[Dict[str, Any]],
    fk: str,
) -> List[Dict[str, Any]]:
    """Attach monthly/annual cost and item counts to each entity.

    fk is the column linking items to the entity ("client_id" or "project_id").
    Only active subscriptions and active lifetime deals count.
    """
    subscriptions = list(subscriptions)
    lifetime_deals = list(lifetime_deals)
    result = []
    for entity in entities:
        entity_id = entity["id"]
        subs = [s for s in subscriptions if s.get(fk) == entity_id and _is_active(s)]
        deals = [d for d in lifetime_deals if d.get(fk) == entity_id and _is_active(d)]
        result.append({
            **entity,
            "monthly_cost": sum(monthly_equivalent(s["cost"], s.get("billing_cycle")) for s in subs),
            "annual_cost": sum(annual_equivalent(s["cost"], s.get("billing_cycle")) for s in subs),
            "subscription_count": len(subs),
            "lifetime_deal_count": len(deals),
            "lifetime_deal_investment": sum(float(d.get("original_cost") or 0) for d in deals),
        })
    return result


def cost_breakdown(
    entities: Iterable[Dict[str, Any]],
    subscriptions: Iterable[Dict[str, Any]],
    lifetime_deals: Iterable[Dict[str, Any]],
    fk: str,
    entity_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """One row per active subscription or lifetime deal assigned to the entities.

    Lifetime deals are one-time costs and contribute nothing to monthly/annual totals.
    """
    by_id = {e["id"]: e for e in entities if entity_id is None or e["id"] == entity_id}
    rows = []
    for sub in subscriptions:
        owner = by_id.get(sub.get(fk))
        if owner is None or not _is_active(sub):
            continue
        rows.append({
            "entity_id": owner["id"],
            "entity_name": owner["name"],
            "entity_color": owner.get("color_hex"),
            "service_name": sub["service_name"],
            "service_type": "subscription",
            "cost": float(sub["cost"]),
            "billing_cycle": sub.get("billing_cycle"),
            "status": sub.get("status"),
            "category": sub.get("category"),
            "monthly_equivalent": monthly_equivalent(sub["cost"], sub.get("billing_cycle")),
            "annual_equivalent": annual_equivalent(sub["cost"], sub.get("billing_cycle")),
        })
    for deal in lifetime_deals:
        owner = by_id.get(deal.get(fk))
        if owner is None or not _is_active(deal):
            continue
        rows.append({
            "entity_id": owner["id"],
            "entity_name": owner["name"],
            "entity_color": owner.get("color_hex"),
            "service_name": deal["service_name"],
            "service_type": "lifetime_deal",
            "cost": float(deal["original_cost"]),
            "billing_cycle": "one-time",
            "status": deal.get("status"),
            "category": deal.get("category"),
            "monthly_equivalent": 0.0,
            "annual_equivalent": 0.0,
        })
    rows.sort(key=lambda r: ((r["entity_name"] or "").lower(), (r["service_name"] or "").lower()))
    return rows


def profitability(costed_entities: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Add per-subscription averages to rolled-up entities, most expensive first."""
    rows = []
    for entity in costed_entities:
        count = entity["subscription_count"]
        avg = entity["monthly_cost"] / count if count > 0 else 0.0
        rows.append({
            **entity,
            "avg_monthly_per_subscription": avg,
            "cost_efficiency_score": avg,
        })
    rows.sort(key=lambda r: r["monthly_cost"], reverse=True)
    return rows
