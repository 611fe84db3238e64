from datetime import date, timedelta

import pytest

from bizsubs.core.billing import calculate_next_billing_date
from conftest import USER

API = "/api/v1/subscriptions"


def _seed_subscription(db, **overrides):
    row = {
        "user_id": USER["id"],
        "service_name": "Notion",
        "cost": 10.0,
        "billing_cycle": "monthly",
        "start_date": None,
        "next_billing_date": (date.today() + timedelta(days=5)).isoformat(),
        "category": "software",
        "status": "active",
        "currency": "USD",
        "business_expense": True,
        "tax_deductible": True,
        "tax_rate": 30.0,
    }
    row.update(overrides)
    return db.seed("subscriptions", row)


def test_create_derives_next_billing_date_and_profile_tax_rate(client, db) -> None:
    db.seed("users", {"id": USER["id"], "email": USER["email"], "tax_rate": 22.0})
    start = date.today() - timedelta(days=10)

    resp = client.post(API, json={
        "service_name": "Figma",
        "cost": 15,
        "billing_cycle": "monthly",
        "start_date": start.isoformat(),
    })

    assert resp.status_code == 201
    body = resp.json()
    assert body["next_billing_date"] == calculate_next_billing_date(start, "monthly", date.today()).isoformat()
    assert body["tax_rate"] == 22.0
    assert body["user_id"] == USER["id"]
    logs = db.tables["activity_logs"]
    assert [log["description"] for log in logs] == ["Created subscription: Figma"]


def test_create_rejects_start_date_outside_one_year(client) -> None:
    resp = client.post(API, json={
        "service_name": "Ancient",
        "cost": 5,
        "start_date": (date.today() - timedelta(days=400)).isoformat(),
    })
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Start date cannot be more than one year ago"


def test_create_requires_a_billing_anchor(client) -> None:
    resp = client.post(API, json={"service_name": "Nothing", "cost": 5})
    assert resp.status_code == 422


@pytest.mark.parametrize("value", ["2025-8-4", "2025-08-04T00:00:00", "04/08/2025"])
def test_dates_must_be_plain_iso(client, db, value) -> None:
    resp = client.post(API, json={"service_name": "Loose", "cost": 5, "next_billing_date": value})
    assert resp.status_code == 422

    sub = _seed_subscription(db)
    assert client.put(f"{API}/{sub['id']}", json={"start_date": value}).status_code == 422


def test_create_survives_activity_log_failure(client, db) -> None:
    db.failing_tables.add("activity_logs")
    resp = client.post(API, json={
        "service_name": "Zoom",
        "cost": 12,
        "next_billing_date": date.today().isoformat(),
        "tax_rate": 0,
    })
    assert resp.status_code == 201
    assert resp.json()["tax_rate"] == 0


def test_list_filters_orders_and_flattens_joins(client, db) -> None:
    acme = db.seed("clients", {"user_id": USER["id"], "name": "Acme", "color_hex": "#ff0000", "status": "active"})
    _seed_subscription(db, service_name="Later", next_billing_date="2099-01-01", client_id=acme["id"])
    _seed_subscription(db, service_name="Sooner", next_billing_date="2098-01-01")
    _seed_subscription(db, service_name="Stopped", status="cancelled")
    _seed_subscription(db, service_name="Not mine", user_id="someone-else")

    resp = client.get(API, params={"status": "active"})
    assert [s["service_name"] for s in resp.json()] == ["Sooner", "Later"]
    later = resp.json()[1]
    assert later["client_name"] == "Acme"
    assert later["client_color"] == "#ff0000"

    everything = client.get(API, params={"status": "all"}).json()
    assert {s["service_name"] for s in everything} == {"Sooner", "Later", "Stopped"}


def test_list_reflects_writes_despite_cache(client) -> None:
    assert client.get(API).json() == []
    client.post(API, json={"service_name": "Canva", "cost": 12, "next_billing_date": date.today().isoformat()})
    assert [s["service_name"] for s in client.get(API).json()] == ["Canva"]


def test_cancelling_stamps_today(client, db) -> None:
    sub = _seed_subscription(db)
    resp = client.put(f"{API}/{sub['id']}", json={"status": "cancelled"})
    assert resp.status_code == 200
    assert resp.json()["cancelled_date"] == date.today().isoformat()


def test_changing_cycle_recalculates_next_billing_date(client, db) -> None:
    start = date.today() - timedelta(days=3)
    sub = _seed_subscription(db, start_date=start.isoformat())
    resp = client.put(f"{API}/{sub['id']}", json={"billing_cycle": "annual"})
    assert resp.json()["next_billing_date"] == calculate_next_billing_date(start, "annual", date.today()).isoformat()


def test_explicit_null_unassigns_client(client, db) -> None:
    acme = db.seed("clients", {"user_id": USER["id"], "name": "Acme", "status": "active"})
    sub = _seed_subscription(db, client_id=acme["id"])
    resp = client.put(f"{API}/{sub['id']}", json={"client_id": None})
    assert resp.json()["client_id"] is None
    assert resp.json()["client_name"] is None


def test_delete_then_missing(client, db) -> None:
    sub = _seed_subscription(db)
    assert client.delete(f"{API}/{sub['id']}").status_code == 204
    assert client.get(f"{API}/{sub['id']}").status_code == 404
    assert client.delete(f"{API}/{sub['id']}").status_code == 404


def test_other_users_subscription_is_not_found(client, db) -> None:
    sub = _seed_subscription(db, user_id="someone-else")
    assert client.get(f"{API}/{sub['id']}").status_code == 404


def test_cost_summary(client, db) -> None:
    start = date.today() - timedelta(days=3)
    sub = _seed_subscription(db, cost=120, billing_cycle="annual", start_date=start.isoformat(), tax_rate=50)

    body = client.get(f"{API}/{sub['id']}/cost-summary").json()

    assert body["monthly_equivalent"] == 10.0
    assert body["annual_equivalent"] == 120.0
    assert body["current_period_amount"] == pytest.approx(3 / 365.25 * 120)
    assert body["pro_rated_tax_savings"] <= 120 * 0.5
    assert body["accumulated_cost"] == pytest.approx(3 / 30.44 * 10)
