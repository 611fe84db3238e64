import csv
import io

import pytest

from conftest import USER


def _seed_world(db):
    acme = db.seed("clients", {"user_id": USER["id"], "name": "Acme", "color_hex": "#111111", "status": "active"})
    beta = db.seed("clients", {"user_id": USER["id"], "name": "Beta", "color_hex": "#222222", "status": "active"})
    dormant = db.seed("clients", {"user_id": USER["id"], "name": "Dormant", "status": "inactive"})
    site = db.seed("projects", {
        "user_id": USER["id"], "client_id": acme["id"], "name": "Website", "color_hex": "#3B82F6", "status": "active",
    })
    db.seed(
        "subscriptions",
        {"user_id": USER["id"], "service_name": "Figma", "cost": 120, "billing_cycle": "annual", "status": "active",
         "client_id": acme["id"], "project_id": site["id"], "category": "design"},
        {"user_id": USER["id"], "service_name": "Hosting", "cost": 15, "billing_cycle": "quarterly", "status": "active",
         "client_id": beta["id"], "category": "infrastructure"},
        {"user_id": USER["id"], "service_name": "Paused", "cost": 500, "billing_cycle": "monthly", "status": "paused",
         "client_id": acme["id"], "project_id": site["id"]},
    )
    db.seed("lifetime_deals", {
        "user_id": USER["id"], "service_name": "Icons LTD", "original_cost": 49, "purchase_date": "2025-01-01",
        "status": "active", "client_id": acme["id"], "project_id": site["id"], "category": "design",
    })
    return acme, beta, dormant, site


def test_client_list_defaults_to_active(client, db) -> None:
    _seed_world(db)
    assert [c["name"] for c in client.get("/api/v1/clients").json()] == ["Acme", "Beta"]
    everyone = client.get("/api/v1/clients", params={"status": "all"}).json()
    assert [c["name"] for c in everyone] == ["Acme", "Beta", "Dormant"]


def test_client_crud_logs_activity(client, db) -> None:
    created = client.post("/api/v1/clients", json={"name": "Gamma", "email": "ops@gamma.io"})
    assert created.status_code == 201
    assert created.json()["color_hex"] == "#6366f1"
    client_id = created.json()["id"]

    updated = client.put(f"/api/v1/clients/{client_id}", json={"status": "inactive"})
    assert updated.json()["status"] == "inactive"
    assert client.delete(f"/api/v1/clients/{client_id}").status_code == 204
    assert client.get(f"/api/v1/clients/{client_id}").status_code == 404

    descriptions = [log["description"] for log in db.tables["activity_logs"]]
    assert descriptions == ["Created client: Gamma", "Updated client: Gamma", "Deleted client: Gamma"]


def test_client_rejects_bad_colour(client) -> None:
    assert client.post("/api/v1/clients", json={"name": "X", "color_hex": "red"}).status_code == 422


def test_clients_with_costs(client, db) -> None:
    _seed_world(db)
    rows = {c["name"]: c for c in client.get("/api/v1/clients/costs").json()}
    assert set(rows) == {"Acme", "Beta"}
    assert rows["Acme"]["monthly_cost"] == pytest.approx(10.0)
    assert rows["Acme"]["annual_cost"] == pytest.approx(120.0)
    assert rows["Acme"]["subscription_count"] == 1
    assert rows["Acme"]["lifetime_deal_count"] == 1
    assert rows["Beta"]["monthly_cost"] == pytest.approx(5.0)


def test_client_cost_breakdown_and_profitability(client, db) -> None:
    acme, *_ = _seed_world(db)
    rows = client.get("/api/v1/clients/cost-breakdown", params={"client_id": acme["id"]}).json()
    assert [(r["service_name"], r["billing_cycle"]) for r in rows] == [("Figma", "annual"), ("Icons LTD", "one-time")]

    ranked = client.get("/api/v1/clients/profitability").json()
    assert [r["name"] for r in ranked] == ["Acme", "Beta"]
    assert ranked[0]["lifetime_deal_investment"] == 49


def test_costs_refresh_after_subscription_change(client, db) -> None:
    acme, *_ = _seed_world(db)
    before = {c["name"]: c["monthly_cost"] for c in client.get("/api/v1/clients/costs").json()}
    client.post("/api/v1/subscriptions", json={
        "service_name": "Slack", "cost": 5, "next_billing_date": "2025-01-01", "client_id": acme["id"],
    })
    after = {c["name"]: c["monthly_cost"] for c in client.get("/api/v1/clients/costs").json()}
    assert after["Acme"] == pytest.approx(before["Acme"] + 5)


def test_project_defaults_and_client_join(client, db) -> None:
    acme, *_ = _seed_world(db)
    created = client.post("/api/v1/projects", json={"name": "Rebrand", "client_id": acme["id"]})
    assert created.status_code == 201
    assert created.json()["color_hex"] == "#3B82F6"
    assert created.json()["client_name"] == "Acme"

    only_acme = client.get("/api/v1/projects", params={"client_id": acme["id"]}).json()
    assert [p["name"] for p in only_acme] == ["Rebrand", "Website"]


def test_projects_with_costs(client, db) -> None:
    _seed_world(db)
    (website,) = client.get("/api/v1/projects/costs").json()
    assert website["client_name"] == "Acme"
    assert website["client_color"] == "#111111"
    assert website["monthly_cost"] == pytest.approx(10.0)
    assert website["lifetime_deal_investment"] == 49


def test_project_breakdown_csv(client, db) -> None:
    *_, site = _seed_world(db)
    resp = client.get(f"/api/v1/projects/{site['id']}/cost-breakdown/export")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="Website-cost-breakdown.csv"' in resp.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0] == [
        "Service Name", "Type", "Cost", "Billing Cycle", "Category", "Monthly Equivalent", "Annual Equivalent",
    ]
    assert rows[1] == ["Figma", "subscription", "120.00", "annual", "design", "10.00", "120.00"]
    assert rows[2] == ["Icons LTD", "lifetime_deal", "49.00", "one-time", "design", "0.00", "0.00"]


def test_unknown_project_breakdown_is_404(client) -> None:
    assert client.get("/api/v1/projects/missing/cost-breakdown").status_code == 404
