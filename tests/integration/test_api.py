"""Integration tests for API endpoints"""

import uuid
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from debt_planner.infrastructure.database.repositories import PlanRepository

pytestmark = pytest.mark.integration


@pytest.fixture
def debts_payload() -> list[dict]:
    return [
        {"id": "store", "name": "Store Card", "balance_cents": 45000, "apr": "24.99", "min_payment_cents": 3500},
        {"id": "medical", "name": "Medical Bill", "balance_cents": 62000, "apr": "0", "min_payment_cents": 2500},
        {"id": "visa", "name": "Visa", "balance_cents": 180000, "apr": "22.49", "min_payment_cents": 5500, "due_day": 12},
    ]


@pytest.fixture
def plan_settings_payload() -> dict:
    return {"strategy": "snowball", "extra_monthly_cents": 20000, "one_time_extra_cents": 100000, "start_date": "2025-01-15"}


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "debt_planner_simulations_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"

    response = client.get("/health")
    assert uuid.UUID(response.headers["X-Request-ID"])


def test_simulate_endpoint(client: TestClient, debts_payload, plan_settings_payload):
    """Test POST /v1/simulate with a converging plan"""
    response = client.post("/v1/simulate", json={"debts": debts_payload, "settings": plan_settings_payload})

    assert response.status_code == 200
    data = response.json()
    assert data["strategy"] == "snowball"
    assert data["start_date"] == "2025-01-15"
    assert data["horizon_exceeded"] is False
    assert data["totals"]["months_to_debt_free"] == len(data["months"])
    assert data["debt_free_date"] == data["months"][-1]["date"]
    assert data["settings"]["max_months"] == 600

    first = data["months"][0]
    assert first["month_index"] == 0
    # Month one pays every minimum plus both extras
    assert first["totals"]["outflow_cents"] == 3500 + 2500 + 5500 + 20000 + 100000
    # Snowball: smallest balance first
    assert [p["debt_id"] for p in first["payments"]] == ["store", "medical", "visa"]


def test_simulate_empty_plan(client: TestClient):
    response = client.post("/v1/simulate", json={"debts": [], "settings": {"start_date": "2025-01-15"}})

    assert response.status_code == 200
    data = response.json()
    assert data["months"] == []
    assert data["totals"]["interest_cents"] == 0
    assert data["totals"]["total_paid_cents"] == 0
    assert data["totals"]["months_to_debt_free"] == 0


def test_simulate_horizon_exceeded_is_not_an_error(client: TestClient):
    debts = [{"id": "x", "name": "Underwater", "balance_cents": 1000000, "apr": "30", "min_payment_cents": 1000}]
    response = client.post("/v1/simulate", json={"debts": debts, "settings": {"max_months": 12}})

    assert response.status_code == 200
    data = response.json()
    assert data["horizon_exceeded"] is True
    assert len(data["months"]) == 12
    assert data["totals"]["months_to_debt_free"] is None


def test_simulate_rejects_invalid_input(client: TestClient, debts_payload):
    negative = [{**debts_payload[0], "balance_cents": -1}]
    response = client.post("/v1/simulate", json={"debts": negative})
    assert response.status_code == 422

    duplicated = [debts_payload[0], debts_payload[0]]
    response = client.post("/v1/simulate", json={"debts": duplicated})
    assert response.status_code == 422
    assert "Duplicate" in response.json()["detail"]

    response = client.post("/v1/simulate", json={"debts": debts_payload, "settings": {"max_months": 5000}})
    assert response.status_code == 422

    response = client.post("/v1/simulate", json={"debts": debts_payload, "settings": {"strategy": "fastest"}})
    assert response.status_code == 422


def test_compare_endpoint(client: TestClient, debts_payload):
    response = client.post(
        "/v1/compare",
        json={"debts": debts_payload, "settings": {"extra_monthly_cents": 20000}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["snowball"]["strategy"] == "snowball"
    assert data["avalanche"]["strategy"] == "avalanche"
    assert data["minimum"]["strategy"] == "minimum"
    assert data["snowball_vs_minimum"]["months_saved"] > 0
    assert data["avalanche_vs_minimum"]["interest_saved_cents"] > 0
    assert data["avalanche"]["totals"]["interest_cents"] <= data["snowball"]["totals"]["interest_cents"]


def test_normalize_endpoint(client: TestClient):
    rows = [
        {"id": "visa", "name": "Visa", "balance": "$1,800.00", "apr": "22.49%", "minPayment": "55"},
        {"name": "Medical", "balance": 620, "apr": 0, "min_payment": 25, "include": "no"},
    ]
    response = client.post("/v1/debts/normalize", json={"rows": rows})

    assert response.status_code == 200
    debts = response.json()["debts"]
    assert debts[0]["balance_cents"] == 180000
    assert debts[0]["min_payment_cents"] == 5500
    assert debts[0]["apr"] == "22.49"
    assert debts[1]["include"] is False
    assert debts[1]["name"] == "Medical"


def test_normalize_endpoint_rejects_bad_rows(client: TestClient):
    response = client.post("/v1/debts/normalize", json={"rows": [{"balance": "abc", "apr": 5, "min_payment": 1}]})
    assert response.status_code == 422
    assert response.json()["detail"].startswith("Row 1:")

    response = client.post("/v1/debts/normalize", json={"rows": [{"balance": 100, "apr": "150%", "min_payment": 1}]})
    assert response.status_code == 422


def test_create_and_reload_plan(client: TestClient, debts_payload, plan_settings_payload):
    """Reloading stored inputs re-simulates to the identical schedule"""
    response = client.post(
        "/v1/plans",
        json={"user_id": "user_1", "name": "Spring plan", "debts": debts_payload, "settings": plan_settings_payload},
    )
    assert response.status_code == 201
    created = response.json()

    response = client.get(f"/v1/plans/{created['plan_id']}")
    assert response.status_code == 200
    loaded = response.json()

    assert loaded["result"] == created["result"]
    assert [d["id"] for d in loaded["debts"]] == ["store", "medical", "visa"]
    assert loaded["debts"][2]["due_day"] == 12
    assert loaded["name"] == "Spring plan"


def test_create_plan_pins_start_date(client: TestClient, debts_payload):
    response = client.post("/v1/plans", json={"user_id": "user_1", "debts": debts_payload})
    assert response.status_code == 201
    created = response.json()

    loaded = client.get(f"/v1/plans/{created['plan_id']}").json()
    assert loaded["result"]["start_date"] == created["result"]["start_date"]


def test_list_plans(client: TestClient, debts_payload):
    client.post("/v1/plans", json={"user_id": "user_1", "debts": debts_payload})
    client.post("/v1/plans", json={"user_id": "user_1", "debts": debts_payload, "settings": {"strategy": "avalanche"}})
    client.post("/v1/plans", json={"user_id": "user_2", "debts": debts_payload})

    response = client.get("/v1/plans", params={"user_id": "user_1"})
    assert response.status_code == 200
    plans = response.json()["plans"]
    assert len(plans) == 2
    assert {p["strategy"] for p in plans} == {"snowball", "avalanche"}


def test_get_plan_errors(client: TestClient):
    assert client.get("/v1/plans/not-a-uuid").status_code == 400
    assert client.get(f"/v1/plans/{uuid.uuid4()}").status_code == 404


def test_snapshot_round_trip(client: TestClient, debts_payload, plan_settings_payload):
    """A stored snapshot is reproduced exactly by re-simulation"""
    plan_id = client.post(
        "/v1/plans", json={"user_id": "user_1", "debts": debts_payload, "settings": plan_settings_payload}
    ).json()["plan_id"]

    assert client.get(f"/v1/plans/{plan_id}/snapshots/latest").status_code == 404

    response = client.post(f"/v1/plans/{plan_id}/snapshots")
    assert response.status_code == 201

    response = client.get(f"/v1/plans/{plan_id}/snapshots/latest")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == 2
    assert data["stored_version"] == 2
    assert data["matches_current"] is True


def test_legacy_snapshot_is_migrated_on_read(client: TestClient, db: Session, debts_payload, plan_settings_payload):
    plan_id = client.post(
        "/v1/plans", json={"user_id": "user_1", "debts": debts_payload, "settings": plan_settings_payload}
    ).json()["plan_id"]

    legacy = {
        "strategy": "snowball",
        "startDateISO": "2025-01-15",
        "months": [
            {
                "monthIndex": 0,
                "payments": [{"debtId": "store", "paid": 35.0, "interest": 9.37, "principal": 25.63, "balanceEnd": 424.37}],
            }
        ],
    }
    PlanRepository(db).save_snapshot(uuid.UUID(plan_id), 1, legacy)
    db.commit()

    response = client.get(f"/v1/plans/{plan_id}/snapshots/latest")
    assert response.status_code == 200
    data = response.json()
    assert data["stored_version"] == 1
    assert data["version"] == 2
    assert data["plan"]["months"][0]["payments"][0]["ending_balance_cents"] == 42437
    assert data["matches_current"] is False


def test_corrupt_snapshot_returns_conflict(client: TestClient, db: Session, debts_payload, plan_settings_payload):
    plan_id = client.post(
        "/v1/plans", json={"user_id": "user_1", "debts": debts_payload, "settings": plan_settings_payload}
    ).json()["plan_id"]

    repo = PlanRepository(db)
    repo.save_snapshot(uuid.UUID(plan_id), 1, {"startDateISO": "not-a-date", "months": []})
    db.commit()
    response = client.get(f"/v1/plans/{plan_id}/snapshots/latest")
    assert response.status_code == 409
    assert "start date" in response.json()["detail"]

    repo.save_snapshot(uuid.UUID(plan_id), 2, {"version": 2, "plan": {"strategy": "snowball"}})
    db.commit()
    response = client.get(f"/v1/plans/{plan_id}/snapshots/latest")
    assert response.status_code == 409


def test_snapshot_write_failure_rolls_back(client: TestClient, monkeypatch, debts_payload, plan_settings_payload):
    plan_id = client.post(
        "/v1/plans", json={"user_id": "user_1", "debts": debts_payload, "settings": plan_settings_payload}
    ).json()["plan_id"]

    def failing_save(self, plan_id, version, payload):
        raise RuntimeError("disk full")

    monkeypatch.setattr(PlanRepository, "save_snapshot", failing_save)
    response = client.post(f"/v1/plans/{plan_id}/snapshots")
    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"

    monkeypatch.undo()
    assert client.get(f"/v1/plans/{plan_id}/snapshots/latest").status_code == 404
    # Session is still usable after the rollback
    assert client.post(f"/v1/plans/{plan_id}/snapshots").status_code == 201
