"""Integration tests for API endpoints"""

from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient


def _optimize_body(snapshot_payload: dict, **extra) -> dict:
    return {"user_id": "user_1", **snapshot_payload, **extra}


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "cashflow_optimization_total" in response.text


@patch("cashflow_gateway.infrastructure.clients.ledger.LedgerClient.send_settlement_event", new_callable=AsyncMock)
def test_optimize_endpoint(mock_ledger: AsyncMock, client: TestClient, snapshot_payload: dict):
    """Test POST /v1/optimize returns the greedy plan and notifies the ledger"""
    response = client.post("/v1/optimize", json=_optimize_body(snapshot_payload))

    assert response.status_code == 200
    data = response.json()
    assert data["original_count"] == 3
    assert data["optimized_count"] == 2
    assert data["savings"] == 1
    assert [(s["from_id"], s["to_id"], s["amount"]) for s in data["settlements"]] == [
        ("A", "B", 100.0),
        ("A", "C", 50.0),
    ]
    assert data["settlements"][0]["from_name"] == "Alpha Bank"
    assert {b["bank_id"]: b["amount"] for b in data["net_balances"]} == {"A": -150.0, "B": 100.0, "C": 50.0}
    assert "unsettled" not in data
    assert data["run_id"]

    mock_ledger.assert_awaited_once()
    payload = mock_ledger.await_args.args[0]
    assert payload["event"] == "SETTLEMENT_PLAN_CREATED"
    assert payload["run_id"] == data["run_id"]
    assert len(payload["settlements"]) == 2


@patch("cashflow_gateway.infrastructure.clients.ledger.LedgerClient.send_settlement_event", new_callable=AsyncMock)
def test_optimize_reports_unsettled_on_request(mock_ledger: AsyncMock, client: TestClient):
    """Test incompatible banks: empty plan, no webhook, leftovers listed"""
    body = {
        "user_id": "user_1",
        "banks": [
            {"id": "A", "name": "Alpha Bank", "payment_types": ["WIRE"]},
            {"id": "B", "name": "Beta Bank", "payment_types": ["UPI"]},
        ],
        "transactions": [{"debtor": "A", "creditor": "B", "amount": 100}],
        "report_unsettled": True,
    }

    response = client.post("/v1/optimize", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["settlements"] == []
    assert data["savings"] == 1
    assert [(u["bank_id"], u["amount"]) for u in data["unsettled"]] == [("A", -100.0), ("B", 100.0)]
    mock_ledger.assert_not_awaited()


def test_optimize_requires_two_banks(client: TestClient, snapshot_payload: dict):
    body = _optimize_body(snapshot_payload)
    body["banks"] = body["banks"][:1]

    response = client.post("/v1/optimize", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Need at least 2 banks to optimize."


def test_optimize_requires_transactions(client: TestClient, snapshot_payload: dict):
    body = _optimize_body(snapshot_payload)
    body["transactions"] = []

    response = client.post("/v1/optimize", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "No transactions to optimize."


def test_optimize_rejects_self_debt(client: TestClient, snapshot_payload: dict):
    body = _optimize_body(snapshot_payload)
    body["transactions"].append({"debtor": "A", "creditor": "A", "amount": 5})

    response = client.post("/v1/optimize", json=body)

    assert response.status_code == 422


def test_optimize_rejects_non_positive_amount(client: TestClient, snapshot_payload: dict):
    body = _optimize_body(snapshot_payload)
    body["transactions"][0]["amount"] = 0

    response = client.post("/v1/optimize", json=body)

    assert response.status_code == 422


def test_optimize_rejects_bank_without_payment_types(client: TestClient, snapshot_payload: dict):
    body = _optimize_body(snapshot_payload)
    body["banks"][0]["payment_types"] = []

    response = client.post("/v1/optimize", json=body)

    assert response.status_code == 422


def test_optimize_strict_mode_unknown_bank(client: TestClient, snapshot_payload: dict):
    body = _optimize_body(snapshot_payload, strict=True)
    body["transactions"].append({"debtor": "A", "creditor": "Z", "amount": 5})

    response = client.post("/v1/optimize", json=body)

    assert response.status_code == 422
    assert "Z" in response.json()["detail"]


@patch("cashflow_gateway.infrastructure.clients.ledger.LedgerClient.send_settlement_event", new_callable=AsyncMock)
def test_get_run_endpoint(mock_ledger: AsyncMock, client: TestClient, snapshot_payload: dict):
    """Test GET /v1/optimize/{run_id} returns the stored plan in order"""
    run_id = client.post("/v1/optimize", json=_optimize_body(snapshot_payload)).json()["run_id"]

    response = client.get(f"/v1/optimize/{run_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["run_id"] == run_id
    assert data["optimized_count"] == 2
    assert [(s["from_id"], s["to_id"], s["amount"]) for s in data["settlements"]] == [
        ("A", "B", 100.0),
        ("A", "C", 50.0),
    ]
    assert {b["bank_id"]: b["amount"] for b in data["net_balances"]} == {"A": -150.0, "B": 100.0, "C": 50.0}


def test_get_run_not_found(client: TestClient):
    fake_uuid = "00000000-0000-0000-0000-000000000000"
    response = client.get(f"/v1/optimize/{fake_uuid}")
    assert response.status_code == 404


def test_get_run_invalid_id(client: TestClient):
    response = client.get("/v1/optimize/not-a-uuid")
    assert response.status_code == 400


@patch("cashflow_gateway.infrastructure.clients.ledger.LedgerClient.send_settlement_event", new_callable=AsyncMock)
def test_get_history_endpoint(mock_ledger: AsyncMock, client: TestClient, snapshot_payload: dict):
    """Test GET /v1/optimize/history"""
    client.post("/v1/optimize", json=_optimize_body(snapshot_payload))
    client.post("/v1/optimize", json=_optimize_body(snapshot_payload))

    response = client.get("/v1/optimize/history?user_id=user_1")

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "user_1"
    assert len(data["runs"]) == 2
    assert all(run["savings"] == 1 for run in data["runs"])


def test_overview_endpoint(client: TestClient, snapshot_payload: dict):
    response = client.post("/v1/analytics/overview", json=snapshot_payload)

    assert response.status_code == 200
    data = response.json()
    assert data["total_banks"] == 3
    assert data["total_volume"] == 190.0
    assert data["total_debt"] == 150.0
    assert data["top_debtor"] == {"name": "Alpha Bank", "amount": -150.0}
    assert data["top_creditor"] == {"name": "Beta Bank", "amount": 100.0}
    assert data["most_active_bank"]["count"] == 2
