"""
API 라우트 테스트

상태 코드, 예외 매핑, 금액 직렬화 확인.
"""

from pathlib import Path

from fastapi.testclient import TestClient

from adapters.mock.ledger import InMemoryLedger
from core.config.loader import get_settings
from core.ledger.cache import BalanceCache
from web.app import app
from web.dependencies import get_app_settings


class TestHealth:
    """GET /api/health"""

    def test_health(self, client: TestClient, temp_settings_file: Path, reset_settings) -> None:
        settings = get_settings(temp_settings_file)
        app.dependency_overrides[get_app_settings] = lambda: settings

        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["mode"] == "development"
        assert data["version"] == "1.0.0"


class TestBalanceRoutes:
    """잔액 API"""

    def test_group_balances(self, client: TestClient) -> None:
        response = client.get("/api/groups/trip/balances")

        assert response.status_code == 200
        data = response.json()
        assert data["currency"] == "INR"
        # key 오름차순: email:bob, user:u-alice, user:u-carol
        assert [b["member"]["key"] for b in data["balances"]] == [
            "email:bob@example.com",
            "user:u-alice",
            "user:u-carol",
        ]
        assert [b["amount"] for b in data["balances"]] == ["-30.00", "60.00", "-30.00"]
        assert sum(b["amount_minor"] for b in data["balances"]) == 0
        assert data["summary"]["transaction_count"] == 2

    def test_member_balance(self, client: TestClient) -> None:
        response = client.get("/api/groups/trip/balances/bob@example.com")

        assert response.status_code == 200
        data = response.json()
        assert data["member"]["name"] == "Bob"
        assert data["status"] == "owes"
        assert data["owes_total"] == "30.00"
        assert len(data["suggestions"]) == 1

    def test_unknown_group(self, client: TestClient) -> None:
        response = client.get("/api/groups/missing/balances")

        assert response.status_code == 404
        assert response.json()["error"] == "GroupNotFoundError"

    def test_unknown_member(self, client: TestClient) -> None:
        response = client.get("/api/groups/trip/balances/nobody@example.com")

        assert response.status_code == 404
        assert response.json()["error"] == "MemberNotFoundError"


class TestDebtRoutes:
    """채무 API"""

    def test_detailed_debts(self, client: TestClient) -> None:
        response = client.get("/api/groups/trip/debts", params={"member": "u-carol"})

        assert response.status_code == 200
        [debt] = response.json()["debts"]
        assert debt["from_member"]["key"] == "user:u-carol"
        assert debt["to_member"]["key"] == "user:u-alice"
        assert debt["amount"] == "30.00"

    def test_detailed_debts_invalid_window(self, client: TestClient) -> None:
        response = client.get(
            "/api/groups/trip/debts",
            params={"start": "2026-04-01T00:00:00Z", "end": "2026-03-01T00:00:00Z"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    def test_between(self, client: TestClient) -> None:
        response = client.get("/api/groups/trip/debts/between", params={"a": "u-alice", "b": "bob@example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == "30.00"
        assert data["debtor"]["key"] == "email:bob@example.com"
        assert data["creditor"]["key"] == "user:u-alice"

    def test_simplified(self, client: TestClient) -> None:
        response = client.get("/api/groups/trip/debts/simplified")

        assert response.status_code == 200
        data = response.json()
        assert [c["amount"] for c in data["creditors"]] == ["60.00"]
        assert [d["amount"] for d in data["debtors"]] == ["-30.00", "-30.00"]
        assert data["summary"]["efficiency_improvement"] == "0.0%"

    def test_suggestions(self, client: TestClient) -> None:
        response = client.get("/api/groups/trip/debts/suggestions")

        assert response.status_code == 200
        suggestions = response.json()["suggestions"]
        assert [(s["from_member"]["key"], s["amount_minor"]) for s in suggestions] == [
            ("email:bob@example.com", 3000),
            ("user:u-carol", 3000),
        ]

    def test_what_if(self, client: TestClient, ledger: InMemoryLedger) -> None:
        response = client.post(
            "/api/groups/trip/debts/what-if",
            json={"settlements": [{"from_member": "bob@example.com", "to_member": "u-alice", "amount": "30.00"}]},
        )

        assert response.status_code == 200
        data = response.json()
        assert [b["amount_minor"] for b in data["projected_balances"]] == [0, 3000, -3000]
        assert data["remaining_debts"] == 2
        assert ledger.write_count == 0

    def test_what_if_non_member(self, client: TestClient) -> None:
        response = client.post(
            "/api/groups/trip/debts/what-if",
            json={"expenses": [{"payer": "u-alice", "amount": "10.00", "beneficiaries": ["zed@example.com"]}]},
        )

        assert response.status_code == 400

    def test_what_if_empty(self, client: TestClient) -> None:
        response = client.post("/api/groups/trip/debts/what-if", json={})

        assert response.status_code == 400


class TestSettlementRoutes:
    """정산 API"""

    def test_record_settlement(
        self, client: TestClient, ledger: InMemoryLedger, cache: BalanceCache
    ) -> None:
        client.get("/api/groups/trip/balances")
        assert len(cache) == 1

        response = client.post(
            "/api/groups/trip/settlements",
            json={
                "from_member": "bob@example.com",
                "to_member": "u-alice",
                "amount": "30.00",
                "payment_method": "UPI",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["amount"] == "30.00"
        assert data["amount_minor"] == 3000
        assert data["status"] == "completed"
        assert len(cache) == 0

        balances = client.get("/api/groups/trip/balances").json()["balances"]
        assert balances[0]["amount"] == "0.00"

    def test_idempotent(self, client: TestClient, ledger: InMemoryLedger) -> None:
        body = {"from_member": "u-carol", "to_member": "u-alice", "amount": "10", "idempotency_key": "k-1"}

        first = client.post("/api/groups/trip/settlements", json=body)
        second = client.post("/api/groups/trip/settlements", json=body)

        assert first.json()["settlement_id"] == second.json()["settlement_id"]
        assert ledger.write_count == 1

    def test_reused_key_different_amount(self, client: TestClient, ledger: InMemoryLedger) -> None:
        body = {"from_member": "u-carol", "to_member": "u-alice", "amount": "10", "idempotency_key": "k-1"}
        client.post("/api/groups/trip/settlements", json=body)

        response = client.post("/api/groups/trip/settlements", json={**body, "amount": "20"})

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
        assert ledger.write_count == 1

    def test_excess_precision_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/api/groups/trip/settlements",
            json={"from_member": "u-carol", "to_member": "u-alice", "amount": "1.005"},
        )

        assert response.status_code == 400

    def test_non_positive_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/api/groups/trip/settlements",
            json={"from_member": "u-carol", "to_member": "u-alice", "amount": "0"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    def test_self_settlement_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/api/groups/trip/settlements",
            json={"from_member": "u-alice", "to_member": "alice@example.com", "amount": "5.00"},
        )

        assert response.status_code == 400

    def test_currency_mismatch(self, client: TestClient) -> None:
        response = client.post(
            "/api/groups/trip/settlements",
            json={"from_member": "u-carol", "to_member": "u-alice", "amount": "5.00", "currency": "USD"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "CurrencyMismatchError"

    def test_missing_group(self, client: TestClient) -> None:
        response = client.post(
            "/api/groups/missing/settlements",
            json={"from_member": "u-carol", "to_member": "u-alice", "amount": "5.00"},
        )

        assert response.status_code == 404

    def test_history_pagination(self, client: TestClient) -> None:
        for amount in ("1.00", "2.00", "3.00"):
            client.post(
                "/api/groups/trip/settlements",
                json={"from_member": "u-carol", "to_member": "u-alice", "amount": amount},
            )

        response = client.get("/api/groups/trip/settlements", params={"limit": 2, "offset": 0})

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 3
        assert len(data["settlements"]) == 2
        assert data["limit"] == 2

    def test_history_limit_validated(self, client: TestClient) -> None:
        response = client.get("/api/groups/trip/settlements", params={"limit": 0})

        assert response.status_code == 422
