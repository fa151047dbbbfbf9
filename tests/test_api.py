"""
API tests using httpx AsyncClient.

``TestInvestmentProcedures`` runs the router → procedure pipeline against a
mocked service (via dependency overrides).  ``TestEndToEnd`` wires the real
service to an in-memory SQLite session and walks the example scenario
through the HTTP surface.
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from investment_tracker.core.exceptions import STORE_ERROR_MESSAGE, add_exception_handlers
from investment_tracker.db.session import get_db
from investment_tracker.schemas.investment import InvestmentRead

from .conftest import create_payload, make_investment

PREFIX = "/rpc"

# ────────────────────────────────────────────────────────────────────────────
# Test app factory
# ────────────────────────────────────────────────────────────────────────────


def _make_test_app() -> FastAPI:
    """
    Build a minimal FastAPI app with the real router but no lifespan, so
    nothing touches the module-level engine.
    """
    from investment_tracker.api.router import api_router

    app = FastAPI()
    add_exception_handlers(app)
    app.include_router(api_router, prefix=PREFIX)
    return app


def _query(input_doc: dict) -> dict:
    return {"input": json.dumps(input_doc)}


def _read(**overrides) -> InvestmentRead:
    return InvestmentRead.model_validate(make_investment(**overrides))


class TestHealthcheck:
    @pytest.mark.asyncio
    async def test_reports_ok_with_timestamp(self):
        transport = ASGITransport(app=_make_test_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.get(f"{PREFIX}/healthcheck")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert isinstance(body["timestamp"], str)
        assert body["timestamp"].startswith("20")


# ────────────────────────────────────────────────────────────────────────────
# Procedures against a mocked service
# ────────────────────────────────────────────────────────────────────────────


class TestInvestmentProcedures:
    """Tests for the investment procedures with the service mocked out."""

    @pytest.fixture(autouse=True)
    def _setup(self):
        from investment_tracker.api.procedures.investments import _get_investment_service

        self.app = _make_test_app()
        self.mock_service = AsyncMock()
        self.app.dependency_overrides[_get_investment_service] = lambda: self.mock_service

    async def _get(self, path, **kwargs):
        transport = ASGITransport(app=self.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.get(f"{PREFIX}/{path}", **kwargs)

    async def _post(self, path, body):
        transport = ASGITransport(app=self.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.post(f"{PREFIX}/{path}", json=body)

    @pytest.mark.asyncio
    async def test_create_returns_investment(self):
        self.mock_service.create_investment.return_value = _read(id=3)

        resp = await self._post("createInvestment", create_payload())

        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == 3
        assert data["ticker_symbol"] == "AAPL"
        assert data["purchase_price"] == 150.25
        assert data["purchase_date"] == "2024-01-15"
        passed = self.mock_service.create_investment.await_args.args[0]
        assert passed.purchase_price == Decimal("150.25")

    @pytest.mark.asyncio
    async def test_create_validation_error_skips_service(self):
        resp = await self._post("createInvestment", create_payload(shares=0, ticker_symbol=""))

        assert resp.status_code == 422
        body = resp.json()
        assert body["error"] is True
        fields = {detail["field"] for detail in body["details"]}
        assert fields == {"shares", "ticker_symbol"}
        self.mock_service.create_investment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_is_mutation_only(self):
        resp = await self._get("createInvestment")

        assert resp.status_code == 405

    @pytest.mark.asyncio
    async def test_list_empty(self):
        self.mock_service.list_investments.return_value = []

        resp = await self._get("getInvestments")

        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_list_returns_rows(self):
        self.mock_service.list_investments.return_value = [_read(id=2), _read(id=1)]

        resp = await self._get("getInvestments")

        assert [row["id"] for row in resp.json()] == [2, 1]

    @pytest.mark.asyncio
    async def test_get_by_id_found(self):
        self.mock_service.get_investment.return_value = _read(id=5)

        resp = await self._get("getInvestmentById", params=_query({"id": 5}))

        assert resp.status_code == 200
        assert resp.json()["id"] == 5
        self.mock_service.get_investment.assert_awaited_once_with(5)

    @pytest.mark.asyncio
    async def test_get_by_id_missing_is_null(self):
        self.mock_service.get_investment.return_value = None

        resp = await self._get("getInvestmentById", params=_query({"id": 404}))

        assert resp.status_code == 200
        assert resp.json() is None

    @pytest.mark.asyncio
    async def test_get_by_id_bad_input(self):
        resp = await self._get("getInvestmentById", params=_query({"id": "abc"}))

        assert resp.status_code == 422
        assert resp.json()["details"][0]["field"] == "id"
        self.mock_service.get_investment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_by_id_malformed_json(self):
        resp = await self._get("getInvestmentById", params={"input": "{not json"})

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_get_by_id_missing_input(self):
        resp = await self._get("getInvestmentById")

        assert resp.status_code == 422
        assert resp.json()["details"][0]["field"] == "input"

    @pytest.mark.asyncio
    async def test_update_passes_sparse_input(self):
        self.mock_service.update_investment.return_value = _read(shares=7)

        resp = await self._post("updateInvestment", {"id": 1, "shares": 7})

        assert resp.status_code == 200
        assert resp.json()["shares"] == 7
        passed = self.mock_service.update_investment.await_args.args[0]
        assert passed.changes() == {"shares": 7}

    @pytest.mark.asyncio
    async def test_update_missing_is_null(self):
        self.mock_service.update_investment.return_value = None

        resp = await self._post("updateInvestment", {"id": 404, "shares": 7})

        assert resp.status_code == 200
        assert resp.json() is None

    @pytest.mark.asyncio
    async def test_update_explicit_null_rejected(self):
        resp = await self._post("updateInvestment", {"id": 1, "company_name": None})

        assert resp.status_code == 422
        self.mock_service.update_investment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_true(self):
        self.mock_service.delete_investment.return_value = True

        resp = await self._post("deleteInvestment", {"id": 1})

        assert resp.status_code == 200
        assert resp.json() is True

    @pytest.mark.asyncio
    async def test_delete_false(self):
        self.mock_service.delete_investment.return_value = False

        resp = await self._post("deleteInvestment", {"id": 404})

        assert resp.json() is False

    @pytest.mark.asyncio
    async def test_delete_requires_id(self):
        resp = await self._post("deleteInvestment", {})

        assert resp.status_code == 422
        assert resp.json()["details"][0]["field"] == "id"

    @pytest.mark.asyncio
    async def test_store_error_is_generic_500(self):
        self.mock_service.list_investments.side_effect = OperationalError(
            "SELECT", {}, Exception("password authentication failed for user tracker")
        )

        resp = await self._get("getInvestments")

        assert resp.status_code == 500
        body = resp.json()
        assert body == {"error": True, "message": STORE_ERROR_MESSAGE}
        assert "password" not in resp.text

    @pytest.mark.asyncio
    async def test_unknown_procedure_404(self):
        resp = await self._get("getPortfolio")

        assert resp.status_code == 404
        assert resp.json()["error"] is True


# ────────────────────────────────────────────────────────────────────────────
# End-to-end through SQLite
# ────────────────────────────────────────────────────────────────────────────


class TestEndToEnd:
    @pytest.fixture()
    def client_app(self, db_session):
        app = _make_test_app()

        async def _override_db():
            yield db_session

        app.dependency_overrides[get_db] = _override_db
        return app

    @pytest.mark.asyncio
    async def test_example_scenario(self, client_app):
        transport = ASGITransport(app=client_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            created = (await client.post(f"{PREFIX}/createInvestment", json=create_payload())).json()
            fetched = (
                await client.get(
                    f"{PREFIX}/getInvestmentById", params=_query({"id": created["id"]})
                )
            ).json()
            updated = (
                await client.post(
                    f"{PREFIX}/updateInvestment",
                    json={"id": created["id"], "company_name": "Apple"},
                )
            ).json()
            listed = (await client.get(f"{PREFIX}/getInvestments")).json()
            deleted = (
                await client.post(f"{PREFIX}/deleteInvestment", json={"id": created["id"]})
            ).json()
            deleted_again = (
                await client.post(f"{PREFIX}/deleteInvestment", json={"id": created["id"]})
            ).json()
            after = (await client.get(f"{PREFIX}/getInvestments")).json()

        assert created["ticker_symbol"] == "AAPL"
        assert created["purchase_price"] == 150.25
        assert created["purchase_date"] == "2024-01-15"
        assert isinstance(created["id"], int)
        assert created["created_at"]
        assert fetched == created
        assert updated == {**created, "company_name": "Apple"}
        assert listed == [updated]
        assert deleted is True
        assert deleted_again is False
        assert after == []

    @pytest.mark.asyncio
    async def test_ids_outside_key_range_are_not_found(self, client_app):
        huge = 2**64
        transport = ASGITransport(app=client_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            fetched = await client.get(f"{PREFIX}/getInvestmentById", params=_query({"id": huge}))
            updated = await client.post(
                f"{PREFIX}/updateInvestment", json={"id": huge, "shares": 5}
            )
            deleted = await client.post(f"{PREFIX}/deleteInvestment", json={"id": huge})
            too_many = await client.post(
                f"{PREFIX}/createInvestment", json=create_payload(shares=huge)
            )

        assert (fetched.status_code, fetched.json()) == (200, None)
        assert (updated.status_code, updated.json()) == (200, None)
        assert (deleted.status_code, deleted.json()) == (200, False)
        assert too_many.status_code == 422
        assert too_many.json()["details"][0]["field"] == "shares"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field,value", [("shares", True), ("shares", "7"), ("purchase_price", "1.5")]
    )
    async def test_create_rejects_non_numeric_types(self, client_app, field, value):
        transport = ASGITransport(app=client_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post(
                f"{PREFIX}/createInvestment", json=create_payload(**{field: value})
            )
            listed = (await client.get(f"{PREFIX}/getInvestments")).json()

        assert resp.status_code == 422
        assert resp.json()["details"][0]["field"] == field
        assert listed == []
