"""Tests HTTP du router /api/risk."""

import pytest
from fastapi.testclient import TestClient

from api import app
from dashboard.controller import DashboardController, get_controller

from conftest import FakeAnalysisService, fake_metrics


@pytest.fixture
def service():
    return FakeAnalysisService()


@pytest.fixture
def client(service):
    controller = DashboardController(service=service, metrics_fn=fake_metrics)
    app.dependency_overrides[get_controller] = lambda: controller
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestReadEndpoints:
    """Lecture de l'état, du portefeuille par défaut et des scénarios."""

    def test_root(self, client):
        assert client.get("/").json() == {"message": "API Risk Dashboard OK"}

    def test_state(self, client):
        data = client.get("/api/risk/state").json()
        assert len(data["nodes"]) == 13
        assert data["edges"][0] == {"from": "interestRate", "to": "gdpGrowth"}
        assert data["is_loading"] is False
        assert data["result"] is None
        assert data["hedge_available"] is False

    def test_default_portfolio(self, client):
        tickers = [a["ticker"] for a in client.get("/api/risk/portfolio/default").json()]
        assert tickers == ["NVDA", "MSFT", "MCD", "CVX", "GS"]

    def test_scenarios(self, client):
        names = [s["name"] for s in client.get("/api/risk/scenarios").json()]
        assert names == ["2008-style Financial Crisis", "Stagflation Shock", "Geopolitical Supply Shock"]


class TestPortfolio:
    """Chargement d'un portefeuille."""

    def test_load_and_analyze(self, client, service):
        resp = client.post(
            "/api/risk/portfolio",
            json={"assets": [{"ticker": "nvda", "weight": 60, "sector": "Technology"},
                             {"ticker": "XOM", "weight": 40, "sector": "Energy"}]},
        )
        assert resp.status_code == 200
        data = resp.json()
        assets = [n for n in data["nodes"] if n["kind"] == "asset"]
        assert [(n["id"], n["impact"]) for n in assets] == [("NVDA", 0.42), ("XOM", 0)]
        assert {"from": "oilPrice", "to": "XOM"} in data["edges"]
        assert service.calls[0][0] == "analyze_risk"

    def test_duplicate_tickers_rejected(self, client):
        resp = client.post(
            "/api/risk/portfolio",
            json={"assets": [{"ticker": "GS", "weight": 50, "sector": "Financials"},
                             {"ticker": "gs", "weight": 50, "sector": "Financials"}]},
        )
        assert resp.status_code == 422

    @pytest.mark.parametrize("ticker", ["oilPrice", "OILPRICE", "gdpgrowth"])
    def test_risk_node_id_ticker_rejected(self, client, ticker):
        resp = client.post(
            "/api/risk/portfolio",
            json={"assets": [{"ticker": ticker, "weight": 100, "sector": "Energy"}]},
        )
        assert resp.status_code == 422


class TestNodesAndScenarios:
    """Etats des noeuds, sélection, scénarios."""

    def test_set_node_state(self, client):
        resp = client.put("/api/risk/nodes/oilPrice/state", json={"state": "High"})
        assert resp.status_code == 200
        node = next(n for n in resp.json()["nodes"] if n["id"] == "oilPrice")
        assert node["current_state"] == "High"

    def test_set_unknown_node(self, client):
        assert client.put("/api/risk/nodes/unknown/state", json={"state": "High"}).status_code == 404

    def test_select_and_clear(self, client):
        assert client.post("/api/risk/nodes/CVX/select").json()["selected_node_id"] == "CVX"
        assert client.delete("/api/risk/selection").json()["selected_node_id"] is None

    def test_apply_scenario(self, client):
        resp = client.post("/api/risk/scenarios/apply", json={"name": "Geopolitical Supply Shock"})
        assert resp.status_code == 200
        states = {n["id"]: n["current_state"] for n in resp.json()["nodes"]}
        assert states["geopolitical"] == "Conflict"
        assert states["supplyChain"] == "Severe"
        assert states["oilPrice"] == "High"
        assert states["interestRate"] == "Hold"

    def test_unknown_scenario(self, client):
        assert client.post("/api/risk/scenarios/apply", json={"name": "nope"}).status_code == 404


class TestAnalysisEndpoints:
    """Analyse, diagnostic, couverture, détail actif."""

    def test_hedge_before_analysis_is_noop(self, client, service):
        resp = client.post("/api/risk/analysis/hedge")
        assert resp.status_code == 200
        assert resp.json()["result"] is None
        assert service.calls == []

    def test_analyze_then_hedge(self, client):
        assert client.post("/api/risk/analysis/analyze").json()["hedge_available"] is True
        data = client.post("/api/risk/analysis/hedge").json()
        assert data["result"]["hedging_suggestions"] == "Acheter des puts sur le Nasdaq."
        assert data["result"]["summary"] == "Forte exposition au sentiment tech."

    def test_diagnose(self, client):
        data = client.post("/api/risk/analysis/diagnose").json()
        assert data["result"]["causal_factors"] == [{"factor": "oilPrice", "probability": 0.7}]
        assert data["hedge_available"] is False

    def test_failure_returns_502(self, client, service):
        service.error = RuntimeError("Erreur OpenAI : 429")
        resp = client.post("/api/risk/analysis/analyze")
        assert resp.status_code == 502
        assert "429" in resp.json()["detail"]
        assert client.get("/api/risk/state").json()["is_loading"] is False

    def test_asset_details(self, client):
        data = client.get("/api/risk/assets/mcd/details").json()
        assert data["ticker"] == "MCD"
        assert data["historical_volatility"] == 35.0
        assert data["insight"] == "MCD concentre le risque du portefeuille."

    def test_asset_details_unknown(self, client):
        assert client.get("/api/risk/assets/AAPL/details").status_code == 404

