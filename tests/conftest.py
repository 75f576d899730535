from types import SimpleNamespace

import pytest

from analysis.schemas import AnalysisResult, AssetImpact, CausalFactor
from dashboard.controller import DashboardController


class FakeAnalysisService:
    """Service d'analyse factice : enregistre les appels, renvoie des résultats fixes."""

    def __init__(self, result=None, diagnosis=None, hedges="Acheter des puts sur le Nasdaq.", error=None):
        self.result = result or AnalysisResult(
            asset_impacts=[AssetImpact(ticker="NVDA", probability_of_drop=0.42)],
            portfolio_drawdown=12.5,
            vulnerable_assets=["NVDA"],
            summary="Forte exposition au sentiment tech.",
        )
        self.diagnosis = diagnosis or AnalysisResult(
            asset_impacts=[AssetImpact(ticker="CVX", probability_of_drop=0.3)],
            portfolio_drawdown=8.0,
            vulnerable_assets=["CVX"],
            summary="Baisse liée au pétrole.",
            causal_factors=[CausalFactor(factor="oilPrice", probability=0.7)],
        )
        self.hedges = hedges
        self.error = error
        self.calls = []

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    def analyze_risk(self, assets, nodes):
        self.calls.append(("analyze_risk", list(assets), list(nodes)))
        self._maybe_fail()
        return self.result

    def diagnose_portfolio_drop(self, assets, nodes):
        self.calls.append(("diagnose_portfolio_drop", list(assets), list(nodes)))
        self._maybe_fail()
        return self.diagnosis

    def suggest_hedges(self, assets, result):
        self.calls.append(("suggest_hedges", list(assets), result))
        self._maybe_fail()
        return self.hedges

    def asset_insight(self, asset, portfolio, volatility, correlations):
        self.calls.append(("asset_insight", asset, volatility, list(correlations)))
        self._maybe_fail()
        return f"{asset.ticker} concentre le risque du portefeuille."


def fake_metrics(ticker, peers):
    return {
        "ticker": ticker,
        "historical_volatility": 35.0,
        "correlation_matrix": [],
    }


@pytest.fixture
def fake_service():
    return FakeAnalysisService()


@pytest.fixture
def controller(fake_service):
    return DashboardController(service=fake_service, metrics_fn=fake_metrics)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_openai_client(content=None, error=None):
    """Client OpenAI minimal exposant client.chat.completions.create."""
    completions = FakeCompletions(content=content, error=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def openai_client_factory():
    return make_openai_client
