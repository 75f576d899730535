###############################
# dashboard/controller.py
###############################
"""
Controller unique du dashboard.

Il possède le DashboardState, est le seul à le remplacer (via les reducers)
et garantit qu'une seule opération de modification est en cours à la fois :
un second déclenchement pendant une analyse est refusé, pas mis en file.
"""
from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple

import settings
from analysis.market_data import compute_asset_metrics
from analysis.schemas import AnalysisResult, AssetDetails
from analysis.service import AnalysisService
from dashboard import reducers
from dashboard.constants import DEFAULT_ASSETS, find_scenario
from dashboard.schemas import Asset, DashboardState, Node

logger = logging.getLogger(__name__)

AnalysisFn = Callable[[Sequence[Asset], Sequence[Node]], AnalysisResult]


class DashboardError(Exception):
    pass


class AnalysisInProgressError(DashboardError):
    """Une opération est déjà en cours."""


class AnalysisFailedError(DashboardError):
    """L'appel externe a échoué ; le message est destiné à l'utilisateur."""


class UnknownNodeError(DashboardError):
    pass


class UnknownScenarioError(DashboardError):
    pass


class UnknownAssetError(DashboardError):
    pass


class DashboardController:
    def __init__(
        self,
        service: Optional[AnalysisService] = None,
        metrics_fn: Callable[..., Dict[str, Any]] = compute_asset_metrics,
        details_ttl_seconds: Optional[float] = None,
        assets: Optional[Sequence[Asset]] = None,
    ):
        self.service = service or AnalysisService()
        self._metrics_fn = metrics_fn
        # Portefeuille par défaut chargé d'office, sans analyse
        self._state = reducers.load_portfolio(
            reducers.initial_state(), DEFAULT_ASSETS if assets is None else assets
        )
        self._busy = threading.Lock()

        self._details_ttl = (
            settings.ASSET_DETAILS_CACHE_TTL_SECONDS
            if details_ttl_seconds is None
            else details_ttl_seconds
        )
        self._details_cache: Dict[Tuple[str, Tuple[str, ...]], Tuple[float, AssetDetails]] = {}

    @property
    def state(self) -> DashboardState:
        return self._state

    @contextmanager
    def _exclusive(self, action: str) -> Iterator[None]:
        if not self._busy.acquire(blocking=False):
            logger.warning("Refus de '%s' : une opération est déjà en cours", action)
            raise AnalysisInProgressError("Une analyse est déjà en cours, réessayez plus tard.")
        try:
            yield
        finally:
            self._busy.release()

    # ------------------------------------------------------------------
    # ANALYSE (appel unique en vol)
    # ------------------------------------------------------------------

    def _run_analysis(self, analysis_fn: AnalysisFn, message: str) -> DashboardState:
        """A appeler en tenant self._busy."""
        assets = list(self._state.assets)
        nodes = list(self._state.nodes)
        if not assets:
            return self._state

        self._state = reducers.start_analysis(self._state, message)
        logger.info("%s (%d actifs)", message, len(assets))
        try:
            result = analysis_fn(assets, nodes)
        except Exception as e:
            logger.exception("Analyse en échec : %s", e)
            self._state = reducers.fail_analysis(self._state)
            raise AnalysisFailedError(str(e) or "Erreur inconnue.") from e

        self._state = reducers.finish_analysis(self._state, result, nodes)
        logger.info(
            "Analyse terminée : drawdown=%.2f, %d impacts",
            result.portfolio_drawdown,
            len(result.asset_impacts),
        )
        return self._state

    def analyze(self) -> DashboardState:
        with self._exclusive("analyze"):
            return self._run_analysis(self.service.analyze_risk, "Analyse du risque...")

    def diagnose(self) -> DashboardState:
        with self._exclusive("diagnose"):
            return self._run_analysis(
                self.service.diagnose_portfolio_drop,
                "Diagnostic de la baisse du portefeuille...",
            )

    def suggest_hedges(self) -> DashboardState:
        with self._exclusive("hedge"):
            if self._state.result is None:
                return self._state

            result = self._state.result
            self._state = reducers.start_loading(
                self._state, "Génération des suggestions de couverture..."
            )
            try:
                suggestions = self.service.suggest_hedges(list(self._state.assets), result)
            except Exception as e:
                logger.exception("Suggestions de couverture en échec : %s", e)
                self._state = reducers.stop_loading(self._state)
                raise AnalysisFailedError(str(e) or "Erreur inconnue.") from e

            self._state = reducers.attach_hedges(self._state, suggestions)
            return self._state

    # ------------------------------------------------------------------
    # PORTEFEUILLE / NOEUDS / SCÉNARIOS
    # ------------------------------------------------------------------

    def load_portfolio(self, assets: Sequence[Asset], analyze: bool = True) -> DashboardState:
        with self._exclusive("load_portfolio"):
            self._state = reducers.load_portfolio(self._state, assets)
            self._details_cache.clear()
            logger.info("Portefeuille chargé : %s", [a.ticker for a in assets])
            if analyze:
                return self._run_analysis(
                    self.service.analyze_risk, "Analyse de l'état initial..."
                )
            return self._state

    def set_node_state(self, node_id: str, new_state: str) -> DashboardState:
        with self._exclusive("set_node_state"):
            if not any(n.id == node_id for n in self._state.nodes):
                raise UnknownNodeError(f"Noeud inconnu : {node_id}")
            self._state = reducers.change_node_state(self._state, node_id, new_state)
            return self._state

    def apply_scenario(self, name: str) -> DashboardState:
        scenario = find_scenario(name)
        if scenario is None:
            raise UnknownScenarioError(f"Scénario inconnu : {name}")

        with self._exclusive("apply_scenario"):
            self._state = reducers.select_scenario(self._state, scenario)
            return self._run_analysis(
                self.service.analyze_risk, f"Analyse du scénario : {scenario.name}..."
            )

    def select_node(self, node_id: Optional[str]) -> DashboardState:
        with self._exclusive("select_node"):
            if node_id is not None and not any(n.id == node_id for n in self._state.nodes):
                raise UnknownNodeError(f"Noeud inconnu : {node_id}")
            self._state = reducers.select_node(self._state, node_id)
            return self._state

    # ------------------------------------------------------------------
    # DÉTAIL D'UN ACTIF (lecture seule, mis en cache)
    # ------------------------------------------------------------------

    def asset_details(self, ticker: str) -> AssetDetails:
        ticker = ticker.strip().upper()
        portfolio = list(self._state.assets)
        asset = next((a for a in portfolio if a.ticker == ticker), None)
        if asset is None:
            raise UnknownAssetError(f"Actif absent du portefeuille : {ticker}")

        key = (ticker, tuple(a.ticker for a in portfolio))
        now = time.time()
        cached = self._details_cache.get(key)
        if cached is not None and now - cached[0] < self._details_ttl:
            return cached[1]

        metrics = self._metrics_fn(ticker, [a.ticker for a in portfolio])
        try:
            insight = self.service.asset_insight(
                asset,
                portfolio,
                metrics.get("historical_volatility"),
                metrics.get("correlation_matrix", []),
            )
        except Exception as e:
            logger.exception("Insight en échec pour %s : %s", ticker, e)
            raise AnalysisFailedError(str(e) or "Erreur inconnue.") from e

        details = AssetDetails(
            ticker=ticker,
            historical_volatility=metrics.get("historical_volatility"),
            correlation_matrix=metrics.get("correlation_matrix", []),
            insight=insight,
        )
        self._details_cache[key] = (now, details)
        return details


# Instance partagée par l'app (surchargée dans les tests)
_CONTROLLER: Optional[DashboardController] = None
_CONTROLLER_LOCK = threading.Lock()


def get_controller() -> DashboardController:
    global _CONTROLLER
    if _CONTROLLER is None:
        with _CONTROLLER_LOCK:
            # Deux premières requêtes concurrentes : une seule instance
            if _CONTROLLER is None:
                _CONTROLLER = DashboardController()
    return _CONTROLLER
