# dashboard/router.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from analysis.schemas import AssetDetails
from dashboard.constants import DEFAULT_ASSETS, SCENARIOS
from dashboard.controller import (
    AnalysisFailedError,
    AnalysisInProgressError,
    DashboardController,
    DashboardError,
    UnknownAssetError,
    UnknownNodeError,
    UnknownScenarioError,
    get_controller,
)
from dashboard.schemas import (
    Asset,
    DashboardState,
    NodeStateRequest,
    PortfolioLoadRequest,
    Scenario,
    ScenarioRequest,
)

router = APIRouter(prefix="/api/risk", tags=["risk"])


def _to_http(e: DashboardError) -> HTTPException:
    if isinstance(e, AnalysisInProgressError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, AnalysisFailedError):
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, (UnknownNodeError, UnknownScenarioError, UnknownAssetError)):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


# ---------------------------------------------------------------------------
# ETAT / PORTEFEUILLE
# ---------------------------------------------------------------------------

@router.get("/state", response_model=DashboardState)
def get_state(controller: DashboardController = Depends(get_controller)):
    """
    Etat complet pour le front : actifs, noeuds, arêtes, dernier résultat,
    indicateur de chargement et actif sélectionné.
    """
    return controller.state


@router.get("/portfolio/default", response_model=List[Asset])
def get_default_portfolio():
    return DEFAULT_ASSETS


@router.post("/portfolio", response_model=DashboardState)
def load_portfolio(
    req: PortfolioLoadRequest,
    controller: DashboardController = Depends(get_controller),
):
    """
    Remplace le portefeuille, reconstruit noeuds actifs + arêtes,
    puis lance l'analyse si analyze=True.
    """
    try:
        return controller.load_portfolio(req.assets, analyze=req.analyze)
    except DashboardError as e:
        raise _to_http(e)


# ---------------------------------------------------------------------------
# NOEUDS
# ---------------------------------------------------------------------------

@router.put("/nodes/{node_id}/state", response_model=DashboardState)
def set_node_state(
    node_id: str,
    req: NodeStateRequest,
    controller: DashboardController = Depends(get_controller),
):
    try:
        return controller.set_node_state(node_id, req.state)
    except DashboardError as e:
        raise _to_http(e)


@router.post("/nodes/{node_id}/select", response_model=DashboardState)
def select_node(node_id: str, controller: DashboardController = Depends(get_controller)):
    try:
        return controller.select_node(node_id)
    except DashboardError as e:
        raise _to_http(e)


@router.delete("/selection", response_model=DashboardState)
def clear_selection(controller: DashboardController = Depends(get_controller)):
    try:
        return controller.select_node(None)
    except DashboardError as e:
        raise _to_http(e)


# ---------------------------------------------------------------------------
# SCÉNARIOS
# ---------------------------------------------------------------------------

@router.get("/scenarios", response_model=List[Scenario])
def list_scenarios():
    return SCENARIOS


@router.post("/scenarios/apply", response_model=DashboardState)
def apply_scenario(
    req: ScenarioRequest,
    controller: DashboardController = Depends(get_controller),
):
    """Force les états du scénario puis relance l'analyse de risque."""
    try:
        return controller.apply_scenario(req.name)
    except DashboardError as e:
        raise _to_http(e)


# ---------------------------------------------------------------------------
# ANALYSES IA
# ---------------------------------------------------------------------------

@router.post("/analysis/analyze", response_model=DashboardState)
def analyze(controller: DashboardController = Depends(get_controller)):
    try:
        return controller.analyze()
    except DashboardError as e:
        raise _to_http(e)


@router.post("/analysis/diagnose", response_model=DashboardState)
def diagnose(controller: DashboardController = Depends(get_controller)):
    try:
        return controller.diagnose()
    except DashboardError as e:
        raise _to_http(e)


@router.post("/analysis/hedge", response_model=DashboardState)
def hedge(controller: DashboardController = Depends(get_controller)):
    """
    Ajoute des suggestions de couverture au résultat courant.
    Sans analyse préalable : rien n'est appelé, l'état est renvoyé tel quel.
    """
    try:
        return controller.suggest_hedges()
    except DashboardError as e:
        raise _to_http(e)


@router.get("/assets/{ticker}/details", response_model=AssetDetails)
def asset_details(ticker: str, controller: DashboardController = Depends(get_controller)):
    """
    Détail d'un actif : volatilité historique, corrélations avec le reste
    du portefeuille (yfinance) et commentaire IA.
    """
    try:
        return controller.asset_details(ticker)
    except DashboardError as e:
        raise _to_http(e)
