# dashboard/schemas.py

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from analysis.schemas import AnalysisResult


NodeKind = Literal["risk", "asset"]


class Asset(BaseModel):
    ticker: str
    weight: float  # % du portefeuille
    sector: str

    @field_validator("ticker")
    @classmethod
    def _normalize_ticker(cls, value: str) -> str:
        ticker = value.strip().upper()
        if not ticker:
            raise ValueError("ticker vide")
        return ticker


class Position(BaseModel):
    x: float  # % de la largeur du canevas
    y: float  # % de la hauteur du canevas


class Node(BaseModel):
    id: str
    label: str
    kind: NodeKind
    states: List[str] = []
    current_state: str = ""
    position: Position
    dependencies: List[str] = []
    impact: Optional[float] = None  # noeuds actifs uniquement


class Edge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")


class Scenario(BaseModel):
    name: str
    description: str
    settings: Dict[str, str]


class DashboardState(BaseModel):
    """
    Etat complet du dashboard. Un seul propriétaire (le controller),
    modifié uniquement via les fonctions de dashboard/reducers.py.
    """

    assets: List[Asset] = []
    nodes: List[Node] = []
    edges: List[Edge] = []
    result: Optional[AnalysisResult] = None

    is_loading: bool = False
    loading_message: str = ""
    selected_node_id: Optional[str] = None

    @computed_field
    @property
    def hedge_available(self) -> bool:
        # Couverture proposée seulement après une analyse "classique"
        return self.result is not None and self.result.causal_factors is None


# ---------------------------------------------------------------------------
# Requêtes
# ---------------------------------------------------------------------------

class PortfolioLoadRequest(BaseModel):
    assets: List[Asset]
    analyze: bool = True

    @model_validator(mode="after")
    def _check_tickers(self) -> "PortfolioLoadRequest":
        # Import local : constants importe ce module
        from dashboard.constants import RISK_NODE_IDS

        # Tickers en majuscules, ids de risque en camelCase : comparaison sans casse
        reserved = {node_id.casefold() for node_id in RISK_NODE_IDS}
        seen = set()
        for asset in self.assets:
            if asset.ticker in seen:
                raise ValueError(f"ticker en double : {asset.ticker}")
            if asset.ticker.casefold() in reserved:
                raise ValueError(f"ticker réservé (facteur de risque) : {asset.ticker}")
            seen.add(asset.ticker)
        return self


class NodeStateRequest(BaseModel):
    state: str


class ScenarioRequest(BaseModel):
    name: str
