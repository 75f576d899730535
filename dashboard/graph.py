# dashboard/graph.py

from __future__ import annotations

from typing import List, Sequence, Tuple

from dashboard.constants import BASE_EDGES, RISK_NODES
from dashboard.schemas import Asset, Edge, Node, Position


# Colonne des actifs + bornes verticales (en % du canevas)
ASSET_COLUMN_X = 80.0
Y_START = 10.0
Y_END = 90.0
MAX_SPACING = 18.0

TECH_SECTORS = ("Technology", "Consumer Discretionary")


def asset_spacing(count: int) -> float:
    """
    Espacement vertical entre deux actifs : réparti entre Y_START et Y_END,
    plafonné à MAX_SPACING. Un seul actif (ou aucun) : pas d'espacement.
    """
    if count <= 1:
        return 0.0
    return min((Y_END - Y_START) / (count - 1), MAX_SPACING)


def sector_dependencies(sector: str) -> List[str]:
    first = "techSentiment" if sector in TECH_SECTORS else "consumerSpending"
    second = "oilPrice" if sector == "Energy" else "gdpGrowth"
    return [first, second]


def infer_dependencies(sector: str) -> List[str]:
    """
    Dépendances simplifiées d'un actif selon son secteur (1 ou 2 ids,
    sans doublon, ordre conservé).
    """
    deps: List[str] = []
    for dep in sector_dependencies(sector):
        if dep not in deps:
            deps.append(dep)
    return deps


def build_asset_nodes(assets: Sequence[Asset]) -> List[Node]:
    spacing = asset_spacing(len(assets))
    return [
        Node(
            id=asset.ticker,
            label=asset.ticker,
            kind="asset",
            states=[],
            current_state="",
            position=Position(x=ASSET_COLUMN_X, y=Y_START + index * spacing),
            dependencies=infer_dependencies(asset.sector),
        )
        for index, asset in enumerate(assets)
    ]


def build_graph(assets: Sequence[Asset]) -> Tuple[List[Node], List[Edge]]:
    """
    Construit le graphe complet : noeuds de risque fixes puis un noeud par
    actif, arêtes de base puis une arête (dépendance -> actif) par dépendance.
    Déterministe, sans effet de bord.
    """
    risk_nodes = [node.model_copy(deep=True) for node in RISK_NODES]
    asset_nodes = build_asset_nodes(assets)

    edges = [edge.model_copy() for edge in BASE_EDGES]
    for node in asset_nodes:
        for dep_id in node.dependencies:
            edges.append(Edge(source=dep_id, target=node.id))

    return risk_nodes + asset_nodes, edges
