###############################
# dashboard/reducers.py
###############################
"""
Transitions pures de l'état du dashboard.

Chaque fonction prend un état (ou une liste de noeuds) et renvoie une
nouvelle valeur, sans jamais modifier l'entrée.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from analysis.schemas import AnalysisResult, AssetImpact
from dashboard.graph import build_graph
from dashboard.schemas import Asset, DashboardState, Node, Scenario


def initial_state() -> DashboardState:
    nodes, edges = build_graph([])
    return DashboardState(nodes=nodes, edges=edges)


# ------------------------------------------------------------------
# NOEUDS
# ------------------------------------------------------------------

def set_node_state(nodes: Sequence[Node], node_id: str, new_state: str) -> List[Node]:
    return [
        node.model_copy(update={"current_state": new_state}) if node.id == node_id else node
        for node in nodes
    ]


def apply_scenario(nodes: Sequence[Node], scenario: Scenario) -> List[Node]:
    """
    Force l'état des noeuds cités dans scenario.settings.
    La valeur n'est pas vérifiée contre node.states.
    """
    return [
        node.model_copy(update={"current_state": scenario.settings[node.id]})
        if node.id in scenario.settings
        else node
        for node in nodes
    ]


def merge_impacts(nodes: Sequence[Node], impacts: Sequence[AssetImpact]) -> List[Node]:
    """
    Reporte probability_of_drop sur les noeuds actifs (ticker == id).
    Actif absent de la réponse -> 0. Noeuds de risque inchangés.
    """
    by_ticker = {}
    for impact in impacts:
        # premier match gagnant
        by_ticker.setdefault(impact.ticker, impact.probability_of_drop)

    return [
        node.model_copy(update={"impact": by_ticker.get(node.id, 0.0)})
        if node.kind == "asset"
        else node
        for node in nodes
    ]


# ------------------------------------------------------------------
# ETAT GLOBAL
# ------------------------------------------------------------------

def load_portfolio(state: DashboardState, assets: Sequence[Asset]) -> DashboardState:
    nodes, edges = build_graph(assets)
    return state.model_copy(
        update={
            "assets": list(assets),
            "nodes": nodes,
            "edges": edges,
            "result": None,
            "selected_node_id": None,
        }
    )


def change_node_state(state: DashboardState, node_id: str, new_state: str) -> DashboardState:
    return state.model_copy(update={"nodes": set_node_state(state.nodes, node_id, new_state)})


def select_scenario(state: DashboardState, scenario: Scenario) -> DashboardState:
    return state.model_copy(update={"nodes": apply_scenario(state.nodes, scenario)})


def select_node(state: DashboardState, node_id: Optional[str]) -> DashboardState:
    """Sélectionne un noeud actif ; un noeud de risque (ou None) vide la sélection."""
    node = next((n for n in state.nodes if n.id == node_id), None)
    selected = node.id if node is not None and node.kind == "asset" else None
    return state.model_copy(update={"selected_node_id": selected})


def start_loading(state: DashboardState, message: str) -> DashboardState:
    return state.model_copy(update={"is_loading": True, "loading_message": message})


def stop_loading(state: DashboardState) -> DashboardState:
    return state.model_copy(update={"is_loading": False, "loading_message": ""})


def start_analysis(state: DashboardState, message: str) -> DashboardState:
    # L'ancien résultat et la sélection sont effacés pendant l'appel
    cleared = state.model_copy(update={"result": None, "selected_node_id": None})
    return start_loading(cleared, message)


def finish_analysis(
    state: DashboardState,
    result: AnalysisResult,
    analyzed_nodes: Sequence[Node],
) -> DashboardState:
    """
    Stocke le résultat et, si la réponse contient des impacts, les reporte
    sur les noeuds utilisés pour l'appel.
    """
    update = {"result": result}
    if result.asset_impacts:
        update["nodes"] = merge_impacts(analyzed_nodes, result.asset_impacts)
    return stop_loading(state.model_copy(update=update))


def fail_analysis(state: DashboardState) -> DashboardState:
    # Pas de résultat partiel, noeuds inchangés
    return stop_loading(state)


def attach_hedges(state: DashboardState, suggestions: str) -> DashboardState:
    """Ajoute les suggestions au résultat existant sans toucher au reste."""
    if state.result is None:
        return stop_loading(state)
    result = state.result.model_copy(update={"hedging_suggestions": suggestions})
    return stop_loading(state.model_copy(update={"result": result}))
