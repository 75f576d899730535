###############################
# dashboard/constants.py
###############################
from typing import List

from dashboard.schemas import Asset, Edge, Node, Position, Scenario


# ------------------------------------------------------------------
# PORTEFEUILLE PAR DÉFAUT
# ------------------------------------------------------------------

DEFAULT_ASSETS: List[Asset] = [
    Asset(ticker="NVDA", weight=30, sector="Technology"),
    Asset(ticker="MSFT", weight=25, sector="Technology"),
    Asset(ticker="MCD", weight=20, sector="Consumer Discretionary"),
    Asset(ticker="CVX", weight=15, sector="Energy"),
    Asset(ticker="GS", weight=10, sector="Financials"),
]


# ------------------------------------------------------------------
# NOEUDS DE RISQUE (fixes, jamais recréés)
# ------------------------------------------------------------------

RISK_NODES: List[Node] = [
    # Macro (colonne 1)
    Node(
        id="interestRate",
        label="Interest Rate",
        kind="risk",
        states=["Cut", "Hold", "Hike"],
        current_state="Hold",
        position=Position(x=2, y=10),
        dependencies=[],
    ),
    Node(
        id="inflation",
        label="Inflation Rate",
        kind="risk",
        states=["Low", "Medium", "High"],
        current_state="Medium",
        position=Position(x=2, y=32),
        dependencies=["oilPrice"],
    ),
    Node(
        id="gdpGrowth",
        label="GDP Growth",
        kind="risk",
        states=["Recession", "Slow", "Robust"],
        current_state="Slow",
        position=Position(x=2, y=54),
        dependencies=["interestRate"],
    ),
    Node(
        id="oilPrice",
        label="Oil Price",
        kind="risk",
        states=["Low", "Stable", "High"],
        current_state="Stable",
        position=Position(x=2, y=76),
        dependencies=["geopolitical"],
    ),
    # Géopolitique (colonne 2)
    Node(
        id="geopolitical",
        label="Geopolitical Stability",
        kind="risk",
        states=["Stable", "Tense", "Conflict"],
        current_state="Stable",
        position=Position(x=27, y=25),
        dependencies=[],
    ),
    Node(
        id="supplyChain",
        label="Supply Chain Disruption",
        kind="risk",
        states=["None", "Moderate", "Severe"],
        current_state="None",
        position=Position(x=27, y=55),
        dependencies=["geopolitical"],
    ),
    # Sectoriel (colonne 3)
    Node(
        id="techSentiment",
        label="Tech Sector Sentiment",
        kind="risk",
        states=["Bearish", "Neutral", "Bullish"],
        current_state="Neutral",
        position=Position(x=52, y=25),
        dependencies=["interestRate", "supplyChain"],
    ),
    Node(
        id="consumerSpending",
        label="Consumer Spending",
        kind="risk",
        states=["Weak", "Normal", "Strong"],
        current_state="Normal",
        position=Position(x=52, y=55),
        dependencies=["gdpGrowth", "inflation"],
    ),
    # Les actifs sont ajoutés dynamiquement en colonne 4
]

RISK_NODE_IDS = frozenset(n.id for n in RISK_NODES)


BASE_EDGES: List[Edge] = [
    Edge(source="interestRate", target="gdpGrowth"),
    Edge(source="interestRate", target="techSentiment"),
    Edge(source="oilPrice", target="inflation"),
    Edge(source="geopolitical", target="oilPrice"),
    Edge(source="geopolitical", target="supplyChain"),
    Edge(source="supplyChain", target="techSentiment"),
    Edge(source="gdpGrowth", target="consumerSpending"),
    Edge(source="inflation", target="consumerSpending"),
]


# ------------------------------------------------------------------
# SCÉNARIOS PRÉDÉFINIS
# ------------------------------------------------------------------

SCENARIOS: List[Scenario] = [
    Scenario(
        name="2008-style Financial Crisis",
        description="Simulates a severe global recession with frozen credit markets.",
        settings={
            "gdpGrowth": "Recession",
            "interestRate": "Cut",
            "consumerSpending": "Weak",
        },
    ),
    Scenario(
        name="Stagflation Shock",
        description="High inflation combined with stagnant economic growth.",
        settings={
            "inflation": "High",
            "gdpGrowth": "Recession",
            "interestRate": "Hike",
        },
    ),
    Scenario(
        name="Geopolitical Supply Shock",
        description="A major geopolitical event disrupts supply chains and spikes commodity prices.",
        settings={
            "geopolitical": "Conflict",
            "supplyChain": "Severe",
            "oilPrice": "High",
        },
    ),
]


def find_scenario(name: str) -> Scenario | None:
    return next((s for s in SCENARIOS if s.name == name), None)
