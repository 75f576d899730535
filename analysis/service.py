# analysis/service.py

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from openai import OpenAI
from pydantic import ValidationError

import settings
from analysis.schemas import AnalysisResult, CorrelationEntry

logger = logging.getLogger(__name__)


class AnalysisServiceError(RuntimeError):
    """Echec de l'appel au modèle (réseau, API, réponse illisible)."""


# -------------------------------------------------------------------
# PROMPTS
# -------------------------------------------------------------------

SYSTEM_PROMPT = (
    "Tu es un analyste de risque de portefeuille. "
    "On te donne la composition d'un portefeuille d'actions (ticker, poids en %, secteur) "
    "et l'état actuel d'un réseau de facteurs de risque macroéconomiques et géopolitiques "
    "(taux, inflation, croissance, pétrole, géopolitique, chaînes d'approvisionnement, "
    "sentiment tech, consommation). "
    "Tu estimes qualitativement l'impact de ces facteurs sur chaque ligne du portefeuille. "
    "Tu t'exprimes EN FRANÇAIS. Tu ne donnes pas de conseil en investissement."
)

RESULT_SCHEMA_TEXT = """
{
  "asset_impacts": [
    {"ticker": "TICKER", "probability_of_drop": 0.0}
  ],
  "portfolio_drawdown": 0.0,
  "vulnerable_assets": ["TICKER"],
  "summary": "Synthèse en 3 à 6 phrases."
}
"""

DIAGNOSE_SCHEMA_TEXT = """
{
  "asset_impacts": [
    {"ticker": "TICKER", "probability_of_drop": 0.0}
  ],
  "portfolio_drawdown": 0.0,
  "vulnerable_assets": ["TICKER"],
  "summary": "Explication en 3 à 6 phrases de la baisse observée.",
  "causal_factors": [
    {"factor": "id du facteur de risque", "probability": 0.0}
  ]
}
"""


def _portfolio_block(assets: Sequence[Any]) -> str:
    lines = [f"- {a.ticker} : {a.weight:g} % ({a.sector})" for a in assets]
    return "\n".join(lines) if lines else "- (portefeuille vide)"


def _risk_block(nodes: Sequence[Any]) -> str:
    lines: List[str] = []
    for node in nodes:
        if node.kind != "risk":
            continue
        deps = ", ".join(node.dependencies) or "aucune"
        lines.append(
            f"- {node.id} ({node.label}) : {node.current_state} "
            f"[états possibles : {' / '.join(node.states)} ; dépend de : {deps}]"
        )
    return "\n".join(lines)


def _dependency_block(nodes: Sequence[Any]) -> str:
    lines = [
        f"- {node.id} <- {', '.join(node.dependencies)}"
        for node in nodes
        if node.kind == "asset"
    ]
    return "\n".join(lines)


def build_analysis_prompt(assets: Sequence[Any], nodes: Sequence[Any]) -> str:
    return f"""
Portefeuille :
{_portfolio_block(assets)}

Etat actuel des facteurs de risque :
{_risk_block(nodes)}

Dépendances des actifs :
{_dependency_block(nodes)}

Pour chaque actif, estime la probabilité (entre 0 et 1) d'une baisse de plus de 5 %
dans ce contexte. Estime aussi le drawdown probable du portefeuille (en %),
liste les actifs les plus vulnérables et rédige une courte synthèse.

Réponds STRICTEMENT en JSON, sans texte autour, avec la structure suivante :
{RESULT_SCHEMA_TEXT}
"""


def build_diagnose_prompt(assets: Sequence[Any], nodes: Sequence[Any]) -> str:
    return f"""
Le portefeuille suivant vient de subir une baisse significative.

Portefeuille :
{_portfolio_block(assets)}

Etat actuel des facteurs de risque :
{_risk_block(nodes)}

Dépendances des actifs :
{_dependency_block(nodes)}

Explique la baisse : quels facteurs de risque en sont la cause la plus probable
(probabilité entre 0 et 1 pour chacun), quelle probabilité de baisse supplémentaire
de plus de 5 % pour chaque actif, quel drawdown (en %) et quels actifs sont les plus exposés.

Réponds STRICTEMENT en JSON, sans texte autour, avec la structure suivante :
{DIAGNOSE_SCHEMA_TEXT}
"""


def build_hedge_prompt(assets: Sequence[Any], result: AnalysisResult) -> str:
    impacts = "\n".join(
        f"- {i.ticker} : {i.probability_of_drop:.0%}" for i in result.asset_impacts
    ) or "- (aucun)"
    vulnerable = ", ".join(result.vulnerable_assets) or "aucun"
    return f"""
Portefeuille :
{_portfolio_block(assets)}

Dernière analyse de risque :
- Drawdown estimé : {result.portfolio_drawdown:g} %
- Actifs vulnérables : {vulnerable}
- Probabilités de baisse :
{impacts}
- Synthèse : {result.summary}

Propose 3 à 5 stratégies de couverture concrètes (options, actifs décorrélés,
réallocation sectorielle...) adaptées à ce portefeuille. Format Markdown court.
Rappelle en une phrase que ce n'est PAS un conseil en investissement.
"""


def build_insight_prompt(
    asset: Any,
    portfolio: Sequence[Any],
    volatility: Optional[float],
    correlations: Sequence[CorrelationEntry],
) -> str:
    vol_text = f"{volatility:.1f} %" if volatility is not None else "indisponible"
    corr_lines = "\n".join(
        f"- {c.ticker} : {c.correlation:.2f}" if c.correlation is not None
        else f"- {c.ticker} : indisponible"
        for c in correlations
    ) or "- (aucune autre ligne)"
    return f"""
Actif : {asset.ticker} ({asset.sector}), {asset.weight:g} % du portefeuille.

Portefeuille complet :
{_portfolio_block(portfolio)}

Volatilité historique annualisée : {vol_text}
Corrélations des rendements journaliers avec les autres lignes :
{corr_lines}

Rédige en 2 à 4 phrases le rôle de cet actif dans le risque du portefeuille
(concentration, diversification, sensibilité macro).
"""


# -------------------------------------------------------------------
# CLIENT
# -------------------------------------------------------------------

class AnalysisService:
    """
    Collaborateur externe : toutes les analyses passent par l'API
    chat.completions d'OpenAI.
    """

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.OPENAI_MODEL

    @property
    def client(self) -> OpenAI:
        # Créé au premier appel : l'import de l'app ne doit pas exiger OPENAI_API_KEY
        if self._client is None:
            kwargs: Dict[str, Any] = {}
            if settings.OPENAI_TIMEOUT_SECONDS is not None:
                kwargs["timeout"] = settings.OPENAI_TIMEOUT_SECONDS
            self._client = OpenAI(**kwargs)
        return self._client

    def _complete(self, user_prompt: str, json_mode: bool) -> str:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            resp = self.client.chat.completions.create(**kwargs)
        except Exception as e:
            raise AnalysisServiceError(f"Erreur OpenAI : {e}") from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise AnalysisServiceError("Réponse vide du modèle.")
        return content

    def _complete_result(self, user_prompt: str) -> AnalysisResult:
        content = self._complete(user_prompt, json_mode=True)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise AnalysisServiceError(f"Réponse JSON illisible : {e}") from e

        if not isinstance(data, dict):
            raise AnalysisServiceError("Réponse JSON inattendue (objet attendu).")

        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            raise AnalysisServiceError(f"Réponse JSON non conforme : {e}") from e

    # ---------------------------------------------------------------
    # API publique
    # ---------------------------------------------------------------

    def analyze_risk(self, assets: Sequence[Any], nodes: Sequence[Any]) -> AnalysisResult:
        logger.info("analyze_risk: %d actifs", len(assets))
        result = self._complete_result(build_analysis_prompt(assets, nodes))
        # Une analyse "classique" ne porte pas de facteurs causaux
        return result.model_copy(update={"causal_factors": None})

    def diagnose_portfolio_drop(self, assets: Sequence[Any], nodes: Sequence[Any]) -> AnalysisResult:
        logger.info("diagnose_portfolio_drop: %d actifs", len(assets))
        result = self._complete_result(build_diagnose_prompt(assets, nodes))
        if result.causal_factors is None:
            result = result.model_copy(update={"causal_factors": []})
        return result

    def suggest_hedges(self, assets: Sequence[Any], result: AnalysisResult) -> str:
        logger.info("suggest_hedges: %d actifs", len(assets))
        return self._complete(build_hedge_prompt(assets, result), json_mode=False).strip()

    def asset_insight(
        self,
        asset: Any,
        portfolio: Sequence[Any],
        volatility: Optional[float],
        correlations: Sequence[CorrelationEntry],
    ) -> str:
        logger.info("asset_insight: %s", asset.ticker)
        prompt = build_insight_prompt(asset, portfolio, volatility, correlations)
        return self._complete(prompt, json_mode=False).strip()
