# analysis/schemas.py

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, field_validator


class AssetImpact(BaseModel):
    ticker: str = ""
    probability_of_drop: float = 0.0  # 0.0 .. 1.0 (probabilité d'une baisse > 5 %)

    @field_validator("ticker", mode="before")
    @classmethod
    def _null_ticker(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("probability_of_drop", mode="before")
    @classmethod
    def _null_probability(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class CausalFactor(BaseModel):
    factor: str = ""
    probability: float = 0.0

    @field_validator("factor", mode="before")
    @classmethod
    def _null_factor(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("probability", mode="before")
    @classmethod
    def _null_probability(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class AnalysisResult(BaseModel):
    """
    Réponse du modèle pour une analyse de risque ou un diagnostic.
    Les champs absents (ou null) de la réponse retombent sur vide / zéro.
    """

    asset_impacts: List[AssetImpact] = []
    portfolio_drawdown: float = 0.0
    vulnerable_assets: List[str] = []
    summary: str = ""

    hedging_suggestions: Optional[str] = None
    # Rempli uniquement par le diagnostic de baisse
    causal_factors: Optional[List[CausalFactor]] = None

    @field_validator("asset_impacts", "vulnerable_assets", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("portfolio_drawdown", mode="before")
    @classmethod
    def _null_number(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("summary", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value


class CorrelationEntry(BaseModel):
    ticker: str
    correlation: Optional[float] = None


class AssetDetails(BaseModel):
    ticker: str
    historical_volatility: Optional[float] = None  # % annualisé
    correlation_matrix: List[CorrelationEntry] = []
    insight: str = ""
