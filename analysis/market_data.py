###############################
# analysis/market_data.py
###############################
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import yfinance as yf

import settings
from analysis.schemas import CorrelationEntry

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252


def _fetch_daily_returns(symbol: str, period: str) -> Optional[Any]:
    """
    Rendements journaliers (série pandas) d'un ticker via yfinance.
    None si yfinance casse ou si l'historique est trop court.
    """
    try:
        hist = yf.Ticker(symbol).history(period=period, interval="1d")
    except Exception as e:
        logger.warning("yfinance indisponible pour %s : %s", symbol, e)
        return None

    if hist.empty or "Close" not in hist.columns:
        return None

    closes = hist["Close"].dropna()
    if len(closes) < 2:
        return None

    return closes.pct_change().dropna()


def annualized_volatility(returns: Any) -> Optional[float]:
    """Volatilité annualisée en % (écart-type journalier * sqrt(252))."""
    if returns is None or len(returns) < 2:
        return None
    vol = float(returns.std() * np.sqrt(TRADING_DAYS_PER_YEAR) * 100)
    if np.isnan(vol):
        return None
    return vol


def _correlation(a: Any, b: Any) -> Optional[float]:
    if a is None or b is None:
        return None
    # corr() aligne les deux séries sur les dates communes
    value = float(a.corr(b))
    if np.isnan(value):
        return None
    return value


def compute_asset_metrics(
    ticker: str,
    peers: Sequence[str],
    period: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Volatilité historique de `ticker` et corrélation avec chaque autre
    ligne du portefeuille. Les données manquantes donnent None, jamais
    une exception.
    """
    period = period or settings.MARKET_DATA_PERIOD
    symbols = [ticker] + [p for p in peers if p != ticker]

    returns: Dict[str, Any] = {}
    for sym in symbols:
        returns[sym] = _fetch_daily_returns(sym, period)

    base = returns.get(ticker)
    correlations: List[CorrelationEntry] = [
        CorrelationEntry(ticker=sym, correlation=_correlation(base, returns.get(sym)))
        for sym in symbols[1:]
    ]

    return {
        "ticker": ticker,
        "historical_volatility": annualized_volatility(base),
        "correlation_matrix": correlations,
    }
