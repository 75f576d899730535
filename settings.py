# settings.py

from __future__ import annotations

import os
from typing import List, Optional


def _get_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# OpenAI (la clé OPENAI_API_KEY est lue directement par le client)
# ---------------------------------------------------------------------------

OPENAI_MODEL = _get_env("OPENAI_MODEL") or "gpt-4.1-mini"
# None = timeout par défaut du client OpenAI
OPENAI_TIMEOUT_SECONDS = _get_float("OPENAI_TIMEOUT_SECONDS", None)


# ---------------------------------------------------------------------------
# Serveur
# ---------------------------------------------------------------------------

LOG_LEVEL = (_get_env("LOG_LEVEL") or "INFO").upper()


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


CORS_ALLOW_ORIGINS = _split_origins(_get_env("CORS_ALLOW_ORIGINS"))


# ---------------------------------------------------------------------------
# Données de marché (détail d'un actif)
# ---------------------------------------------------------------------------

MARKET_DATA_PERIOD = _get_env("MARKET_DATA_PERIOD") or "1y"
ASSET_DETAILS_CACHE_TTL_SECONDS = _get_float("ASSET_DETAILS_CACHE_TTL_SECONDS", 300.0)
