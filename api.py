###############################
# IMPORTS
###############################
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import settings

# Router dashboard (graphe de risques + analyses IA)
from dashboard.router import router as risk_router


###############################
# CONFIG GLOBALE
###############################
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)

app = FastAPI(
    title="Risk Dependency Dashboard API",
    description="Backend du dashboard de risques de portefeuille (graphe de facteurs + OpenAI + yfinance)",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,  # "*" en dev
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Le router porte déjà son préfixe /api/risk
app.include_router(risk_router)


###############################
# ENDPOINTS
###############################
@app.get("/")
async def root():
    return {"message": "API Risk Dashboard OK"}
