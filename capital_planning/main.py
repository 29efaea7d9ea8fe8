# capital_planning/main.py

import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# -------------------------------------------------------------------
# Load .env BEFORE importing anything that relies on environment vars
# -------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# -------------------------------------------------------------------
# FastAPI + CORS
# -------------------------------------------------------------------
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from capital_planning.optimization.router import router as optimization_router
from capital_planning.portfolio.router import router as portfolio_router
from capital_planning.scenarios.router import router as scenarios_router

# -------------------------------------------------------------------
# FastAPI APP CONFIG
# -------------------------------------------------------------------
app = FastAPI(
    title="Capital Planning API",
    description="Lifecycle strategy evaluation and capital-budget optimization for building portfolios.",
)


# -------------------------------------------------------------------
# MIDDLEWARE
# -------------------------------------------------------------------
allow_origins = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------------------------------------------
# ROUTES
# -------------------------------------------------------------------
app.include_router(
    optimization_router,
    prefix="/api/v1/projects",
    tags=["Lifecycle Optimization"],
)

app.include_router(
    scenarios_router,
    prefix="/api/v1/projects",
    tags=["Optimization Scenarios"],
)

app.include_router(
    portfolio_router,
    prefix="/api/v1/portfolio",
    tags=["Portfolio"],
)


# -------------------------------------------------------------------
# ROOT PING / HEALTHCHECK
# -------------------------------------------------------------------
@app.get("/")
def read_root():
    return {
        "status": "ok",
        "service": "Capital Planning API"
    }
