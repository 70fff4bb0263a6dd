import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from report_engine.api import dashboard, finance, pricing

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:80").split(",")
    if origin.strip()
]

app = FastAPI(title="Garment Report Engine")

# CORS for the dashboard frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(dashboard.router, prefix="/reports", tags=["reports"])
app.include_router(pricing.router, prefix="/pricing", tags=["pricing"])
app.include_router(finance.router, prefix="/finance", tags=["finance"])

logger.debug("Report engine started with CORS origins=%s", CORS_ORIGINS)


@app.get("/")
async def root():
    return {"status": "ok", "service": "garment-report-engine"}
