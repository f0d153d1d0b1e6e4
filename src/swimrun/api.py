"""FastAPI backend feeding map events into route-building sessions."""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swimrun.config import settings
from swimrun.routers import sessions

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [api] %(levelname)s %(name)s %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(title="Swimrun Route", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions.router)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "classification": settings.classification,
        "sessions": len(sessions._sessions),
    }
