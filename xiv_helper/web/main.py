"""HTTP application entrypoint (composition-only)."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from xiv_helper.web.routers import crafting_router, items_router, system_router

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

_cors_origins_raw = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173")
_cors_origins = [o.strip() for o in _cors_origins_raw.split(",") if o.strip()]

app = FastAPI(title="XIV Helper")
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system_router)
app.include_router(items_router)
app.include_router(crafting_router)

__all__ = ["app", "run"]


def run() -> None:
    """Serve the API with uvicorn."""
    host = os.getenv("XIV_HOST", "127.0.0.1")
    port = int(os.getenv("XIV_PORT", "8000"))
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("XIV_LOG_LEVEL", "info"))


if __name__ == "__main__":
    run()
