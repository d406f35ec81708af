from __future__ import annotations
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from ribbonprint.views import (
    health_router,
    gfx_router,
)

from ribbonprint.config import configure_logging

def create_app() -> FastAPI:
    # Configure logging first
    configure_logging()

    app = FastAPI(
        title="RibbonPrint Graphics Service",
        version="1.0.0",
        description="RibbonPrint FastAPI application converting palette bitmaps into color ribbon print streams for 9-pin dot-matrix printers.",
    )

    # Configure CORS
    cors_env = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    if cors_env.strip() == "*" or cors_env.strip() == "":
        allowed_origins = ["*"]
    else:
        allowed_origins = [o.strip() for o in cors_env.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include all routers by type
    app.include_router(health_router)
    app.include_router(gfx_router)

    return app


app = create_app()
