"""
Main Application Entry Point.

Configures and initializes the FastAPI application, including logging,
routers, and health checks.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.deps import PlantServices, build_plant_services
from apps.plant.api import build_plant_router
from apps.settings import load_settings


def create_app(services: Optional[PlantServices] = None) -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = load_settings()
    # Configure logging: info level for app, warning for noisy refs
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s"
    )

    # Silence httpx/httpcore (used by google-genai)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google.genai").setLevel(logging.WARNING)

    if services is None:
        services = build_plant_services(settings)

    fastapi_app = FastAPI(title="Botanist AI Backend", version="0.1.0")

    # CORS: the browser front end runs on another origin
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @fastapi_app.get("/health")
    async def health():
        return {
            "status": "ok",
            "service": "botanist-backend",
            "gemini_model": settings.gemini_model_name,
            "gemini_image_model": settings.gemini_image_model_name,
        }

    fastapi_app.include_router(build_plant_router(services))
    return fastapi_app


app = create_app()
