"""
Dependencies for FastAPI.

Builds the process-wide plant services once and hands them to routers.
"""

import logging
from dataclasses import dataclass

from apps.plant.consultation import ConsultationStore
from apps.plant.gateway import PlantGateway
from apps.plant.workspace import WorkspaceStore
from apps.settings import BackendSettings

logger = logging.getLogger(__name__)


@dataclass
class PlantServices:
    """Shared gateway and the in-memory stores behind the plant router."""

    gateway: PlantGateway
    workspaces: WorkspaceStore
    consultations: ConsultationStore


def build_plant_services(settings: BackendSettings) -> PlantServices:
    gateway = PlantGateway.from_settings(settings)
    idle_ttl = settings.session_idle_ttl_seconds or None
    logger.info(
        "Plant services ready: model=%s, image_model=%s, stage delay=%dms, idle ttl=%ss",
        settings.gemini_model_name,
        settings.gemini_image_model_name,
        settings.stage_image_delay_ms,
        idle_ttl,
    )
    return PlantServices(
        gateway=gateway,
        workspaces=WorkspaceStore(
            gateway,
            stage_delay_seconds=settings.stage_image_delay_ms / 1000,
            idle_ttl_seconds=idle_ttl,
        ),
        consultations=ConsultationStore(idle_ttl_seconds=idle_ttl),
    )
