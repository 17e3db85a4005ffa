"""
Plant Consultation Usecase.

Opens chat rooms seeded with the plant's identification context and relays
user turns to them.
"""

from typing import Any, Dict, List, Optional

from apps.plant.consultation import ConsultationRoom, ConsultationStore
from apps.plant.gateway import PlantGateway
from apps.plant.models import ChatMessage
from apps.plant.prompt_builder import serialize_plant_context


class PlantConsultUsecase:
    def __init__(self, gateway: PlantGateway, store: ConsultationStore):
        self.gateway = gateway
        self.store = store

    def open(
        self,
        plant_name: str,
        language: str,
        diseases: Optional[List[Dict[str, Any]]] = None,
        plant_context: Optional[str] = None,
    ) -> ConsultationRoom:
        """An explicit plant_context wins over the name + diseases serialization."""
        context = plant_context or serialize_plant_context(plant_name, diseases or [])
        session = self.gateway.create_consultation_session(context, language)
        return self.store.open(plant_name, language, session, relay=self.gateway.send_message)

    def get(self, room_id: str) -> Optional[ConsultationRoom]:
        return self.store.get(room_id)

    async def send_async(self, room: ConsultationRoom, text: str) -> ChatMessage:
        return await room.send(text)

    def close(self, room_id: str) -> bool:
        return self.store.close(room_id)
