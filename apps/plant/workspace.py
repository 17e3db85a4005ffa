"""
Plant workspace: the application state of one browser session.

Holds the selected images, the displayed result, the active language and
one card per displayed plant. Nothing here is persisted.
"""

import logging
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from apps.common.globalization import DEFAULT_LANGUAGE, localized_text, validate_language
from apps.plant.gateway import PlantGateway
from apps.plant.illustrator import DEFAULT_STAGE_DELAY_SECONDS, StageIllustrator
from apps.plant.models import AnalysisResult, Plant
from apps.plant.usecases.analyze import PlantAnalyzeUsecase
from libs.llm_gemini import GatewayError, InlineImage

logger = logging.getLogger(__name__)


class PlantCard:
    """Per-plant view state; each card owns its own illustrator and cache."""

    def __init__(self, index: int, plant: Plant, illustrator: StageIllustrator):
        self.index = index
        self.plant = plant
        self.illustrator = illustrator

    def teardown(self) -> None:
        self.illustrator.cancel()

    def stage_images(self) -> Dict[str, Any]:
        if self.illustrator.plant_name is not None:
            return self.illustrator.snapshot()
        # not started yet: every stage is still pending
        return {
            "plant_name": self.plant.name,
            "stages": [
                {"index": i, "stage_name": s.stage_name, "state": "pending", "image": None}
                for i, s in enumerate(self.plant.plant_information.life_cycle)
            ],
        }


class PlantWorkspace:
    def __init__(
        self,
        workspace_id: str,
        gateway: PlantGateway,
        language: str = DEFAULT_LANGUAGE,
        stage_delay_seconds: float = DEFAULT_STAGE_DELAY_SECONDS,
        auto_illustrate: bool = True,
    ):
        self.id = workspace_id
        self.gateway = gateway
        self.language = validate_language(language)
        self.stage_delay_seconds = stage_delay_seconds
        self.auto_illustrate = auto_illustrate
        self.images: List[InlineImage] = []
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None
        self.loading = False
        self.cards: List[PlantCard] = []
        self._analyze_uc = PlantAnalyzeUsecase(gateway)

    # ---------- selection ----------

    def add_images(self, images: List[InlineImage]) -> None:
        self.images.extend(images)
        self._replace_result(None)
        self.error = None

    def remove_image(self, index: int) -> None:
        if index < 0 or index >= len(self.images):
            raise IndexError(f"No image at index {index}")
        del self.images[index]
        if not self.images:
            self._replace_result(None)

    def reset(self) -> None:
        self.images = []
        self._replace_result(None)
        self.error = None

    # ---------- analysis ----------

    async def analyze(self) -> AnalysisResult:
        if not self.images:
            raise ValueError("No images selected")
        return await self._run_batch(self.language)

    async def change_language(self, language: str) -> Optional[AnalysisResult]:
        """
        Switch language. With a result on display every selected image is
        analysed again in the new language and the result replaced wholesale.
        """
        self.language = validate_language(language)
        if not (self.images and self.result):
            return None
        self._replace_result(None)
        return await self._run_batch(self.language)

    async def _run_batch(self, language: str) -> AnalysisResult:
        self.loading = True
        self.error = None
        try:
            result = await self._analyze_uc.execute_async(list(self.images), language)
        except GatewayError as e:
            logger.error("Workspace %s batch failed: %s", self.id, e)
            self.error = localized_text(language, "error_msg")
            raise
        finally:
            self.loading = False
        self._replace_result(result)
        return result

    def _replace_result(self, result: Optional[AnalysisResult]) -> None:
        for card in self.cards:
            card.teardown()
        self.cards = []
        self.result = result
        if result is None:
            return
        for i, plant in enumerate(result.plants):
            card = PlantCard(
                i,
                plant,
                StageIllustrator(
                    self.gateway.generate_life_cycle_stage_image,
                    delay_seconds=self.stage_delay_seconds,
                ),
            )
            if self.auto_illustrate:
                card.illustrator.restart(plant.name, plant.plant_information.life_cycle)
            self.cards.append(card)

    # ---------- views ----------

    def get_card(self, index: int) -> PlantCard:
        if index < 0 or index >= len(self.cards):
            raise IndexError(f"No plant card at index {index}")
        return self.cards[index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workspace_id": self.id,
            "language": self.language,
            "image_count": len(self.images),
            "loading": self.loading,
            "error": self.error,
            "result": self.result.model_dump() if self.result else None,
        }


class WorkspaceStore:
    """
    In-memory workspaces keyed by id.

    A workspace untouched for `idle_ttl_seconds` is reset and dropped the
    next time the store is used; None keeps workspaces until DELETE.
    """

    def __init__(
        self,
        gateway: PlantGateway,
        stage_delay_seconds: float = DEFAULT_STAGE_DELAY_SECONDS,
        auto_illustrate: bool = True,
        idle_ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.gateway = gateway
        self.stage_delay_seconds = stage_delay_seconds
        self.auto_illustrate = auto_illustrate
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self._workspaces: Dict[str, PlantWorkspace] = {}
        self._last_used: Dict[str, float] = {}

    def _expire_idle(self) -> None:
        if self.idle_ttl_seconds is None:
            return
        now = self._clock()
        stale = [
            wid for wid, used in self._last_used.items() if now - used > self.idle_ttl_seconds
        ]
        for wid in stale:
            logger.info("Workspace %s idle, dropping it", wid)
            self.delete(wid)

    def create(self, language: str = DEFAULT_LANGUAGE) -> PlantWorkspace:
        ws = PlantWorkspace(
            uuid.uuid4().hex,
            self.gateway,
            language=language,
            stage_delay_seconds=self.stage_delay_seconds,
            auto_illustrate=self.auto_illustrate,
        )
        self._expire_idle()
        self._workspaces[ws.id] = ws
        self._last_used[ws.id] = self._clock()
        return ws

    def get(self, workspace_id: str) -> Optional[PlantWorkspace]:
        self._expire_idle()
        ws = self._workspaces.get(workspace_id)
        if ws is not None:
            self._last_used[workspace_id] = self._clock()
        return ws

    def delete(self, workspace_id: str) -> bool:
        self._last_used.pop(workspace_id, None)
        ws = self._workspaces.pop(workspace_id, None)
        if ws is None:
            return False
        ws.reset()
        return True
