"""
Sequential life-cycle stage illustrator.

One illustrator per plant card. Stage images are requested strictly one at
a time with a fixed pause after each success, so a card never has more than
one request outstanding. Cards do not coordinate with each other.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from apps.plant.models import LifeCycleStage
from libs.llm_gemini import GatewayError, InlineImage

logger = logging.getLogger(__name__)

DEFAULT_STAGE_DELAY_SECONDS = 2.0

StageImageGenerator = Callable[[str, str], Awaitable[Optional[InlineImage]]]


class StageState(str, Enum):
    PENDING = "pending"
    LOADING = "loading"
    ILLUSTRATED = "illustrated"
    SKIPPED = "skipped"


class CancellationToken:
    """Set once by the owner of the loop; the loop only reads it."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Stage illustration pass crashed: %r", exc, exc_info=exc)


class StageIllustrator:
    """
    Fetches one illustration per life-cycle stage of a plant.

    - cached stages are never requested again
    - success: cache, then pause `delay_seconds` unless it was the last stage
    - no image or failed call: mark skipped and move on without pausing
    - the token is checked before each request and after it resolves; an
      in-flight request is not aborted, its result is dropped
    """

    def __init__(
        self,
        generate: StageImageGenerator,
        delay_seconds: float = DEFAULT_STAGE_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._generate = generate
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self.images: Dict[int, InlineImage] = {}
        self.states: Dict[int, StageState] = {}
        self.plant_name: Optional[str] = None
        self._stage_names: List[str] = []
        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task] = None

    async def run(
        self,
        plant_name: str,
        stage_names: Sequence[str],
        token: CancellationToken,
        previous: Optional[asyncio.Task] = None,
    ) -> None:
        if previous is not None:
            # the cancelled pass may still have a request in flight
            await asyncio.wait({previous})
        last = len(stage_names) - 1
        for i, stage_name in enumerate(stage_names):
            if token.cancelled:
                return
            if i in self.images:
                continue

            self.states[i] = StageState.LOADING
            image: Optional[InlineImage] = None
            try:
                image = await self._generate(plant_name, stage_name)
            except GatewayError as e:
                logger.warning("Stage image for %s / %s failed: %s", plant_name, stage_name, e)

            if token.cancelled:
                if i not in self.images and self.states.get(i) == StageState.LOADING:
                    self.states[i] = StageState.PENDING
                return

            if image is None:
                self.states[i] = StageState.SKIPPED
                continue

            self.images[i] = image
            self.states[i] = StageState.ILLUSTRATED
            if i < last:
                await self._sleep(self.delay_seconds)

    def restart(self, plant_name: str, stages: Sequence[LifeCycleStage]) -> asyncio.Task:
        """
        Start (or restart) the pass for this plant.

        Same plant name: the existing pass is kept. New name: the running
        pass is cancelled and a new one begins at stage 0, reusing the cache,
        once the cancelled pass has settled. A card never has two requests
        outstanding.
        Must be called from a running event loop.
        """
        if self._task is not None and plant_name == self.plant_name:
            return self._task

        previous = self._task
        self.cancel()
        self.plant_name = plant_name
        self._stage_names = [s.stage_name for s in stages]
        for i in range(len(self._stage_names)):
            if i not in self.images:
                self.states[i] = StageState.PENDING

        self._token = CancellationToken()
        self._task = asyncio.create_task(
            self.run(plant_name, list(self._stage_names), self._token, previous)
        )
        self._task.add_done_callback(_log_task_failure)
        return self._task

    def cancel(self) -> None:
        if self._token is not None:
            self._token.cancel()

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def snapshot(self) -> Dict[str, object]:
        stages = []
        for i, name in enumerate(self._stage_names):
            image = self.images.get(i)
            stages.append(
                {
                    "index": i,
                    "stage_name": name,
                    "state": self.states.get(i, StageState.PENDING).value,
                    "image": image.to_data_url() if image else None,
                }
            )
        return {"plant_name": self.plant_name, "stages": stages}
