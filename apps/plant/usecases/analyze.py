"""
Plant Analyze Usecase.

Runs one batch: one analysis call per image, concurrently, merged in
submission order.
"""

import asyncio
import logging
from typing import List

from apps.common.globalization import validate_language
from apps.plant.aggregator import aggregate_results
from apps.plant.gateway import ImageInput, PlantGateway
from apps.plant.models import AnalysisResult

logger = logging.getLogger(__name__)


class PlantAnalyzeUsecase:
    """Usecase for analysing a batch of plant photos."""

    # pylint: disable=too-few-public-methods

    def __init__(self, gateway: PlantGateway):
        self.gateway = gateway

    async def execute_async(self, images: List[ImageInput], language: str) -> AnalysisResult:
        """
        All-or-nothing: if any image fails the exception propagates and no
        partial result is built. gather() keeps submission order no matter
        which response lands first.
        """
        language = validate_language(language)
        if not images:
            raise ValueError("No images to analyze")

        logger.info("Analyzing batch of %d image(s) in %s", len(images), language)
        results = await asyncio.gather(
            *(self.gateway.analyze_image(img, language) for img in images)
        )
        return aggregate_results(results, language)
