"""
On-demand overlay content: recipes and decoration guides.

Each call is independent; a failure only affects its own request.
"""

from apps.plant.gateway import PlantGateway
from apps.plant.models import DecorationGuide, Recipe


class PlantGuideUsecase:
    def __init__(self, gateway: PlantGateway):
        self.gateway = gateway

    async def recipe_async(self, dish_name: str, plant_name: str, language: str) -> Recipe:
        return await self.gateway.generate_recipe(dish_name, plant_name, language)

    async def decoration_async(
        self, style_name: str, plant_name: str, language: str
    ) -> DecorationGuide:
        return await self.gateway.generate_decoration_guide(style_name, plant_name, language)
