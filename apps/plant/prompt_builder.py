import json
from typing import Any, Dict, List

from apps.common.globalization import language_label


def _language_line(language: str) -> str:
    return f"{language_label(language)} ({language})"


def build_analysis_prompt(language: str) -> str:
    return f"""You are an AI botanist. Your task is to analyse the image and identify EVERY plant that appears in it.
Required reply language: {_language_line(language)}. Set "language" to "{language}".

Follow the JSON structure defined in the schema.

【Requirements】
1. **Multiple subjects:** if the image holds several different species (a mixed bouquet, a garden bed with many vegetables...), split them and return one object per species in the "plants" array. One entry per species, not per individual plant.
2. **Care profile:** give watering, light, soil, temperature, fertilizer and pruning details for each species.
   **Important:** fill environmental_info with concrete numbers (min/max temperature in Celsius, min/max humidity in percent) plus seasonal advice.
3. **Diseases:** diagnose visible disease on each plant, if any. Predict the root cause (root_cause) and the prevention steps (prevention).
4. **Decoration:** for flowers and ornamental plants, suggest decoration styles in common_uses.decoration.
5. **Life cycle:** list the main growth stages in order.
6. **Market:** estimate the price and where to buy it in the region that speaks this language.
7. **Toxicity:** warn clearly when the plant is poisonous (is_poisonous, poison_details, warnings).

If you are not sure about the species, write 'Uncertain'.
"""


def build_recipe_prompt(dish_name: str, plant_name: str, language: str) -> str:
    return f"""You are a professional chef. Create a recipe for the dish "{dish_name}" using the ingredient "{plant_name}".
Language: {_language_line(language)}. Return JSON following the schema.
"""


def build_decoration_prompt(style_name: str, plant_name: str, language: str) -> str:
    return f"""You are a florist. Write a step-by-step "{style_name}" decoration guide using "{plant_name}".
Language: {_language_line(language)}. Return JSON following the schema.
"""


def build_stage_image_prompt(plant_name: str, stage_name: str) -> str:
    return (
        f"Scientific botanical illustration of {plant_name} at the {stage_name} stage. "
        "White background, detailed, realistic, high quality."
    )


def serialize_plant_context(name: str, diseases: List[Dict[str, Any]]) -> str:
    """Plant context embedded in the consultation instruction: name + detected diseases."""
    return json.dumps({"name": name, "diseases": diseases}, ensure_ascii=False)


def build_consultation_instruction(plant_context: str, language: str) -> str:
    return f"""You are "Botanist AI", a friendly and knowledgeable plant care assistant.
Current context: the user is asking about this plant: {plant_context}.
Reply language: {_language_line(language)}.

【Tasks】
1. Answer questions about caring for this plant, treating its diseases, or its characteristics.
2. When the user asks about a disease, explain the cause and how to prevent it.
3. Keep answers short, concise and easy to understand, formatted in Markdown.
4. Always stay helpful and encouraging.
"""
