"""
Plant LLM structured-output schemas (passed to Gemini as response_schema).

Required lists mirror apps.plant.models; the models re-validate whatever
comes back, so the two must stay in step.
"""

SEVERITY_VALUES = ["nhẹ", "trung bình", "nặng", "light", "medium", "severe"]
DIFFICULTY_VALUES = ["Easy", "Medium", "Hard", "Dễ", "Trung bình", "Khó"]

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

DISEASE_SCHEMA = {
    "type": "object",
    "properties": {
        "disease_name": {"type": "string"},
        "confidence": {"type": "string"},
        "symptoms": _STRING_LIST,
        "root_cause": {
            "type": "string",
            "description": "Predicted cause of the disease (fungal, bacterial, environmental, etc.)",
        },
        "severity": {"type": "string", "enum": SEVERITY_VALUES},
        "treatment": _STRING_LIST,
        "prevention": _STRING_LIST,
    },
    "required": [
        "disease_name",
        "confidence",
        "symptoms",
        "severity",
        "treatment",
        "root_cause",
        "prevention",
    ],
}

ENVIRONMENTAL_INFO_SCHEMA = {
    "type": "object",
    "properties": {
        "min_temp": {"type": "number", "description": "Minimum ideal temperature in Celsius"},
        "max_temp": {"type": "number", "description": "Maximum ideal temperature in Celsius"},
        "min_humidity": {"type": "number", "description": "Minimum ideal humidity percentage (0-100)"},
        "max_humidity": {"type": "number", "description": "Maximum ideal humidity percentage (0-100)"},
        "seasonal_advice": {"type": "string", "description": "Growth advice based on weather/season"},
    },
    "required": ["min_temp", "max_temp", "min_humidity", "max_humidity", "seasonal_advice"],
}

CARE_PROFILE_SCHEMA = {
    "type": "object",
    "properties": {
        "water": {"type": "string", "description": "Watering frequency and tips"},
        "light": {"type": "string", "description": "Sunlight requirements"},
        "soil": {"type": "string", "description": "Soil type preferences"},
        "temperature": {"type": "string", "description": "Ideal temperature range description"},
        "fertilizer": {"type": "string", "description": "Fertilizer recommendations"},
        "pruning": {"type": "string", "description": "Pruning advice"},
        "environmental_info": ENVIRONMENTAL_INFO_SCHEMA,
    },
    "required": ["water", "light", "soil", "temperature", "fertilizer", "pruning", "environmental_info"],
}

LIFE_CYCLE_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "stage_name": {"type": "string", "description": "Name of the stage (e.g. Seedling, Vegetative, Flowering)"},
            "duration": {"type": "string", "description": "Typical duration of this stage"},
            "description": {"type": "string", "description": "Key characteristics of this stage"},
        },
        "required": ["stage_name", "duration", "description"],
    },
}

MARKET_INFO_SCHEMA = {
    "type": "object",
    "properties": {
        "estimated_price": {
            "type": "string",
            "description": "Estimated price range for a standard pot size (e.g. '50.000 - 150.000')",
        },
        "currency": {"type": "string", "description": "Currency code or symbol (e.g. VND, USD)"},
        "buying_tips": {"type": "string", "description": "Tips for selecting a healthy plant at the store"},
        "suggested_places": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Types of stores, markets or websites that sell this plant",
        },
    },
    "required": ["estimated_price", "currency", "buying_tips", "suggested_places"],
}

COMMON_USES_SCHEMA = {
    "type": "object",
    "properties": {
        "medical": _STRING_LIST,
        "cooking": _STRING_LIST,
        "decoration": _STRING_LIST,
        "other": _STRING_LIST,
    },
}

PLANT_INFO_SCHEMA = {
    "type": "object",
    "properties": {
        "description": {"type": "string"},
        "common_uses": COMMON_USES_SCHEMA,
        "care_profile": CARE_PROFILE_SCHEMA,
        "life_cycle": LIFE_CYCLE_SCHEMA,
        "market_info": MARKET_INFO_SCHEMA,
    },
    "required": ["description", "common_uses", "care_profile", "life_cycle", "market_info"],
}

PLANT_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "confidence": {"type": "string"},
        "scientific_name": {"type": "string"},
        "other_possible_species": _STRING_LIST,
        "is_poisonous": {"type": "boolean"},
        "poison_details": {"type": "string"},
        "detected_diseases": {"type": "array", "items": DISEASE_SCHEMA},
        "plant_information": PLANT_INFO_SCHEMA,
    },
    "required": ["name", "confidence", "scientific_name", "is_poisonous", "plant_information"],
}

ANALYSIS_LLM_SCHEMA = {
    "type": "object",
    "properties": {
        "language": {"type": "string"},
        "plant_count": {"type": "integer"},
        "plants": {"type": "array", "items": PLANT_SCHEMA},
        "warnings": _STRING_LIST,
    },
    "required": ["language", "plant_count", "plants", "warnings"],
}

RECIPE_LLM_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "prep_time": {"type": "string"},
        "cook_time": {"type": "string"},
        "difficulty": {"type": "string", "enum": DIFFICULTY_VALUES},
        "servings": {"type": "string"},
        "ingredients": _STRING_LIST,
        "instructions": _STRING_LIST,
        "tips": _STRING_LIST,
    },
    "required": ["title", "ingredients", "instructions", "prep_time", "cook_time", "difficulty"],
}

DECORATION_GUIDE_LLM_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "difficulty": {"type": "string", "enum": DIFFICULTY_VALUES},
        "tools_materials": _STRING_LIST,
        "steps": _STRING_LIST,
        "tips": _STRING_LIST,
    },
    "required": ["title", "description", "tools_materials", "steps", "difficulty"],
}
