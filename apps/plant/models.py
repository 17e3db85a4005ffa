from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field

Severity = Literal["nhẹ", "trung bình", "nặng", "light", "medium", "severe"]
Difficulty = Literal["Easy", "Medium", "Hard", "Dễ", "Trung bình", "Khó"]


class Disease(BaseModel):
    disease_name: str
    confidence: str
    symptoms: List[str]
    root_cause: str = Field(..., description="Predicted cause (fungal, bacterial, environmental...)")
    severity: Severity
    treatment: List[str]
    prevention: List[str]


class EnvironmentalInfo(BaseModel):
    min_temp: float = Field(..., description="Celsius")
    max_temp: float = Field(..., description="Celsius")
    min_humidity: float = Field(..., description="Percent, 0-100")
    max_humidity: float = Field(..., description="Percent, 0-100")
    seasonal_advice: str


class CareProfile(BaseModel):
    water: str
    light: str
    soil: str
    temperature: str
    fertilizer: str
    pruning: str
    environmental_info: EnvironmentalInfo


class LifeCycleStage(BaseModel):
    stage_name: str
    duration: str
    description: str


class MarketInfo(BaseModel):
    estimated_price: str
    currency: str
    buying_tips: str
    suggested_places: List[str]


class CommonUses(BaseModel):
    medical: List[str] = Field(default_factory=list)
    cooking: List[str] = Field(default_factory=list)
    decoration: List[str] = Field(default_factory=list)
    other: List[str] = Field(default_factory=list)


class PlantInformation(BaseModel):
    description: str
    common_uses: CommonUses
    care_profile: CareProfile
    life_cycle: List[LifeCycleStage]
    market_info: MarketInfo


class Plant(BaseModel):
    """One identified species. Generated stage images never live here."""

    name: str
    confidence: str = Field(..., description="Free-text label, not a number")
    scientific_name: str
    other_possible_species: List[str] = Field(default_factory=list)
    is_poisonous: bool
    poison_details: str = ""
    detected_diseases: List[Disease] = Field(default_factory=list)
    plant_information: PlantInformation


class AnalysisResult(BaseModel):
    """
    Analysis of one image, or of a whole batch after aggregation.

    plant_count is whatever the service (or the aggregator) reported and may
    differ from len(plants).
    """

    language: str
    plant_count: int
    plants: List[Plant]
    warnings: List[str]


class Recipe(BaseModel):
    title: str
    description: str = ""
    prep_time: str
    cook_time: str
    difficulty: Difficulty
    servings: str = ""
    ingredients: List[str]
    instructions: List[str]
    tips: List[str] = Field(default_factory=list)


class DecorationGuide(BaseModel):
    title: str
    description: str
    difficulty: Difficulty
    tools_materials: List[str]
    steps: List[str]
    tips: List[str] = Field(default_factory=list)


class ChatMessage(BaseModel):
    id: str = Field(..., description="Unique message ID")
    role: Literal["user", "model"]
    text: str
    timestamp: datetime
