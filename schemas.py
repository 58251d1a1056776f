from pydantic import BaseModel, ValidationError
from typing import Any, Dict, List, Optional


class Personality(BaseModel):
    tags: List[str] = []
    description: Optional[str] = None


class Interest(BaseModel):
    name: str = ""
    level: str = ""
    description: Optional[str] = None


class Lifestyle(BaseModel):
    habits: List[str] = []
    description: Optional[str] = None


class Values(BaseModel):
    career: Optional[str] = None
    relationship: Optional[str] = None
    family: Optional[str] = None
    life: Optional[str] = None


class Emotion(BaseModel):
    state: Optional[str] = None
    description: Optional[str] = None


class DatingSuggestions(BaseModel):
    places: List[str] = []
    activities: List[str] = []


class Suggestions(BaseModel):
    topics: List[str] = []
    openings: List[str] = []
    dating: Optional[DatingSuggestions] = None
    warnings: List[str] = []
    strategy: List[str] = []


class AnalysisResult(BaseModel):
    personality: Optional[Personality] = None
    interests: List[Interest] = []
    lifestyle: Optional[Lifestyle] = None
    values: Optional[Values] = None
    emotion: Optional[Emotion] = None
    suggestions: Optional[Suggestions] = None


class AnalyzeResponse(BaseModel):
    success: bool = True
    raw: str = ""
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"


def coerce_result(data: Any) -> AnalysisResult:
    """Best-effort view of the model's structured payload; unusable sections are dropped."""
    if not isinstance(data, dict):
        return AnalysisResult()
    sections: Dict[str, Any] = {}
    for name in AnalysisResult.model_fields:
        if name not in data or data[name] is None:
            continue
        try:
            sections[name] = getattr(AnalysisResult.model_validate({name: data[name]}), name)
        except ValidationError:
            continue
    return AnalysisResult(**sections)
