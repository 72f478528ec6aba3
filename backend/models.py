from pydantic import BaseModel
from typing import Optional, List


# Ingredient Reference Models
class IngredientSuggestion(BaseModel):
    slug: str
    name: str

    class Config:
        from_attributes = True


class IngredientSummary(IngredientSuggestion):
    functions: List[str] = []
    comedogenic_rating: Optional[int] = None
    is_fungal_acne_trigger: bool = False
    is_allergen: bool = False


class IngredientResponse(IngredientSummary):
    inci_name: Optional[str] = None
    aliases: List[str] = []
    irritation_level: Optional[int] = None
    is_reef_unsafe: bool = False
    description: Optional[str] = None
    benefits: List[str] = []
    concerns: List[str] = []


class IngredientSearchResponse(BaseModel):
    ingredients: List[IngredientSummary]
    total: int


class FunctionTag(BaseModel):
    id: str
    name: str


# Analysis Models
class AnalyzeRequest(BaseModel):
    text: Optional[str] = None


class AnalyzedIngredientResponse(BaseModel):
    original_text: str
    position: int
    is_recognized: bool
    ingredient: Optional[IngredientResponse] = None

    class Config:
        from_attributes = True


class AnalysisSummaryResponse(BaseModel):
    total: int
    recognized: int
    unrecognized: int
    is_fungal_acne_safe: bool
    fungal_acne_triggers: List[str]
    potential_allergens: List[str]
    potential_irritants: List[str]
    comedogenic_ingredients: List[str]
    reef_unsafe: List[str] = []

    class Config:
        from_attributes = True


class AnalysisResponse(BaseModel):
    ingredients: List[AnalyzedIngredientResponse]
    summary: AnalysisSummaryResponse

    class Config:
        from_attributes = True


class AnalysisErrorResponse(BaseModel):
    detail: str
    reason: str
