"""
Ingredient Analyzer - Label Safety Summary

Analyze a pasted ingredient list against the reference table:
- Keep declaration order (INCI lists run from highest to lowest concentration)
- Mark each ingredient as recognized or not
- Flag fungal acne triggers, allergens, irritants, comedogenic and reef-unsafe ingredients

The analysis is a pure function of the text and the injected ReferenceTable.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from config import MAX_INGREDIENTS
from ingredient_parser import parse_tokens
from ingredient_reference import IngredientRecord, ReferenceTable
from structured_logging import log_analysis

IRRITANT_THRESHOLD = 3  # irritation_level >= 3
COMEDOGENIC_THRESHOLD = 3  # comedogenic_rating >= 3


@dataclass
class AnalyzedIngredient:
    original_text: str
    position: int
    ingredient: Optional[IngredientRecord]
    is_recognized: bool

    def to_dict(self) -> Dict:
        return {
            "original_text": self.original_text,
            "position": self.position,
            "is_recognized": self.is_recognized,
            "ingredient": self.ingredient.to_dict() if self.ingredient else None,
        }


@dataclass
class AnalysisSummary:
    total: int
    recognized: int
    unrecognized: int
    is_fungal_acne_safe: bool
    fungal_acne_triggers: List[str] = field(default_factory=list)
    potential_allergens: List[str] = field(default_factory=list)
    potential_irritants: List[str] = field(default_factory=list)
    comedogenic_ingredients: List[str] = field(default_factory=list)
    reef_unsafe: List[str] = field(default_factory=list)


@dataclass
class AnalysisResult:
    ingredients: List[AnalyzedIngredient]
    summary: AnalysisSummary

    def to_dict(self) -> Dict:
        return {
            "ingredients": [i.to_dict() for i in self.ingredients],
            "summary": vars(self.summary).copy(),
        }


def summarize(ingredients: List[AnalyzedIngredient]) -> AnalysisSummary:
    """
    Aggregate analyzed ingredients into a summary.

    Name lists follow position order and are not deduplicated: an ingredient
    declared twice is listed twice.
    """
    matched = [i.ingredient for i in ingredients if i.is_recognized and i.ingredient]

    triggers = [r.name for r in matched if r.is_fungal_acne_trigger]
    allergens = [r.name for r in matched if r.is_allergen]
    irritants = [r.name for r in matched if (r.irritation_level or 0) >= IRRITANT_THRESHOLD]
    comedogenic = [r.name for r in matched if (r.comedogenic_rating or 0) >= COMEDOGENIC_THRESHOLD]
    reef_unsafe = [r.name for r in matched if r.is_reef_unsafe]

    recognized = sum(1 for i in ingredients if i.is_recognized)

    return AnalysisSummary(
        total=len(ingredients),
        recognized=recognized,
        unrecognized=len(ingredients) - recognized,
        is_fungal_acne_safe=not triggers,
        fungal_acne_triggers=triggers,
        potential_allergens=allergens,
        potential_irritants=irritants,
        comedogenic_ingredients=comedogenic,
        reef_unsafe=reef_unsafe,
    )


class IngredientAnalyzer:
    """Runs the parse -> lookup -> summarize pipeline against one reference table."""

    def __init__(self, table: ReferenceTable, max_ingredients: int = MAX_INGREDIENTS):
        self.table = table
        self.max_ingredients = max_ingredients

    def analyze(self, text: str) -> AnalysisResult:
        start_time = time.time()

        analyzed = []
        for token in parse_tokens(text, self.max_ingredients):
            record = self.table.lookup(token.key)
            analyzed.append(AnalyzedIngredient(
                original_text=token.original_text,
                position=token.position,
                ingredient=record,
                is_recognized=record is not None,
            ))

        summary = summarize(analyzed)

        log_analysis(
            total=summary.total,
            recognized=summary.recognized,
            duration_ms=(time.time() - start_time) * 1000,
            input_length=len(text or ""),
        )

        return AnalysisResult(ingredients=analyzed, summary=summary)


def analyze_ingredients(
    text: str,
    table: ReferenceTable,
    max_ingredients: int = MAX_INGREDIENTS,
) -> AnalysisResult:
    """Analyze ingredient label text. Validate with ingredient_parser.validate_input first."""
    return IngredientAnalyzer(table, max_ingredients).analyze(text)
