"""
Ingredients Router - Ingredient Reference and Search

Handles ingredient reference lookups:
- Filtered listing (function, fungal acne safe, allergen free, comedogenic cap)
- Autocomplete suggestions
- Function tag vocabulary
- Single ingredient by slug
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from ingredient_reference import IngredientFunction, ReferenceTable
from models import (
    FunctionTag,
    IngredientResponse,
    IngredientSearchResponse,
    IngredientSuggestion,
)
from rate_limit import rate_limit
from shared import get_reference_table

router = APIRouter(prefix="/api", tags=["Ingredients"])

MAX_QUERY_LENGTH = 100


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/ingredients",
    response_model=IngredientSearchResponse,
    dependencies=[Depends(rate_limit("api"))],
)
def search_ingredients(
    q: Optional[str] = Query(None, max_length=MAX_QUERY_LENGTH),
    function: Optional[List[str]] = Query(None),
    fungal_acne_safe: Optional[bool] = None,
    allergen_free: Optional[bool] = None,
    max_comedogenic: Optional[int] = Query(None, ge=0, le=5),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    table: ReferenceTable = Depends(get_reference_table),
):
    """
    Search reference ingredients.

    Query matches name or INCI name (substring) or any alias (exact).
    Results are ordered by name; `total` counts all matches before paging.
    """
    ingredients, total = table.search(
        query=q,
        functions=function,
        fungal_acne_safe=fungal_acne_safe,
        allergen_free=allergen_free,
        max_comedogenic_rating=max_comedogenic,
        limit=limit,
        offset=offset,
    )
    return {"ingredients": [r.to_dict() for r in ingredients], "total": total}


@router.get("/ingredients/functions", response_model=List[FunctionTag])
def list_functions():
    """List the ingredient function tags."""
    return [
        {"id": f.value, "name": f.value.replace("-", " ").title()}
        for f in IngredientFunction
    ]


@router.get("/ingredients/{slug}", response_model=IngredientResponse)
def get_ingredient(
    slug: str,
    table: ReferenceTable = Depends(get_reference_table),
):
    """Look up a single ingredient by slug."""
    record = table.get(slug)
    if record is None:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return record.to_dict()


@router.get(
    "/search/ingredients",
    response_model=List[IngredientSuggestion],
    dependencies=[Depends(rate_limit("search"))],
)
def suggest_ingredients(
    q: Optional[str] = None,
    table: ReferenceTable = Depends(get_reference_table),
):
    """Autocomplete suggestions. Queries shorter than 2 characters return []."""
    if not q or len(q) < 2:
        return []

    suggestions = table.suggest(q[:MAX_QUERY_LENGTH], limit=10)
    return [{"slug": r.slug, "name": r.name} for r in suggestions]
