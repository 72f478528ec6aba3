"""
Analysis Router - Ingredient List Analysis Endpoint

Endpoints for:
- Analyzing a pasted ingredient list against the reference table
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ingredient_analyzer import analyze_ingredients
from ingredient_parser import IngredientInputError, ensure_valid_input
from ingredient_reference import ReferenceTable
from models import AnalyzeRequest, AnalysisResponse, AnalysisErrorResponse
from rate_limit import rate_limit
from shared import get_reference_table
from structured_logging import get_logger

logger = get_logger("api.analysis")

router = APIRouter(prefix="/api", tags=["Analysis"])


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    responses={422: {"model": AnalysisErrorResponse}},
    dependencies=[Depends(rate_limit("analysis"))],
)
def analyze(
    payload: AnalyzeRequest,
    table: ReferenceTable = Depends(get_reference_table),
):
    """
    Analyze an ingredient list pasted from a product label.

    Returns every parsed ingredient in label order, whether it was recognized,
    and a summary of fungal acne triggers, allergens, irritants, comedogenic
    and reef-unsafe ingredients.

    Rejects (422) empty input, input over the length limit, and input with no
    ingredients left after parsing.
    """
    try:
        text = ensure_valid_input(payload.text)
    except IngredientInputError as e:
        logger.info("Analysis input rejected", extra={"reason": e.reason})
        return JSONResponse(
            status_code=422,
            content={"detail": e.message, "reason": e.reason},
        )

    result = analyze_ingredients(text, table)
    return result.to_dict()
