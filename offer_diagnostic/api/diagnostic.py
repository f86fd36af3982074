"""API endpoints for offer diagnostic evaluation."""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from offer_diagnostic.chains.phrase_recommendations import phrase_recommendations
from offer_diagnostic.core.config import get_settings
from offer_diagnostic.core.diagnostic import (
    DiagnosticSnapshot,
    EvaluationResult,
    OfferConfiguration,
    RecommendationPhrasingError,
    evaluate,
    missing_fields,
)
from offer_diagnostic.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class EvaluateRequest(BaseModel):
    """Request body for evaluation endpoints."""

    configuration: OfferConfiguration
    top_k: int | None = Field(
        default=None, ge=1, le=5, description="Recommendations to return (default from settings)"
    )


class CompletenessResponse(BaseModel):
    evaluable: bool
    missing_fields: list[str] = Field(default_factory=list)


def _evaluate_or_422(request: EvaluateRequest) -> EvaluationResult:
    top_k = request.top_k or get_settings().DIAGNOSTIC_TOP_K
    result = evaluate(request.configuration, top_k=top_k)
    if result is None:
        missing = missing_fields(request.configuration)
        raise HTTPException(
            status_code=422,
            detail={"message": "Configuration is incomplete", "missing_fields": missing},
        )
    return result


@router.post("/diagnostic/evaluate", response_model=EvaluationResult)
async def evaluate_offer(request: EvaluateRequest) -> EvaluationResult:
    """
    Evaluate an offer configuration.

    Args:
        request: Configuration and optional top_k

    Returns:
        EvaluationResult with scores, gates, bottleneck and recommendations

    Raises:
        HTTPException 422: If the configuration is incomplete
        HTTPException 500: If evaluation fails
    """
    try:
        result = _evaluate_or_422(request)
        logger.info(
            f"Evaluated offer: score={result.alignment_score} ready={result.ready} "
            f"bottleneck={result.bottleneck.dimension.value}"
        )
        return result

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to evaluate offer")
        raise HTTPException(status_code=500, detail="Failed to evaluate offer") from e


@router.post("/diagnostic/evaluate/phrased", response_model=EvaluationResult)
async def evaluate_offer_phrased(
    request: EvaluateRequest,
    scores_only: bool = Query(
        False, description="Return deterministic scores if phrasing fails instead of 502"
    ),
) -> EvaluationResult:
    """
    Evaluate an offer and phrase its recommendations with Claude.

    Scores, gates and bottleneck are computed before the phrasing call, so
    with scores_only=true a phrasing failure still returns them, with
    recommendations_unavailable set and no recommendations.

    Raises:
        HTTPException 422: If the configuration is incomplete
        HTTPException 502: If phrasing fails and scores_only is false
        HTTPException 500: If evaluation fails
    """
    try:
        result = _evaluate_or_422(request)

        try:
            return await phrase_recommendations(request.configuration, result)
        except RecommendationPhrasingError as e:
            if not scores_only:
                logger.warning(f"Recommendation phrasing failed: {e}")
                raise HTTPException(
                    status_code=502, detail="Recommendation phrasing unavailable, retry"
                ) from e
            logger.warning(f"Recommendation phrasing failed, returning scores only: {e}")
            return result.model_copy(
                update={"recommendations": [], "recommendations_unavailable": True}
            )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to evaluate offer with phrasing")
        raise HTTPException(status_code=500, detail="Failed to evaluate offer") from e


@router.post("/diagnostic/snapshot", response_model=DiagnosticSnapshot)
async def snapshot_offer(request: EvaluateRequest) -> DiagnosticSnapshot:
    """Evaluate and wrap the result in a versioned snapshot document."""
    try:
        result = _evaluate_or_422(request)
        return DiagnosticSnapshot.capture(request.configuration, result)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to snapshot offer evaluation")
        raise HTTPException(status_code=500, detail="Failed to snapshot evaluation") from e


@router.post("/diagnostic/completeness", response_model=CompletenessResponse)
async def check_completeness(configuration: OfferConfiguration) -> CompletenessResponse:
    """Report whether a configuration can be evaluated, and what is missing."""
    missing = missing_fields(configuration)
    return CompletenessResponse(evaluable=not missing, missing_fields=missing)
