"""Recommendation routes."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from mediashelf.adapters.catalog.sql import SqlCatalogStore
from mediashelf.adapters.recommender.facet import FacetRecommenderAdapter
from mediashelf.api.schemas import RecommendationsResponse, WorkResponse
from mediashelf.database import get_session

router = APIRouter(tags=["Recommendations"])


@router.get("/users/{user_id}/recommendations", response_model=RecommendationsResponse)
async def get_recommendations(
    user_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> RecommendationsResponse:
    """
    Two ranked lists of unrated works for the user.

    `current` is popularity-ranked; `profile` is ranked by the user's taste
    profile (popularity for users without ratings). `version` changes
    whenever the user's ratings change.
    """
    recommender = FacetRecommenderAdapter(store=SqlCatalogStore(session))
    result = await recommender.recommend(user_id)
    return RecommendationsResponse(
        current=[WorkResponse.model_validate(w) for w in result.current],
        profile=[WorkResponse.model_validate(w) for w in result.profile],
        version=result.version,
    )
