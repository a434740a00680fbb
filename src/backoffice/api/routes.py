"""FastAPI endpoints for the back-office dashboard."""

from fastapi import APIRouter, Depends

from backoffice.api.schemas import StatsResponse
from backoffice.stats import StatsQuery
from identity.api.dependencies import get_store, require_admin
from shared.store import Store

admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_router.get("/stats", response_model=StatsResponse)
def get_stats(store: Store = Depends(get_store)) -> StatsResponse:
    return StatsResponse.model_validate(StatsQuery(store).collect())
