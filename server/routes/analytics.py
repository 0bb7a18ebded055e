"""Analytics routes"""
from context.dependencies import get_analytics_service
from fastapi import APIRouter, Depends
from models.schemas import DashboardSummary, DataPoint, DataPointCreate, ErrorResponse
from services.analytics import AnalyticsService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get(
    "/dashboard",
    response_model=DashboardSummary,
    responses={500: {"model": ErrorResponse}},
)
async def get_dashboard(service: AnalyticsService = Depends(get_analytics_service)):
    """Totals, the 100 most recent points and the server time"""
    return await service.get_dashboard_summary()


@router.post(
    "/data",
    response_model=DataPoint,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def ingest_data_point(
    point: DataPointCreate,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Store a data point and broadcast it as `data:new`"""
    return await service.ingest(point)


@router.get(
    "/data/{dataset_id}",
    response_model=list[DataPoint],
    responses={500: {"model": ErrorResponse}},
)
async def get_dataset_data(
    dataset_id: str,
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.get_dataset_history(dataset_id)
