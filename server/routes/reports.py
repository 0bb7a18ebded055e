"""Report routes"""
from context.dependencies import get_report_registry
from fastapi import APIRouter, Depends
from models.schemas import ErrorResponse, Report, ReportCreate
from services.reports import ReportRegistry

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post(
    "",
    response_model=Report,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
async def create_report(
    spec: ReportCreate,
    registry: ReportRegistry = Depends(get_report_registry),
):
    return await registry.create_report(spec)


@router.get("", response_model=list[Report], responses={500: {"model": ErrorResponse}})
async def list_reports(registry: ReportRegistry = Depends(get_report_registry)):
    return await registry.list_reports()


@router.get(
    "/{report_id}",
    response_model=Report,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_report(
    report_id: str,
    registry: ReportRegistry = Depends(get_report_registry),
):
    """Single report; missing ids answer 404 instead of a null body"""
    return await registry.get_report(report_id)
