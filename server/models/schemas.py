"""DTOs and schemas for analytics data"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, TypeVar, Union

from models.errors import ValidationError, format_validation_errors
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current server time, timezone-aware"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC (naive values are taken as UTC)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """JSON-compatible dict with wire field names"""
        return self.model_dump(mode="json", by_alias=True)


class ChartType(str, Enum):
    """Chart types a report can be rendered as"""
    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    AREA = "area"


class DataPointCreate(CamelModel):
    """Schema for an incoming data point"""
    dataset_id: str
    value: float = Field(allow_inf_nan=False)
    category: str
    timestamp: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None


class DataPoint(CamelModel):
    """Stored data point"""
    id: str
    dataset_id: str
    timestamp: datetime
    value: float
    category: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ReportCreate(CamelModel):
    """Schema for a new report definition"""
    title: str
    description: str = ""
    dataset_ids: list[str] = Field(default_factory=list)
    chart_type: ChartType


class Report(CamelModel):
    """Stored report definition"""
    id: str
    title: str
    description: str = ""
    dataset_ids: list[str] = Field(default_factory=list)
    chart_type: ChartType
    created_at: datetime
    updated_at: datetime


class DashboardSummary(CamelModel):
    """Aggregate view served to the dashboard"""
    total_data_points: int
    latest_data: list[DataPoint]
    report_count: int
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Error body"""
    error: str


class HealthResponse(BaseModel):
    """Schema for health check"""
    status: str
    timestamp: str
    active_connections: int


class ApiInfoResponse(BaseModel):
    """Schema for API info"""
    message: str
    websocket: str
    dashboard: str
    reports: str
    status: str


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: type[ModelT], payload: Union[ModelT, dict]) -> ModelT:
    """Validate raw input against a schema, raising the application ValidationError"""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(format_validation_errors(e.errors()), e) from e
