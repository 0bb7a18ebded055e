"""Ingest and aggregation service for data points"""
from typing import Union

from config.logger import logger
from config.settings import (
    DASHBOARD_LATEST_LIMIT,
    DATASET_HISTORY_LIMIT,
    STREAM_RESPONSE_LIMIT,
)
from database.db import DocumentStore
from models.schemas import (
    DashboardSummary,
    DataPoint,
    DataPointCreate,
    utc_now,
    validate_payload,
)
from services.websocket_manager import ConnectionManager


class AnalyticsService:
    """Persists data points, serves dashboard aggregates, and publishes new points"""

    def __init__(self, store: DocumentStore, manager: ConnectionManager):
        self.store = store
        self.manager = manager

    async def ingest(self, point: Union[DataPointCreate, dict]) -> DataPoint:
        """
        Store a data point and push it to every connected dashboard.

        The timestamp defaults to the insert time. The broadcast only
        happens once the point is persisted.
        """
        point = validate_payload(DataPointCreate, point)
        document = point.to_document()
        document["timestamp"] = (point.timestamp or utc_now()).isoformat()
        stored = DataPoint.model_validate(await self.store.insert_data_point(document))

        delivered = await self.manager.broadcast_new_point(stored.to_document())
        logger.debug(f"Data point {stored.id} ({stored.dataset_id}) sent to {delivered} dashboards")
        return stored

    async def get_dashboard_summary(self) -> DashboardSummary:
        total = await self.store.count_data_points()
        latest = await self.store.find_data_points(limit=DASHBOARD_LATEST_LIMIT)
        report_count = await self.store.count_reports()
        return DashboardSummary(
            total_data_points=total,
            latest_data=[DataPoint.model_validate(d) for d in latest],
            report_count=report_count,
            timestamp=utc_now(),
        )

    async def get_dataset_history(self, dataset_id: str, limit: int = DATASET_HISTORY_LIMIT) -> list[DataPoint]:
        """Up to `limit` points of one dataset, newest-first"""
        documents = await self.store.find_data_points(dataset_id=dataset_id, limit=limit)
        return [DataPoint.model_validate(d) for d in documents]

    async def get_stream_snapshot(self, dataset_id: str) -> list[DataPoint]:
        """Recent points answered to a realtime stream request"""
        return await self.get_dataset_history(dataset_id, limit=STREAM_RESPONSE_LIMIT)
