"""Report registry"""
from typing import Union

from database.db import DocumentStore
from models.errors import NotFoundError
from models.schemas import Report, ReportCreate, utc_now, validate_payload


class ReportRegistry:
    """Create and read report definitions"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_report(self, spec: Union[ReportCreate, dict]) -> Report:
        spec = validate_payload(ReportCreate, spec)
        now = utc_now().isoformat()
        document = spec.to_document()
        document["createdAt"] = now
        document["updatedAt"] = now
        return Report.model_validate(await self.store.insert_report(document))

    async def list_reports(self) -> list[Report]:
        return [Report.model_validate(d) for d in await self.store.find_reports()]

    async def get_report(self, report_id: str) -> Report:
        document = await self.store.find_report(report_id)
        if document is None:
            raise NotFoundError(f"Report {report_id} not found")
        return Report.model_validate(document)
