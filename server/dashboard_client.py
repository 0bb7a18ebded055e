#!/usr/bin/env python3
"""Terminal dashboard for the InsightHub analytics server"""
import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Any, Optional

import aiohttp
import websockets
from config.logger import logger
from config.settings import CLIENT_BUFFER_SIZE
from services.websocket_manager import (
    EVENT_CONNECTED,
    EVENT_DATA_NEW,
    EVENT_ERROR,
    EVENT_STREAM,
    EVENT_STREAM_RESPONSE,
    encode_event,
)

SPARK_BLOCKS = "▁▂▃▄▅▆▇█"
CHART_WIDTH = 60
TABLE_ROWS = 20


def sparkline(values: list[float], width: int = CHART_WIDTH) -> str:
    """Render values (oldest first) as a one-line block chart"""
    values = values[-width:]
    if not values:
        return ""
    low, high = min(values), max(values)
    span = high - low
    if span == 0:
        return SPARK_BLOCKS[len(SPARK_BLOCKS) // 2] * len(values)
    top = len(SPARK_BLOCKS) - 1
    return "".join(SPARK_BLOCKS[round((v - low) / span * top)] for v in values)


def format_time(value: Optional[str]) -> str:
    if not value:
        return "-"
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


class DashboardState:
    """
    View model of the dashboard.

    Holds the last summary, the report list, a rolling buffer of pushed
    data points (newest first, capped) and the per-dataset stream results.
    Stream results are keyed by the dataset last requested, since the
    response payload itself does not name its dataset.
    """

    def __init__(self, buffer_size: int = CLIENT_BUFFER_SIZE):
        self.buffer_size = buffer_size
        self.total_data_points = 0
        self.report_count = 0
        self.last_update: Optional[str] = None
        self.latest_data: list[dict] = []
        self.reports: list[dict] = []
        self.dataset_data: dict[str, list[dict]] = {}
        self.selected_dataset: Optional[str] = None
        self.loading = True

    def apply_summary(self, summary: dict):
        self.total_data_points = summary.get("totalDataPoints", 0)
        self.report_count = summary.get("reportCount", 0)
        self.last_update = summary.get("timestamp")
        self.latest_data = list(summary.get("latestData", []))[: self.buffer_size]
        self.loading = False

    def apply_reports(self, reports: list[dict]):
        self.reports = list(reports)

    def on_new_point(self, point: dict):
        """Prepend a pushed point, dropping the oldest beyond the cap"""
        self.latest_data = [point, *self.latest_data][: self.buffer_size]

    def select_report(self, report: dict) -> Optional[str]:
        """Select the report's first dataset; returns it, or None if it has none"""
        dataset_ids = report.get("datasetIds") or []
        if not dataset_ids:
            return None
        self.selected_dataset = dataset_ids[0]
        return self.selected_dataset

    def on_stream_response(self, points: list[dict]) -> bool:
        """Cache a stream response; True when the selected table changed"""
        if self.selected_dataset is None:
            return False
        self.dataset_data[self.selected_dataset] = list(points)
        return True

    def selected_rows(self) -> Optional[list[dict]]:
        if self.selected_dataset is None:
            return None
        return self.dataset_data.get(self.selected_dataset)

    def render(self) -> str:
        if self.loading:
            return "Loading analytics dashboard..."

        lines = [
            "📊 InsightHub Analytics Dashboard",
            f"   Total Data Points: {self.total_data_points}"
            f" | Total Reports: {self.report_count}"
            f" | Last Update: {format_time(self.last_update)}",
            "",
            "Real-Time Data Visualization",
        ]
        if self.latest_data:
            values = [p.get("value", 0) for p in reversed(self.latest_data)]
            lines.append(f"   {sparkline(values)}")
            lines.append(f"   latest: {self.latest_data[0].get('value')} ({len(self.latest_data)} points)")
        else:
            lines.append("   No data yet")

        lines.append("")
        lines.append("Analytics Reports")
        if self.reports:
            for index, report in enumerate(self.reports):
                datasets = ", ".join(report.get("datasetIds") or []) or "-"
                lines.append(f"   [{index}] {report.get('title')} ({report.get('chartType')}) datasets: {datasets}")
        else:
            lines.append("   No reports available")

        rows = self.selected_rows()
        if rows is not None:
            lines.append("")
            lines.append(f"Dataset: {self.selected_dataset}")
            lines.append(f"   {'Timestamp':<20} {'Value':>12}  Category")
            for row in rows[:TABLE_ROWS]:
                lines.append(
                    f"   {format_time(row.get('timestamp')):<20} {str(row.get('value')):>12}  {row.get('category')}"
                )
        return "\n".join(lines)


class DashboardClient:
    """
    Keeps one long-lived WebSocket connection to the server.

    Event handlers are bound once per connection; changing the selected
    dataset only sends a new stream request.
    """

    def __init__(self, api_url: str, websocket_url: str, state: Optional[DashboardState] = None):
        self.api_url = api_url.rstrip("/")
        self.websocket_url = websocket_url
        self.state = state or DashboardState()
        self.websocket = None
        self.handlers = {
            EVENT_CONNECTED: self.handle_connected,
            EVENT_DATA_NEW: self.handle_new_point,
            EVENT_STREAM_RESPONSE: self.handle_stream_response,
            EVENT_ERROR: self.handle_error,
        }

    async def fetch_json(self, session: aiohttp.ClientSession, path: str) -> Any:
        async with session.get(f"{self.api_url}{path}") as response:
            response.raise_for_status()
            return await response.json()

    async def fetch_dashboard(self, session: aiohttp.ClientSession):
        try:
            self.state.apply_summary(await self.fetch_json(session, "/api/analytics/dashboard"))
        except aiohttp.ClientError as e:
            logger.error(f"Error fetching dashboard: {e}")
            self.state.loading = False

    async def fetch_reports(self, session: aiohttp.ClientSession):
        try:
            self.state.apply_reports(await self.fetch_json(session, "/api/reports"))
        except aiohttp.ClientError as e:
            logger.error(f"Error fetching reports: {e}")

    async def view_report(self, report: dict) -> bool:
        """Select a report's dataset and ask the server for its recent points"""
        dataset_id = self.state.select_report(report)
        if dataset_id is None or self.websocket is None:
            return False
        await self.websocket.send(encode_event(EVENT_STREAM, dataset_id))
        return True

    async def handle_connected(self, data: Any):
        logger.info(f"Connected to analytics server as {data.get('id') if isinstance(data, dict) else data}")
        async with aiohttp.ClientSession() as session:
            await asyncio.gather(self.fetch_dashboard(session), self.fetch_reports(session))
        self.refresh()

    async def handle_new_point(self, data: Any):
        self.state.on_new_point(data)
        self.refresh()

    async def handle_stream_response(self, data: Any):
        if self.state.on_stream_response(data):
            self.refresh()

    async def handle_error(self, data: Any):
        logger.error(f"Server error: {data}")

    async def dispatch(self, raw: str):
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed message: {raw[:100]}")
            return
        if not isinstance(message, dict):
            return
        handler = self.handlers.get(message.get("event"))
        if handler is not None:
            await handler(message.get("data"))

    def refresh(self):
        print("\033[2J\033[H" + self.state.render(), flush=True)

    async def run(self, report_index: Optional[int] = None):
        """Run main loop"""
        print(f"🔌 Connecting to {self.websocket_url}...")
        try:
            async with websockets.connect(self.websocket_url) as websocket:
                self.websocket = websocket
                selection_pending = report_index is not None
                async for raw in websocket:
                    await self.dispatch(raw)
                    if selection_pending and self.state.reports:
                        selection_pending = False
                        if 0 <= report_index < len(self.state.reports):
                            await self.view_report(self.state.reports[report_index])
                        else:
                            logger.warning(f"No report at index {report_index}")
        except websockets.exceptions.ConnectionClosed:
            print("\n❌ WebSocket connection closed")
        except OSError as e:
            print(f"❌ Could not connect: {e}")
        finally:
            self.websocket = None


def main():
    parser = argparse.ArgumentParser(
        description="Live terminal view of the InsightHub analytics dashboard"
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default="http://localhost:5000",
        help="REST API base URL (default: http://localhost:5000)"
    )
    parser.add_argument(
        "--url", "-u",
        type=str,
        default="ws://localhost:5000/ws",
        help="WebSocket server URL (default: ws://localhost:5000/ws)"
    )
    parser.add_argument(
        "--report", "-r",
        type=int,
        default=None,
        help="Index of the report whose dataset table to show"
    )

    args = parser.parse_args()

    # Check URL format
    if not args.url.startswith(('ws://', 'wss://')):
        print("⚠️  URL must start with ws:// or wss://")
        print(f"   You provided: {args.url}")
        sys.exit(1)

    client = DashboardClient(args.api_url, args.url)

    try:
        asyncio.run(client.run(args.report))
    except KeyboardInterrupt:
        print("\n✅ Shutdown complete")


if __name__ == "__main__":
    main()
