"""Database logic"""
import json
import uuid
from datetime import datetime, timezone
from typing import Optional

import aiosqlite
from config.logger import logger
from models.errors import StoreError

DATA_POINTS = "data_points"
REPORTS = "reports"

SCHEMA = (
    f"""
    CREATE TABLE IF NOT EXISTS {DATA_POINTS} (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL UNIQUE,
        dataset_id TEXT NOT NULL,
        timestamp TEXT NOT NULL,
        document TEXT NOT NULL
    )
    """,
    f"""
    CREATE INDEX IF NOT EXISTS idx_dataset_timestamp
    ON {DATA_POINTS}(dataset_id, timestamp)
    """,
    f"""
    CREATE INDEX IF NOT EXISTS idx_timestamp ON {DATA_POINTS}(timestamp)
    """,
    f"""
    CREATE TABLE IF NOT EXISTS {REPORTS} (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL UNIQUE,
        created_at TEXT NOT NULL,
        document TEXT NOT NULL
    )
    """,
)


def new_document_id() -> str:
    """Store-assigned document id"""
    return uuid.uuid4().hex


def timestamp_key(value: str) -> str:
    """Fixed-width UTC form of an ISO-8601 timestamp, sortable as text"""
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.replace(tzinfo=None).isoformat(timespec="microseconds")


class DocumentStore:
    """
    JSON document store on top of SQLite.

    Holds two collections, data points and reports. Each document is kept
    as a JSON blob next to the columns it is queried and sorted by.
    Timestamps are indexed in a fixed-width UTC form so they sort as text.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._db: Optional[aiosqlite.Connection] = None

    async def open(self):
        """Open the connection and create collections if needed"""
        try:
            self._db = await aiosqlite.connect(self.db_path)
            for statement in SCHEMA:
                await self._db.execute(statement)
            await self._db.commit()
        except aiosqlite.Error as e:
            logger.error(f"SQLite init error: {e}", exc_info=True)
            raise StoreError(f"Could not open document store: {e}", e) from e
        logger.info(f"Document store opened at {self.db_path}")

    async def close(self):
        if self._db is not None:
            await self._db.close()
            self._db = None
            logger.info("Document store closed")

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreError("Document store is not open")
        return self._db

    async def _fetch_documents(self, query: str, params: tuple = ()) -> list[dict]:
        try:
            async with self.db.execute(query, params) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error(f"Query error: {e}", exc_info=True)
            raise StoreError(str(e), e) from e
        return [json.loads(row[0]) for row in rows]

    async def _count(self, collection: str) -> int:
        try:
            async with self.db.execute(f"SELECT COUNT(*) FROM {collection}") as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error(f"Count error: {e}", exc_info=True)
            raise StoreError(str(e), e) from e
        return row[0] if row else 0

    async def _insert(self, query: str, params: tuple):
        try:
            await self.db.execute(query, params)
            await self.db.commit()
        except aiosqlite.Error as e:
            logger.error(f"SQLite save error: {e}", exc_info=True)
            raise StoreError(str(e), e) from e

    # Data points

    async def insert_data_point(self, document: dict) -> dict:
        """Persist a data point document; `document` must carry a timestamp"""
        document = {**document, "id": new_document_id()}
        await self._insert(
            f"""
            INSERT INTO {DATA_POINTS} (id, dataset_id, timestamp, document)
            VALUES (?, ?, ?, ?)
            """,
            (
                document["id"],
                document["datasetId"],
                timestamp_key(document["timestamp"]),
                json.dumps(document),
            ),
        )
        return document

    async def find_data_points(self, dataset_id: Optional[str] = None, limit: int = 100) -> list[dict]:
        """Data points newest-first, optionally restricted to one dataset"""
        if dataset_id is None:
            return await self._fetch_documents(
                f"SELECT document FROM {DATA_POINTS} ORDER BY timestamp DESC, seq DESC LIMIT ?",
                (limit,),
            )
        return await self._fetch_documents(
            f"""
            SELECT document FROM {DATA_POINTS}
            WHERE dataset_id = ?
            ORDER BY timestamp DESC, seq DESC
            LIMIT ?
            """,
            (dataset_id, limit),
        )

    async def count_data_points(self) -> int:
        return await self._count(DATA_POINTS)

    # Reports

    async def insert_report(self, document: dict) -> dict:
        document = {**document, "id": new_document_id()}
        await self._insert(
            f"INSERT INTO {REPORTS} (id, created_at, document) VALUES (?, ?, ?)",
            (document["id"], document["createdAt"], json.dumps(document)),
        )
        return document

    async def find_reports(self) -> list[dict]:
        """All reports in insertion order"""
        return await self._fetch_documents(f"SELECT document FROM {REPORTS} ORDER BY seq")

    async def find_report(self, report_id: str) -> Optional[dict]:
        documents = await self._fetch_documents(
            f"SELECT document FROM {REPORTS} WHERE id = ?", (report_id,)
        )
        return documents[0] if documents else None

    async def count_reports(self) -> int:
        return await self._count(REPORTS)
