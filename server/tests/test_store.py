"""Tests for the SQLite document store."""
import pytest
from database.db import DocumentStore, timestamp_key
from models.errors import StoreError


def point(dataset_id, value, timestamp):
    return {
        "datasetId": dataset_id,
        "value": value,
        "category": "c",
        "metadata": {},
        "timestamp": timestamp,
    }


def test_timestamp_key_normalizes_to_utc():
    assert timestamp_key("2024-01-01T01:00:00+01:00") == "2024-01-01T00:00:00.000000"
    assert timestamp_key("2024-01-01T00:00:00Z") == "2024-01-01T00:00:00.000000"
    assert timestamp_key("2024-01-01T00:00:00.500000+00:00") == "2024-01-01T00:00:00.500000"


def test_timestamp_key_pads_early_years():
    assert timestamp_key("0999-06-01T00:00:00+00:00") == "0999-06-01T00:00:00.000000"
    assert timestamp_key("0999-06-01T00:00:00+00:00") < timestamp_key("1999-01-01T00:00:00+00:00")


def test_timestamp_key_orders_fractional_seconds():
    assert timestamp_key("2024-01-01T00:00:00Z") < timestamp_key("2024-01-01T00:00:00.500000+00:00")


@pytest.mark.asyncio
async def test_insert_assigns_id(store):
    stored = await store.insert_data_point(point("A", 1, "2024-01-01T00:00:00Z"))

    assert stored["id"]
    assert stored["datasetId"] == "A"
    assert await store.count_data_points() == 1


@pytest.mark.asyncio
async def test_find_orders_newest_first(store):
    await store.insert_data_point(point("A", 2, "2024-01-02T00:00:00Z"))
    await store.insert_data_point(point("A", 1, "2024-01-01T00:00:00Z"))
    await store.insert_data_point(point("A", 3, "2024-01-03T00:00:00Z"))

    documents = await store.find_data_points(dataset_id="A")

    assert [d["value"] for d in documents] == [3, 2, 1]


@pytest.mark.asyncio
async def test_equal_timestamps_keep_latest_insert_first(store):
    for value in (1, 2, 3):
        await store.insert_data_point(point("A", value, "2024-01-01T00:00:00Z"))

    documents = await store.find_data_points(dataset_id="A")

    assert [d["value"] for d in documents] == [3, 2, 1]


@pytest.mark.asyncio
async def test_find_filters_dataset_and_limits(store):
    for i in range(5):
        await store.insert_data_point(point("A", i, f"2024-01-01T00:00:0{i}Z"))
    await store.insert_data_point(point("B", 99, "2024-01-02T00:00:00Z"))

    documents = await store.find_data_points(dataset_id="A", limit=3)

    assert len(documents) == 3
    assert {d["datasetId"] for d in documents} == {"A"}
    assert await store.find_data_points(dataset_id="missing") == []


@pytest.mark.asyncio
async def test_find_all_spans_datasets(store):
    await store.insert_data_point(point("A", 1, "2024-01-01T00:00:00Z"))
    await store.insert_data_point(point("B", 2, "2024-01-02T00:00:00Z"))

    documents = await store.find_data_points(limit=10)

    assert [d["datasetId"] for d in documents] == ["B", "A"]


@pytest.mark.asyncio
async def test_reports_roundtrip(store):
    first = await store.insert_report({"title": "one", "createdAt": "2024-01-01T00:00:00Z"})
    second = await store.insert_report({"title": "two", "createdAt": "2024-01-01T00:00:00Z"})

    assert [r["title"] for r in await store.find_reports()] == ["one", "two"]
    assert await store.find_report(second["id"]) == second
    assert await store.find_report("nope") is None
    assert await store.count_reports() == 2
    assert first["id"] != second["id"]


@pytest.mark.asyncio
async def test_data_survives_reopen(db_path):
    store = DocumentStore(db_path)
    await store.open()
    await store.insert_data_point(point("A", 1, "2024-01-01T00:00:00Z"))
    await store.close()

    reopened = DocumentStore(db_path)
    await reopened.open()
    try:
        assert await reopened.count_data_points() == 1
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_closed_store_raises_store_error(db_path):
    store = DocumentStore(db_path)

    with pytest.raises(StoreError):
        await store.count_data_points()
