"""Tests for QueryPipeline and the dataset entrypoints."""

import threading
from datetime import datetime, timezone

import httpx
import pyarrow.parquet as pq
import pytest

import bulkfeed.pipeline.orchestrator as orchestrator_module
from conftest import (
    EARTHQUAKE_CSV,
    EARTHQUAKE_HEADER,
    EARTHQUAKE_ROWS,
    EXPECTED_EARTHQUAKES,
    FROM_MS,
    USGS_URL,
    parquet_bytes,
    tlc_url,
    trips_table,
)
from bulkfeed.datasets import EarthquakeFeed, TaxiTrips
from bulkfeed.datasets.records import Earthquake, Trip
from bulkfeed.engine import map_records
from bulkfeed.errors import FetchError, InvalidQueryError, SchemaMismatchError
from bulkfeed.pipeline import QueryPipeline, get_earthquakes, get_trips, now_ms


@pytest.fixture
def pipeline(tmp_path) -> QueryPipeline:
    return QueryPipeline(cache_dir=str(tmp_path / "cache"))


@pytest.fixture
def usgs(respx_mock):
    return respx_mock.get(USGS_URL).mock(return_value=httpx.Response(200, text=EARTHQUAKE_CSV))


class TestEarthquakes:

    @pytest.mark.asyncio
    async def test_five_results_from_known_timestamp(self, usgs, pipeline):
        quakes = await get_earthquakes(FROM_MS, 5, pipeline=pipeline)

        assert quakes == [Earthquake(*values) for values in EXPECTED_EARTHQUAKES]

    @pytest.mark.asyncio
    async def test_results_bounded_sorted_and_after_start(self, usgs, pipeline):
        start = datetime.fromtimestamp(FROM_MS / 1000, tz=timezone.utc)
        for n in (1, 3, 7, 50):
            quakes = await get_earthquakes(FROM_MS, n, pipeline=pipeline)

            assert len(quakes) <= n
            assert [q.time for q in quakes] == sorted(q.time for q in quakes)
            assert all(q.time >= start for q in quakes)

    @pytest.mark.asyncio
    async def test_zero_results_is_empty(self, usgs, pipeline):
        assert await get_earthquakes(FROM_MS, 0, pipeline=pipeline) == []

    @pytest.mark.asyncio
    async def test_negative_results_rejected(self, pipeline):
        with pytest.raises(InvalidQueryError):
            await get_earthquakes(FROM_MS, -1, pipeline=pipeline)

    @pytest.mark.asyncio
    async def test_repeated_query_is_identical_and_cached(self, usgs, pipeline):
        first = await get_earthquakes(FROM_MS, 5, pipeline=pipeline)
        second = await get_earthquakes(FROM_MS, 5, pipeline=pipeline)

        assert [q.to_dict() for q in first] == [q.to_dict() for q in second]
        assert usgs.call_count == 1

    @pytest.mark.asyncio
    async def test_row_with_missing_field_is_dropped(self, respx_mock, pipeline):
        # us005 loses its magnitude
        rows = [r.replace(",4.2,mb,", ",,mb,") for r in EARTHQUAKE_ROWS]
        respx_mock.get(USGS_URL).mock(
            return_value=httpx.Response(200, text="\n".join([EARTHQUAKE_HEADER, *rows]) + "\n")
        )

        quakes = await get_earthquakes(FROM_MS, 10, pipeline=pipeline)

        assert "Oaxaca, Mexico" not in [q.location for q in quakes]
        assert len(quakes) == 6
        assert quakes[0].location == "10 km NE of Pahala, Hawaii"

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, respx_mock, pipeline):
        respx_mock.get(USGS_URL).mock(return_value=httpx.Response(500, text="oops"))

        with pytest.raises(FetchError):
            await get_earthquakes(FROM_MS, 5, pipeline=pipeline)

    @pytest.mark.asyncio
    async def test_fake_data_skips_network(self):
        quakes = await get_earthquakes(FROM_MS, 3, fake_data=True)
        assert len(quakes) == 3
        assert quakes[0].location == "Somewhere"


class TestTrips:

    @pytest.mark.asyncio
    async def test_five_results_from_known_timestamp(self, respx_mock, pipeline):
        respx_mock.get(tlc_url(2024, 6)).mock(
            return_value=httpx.Response(200, content=parquet_bytes(trips_table()))
        )

        trips = await get_trips(FROM_MS, 5, pipeline=pipeline)

        assert [t.fare_amount for t in trips] == [12.1, 15.0, 45.2, 22.0, 9.8]
        assert trips[0] == Trip(
            tpep_pickup_datetime=datetime(2024, 6, 30, 21, 40, 21, tzinfo=timezone.utc),
            tpep_dropoff_datetime=datetime(2024, 6, 30, 21, 43, 21, tzinfo=timezone.utc),
            trip_distance=2.25,
            fare_amount=12.1,
        )

    @pytest.mark.asyncio
    async def test_window_is_not_split_across_months(self, respx_mock, pipeline):
        """Only June is consulted even though the window runs into July."""
        june = respx_mock.get(tlc_url(2024, 6)).mock(
            return_value=httpx.Response(200, content=parquet_bytes(trips_table()))
        )

        trips = await get_trips(FROM_MS, 100, pipeline=pipeline)

        assert len(trips) == 5
        assert june.call_count == 1

    @pytest.mark.asyncio
    async def test_new_month_triggers_exactly_one_fetch(self, respx_mock, pipeline):
        january_ms = int(datetime(2024, 1, 15, tzinfo=timezone.utc).timestamp() * 1000)
        july_ms = int(datetime(2024, 7, 15, tzinfo=timezone.utc).timestamp() * 1000)
        january = respx_mock.get(tlc_url(2024, 1)).mock(
            return_value=httpx.Response(200, content=parquet_bytes(trips_table()))
        )
        july = respx_mock.get(tlc_url(2024, 7)).mock(
            return_value=httpx.Response(200, content=parquet_bytes(trips_table()))
        )

        await get_trips(january_ms, 5, pipeline=pipeline)
        await get_trips(july_ms, 5, pipeline=pipeline)
        await get_trips(july_ms, 5, pipeline=pipeline)

        assert january.call_count == 1
        assert july.call_count == 1
        artifacts = await pipeline.store.list_artifacts(TaxiTrips())
        assert [p.name for p in artifacts] == [
            "yellow_tripdata_2024-01.parquet",
            "yellow_tripdata_2024-07.parquet",
        ]

    @pytest.mark.asyncio
    async def test_corrupted_cache_is_not_evicted(self, pipeline):
        trips = TaxiTrips()
        partition = trips.resolve(FROM_MS)
        path = pipeline.store.artifact_path(trips, partition)
        path.parent.mkdir(parents=True)
        pq.write_table(trips_table().drop(["trip_distance"]), path)

        with pytest.raises(SchemaMismatchError):
            await get_trips(FROM_MS, 5, pipeline=pipeline)
        assert path.exists()


@pytest.mark.asyncio
async def test_get_records_accepts_any_dataset(usgs, pipeline):
    quakes = await pipeline.get_records(EarthquakeFeed(), FROM_MS, 2)
    assert [q.magnitude for q in quakes] == [2.3, 4.2]


@pytest.mark.asyncio
async def test_query_and_mapping_run_in_a_worker_thread(usgs, pipeline, mocker):
    threads = []

    def recording_map_records(*args):
        threads.append(threading.get_ident())
        return map_records(*args)

    mocker.patch.object(orchestrator_module, "map_records", side_effect=recording_map_records)

    quakes = await pipeline.get_records(EarthquakeFeed(), FROM_MS, 5)

    assert len(quakes) == 5
    assert threads and threading.get_ident() not in threads


def test_now_ms_is_epoch_milliseconds():
    value = now_ms()
    assert isinstance(value, int)
    assert abs(value - datetime.now(timezone.utc).timestamp() * 1000) < 5000
