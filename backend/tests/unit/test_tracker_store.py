import json

import pytest

from leetboard.domain.tracker.models import BaselineRecord, SolvedCounts, TrackingPeriod, safe_delta


@pytest.mark.asyncio
async def test_baseline_is_stored_with_camel_case_keys(store, fake_redis):
	record = BaselineRecord.seed(SolvedCounts(total_solved=42, easy_solved=20), TrackingPeriod("2024-05-01", "2024-05"))

	await store.save("alice", record)

	raw = json.loads(await fake_redis.get("test:baseline:alice"))
	assert raw["startOfDayTotal"] == 42
	assert raw["lastUpdatedMonth"] == "2024-05"
	assert await store.load("alice") == record


@pytest.mark.asyncio
async def test_missing_baseline_loads_as_none(store):
	assert await store.load("nobody") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"raw",
	[
		"not json",
		"[1, 2, 3]",
		'{"startOfDayTotal": 1}',
		'{"startOfDayTotal": "1", "startOfMonthTotal": 1, "total": 1, "easy": 1, "medium": 0, "hard": 0,'
		' "dailyIncrease": 0, "monthlyIncrease": 0, "lastUpdatedDay": "2024-05-01", "lastUpdatedMonth": "2024-05"}',
	],
)
async def test_malformed_baseline_loads_as_none(store, fake_redis, raw):
	await fake_redis.set("test:baseline:alice", raw)
	assert await store.load("alice") is None


@pytest.mark.asyncio
async def test_custom_records_default_to_empty(store, fake_redis):
	await fake_redis.set("test:custom:usernames", '{"oops": true}')
	await fake_redis.set("test:custom:mappings", '["oops"]')

	assert await store.load_custom_usernames() == []
	assert await store.load_custom_mappings() == {}


@pytest.mark.asyncio
async def test_custom_records_skip_non_string_items(store, fake_redis):
	await fake_redis.set("test:custom:usernames", '["alice", 7, null]')
	await fake_redis.set("test:custom:mappings", '{"alice": "Alice", "bob": 3}')

	assert await store.load_custom_usernames() == ["alice"]
	assert await store.load_custom_mappings() == {"alice": "Alice"}


def test_solved_counts_treat_missing_fields_as_zero():
	parsed = SolvedCounts.from_payload({"totalSolved": 17, "easySolved": None, "mediumSolved": "4"})
	assert parsed == SolvedCounts(total_solved=17, easy_solved=0, medium_solved=4, hard_solved=0)


def test_safe_delta_coerces_non_numeric_to_zero():
	assert safe_delta(10, None) == 0
	assert safe_delta(float("nan"), 3) == 0
	assert safe_delta(3, 10) == -7
