import sys
from pathlib import Path
from typing import Iterable, Mapping, Optional

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from leetboard.domain.tracker.directory import DirectoryManager
from leetboard.domain.tracker.errors import DirectoryFetchError, RemoteFetchError
from leetboard.domain.tracker.models import SolvedCounts
from leetboard.domain.tracker.reconcile import ReconciliationEngine
from leetboard.domain.tracker.service import TrackerService
from leetboard.domain.tracker.store import BaselineStore, JSONKeyValueStore
from leetboard.main import app


class FakeRemote:
	"""In-memory stand-in for the stats API and directory files."""

	def __init__(
		self,
		counts: Optional[Mapping[str, SolvedCounts]] = None,
		*,
		failing: Iterable[str] = (),
		directory: Optional[tuple[list[str], dict[str, str]]] = None,
		directory_error: bool = False,
	) -> None:
		self.counts = dict(counts or {})
		self.failing = set(failing)
		self.directory = directory or ([], {})
		self.directory_error = directory_error
		self.calls: list[str] = []

	async def fetch_counts(self, username: str) -> SolvedCounts:
		self.calls.append(username)
		if username in self.failing or username not in self.counts:
			raise RemoteFetchError(username, "HTTPStatusError: 404")
		return self.counts[username]

	async def fetch_directory(self) -> tuple[list[str], dict[str, str]]:
		if self.directory_error:
			raise DirectoryFetchError("ConnectError: offline")
		usernames, mappings = self.directory
		return list(usernames), dict(mappings)



@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from leetboard.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture
def remote() -> FakeRemote:
	return FakeRemote()


@pytest.fixture
def store() -> BaselineStore:
	return BaselineStore(JSONKeyValueStore(), prefix="test")


@pytest.fixture
def tracker(remote, store) -> TrackerService:
	return TrackerService(DirectoryManager(remote, store), ReconciliationEngine(remote, store))


@pytest_asyncio.fixture
async def api_client(tracker):
	original = getattr(app.state, "tracker", None)
	app.state.tracker = tracker
	transport = ASGITransport(app=app)
	try:
		async with AsyncClient(transport=transport, base_url="http://testserver") as client:
			yield client
	finally:
		app.state.tracker = original
