"""Service layer tying the directory, the engine and the last snapshot together."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Optional

from leetboard.domain.tracker.directory import DirectoryLoad, DirectoryManager
from leetboard.domain.tracker.errors import ReconcileError, UserAlreadyTrackedError, UserNotFoundError
from leetboard.domain.tracker.models import AddUserResult, DirectoryEntry, LeaderboardEntry, RefreshStatus
from leetboard.domain.tracker.reconcile import ReconciliationEngine
from leetboard.domain.tracker.remote import HttpRemoteDataClient
from leetboard.domain.tracker.store import BaselineStore, JSONKeyValueStore
from leetboard.obs import metrics
from leetboard.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LeaderboardSnapshot:
	"""What the presentation layer renders."""

	status: RefreshStatus = RefreshStatus.IDLE
	entries: list[LeaderboardEntry] = field(default_factory=list)
	refreshed_at: Optional[datetime] = None
	day: Optional[str] = None
	month: Optional[str] = None
	failed: list[str] = field(default_factory=list)
	error: Optional[str] = None
	directory_warning: Optional[str] = None


class TrackerService:
	"""Coordinates refresh cycles and user management for the API."""

	def __init__(
		self,
		directory: DirectoryManager,
		engine: ReconciliationEngine,
		*,
		clock: Callable[[], datetime] = _utcnow,
	) -> None:
		self._directory = directory
		self._engine = engine
		self._clock = clock
		self._snapshot = LeaderboardSnapshot()
		self._inflight: Optional[asyncio.Task[LeaderboardSnapshot]] = None

	@property
	def snapshot(self) -> LeaderboardSnapshot:
		return self._snapshot

	@property
	def refreshing(self) -> bool:
		return self._inflight is not None and not self._inflight.done()

	def directory_entries(self) -> list[DirectoryEntry]:
		return self._directory.directory.entries()

	@property
	def directory_warning(self) -> Optional[str]:
		return self._directory.warning

	async def load_directory(self) -> DirectoryLoad:
		loaded = await self._directory.load_directory()
		self._snapshot = replace(self._snapshot, directory_warning=loaded.warning)
		return loaded

	async def refresh(self, now: Optional[datetime] = None) -> LeaderboardSnapshot:
		"""Run one reconciliation cycle.

		Only one cycle runs at a time: a trigger that arrives while a cycle is
		in flight waits for that cycle and gets its snapshot.
		"""

		if self.refreshing:
			logger.info("Refresh already in flight, joining it")
			return await asyncio.shield(self._inflight)  # type: ignore[arg-type]
		self._inflight = asyncio.create_task(self._run_cycle(now), name="leetboard-refresh")
		return await asyncio.shield(self._inflight)

	async def _run_cycle(self, now: Optional[datetime]) -> LeaderboardSnapshot:
		previous = self._snapshot
		self._snapshot = replace(previous, status=RefreshStatus.LOADING)
		started = time.perf_counter()
		directory = self._directory.directory
		try:
			result = await self._engine.reconcile(directory.usernames, directory, now or self._clock())
		except ReconcileError as exc:
			logger.error("Refresh failed, keeping previous leaderboard", extra={"error": str(exc)})
			return self._fail(previous, started, exc)
		except Exception as exc:
			logger.exception("Refresh crashed, keeping previous leaderboard")
			return self._fail(previous, started, exc)

		metrics.observe_refresh("success", time.perf_counter() - started)
		self._snapshot = LeaderboardSnapshot(
			status=RefreshStatus.SUCCESS,
			entries=result.entries,
			refreshed_at=self._clock(),
			day=result.period.day,
			month=result.period.month,
			failed=result.failed,
			directory_warning=self._directory.warning,
		)
		return self._snapshot

	def _fail(self, previous: LeaderboardSnapshot, started: float, exc: Exception) -> LeaderboardSnapshot:
		metrics.observe_refresh("failure", time.perf_counter() - started)
		self._snapshot = replace(previous, status=RefreshStatus.FAILURE, error=str(exc) or type(exc).__name__)
		return self._snapshot

	async def add_user(self, username: str, display_name: Optional[str] = None) -> DirectoryEntry:
		result = await self._directory.add_user(username, display_name)
		if result is AddUserResult.ALREADY_EXISTS:
			raise UserAlreadyTrackedError(username)
		if result is AddUserResult.NOT_FOUND:
			raise UserNotFoundError(username)
		return DirectoryEntry(username=username, display_name=self._directory.directory.display_name(username))

	async def wait_idle(self) -> None:
		if self._inflight is not None:
			await asyncio.gather(self._inflight, return_exceptions=True)


def build_tracker_service(http, *, redis=None, settings: Optional[Settings] = None) -> TrackerService:
	"""Assemble the service from settings, an httpx client and a Redis client."""

	settings = settings or default_settings
	remote = HttpRemoteDataClient(
		http=http,
		stats_base_url=settings.stats_api_base_url,
		usernames_url=settings.directory_usernames_url,
		mappings_url=settings.directory_mappings_url,
		request_timeout=settings.fetch_timeout_seconds,
	)
	store = BaselineStore(JSONKeyValueStore(redis), prefix=settings.storage_prefix)
	return TrackerService(
		DirectoryManager(remote, store),
		ReconciliationEngine(remote, store, max_concurrency=settings.max_concurrency),
	)
