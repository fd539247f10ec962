"""Reconciliation engine: fresh solved counts merged against stored baselines."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from leetboard.domain.tracker.errors import ReconcileError, RemoteFetchError
from leetboard.domain.tracker.models import (
	BaselineRecord,
	Directory,
	LeaderboardEntry,
	ReconcileOutcome,
	ReconcileResult,
	SolvedCounts,
	TrackingPeriod,
	safe_delta,
)
from leetboard.domain.tracker.remote import RemoteDataClient
from leetboard.domain.tracker.store import BaselineStore
from leetboard.obs import metrics

logger = logging.getLogger(__name__)


def advance_baseline(
	stored: Optional[BaselineRecord],
	counts: SolvedCounts,
	period: TrackingPeriod,
) -> BaselineRecord:
	"""Compute the replacement baseline for a successful fetch.

	Rollover is plain tag inequality: a different day tag resets the daily
	start, a different month tag resets the monthly start.
	"""

	if stored is None:
		return BaselineRecord.seed(counts, period)

	current_total = counts.total_solved
	is_new_day = stored.last_updated_day != period.day
	is_new_month = stored.last_updated_month != period.month
	if is_new_day:
		metrics.inc_rollover("day")
	if is_new_month:
		metrics.inc_rollover("month")

	daily_increase = 0 if is_new_day else safe_delta(current_total, stored.start_of_day_total)
	monthly_increase = 0 if is_new_month else safe_delta(current_total, stored.start_of_month_total)

	return BaselineRecord(
		start_of_day_total=current_total if is_new_day else stored.start_of_day_total,
		start_of_month_total=current_total if is_new_month else stored.start_of_month_total,
		total=current_total,
		easy=counts.easy_solved,
		medium=counts.medium_solved,
		hard=counts.hard_solved,
		daily_increase=daily_increase,
		monthly_increase=monthly_increase,
		last_updated_day=period.day,
		last_updated_month=period.month,
	)


def rank_entries(entries: Sequence[LeaderboardEntry]) -> List[LeaderboardEntry]:
	"""Order by total descending and number ranks from 1; ties keep input order."""

	ordered = sorted(entries, key=lambda entry: entry.total, reverse=True)
	return [entry.ranked(idx) for idx, entry in enumerate(ordered, start=1)]


class ReconciliationEngine:
	"""Runs one refresh cycle across every tracked username."""

	def __init__(
		self,
		remote: RemoteDataClient,
		store: BaselineStore,
		*,
		max_concurrency: int = 0,
	) -> None:
		self._remote = remote
		self._store = store
		self._max_concurrency = max(0, max_concurrency)

	async def _fallback(self, username: str, display_name: str) -> LeaderboardEntry:
		try:
			stored = await self._store.load(username)
		except Exception:
			logger.warning("Baseline unavailable for fallback", extra={"username": username}, exc_info=True)
			stored = None
		if stored is None:
			return LeaderboardEntry.empty(username, display_name)
		return LeaderboardEntry.from_baseline(username, display_name, stored, stale=True)

	async def reconcile_user(self, username: str, directory: Directory, period: TrackingPeriod) -> ReconcileOutcome:
		"""Reconcile a single user. Never raises for per-user problems."""

		display_name = directory.display_name(username)
		try:
			counts = await self._remote.fetch_counts(username)
		except RemoteFetchError as exc:
			metrics.inc_user_fetch("error")
			logger.warning("Fetch failed, serving cached figures", extra={"username": username, "error": exc.detail})
			entry = await self._fallback(username, display_name)
			return ReconcileOutcome(username=username, ok=False, entry=entry, error=str(exc))
		metrics.inc_user_fetch("ok")

		try:
			stored = await self._store.load(username)
			updated = advance_baseline(stored, counts, period)
			await self._store.save(username, updated)
		except Exception as exc:
			logger.exception("Baseline update failed", extra={"username": username})
			entry = await self._fallback(username, display_name)
			return ReconcileOutcome(username=username, ok=False, entry=entry, error=f"storage: {exc}")

		entry = LeaderboardEntry.from_baseline(username, display_name, updated, stale=False)
		return ReconcileOutcome(username=username, ok=True, entry=entry)

	async def reconcile(
		self,
		usernames: Iterable[str],
		directory: Directory,
		now: Optional[datetime] = None,
	) -> ReconcileResult:
		"""Fan out one task per username, wait for all, and rank the results."""

		try:
			names = list(usernames)
		except Exception as exc:
			raise ReconcileError(f"could not read usernames: {exc}") from exc
		period = TrackingPeriod.from_datetime(now)

		semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None

		async def _run(username: str) -> ReconcileOutcome:
			if semaphore is None:
				return await self.reconcile_user(username, directory, period)
			async with semaphore:
				return await self.reconcile_user(username, directory, period)

		settled = await asyncio.gather(*(_run(name) for name in names), return_exceptions=True)

		outcomes: List[ReconcileOutcome] = []
		for username, result in zip(names, settled):
			if isinstance(result, ReconcileOutcome):
				outcomes.append(result)
				continue
			if isinstance(result, asyncio.CancelledError):
				raise result
			# Only reachable on an unexpected bug inside reconcile_user.
			logger.error("Reconcile task crashed", extra={"username": username}, exc_info=result)
			entry = await self._fallback(username, directory.display_name(username))
			outcomes.append(ReconcileOutcome(username=username, ok=False, entry=entry, error=repr(result)))

		entries = rank_entries([outcome.entry for outcome in outcomes])
		logger.info(
			"Reconciliation cycle complete",
			extra={
				"day": period.day,
				"users": len(names),
				"failed": sum(1 for outcome in outcomes if not outcome.ok),
			},
		)
		return ReconcileResult(period=period, entries=entries, outcomes=outcomes)
