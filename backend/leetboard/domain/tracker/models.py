"""Domain models for solved-count tracking and the progress leaderboard."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Mapping, MutableMapping, Optional


def _get_int(mapping: Mapping[str, Any], name: str) -> int:
	"""Read an integer field, treating missing or non-numeric values as 0."""

	raw = mapping.get(name, 0)
	if raw is None or isinstance(raw, bool):
		return 0
	try:
		value = float(raw)
	except (TypeError, ValueError):
		return 0
	if math.isnan(value) or math.isinf(value):
		return 0
	return int(value)


def _require_int(mapping: Mapping[str, Any], name: str) -> int:
	"""Read a stored integer field; anything else means the record is corrupt."""

	raw = mapping[name]
	if isinstance(raw, bool) or not isinstance(raw, (int, float)):
		raise ValueError(f"{name} is not numeric")
	if isinstance(raw, float) and (math.isnan(raw) or math.isinf(raw)):
		raise ValueError(f"{name} is not finite")
	return int(raw)


def _require_str(mapping: Mapping[str, Any], name: str) -> str:
	raw = mapping[name]
	if not isinstance(raw, str):
		raise ValueError(f"{name} is not a string")
	return raw


def safe_delta(current: Any, baseline: Any) -> int:
	"""Subtract two totals, coercing a non-numeric result to 0.

	Negative results are kept as-is.
	"""

	try:
		value = float(current) - float(baseline)
	except (TypeError, ValueError):
		return 0
	if math.isnan(value) or math.isinf(value):
		return 0
	return int(value)


@dataclass(frozen=True, slots=True)
class TrackingPeriod:
	"""Day and month tags shared by every user in one reconciliation cycle."""

	day: str
	month: str

	@classmethod
	def from_datetime(cls, when: Optional[datetime] = None) -> "TrackingPeriod":
		when = when or datetime.now(timezone.utc)
		if when.tzinfo is not None:
			when = when.astimezone(timezone.utc)
		return cls(day=when.strftime("%Y-%m-%d"), month=when.strftime("%Y-%m"))


@dataclass(frozen=True, slots=True)
class SolvedCounts:
	"""Cumulative solved counts reported by the stats API for one user."""

	total_solved: int = 0
	easy_solved: int = 0
	medium_solved: int = 0
	hard_solved: int = 0

	@classmethod
	def from_payload(cls, payload: Mapping[str, Any]) -> "SolvedCounts":
		return cls(
			total_solved=_get_int(payload, "totalSolved"),
			easy_solved=_get_int(payload, "easySolved"),
			medium_solved=_get_int(payload, "mediumSolved"),
			hard_solved=_get_int(payload, "hardSolved"),
		)


@dataclass(frozen=True, slots=True)
class BaselineRecord:
	"""Persisted reference totals for a username.

	Stored as JSON with camelCase keys so records written by earlier clients
	keep loading.
	"""

	start_of_day_total: int
	start_of_month_total: int
	total: int
	easy: int
	medium: int
	hard: int
	daily_increase: int
	monthly_increase: int
	last_updated_day: str
	last_updated_month: str

	@classmethod
	def seed(cls, counts: SolvedCounts, period: TrackingPeriod) -> "BaselineRecord":
		"""Record for a first-seen user; both deltas start at zero."""

		return cls(
			start_of_day_total=counts.total_solved,
			start_of_month_total=counts.total_solved,
			total=counts.total_solved,
			easy=counts.easy_solved,
			medium=counts.medium_solved,
			hard=counts.hard_solved,
			daily_increase=0,
			monthly_increase=0,
			last_updated_day=period.day,
			last_updated_month=period.month,
		)

	@classmethod
	def from_mapping(cls, mapping: Mapping[str, Any]) -> "BaselineRecord":
		"""Parse a stored record. Raises ValueError/KeyError on a malformed value."""

		if not isinstance(mapping, Mapping):
			raise ValueError("baseline is not an object")
		return cls(
			start_of_day_total=_require_int(mapping, "startOfDayTotal"),
			start_of_month_total=_require_int(mapping, "startOfMonthTotal"),
			total=_require_int(mapping, "total"),
			easy=_require_int(mapping, "easy"),
			medium=_require_int(mapping, "medium"),
			hard=_require_int(mapping, "hard"),
			daily_increase=_require_int(mapping, "dailyIncrease"),
			monthly_increase=_require_int(mapping, "monthlyIncrease"),
			last_updated_day=_require_str(mapping, "lastUpdatedDay"),
			last_updated_month=_require_str(mapping, "lastUpdatedMonth"),
		)

	def to_mapping(self) -> MutableMapping[str, int | str]:
		return {
			"startOfDayTotal": self.start_of_day_total,
			"startOfMonthTotal": self.start_of_month_total,
			"total": self.total,
			"dailyIncrease": self.daily_increase,
			"monthlyIncrease": self.monthly_increase,
			"easy": self.easy,
			"medium": self.medium,
			"hard": self.hard,
			"lastUpdatedDay": self.last_updated_day,
			"lastUpdatedMonth": self.last_updated_month,
		}


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
	username: str
	display_name: str


@dataclass(frozen=True, slots=True)
class Directory:
	"""Merged remote + custom directory held by the caller.

	`usernames` is the concatenation of both sources and may repeat a name;
	`mappings` resolves display names with custom entries taking precedence.
	"""

	usernames: tuple[str, ...] = ()
	mappings: Mapping[str, str] = field(default_factory=dict)

	@classmethod
	def merge(
		cls,
		remote_usernames: Iterable[str],
		remote_mappings: Mapping[str, str],
		custom_usernames: Iterable[str],
		custom_mappings: Mapping[str, str],
	) -> "Directory":
		return cls(
			usernames=tuple(remote_usernames) + tuple(custom_usernames),
			mappings={**remote_mappings, **custom_mappings},
		)

	def __contains__(self, username: object) -> bool:
		return username in self.usernames

	def __len__(self) -> int:
		return len(self.usernames)

	def display_name(self, username: str) -> str:
		return self.mappings.get(username) or username

	def entries(self) -> list[DirectoryEntry]:
		return [DirectoryEntry(username=u, display_name=self.display_name(u)) for u in self.usernames]

	def with_entry(self, username: str, display_name: str) -> "Directory":
		return Directory(
			usernames=self.usernames + (username,),
			mappings={**self.mappings, username: display_name},
		)


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
	"""One ranked row. Rebuilt every cycle, never persisted."""

	rank: int
	username: str
	handle: str
	easy: int
	medium: int
	hard: int
	total: int
	daily_increase: int
	monthly_increase: int
	stale: bool = False

	@classmethod
	def from_baseline(cls, handle: str, display_name: str, record: BaselineRecord, *, stale: bool) -> "LeaderboardEntry":
		return cls(
			rank=0,
			username=display_name,
			handle=handle,
			easy=record.easy,
			medium=record.medium,
			hard=record.hard,
			total=record.total,
			daily_increase=record.daily_increase,
			monthly_increase=record.monthly_increase,
			stale=stale,
		)

	@classmethod
	def empty(cls, handle: str, display_name: str) -> "LeaderboardEntry":
		return cls(
			rank=0,
			username=display_name,
			handle=handle,
			easy=0,
			medium=0,
			hard=0,
			total=0,
			daily_increase=0,
			monthly_increase=0,
			stale=True,
		)

	def ranked(self, rank: int) -> "LeaderboardEntry":
		return replace(self, rank=rank)


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
	"""Per-user result of one cycle."""

	username: str
	ok: bool
	entry: LeaderboardEntry
	error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ReconcileResult:
	period: TrackingPeriod
	entries: list[LeaderboardEntry]
	outcomes: list[ReconcileOutcome]

	@property
	def failed(self) -> list[str]:
		return [outcome.username for outcome in self.outcomes if not outcome.ok]


class AddUserResult(str, Enum):
	ADDED = "added"
	ALREADY_EXISTS = "already_exists"
	NOT_FOUND = "not_found"


class RefreshStatus(str, Enum):
	IDLE = "idle"
	LOADING = "loading"
	SUCCESS = "success"
	FAILURE = "failure"
