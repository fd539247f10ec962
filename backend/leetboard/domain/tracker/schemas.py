"""Pydantic schemas for the leaderboard and directory APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from leetboard.domain.tracker.models import DirectoryEntry, LeaderboardEntry, RefreshStatus


class LeaderboardRowSchema(BaseModel):
	rank: int = Field(..., ge=1)
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
	def from_entry(cls, entry: LeaderboardEntry) -> "LeaderboardRowSchema":
		return cls(
			rank=entry.rank,
			username=entry.username,
			handle=entry.handle,
			easy=entry.easy,
			medium=entry.medium,
			hard=entry.hard,
			total=entry.total,
			daily_increase=entry.daily_increase,
			monthly_increase=entry.monthly_increase,
			stale=entry.stale,
		)


class LeaderboardResponseSchema(BaseModel):
	status: RefreshStatus
	refreshing: bool = False
	refreshed_at: Optional[datetime] = None
	day: Optional[str] = None
	month: Optional[str] = None
	failed: list[str] = Field(default_factory=list)
	error: Optional[str] = None
	warning: Optional[str] = None
	items: list[LeaderboardRowSchema] = Field(default_factory=list)


class DirectoryEntrySchema(BaseModel):
	username: str
	display_name: str

	@classmethod
	def from_entry(cls, entry: DirectoryEntry) -> "DirectoryEntrySchema":
		return cls(username=entry.username, display_name=entry.display_name)


class DirectoryResponseSchema(BaseModel):
	warning: Optional[str] = None
	items: list[DirectoryEntrySchema] = Field(default_factory=list)


class AddUserRequest(BaseModel):
	username: str = Field(..., min_length=1, max_length=64, description="Platform username, case-sensitive")
	display_name: Optional[str] = Field(default=None, max_length=64, description="Name shown on the leaderboard")

	@field_validator("username")
	@classmethod
	def _strip_username(cls, value: str) -> str:
		value = value.strip()
		if not value:
			raise ValueError("username must not be blank")
		return value

	@field_validator("display_name")
	@classmethod
	def _blank_display_name(cls, value: Optional[str]) -> Optional[str]:
		if value is None:
			return None
		return value.strip() or None
