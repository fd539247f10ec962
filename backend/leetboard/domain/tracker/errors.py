"""Exceptions raised by the tracker domain."""

from __future__ import annotations


class TrackerError(Exception):
	"""Base class for tracker failures."""

	reason: str = "tracker_error"


class RemoteFetchError(TrackerError):
	"""The stats API could not produce counts for a user."""

	reason = "remote_fetch_failed"

	def __init__(self, username: str, detail: str) -> None:
		super().__init__(f"fetch failed for {username}: {detail}")
		self.username = username
		self.detail = detail


class DirectoryFetchError(TrackerError):
	"""The remote username list or display-name mapping was unavailable."""

	reason = "directory_fetch_failed"


class UserAlreadyTrackedError(TrackerError):
	reason = "user_already_tracked"

	def __init__(self, username: str) -> None:
		super().__init__(f"{username} is already tracked")
		self.username = username


class UserNotFoundError(TrackerError):
	reason = "user_not_found"

	def __init__(self, username: str) -> None:
		super().__init__(f"{username} could not be found upstream")
		self.username = username


class ReconcileError(TrackerError):
	"""The cycle itself could not run; per-user failures never raise this."""

	reason = "refresh_failed"
