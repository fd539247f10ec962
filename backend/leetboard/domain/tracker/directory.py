"""Directory manager: remote user list merged with locally added users."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from leetboard.domain.tracker.errors import DirectoryFetchError, RemoteFetchError
from leetboard.domain.tracker.models import AddUserResult, Directory
from leetboard.domain.tracker.remote import RemoteDataClient
from leetboard.domain.tracker.store import BaselineStore
from leetboard.obs import metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DirectoryLoad:
	directory: Directory
	warning: Optional[str] = None


class DirectoryManager:
	"""Owns the in-memory directory and the persisted custom entries.

	Loads and additions are serialised on one lock so a reload never replaces
	the directory with a merge that predates a concurrent addition.
	"""

	def __init__(self, remote: RemoteDataClient, store: BaselineStore) -> None:
		self._remote = remote
		self._store = store
		self._directory = Directory()
		self._warning: Optional[str] = None
		self._loaded = False
		self._lock = asyncio.Lock()

	@property
	def directory(self) -> Directory:
		return self._directory

	@property
	def warning(self) -> Optional[str]:
		return self._warning

	@property
	def loaded(self) -> bool:
		return self._loaded

	async def load_directory(self) -> DirectoryLoad:
		"""Fetch the remote directory and merge the custom entries over it.

		Neither a remote failure nor a storage failure is fatal: whichever half
		is available is used and a warning is returned for the caller to surface.
		"""

		async with self._lock:
			return await self._load_locked()

	async def _load_locked(self) -> DirectoryLoad:
		warnings: list[str] = []
		try:
			custom_usernames, custom_mappings = await asyncio.gather(
				self._store.load_custom_usernames(),
				self._store.load_custom_mappings(),
			)
		except Exception:
			logger.warning("Custom entries unavailable, using remote directory only", exc_info=True)
			metrics.inc_directory_load("custom_unavailable")
			custom_usernames, custom_mappings = [], {}
			warnings.append("Failed to read locally added users.")
		try:
			remote_usernames, remote_mappings = await self._remote.fetch_directory()
			metrics.inc_directory_load("ok")
		except DirectoryFetchError as exc:
			logger.warning("Remote directory unavailable, using custom entries only", extra={"error": str(exc)})
			metrics.inc_directory_load("fallback")
			remote_usernames, remote_mappings = [], {}
			warnings.append("Failed to fetch the remote directory. Showing locally added users only.")

		self._directory = Directory.merge(remote_usernames, remote_mappings, custom_usernames, custom_mappings)
		self._warning = " ".join(warnings) or None
		self._loaded = True
		metrics.set_tracked_users(len(self._directory))
		logger.info(
			"Directory loaded",
			extra={"remote": len(remote_usernames), "custom": len(custom_usernames)},
		)
		return DirectoryLoad(directory=self._directory, warning=self._warning)

	async def add_user(self, username: str, display_name: Optional[str] = None) -> AddUserResult:
		"""Track a new username after confirming it exists upstream.

		The membership check needs a loaded directory, so the first call loads
		it when no load has completed yet. Rejections leave storage untouched.
		"""

		async with self._lock:
			if not self._loaded:
				await self._load_locked()
			if username in self._directory:
				return AddUserResult.ALREADY_EXISTS
			try:
				await self._remote.fetch_counts(username)
			except RemoteFetchError as exc:
				logger.info("Rejected unknown user", extra={"username": username, "error": str(exc)})
				return AddUserResult.NOT_FOUND

			resolved = display_name or username
			custom_usernames = await self._store.load_custom_usernames()
			custom_mappings = await self._store.load_custom_mappings()
			custom_usernames.append(username)
			custom_mappings[username] = resolved
			await self._store.save_custom_usernames(custom_usernames)
			await self._store.save_custom_mappings(custom_mappings)

			self._directory = self._directory.with_entry(username, resolved)
			metrics.set_tracked_users(len(self._directory))
			logger.info("Added custom user", extra={"username": username})
			return AddUserResult.ADDED
