"""Clients for the stats API and the remotely hosted user directory."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from leetboard.domain.tracker.errors import DirectoryFetchError, RemoteFetchError
from leetboard.domain.tracker.models import SolvedCounts

# InvalidURL and StreamError sit outside the HTTPError hierarchy.
_FETCH_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, ValueError)


class RemoteDataClient(Protocol):
	"""Interface for upstream lookups."""

	async def fetch_counts(self, username: str) -> SolvedCounts:
		...

	async def fetch_directory(self) -> tuple[list[str], dict[str, str]]:
		...


@dataclass
class HttpRemoteDataClient(RemoteDataClient):
	"""Reads solved counts and the directory JSON files over httpx."""

	http: httpx.AsyncClient
	stats_base_url: str
	usernames_url: str
	mappings_url: str
	request_timeout: float = 10.0

	async def _get_json(self, url: str) -> Any:
		response = await self.http.get(url, timeout=self.request_timeout)
		response.raise_for_status()
		return response.json()

	async def fetch_counts(self, username: str) -> SolvedCounts:
		url = f"{self.stats_base_url.rstrip('/')}/user/{quote(username, safe='')}"
		try:
			payload = await self._get_json(url)
		except _FETCH_ERRORS as exc:
			raise RemoteFetchError(username, f"{type(exc).__name__}: {exc}") from exc
		if not isinstance(payload, dict):
			raise RemoteFetchError(username, "unexpected payload shape")
		return SolvedCounts.from_payload(payload)

	async def fetch_directory(self) -> tuple[list[str], dict[str, str]]:
		try:
			usernames, mappings = await asyncio.gather(
				self._get_json(self.usernames_url),
				self._get_json(self.mappings_url),
			)
		except _FETCH_ERRORS as exc:
			raise DirectoryFetchError(f"{type(exc).__name__}: {exc}") from exc
		if not isinstance(usernames, list) or not isinstance(mappings, dict):
			raise DirectoryFetchError("unexpected directory payload shape")
		return (
			[str(name) for name in usernames if isinstance(name, str) and name],
			{str(k): str(v) for k, v in mappings.items() if v is not None},
		)
