"""Shared httpx client used for every upstream call."""

from __future__ import annotations

from typing import Optional

import httpx

from leetboard.settings import settings

_client: Optional[httpx.AsyncClient] = None


def _build_client() -> httpx.AsyncClient:
	return httpx.AsyncClient(
		timeout=httpx.Timeout(settings.fetch_timeout_seconds),
		headers={"Accept": "application/json", "User-Agent": f"{settings.service_name}/{settings.git_commit}"},
		follow_redirects=True,
	)


def get_http_client() -> httpx.AsyncClient:
	global _client
	if _client is None or _client.is_closed:
		_client = _build_client()
	return _client


async def close_http_client() -> None:
	global _client
	if _client is not None and not _client.is_closed:
		await _client.aclose()
	_client = None
