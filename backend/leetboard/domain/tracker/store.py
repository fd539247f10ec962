"""Redis-backed persistence for baselines and the custom directory."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from leetboard.domain.tracker.models import BaselineRecord
from leetboard.infra.redis import redis_client

logger = logging.getLogger(__name__)


class JSONKeyValueStore:
	"""String keys mapped to JSON values.

	A value that cannot be decoded is reported as absent.
	"""

	def __init__(self, redis=None) -> None:
		self._redis = redis if redis is not None else redis_client

	async def get(self, key: str) -> Optional[Any]:
		raw = await self._redis.get(key)
		if raw is None:
			return None
		try:
			return json.loads(raw)
		except (TypeError, ValueError):
			logger.warning("Discarding undecodable stored value", extra={"key": key})
			return None

	async def set(self, key: str, value: Any) -> None:  # noqa: A003
		await self._redis.set(key, json.dumps(value, separators=(",", ":")))


class BaselineStore:
	"""Typed access to per-user baselines and the two custom directory records."""

	def __init__(self, kv: Optional[JSONKeyValueStore] = None, *, prefix: str = "leetboard") -> None:
		self._kv = kv or JSONKeyValueStore()
		self._prefix = prefix

	def baseline_key(self, username: str) -> str:
		return f"{self._prefix}:baseline:{username}"

	@property
	def custom_usernames_key(self) -> str:
		return f"{self._prefix}:custom:usernames"

	@property
	def custom_mappings_key(self) -> str:
		return f"{self._prefix}:custom:mappings"

	async def load(self, username: str) -> Optional[BaselineRecord]:
		value = await self._kv.get(self.baseline_key(username))
		if value is None:
			return None
		try:
			return BaselineRecord.from_mapping(value)
		except (KeyError, TypeError, ValueError):
			logger.warning("Ignoring malformed baseline", extra={"username": username})
			return None

	async def save(self, username: str, record: BaselineRecord) -> None:
		await self._kv.set(self.baseline_key(username), record.to_mapping())

	async def load_custom_usernames(self) -> list[str]:
		value = await self._kv.get(self.custom_usernames_key)
		if not isinstance(value, list):
			return []
		return [item for item in value if isinstance(item, str)]

	async def save_custom_usernames(self, usernames: list[str]) -> None:
		await self._kv.set(self.custom_usernames_key, list(usernames))

	async def load_custom_mappings(self) -> dict[str, str]:
		value = await self._kv.get(self.custom_mappings_key)
		if not isinstance(value, dict):
			return {}
		return {str(k): v for k, v in value.items() if isinstance(v, str)}

	async def save_custom_mappings(self, mappings: dict[str, str]) -> None:
		await self._kv.set(self.custom_mappings_key, dict(mappings))
