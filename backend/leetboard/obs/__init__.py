"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from leetboard.obs import logging as obs_logging
from leetboard.obs import middleware
from leetboard.settings import settings

_initialised = False


def init(app: FastAPI) -> None:
	global _initialised
	if _initialised:
		return
	if not settings.obs_enabled:
		return
	obs_logging.configure_logging()
	middleware.install(app)
	_initialised = True


__all__ = ["init"]
