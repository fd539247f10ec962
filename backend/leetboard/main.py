"""FastAPI application entrypoint."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leetboard.api import ops, tracker
from leetboard.api.errors import install_error_handlers
from leetboard.api.middleware_request_id import RequestIdMiddleware
from leetboard.domain.tracker.service import build_tracker_service
from leetboard.infra.http import close_http_client, get_http_client
from leetboard.infra.redis import close_redis
from leetboard.obs import init as obs_init
from leetboard.settings import settings

logger = logging.getLogger(__name__)


async def _warm_up(service) -> None:
	try:
		await service.load_directory()
		if settings.refresh_on_startup:
			await service.refresh()
	except Exception:
		logger.exception("Warm-up failed; the leaderboard stays empty until the next refresh")


@asynccontextmanager
async def lifespan(app: FastAPI):
	service = build_tracker_service(get_http_client())
	app.state.tracker = service
	# Directory load and the first refresh run in the background so startup is not
	# blocked on the upstream APIs.
	warm_up = asyncio.create_task(_warm_up(service), name="leetboard-warm-up")
	try:
		yield
	finally:
		if not warm_up.done():
			warm_up.cancel()
		await asyncio.gather(warm_up, return_exceptions=True)
		await service.wait_idle()
		await close_http_client()
		await close_redis()


app = FastAPI(title="Leetboard", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins:
	allow_origins = ["http://localhost:3000", "http://localhost:8081"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=False,
	allow_methods=["GET", "POST"],
	allow_headers=["*"],
)

obs_init(app)
app.add_middleware(RequestIdMiddleware)

app.include_router(tracker.router)
app.include_router(ops.router)
