"""FastAPI routes for the progress leaderboard and the user directory."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from leetboard.domain.tracker.errors import UserAlreadyTrackedError, UserNotFoundError
from leetboard.domain.tracker.schemas import (
	AddUserRequest,
	DirectoryEntrySchema,
	DirectoryResponseSchema,
	LeaderboardResponseSchema,
	LeaderboardRowSchema,
)
from leetboard.domain.tracker.service import LeaderboardSnapshot, TrackerService

router = APIRouter(tags=["leaderboard"])


def get_tracker_service(request: Request) -> TrackerService:
	service = getattr(request.app.state, "tracker", None)
	if service is None:
		raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="tracker_not_ready")
	return service


def _leaderboard_response(service: TrackerService, snapshot: LeaderboardSnapshot) -> LeaderboardResponseSchema:
	return LeaderboardResponseSchema(
		status=snapshot.status,
		refreshing=service.refreshing,
		refreshed_at=snapshot.refreshed_at,
		day=snapshot.day,
		month=snapshot.month,
		failed=list(snapshot.failed),
		error=snapshot.error,
		warning=snapshot.directory_warning,
		items=[LeaderboardRowSchema.from_entry(entry) for entry in snapshot.entries],
	)


@router.get("/leaderboard", response_model=LeaderboardResponseSchema)
async def leaderboard_endpoint(service: TrackerService = Depends(get_tracker_service)) -> LeaderboardResponseSchema:
	return _leaderboard_response(service, service.snapshot)


@router.post("/leaderboard/refresh", response_model=LeaderboardResponseSchema)
async def refresh_endpoint(service: TrackerService = Depends(get_tracker_service)) -> LeaderboardResponseSchema:
	snapshot = await service.refresh()
	return _leaderboard_response(service, snapshot)


@router.get("/directory", response_model=DirectoryResponseSchema)
async def directory_endpoint(service: TrackerService = Depends(get_tracker_service)) -> DirectoryResponseSchema:
	return DirectoryResponseSchema(
		warning=service.directory_warning,
		items=[DirectoryEntrySchema.from_entry(entry) for entry in service.directory_entries()],
	)


@router.post("/directory/reload", response_model=DirectoryResponseSchema)
async def reload_directory_endpoint(service: TrackerService = Depends(get_tracker_service)) -> DirectoryResponseSchema:
	loaded = await service.load_directory()
	return DirectoryResponseSchema(
		warning=loaded.warning,
		items=[DirectoryEntrySchema.from_entry(entry) for entry in loaded.directory.entries()],
	)


@router.post("/directory/users", response_model=DirectoryEntrySchema, status_code=status.HTTP_201_CREATED)
async def add_user_endpoint(
	payload: AddUserRequest,
	service: TrackerService = Depends(get_tracker_service),
) -> DirectoryEntrySchema:
	try:
		entry = await service.add_user(payload.username, payload.display_name)
	except UserAlreadyTrackedError as exc:
		raise HTTPException(status.HTTP_409_CONFLICT, detail=exc.reason) from exc
	except UserNotFoundError as exc:
		raise HTTPException(status.HTTP_404_NOT_FOUND, detail=exc.reason) from exc
	return DirectoryEntrySchema.from_entry(entry)
