"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"leetboard_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"leetboard_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

REFRESH_CYCLES = Counter(
	"leetboard_refresh_cycles_total",
	"Reconciliation cycles run",
	["status"],
)

REFRESH_DURATION = Histogram(
	"leetboard_refresh_duration_seconds",
	"Wall time of a full reconciliation cycle",
	buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

USER_FETCHES = Counter(
	"leetboard_user_fetch_total",
	"Per-user solved-count fetches",
	["result"],
)

ROLLOVERS = Counter(
	"leetboard_rollovers_total",
	"Baseline resets caused by a day or month rollover",
	["period"],
)

DIRECTORY_LOADS = Counter(
	"leetboard_directory_loads_total",
	"Directory loads by outcome",
	["result"],
)

TRACKED_USERS = Gauge(
	"leetboard_tracked_users",
	"Usernames in the merged directory",
)

REDIS_UP = Gauge(
	"leetboard_redis_up",
	"Redis readiness (1 healthy, 0 unavailable)",
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def observe_refresh(status: str, elapsed_seconds: float) -> None:
	REFRESH_CYCLES.labels(status=status).inc()
	REFRESH_DURATION.observe(elapsed_seconds)


def inc_user_fetch(result: str) -> None:
	USER_FETCHES.labels(result=result).inc()


def inc_rollover(period: str) -> None:
	ROLLOVERS.labels(period=period).inc()


def inc_directory_load(result: str) -> None:
	DIRECTORY_LOADS.labels(result=result).inc()


def set_tracked_users(count: int) -> None:
	TRACKED_USERS.set(count)


def mark_redis(ok: bool) -> None:
	REDIS_UP.set(1 if ok else 0)
