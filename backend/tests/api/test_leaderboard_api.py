import pytest

from leetboard.domain.tracker.models import SolvedCounts


@pytest.mark.asyncio
async def test_leaderboard_is_idle_before_first_refresh(api_client):
	response = await api_client.get("/leaderboard")
	assert response.status_code == 200
	payload = response.json()
	assert payload["status"] == "idle"
	assert payload["items"] == []
	assert response.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_refresh_returns_ranked_rows(api_client, tracker, remote):
	remote.directory = (["alice", "bob", "carol"], {"alice": "Alice"})
	remote.counts.update(
		{
			"alice": SolvedCounts(total_solved=120, easy_solved=70, medium_solved=40, hard_solved=10),
			"bob": SolvedCounts(total_solved=200),
		}
	)
	await tracker.load_directory()

	response = await api_client.post("/leaderboard/refresh")

	assert response.status_code == 200
	payload = response.json()
	assert payload["status"] == "success"
	assert payload["failed"] == ["carol"]
	assert [row["username"] for row in payload["items"]] == ["bob", "Alice", "carol"]
	assert [row["rank"] for row in payload["items"]] == [1, 2, 3]
	alice = payload["items"][1]
	assert alice["handle"] == "alice"
	assert (alice["easy"], alice["medium"], alice["hard"]) == (70, 40, 10)
	assert (alice["daily_increase"], alice["monthly_increase"]) == (0, 0)
	assert payload["items"][2]["stale"] is True

	cached = await api_client.get("/leaderboard")
	assert cached.json()["items"] == payload["items"]


@pytest.mark.asyncio
async def test_add_user_endpoint(api_client, tracker, remote):
	remote.directory = (["alice"], {})
	remote.counts["dave"] = SolvedCounts(total_solved=3)
	await tracker.load_directory()

	created = await api_client.post("/directory/users", json={"username": "  dave ", "display_name": "Dave"})
	assert created.status_code == 201
	assert created.json() == {"username": "dave", "display_name": "Dave"}

	duplicate = await api_client.post("/directory/users", json={"username": "alice"})
	assert duplicate.status_code == 409
	assert duplicate.json()["detail"] == "user_already_tracked"
	assert duplicate.json()["request_id"]

	missing = await api_client.post("/directory/users", json={"username": "nobody"})
	assert missing.status_code == 404
	assert missing.json()["detail"] == "user_not_found"

	listing = await api_client.get("/directory")
	assert [item["username"] for item in listing.json()["items"]] == ["alice", "dave"]


@pytest.mark.asyncio
async def test_add_user_rejects_blank_username(api_client):
	response = await api_client.post("/directory/users", json={"username": "   "})
	assert response.status_code == 422
	assert response.json()["detail"] == "validation_error"


@pytest.mark.asyncio
async def test_directory_reload_reports_warning(api_client, remote, store):
	remote.directory_error = True
	await store.save_custom_usernames(["carol"])

	response = await api_client.post("/directory/reload")

	assert response.status_code == 200
	payload = response.json()
	assert payload["warning"]
	assert payload["items"] == [{"username": "carol", "display_name": "carol"}]


@pytest.mark.asyncio
async def test_health_and_metrics(api_client, tracker, remote):
	live = await api_client.get("/health/live")
	assert live.json() == {"status": "ok"}

	ready = await api_client.get("/health/ready")
	assert ready.status_code == 200
	assert ready.json()["checks"]["redis"]["ok"] is True

	await tracker.refresh()
	metrics = await api_client.get("/metrics")
	assert metrics.status_code == 200
	assert "leetboard_refresh_cycles_total" in metrics.text


@pytest.mark.asyncio
async def test_directory_reload_survives_storage_failure(api_client, remote, store, monkeypatch):
	remote.directory = (["alice"], {"alice": "Alice"})

	async def broken_read():
		raise ConnectionError("redis down")

	monkeypatch.setattr(store, "load_custom_mappings", broken_read)
	response = await api_client.post("/directory/reload")

	assert response.status_code == 200
	payload = response.json()
	assert payload["warning"]
	assert payload["items"] == [{"username": "alice", "display_name": "Alice"}]
