import httpx
import pytest

from leetboard.domain.tracker.errors import DirectoryFetchError, RemoteFetchError
from leetboard.domain.tracker.models import SolvedCounts
from leetboard.domain.tracker.remote import HttpRemoteDataClient

STATS = "https://stats.example"
USERNAMES = "https://raw.example/usernames.json"
MAPPINGS = "https://raw.example/usernameMappings.json"


def _client(handler) -> HttpRemoteDataClient:
	http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
	return HttpRemoteDataClient(http=http, stats_base_url=STATS, usernames_url=USERNAMES, mappings_url=MAPPINGS)


@pytest.mark.asyncio
async def test_fetch_counts_parses_stats_payload():
	seen: list[str] = []

	def handler(request: httpx.Request) -> httpx.Response:
		seen.append(str(request.url))
		return httpx.Response(
			200,
			json={"totalSolved": 321, "easySolved": 150, "mediumSolved": 140, "hardSolved": 31, "ranking": 12345},
		)

	client = _client(handler)
	result = await client.fetch_counts("alice")

	assert result == SolvedCounts(total_solved=321, easy_solved=150, medium_solved=140, hard_solved=31)
	assert seen == ["https://stats.example/user/alice"]


@pytest.mark.asyncio
async def test_fetch_counts_quotes_username_in_path():
	seen: list[str] = []

	def handler(request: httpx.Request) -> httpx.Response:
		seen.append(request.url.raw_path.decode())
		return httpx.Response(200, json={"totalSolved": 1})

	await _client(handler).fetch_counts("a/b c")

	assert seen == ["/user/a%2Fb%20c"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"response",
	[
		httpx.Response(404, json={"error": "user not found"}),
		httpx.Response(500, text="boom"),
		httpx.Response(200, text="<html>not json</html>"),
		httpx.Response(200, json=["unexpected"]),
	],
)
async def test_fetch_counts_failures_surface_as_remote_fetch_error(response):
	client = _client(lambda request: response)

	with pytest.raises(RemoteFetchError) as excinfo:
		await client.fetch_counts("alice")
	assert excinfo.value.username == "alice"


@pytest.mark.asyncio
async def test_fetch_counts_timeout_is_a_fetch_failure():
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ReadTimeout("timed out", request=request)

	with pytest.raises(RemoteFetchError):
		await _client(handler).fetch_counts("slow")


@pytest.mark.asyncio
async def test_fetch_directory_reads_both_files():
	def handler(request: httpx.Request) -> httpx.Response:
		if str(request.url) == USERNAMES:
			return httpx.Response(200, json=["alice", "bob", 5, ""])
		if str(request.url) == MAPPINGS:
			return httpx.Response(200, json={"alice": "Alice", "bob": None})
		return httpx.Response(404)

	usernames, mappings = await _client(handler).fetch_directory()

	assert usernames == ["alice", "bob"]
	assert mappings == {"alice": "Alice"}


@pytest.mark.asyncio
async def test_fetch_directory_fails_when_either_file_fails():
	def handler(request: httpx.Request) -> httpx.Response:
		if str(request.url) == USERNAMES:
			return httpx.Response(200, json=["alice"])
		raise httpx.ConnectError("offline", request=request)

	with pytest.raises(DirectoryFetchError):
		await _client(handler).fetch_directory()


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [httpx.StreamClosed(), httpx.InvalidURL("bad url")])
async def test_fetch_counts_maps_non_http_transport_errors(error):
	def handler(request: httpx.Request) -> httpx.Response:
		raise error

	with pytest.raises(RemoteFetchError):
		await _client(handler).fetch_counts("alice")
