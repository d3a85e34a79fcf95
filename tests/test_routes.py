import httpx
import pytest
from fastapi.testclient import TestClient

from cinenova.availability import AvailabilityTable
from cinenova.cache import TTLCache
from cinenova.main import create_app
from cinenova.providers import OMDbProvider
from cinenova.services.catalog import CatalogService
from cinenova.services.transfer import TransferService
from cinenova.settings import Settings

from conftest import make_descriptor

REMOTE = "https://videos.example.com/sample/ElephantsDream.mp4"


def _proxy_handler(request):
    if request.url.path.endswith("broken.mp4"):
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(200, content=b"MOVIEBYTES", headers={"content-length": "10"})


@pytest.fixture
def app(service):
    return create_app(
        settings=Settings(admin_password="secret"),
        catalog=service,
        transfer_service=TransferService(transport=httpx.MockTransport(_proxy_handler)),
    )


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["x-request-id"]


def test_wake(client):
    response = client.get("/wake")
    assert response.status_code == 200
    assert response.json() == {"status": "awake"}


def test_home_shows_featured_and_grid(client):
    response = client.get("/")

    assert response.status_code == 200
    html = response.text
    assert "Watch Now" in html
    assert 'href="/movie/1"' in html
    assert "Movie 3" in html
    assert "2 Movies Available" in html


def test_home_survives_upstream_failure(client, provider):
    provider.fail_with()

    response = client.get("/")

    assert response.status_code == 200
    assert "Fallback One" in response.text


def test_search_page_redirects_without_query(client):
    response = client.get("/search", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/"

    response = client.get("/search?q=%20%20", follow_redirects=False)
    assert response.status_code == 302


def test_search_page_lists_results(client):
    response = client.get("/search?q=batman")

    assert response.status_code == 200
    assert "Batman Returns" in response.text
    assert "1 available for download" in response.text
    assert "NOT AVAILABLE" in response.text


def test_movie_page(client):
    response = client.get("/movie/1")

    assert response.status_code == 200
    assert "Movie One" in response.text
    assert "/download/1" in response.text


def test_movie_page_not_found(client):
    response = client.get("/movie/404")

    assert response.status_code == 404
    assert "Movie not found" in response.text


def test_api_search(client):
    response = client.get("/api/search?q=Batman&page=1")

    data = response.json()
    assert data["total"] == 2
    assert data["results"][0]["id"] == "2"
    assert data["results"][0]["can_play"] is True
    assert data["results"][0]["availability"]["stream_url"] == "/api/stream/two"
    assert data["results"][1]["availability"] is None


def test_api_search_without_query_is_empty(client, provider):
    data = client.get("/api/search").json()

    assert data["results"] == []
    assert provider.calls == []


def test_api_search_bad_page_defaults_to_first(client, provider):
    client.get("/api/search?q=batman&page=abc")

    assert provider.calls == [("search", "batman", 1)]


def test_api_movie(client):
    response = client.get("/api/movie/1")
    assert response.status_code == 200
    assert response.json()["title"] == "Movie One"

    response = client.get("/api/movie/unknown")
    assert response.status_code == 404
    assert response.json() == {"error": "Movie not found"}


def test_api_play(client):
    data = client.get("/api/play/1").json()
    assert data["canDownload"] is True
    assert data["sources"][0]["url"] == "/api/stream/one"
    assert data["movie"]["id"] == "1"

    data = client.get("/api/play/unknown").json()
    assert data == {"sources": [], "movie": {}, "canDownload": False}


def test_api_trending(client):
    data = client.get("/api/trending").json()
    assert [m["id"] for m in data["results"]] == ["3", "1", "2"]


def test_simulated_stream(client):
    response = client.get("/api/stream/avengers")

    assert response.status_code == 200
    assert response.headers["content-type"] == "video/mp4"
    assert response.headers["accept-ranges"] == "bytes"
    assert "AVENGERS" in response.content.decode("utf-8")


def test_simulated_download(client):
    response = client.get("/api/download/venom")

    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="venom-full-movie-1080p.mp4"'


def test_download_local_reference_redirects(client):
    response = client.get("/download/1", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/api/download/one"


def test_download_unknown_title(client):
    response = client.get("/download/unknown")

    assert response.status_code == 404
    assert "Download Failed" in response.text


@pytest.fixture
def remote_client(provider, clock):
    table = AvailabilityTable({
        "tt1": make_descriptor("tt1", stream_url=REMOTE, download_url=REMOTE, filename="Movie_1.mp4"),
        "tt2": make_descriptor("tt2", stream_url=REMOTE, download_url="https://videos.example.com/broken.mp4"),
    })
    app = create_app(
        catalog=CatalogService(provider, table, cache=TTLCache(clock=clock)),
        transfer_service=TransferService(transport=httpx.MockTransport(_proxy_handler)),
    )
    with TestClient(app) as c:
        yield c


def test_download_proxies_remote_file(remote_client):
    response = remote_client.get("/download/tt1")

    assert response.status_code == 200
    assert response.content == b"MOVIEBYTES"
    assert response.headers["content-disposition"] == 'attachment; filename="Movie_1.mp4"'


def test_download_proxy_failure(remote_client):
    response = remote_client.get("/download/tt2")

    assert response.status_code == 502
    assert "Download Failed" in response.text


def test_cache_admin_requires_password(client):
    assert client.get("/cache/stats?password=wrong").status_code == 401
    assert client.get("/cache/clear?password=wrong").status_code == 401


def test_cache_admin_stats_and_clear(client, service):
    client.get("/api/search?q=batman")

    stats = client.get("/cache/stats?password=secret").json()
    assert stats["entries"] == 1
    assert stats["provider"] == "fake"

    assert client.get("/cache/clear?password=secret").json() == {"status": "Cache cleared."}
    assert len(service.cache) == 0


def test_search_reports_provider_total(client, provider):
    provider.totals["batman"] = (57, 3)

    data = client.get("/api/search?q=batman").json()
    assert data["total"] == 57
    assert data["total_pages"] == 3

    html = client.get("/search?q=batman").text
    assert "Found 57 results" in html
    assert "page=2" in html


def test_search_page_hides_next_on_last_page(client, provider):
    provider.totals["batman"] = (57, 3)

    html = client.get("/search?q=batman&page=3").text

    assert "Previous" in html
    assert "Next" not in html


def test_search_total_from_omdb_payload(table, clock):
    body = {
        "Search": [{"Title": "Batman", "Year": "1989", "imdbID": "tt0096895", "Type": "movie", "Poster": "N/A"}],
        "totalResults": "57",
        "Response": "True",
    }
    omdb = OMDbProvider("key", client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))))
    app = create_app(catalog=CatalogService(omdb, table, cache=TTLCache(clock=clock)))

    with TestClient(app) as c:
        data = c.get("/api/search?q=batman").json()
        html = c.get("/search?q=batman").text

    assert data["total"] == 57
    assert data["total_pages"] == 6
    assert "Found 57 results" in html


def test_app_name_comes_from_app_settings(service):
    app = create_app(settings=Settings(app_name="Movie Night"), catalog=service)

    with TestClient(app) as c:
        assert "Movie Night" in c.get("/").text


def test_default_app_shares_one_provider_client():
    app = create_app(settings=Settings(metadata_provider="omdb"))
    http_client = app.state.catalog.provider._client

    assert isinstance(http_client, httpx.AsyncClient)
    with TestClient(app):
        assert not http_client.is_closed
    assert http_client.is_closed
