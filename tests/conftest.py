import pytest

from cinenova.availability import AvailabilityTable
from cinenova.cache import TTLCache
from cinenova.errors import NotFound, UpstreamUnavailable
from cinenova.models import AvailabilityDescriptor, MetadataRecord
from cinenova.providers.base import MetadataProvider
from cinenova.services.catalog import CatalogService


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(MetadataProvider):
    """In-memory provider that counts calls and can be told to fail."""

    name = "fake"

    def __init__(self, trending=None, results=None, details=None, totals=None):
        super().__init__(api_key="test", base_url="http://fake")
        self.trending_records = list(trending or [])
        self.results = dict(results or {})
        self.details = dict(details or {})
        self.totals = dict(totals or {})
        self.error = None
        self.calls = []

    async def trending(self):
        self.calls.append(("trending",))
        if self.error:
            raise self.error
        return {"records": self.trending_records}

    async def search(self, query, page=1):
        self.calls.append(("search", query, page))
        if self.error:
            raise self.error
        if query not in self.results:
            raise NotFound(self.name, query)
        return {"records": self.results[query], "totals": self.totals.get(query, (None, None))}

    async def fetch_by_id(self, id):
        self.calls.append(("details", id))
        if self.error:
            raise self.error
        if id not in self.details:
            raise NotFound(self.name, id)
        return {"record": self.details[id]}

    def parse_listing(self, payload):
        return list(payload["records"])

    def parse_detail(self, payload):
        return payload["record"]

    def parse_totals(self, payload):
        return payload.get("totals", (None, None))

    def fail_with(self, reason="connection refused"):
        self.error = UpstreamUnavailable(self.name, reason)

    def recover(self):
        self.error = None


def make_record(id, title=None, **kwargs):
    return MetadataRecord(id=str(id), title=title or f"Movie {id}", **kwargs)


def make_descriptor(id, stream_url="/api/stream/x", download_url="/api/download/x", **kwargs):
    return AvailabilityDescriptor(
        id=str(id),
        title=kwargs.pop("title", f"Movie {id}"),
        stream_url=stream_url,
        download_url=download_url,
        **kwargs,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def table():
    return AvailabilityTable(
        {
            "1": make_descriptor("1", stream_url="/api/stream/one", download_url="/api/download/one", quality="1080p"),
            "2": make_descriptor("2", stream_url="/api/stream/two", download_url="/api/download/two"),
        },
        fallback=(make_record("1", "Fallback One", year="1994"),),
    )


@pytest.fixture
def provider():
    return FakeProvider(
        trending=[make_record("3"), make_record("1"), make_record("2")],
        results={"batman": [make_record("2", "Batman"), make_record("9", "Batman Returns")]},
        details={"1": make_record("1", "Movie One", year="2019"), "7": make_record("7", "Unavailable")},
    )


@pytest.fixture
def service(provider, table, clock):
    return CatalogService(provider, table, cache=TTLCache(clock=clock))
