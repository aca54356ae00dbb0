"""
Pytest configuration for place-wiki tests.

Provides an in-memory Wikipedia fake and stub aiohttp objects.
"""
import asyncio
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from place_wiki.config import Config
from place_wiki.providers.base import ProviderError
from place_wiki.src.models import AdminAreas, ArticleSummary, GeoHit, LatLng, SelectedPlace

KM_PER_DEG_LAT = 6371.0088 * 3.141592653589793 / 180


def north_of(origin: LatLng, km: float) -> LatLng:
    """A point `km` due north of origin."""
    return LatLng(origin.lat + km / KM_PER_DEG_LAT, origin.lng)


class FakeWikipedia:
    """In-memory stand-in for WikipediaProvider.

    Pages are REST summary payloads keyed by title; redirects map a title to
    its canonical one. Every call is recorded in `calls`.
    """

    def __init__(self):
        self.pages = {}
        self.redirects = {}
        self.searches = {}
        self.near = {}
        self.geo = []
        self.coords = {}
        self.calls = []
        self.fail = set()

    def add_page(self, title, description='', coordinates=None, type='standard', extract=''):
        page = {'title': title, 'description': description, 'type': type, 'extract': extract}
        if coordinates is not None:
            page['coordinates'] = coordinates.to_dict()
        self.pages[title] = page
        return page

    def add_geo(self, title, description, at: LatLng, origin: LatLng, with_coords=True):
        from place_wiki.src.geo import distance_km
        self.add_page(title, description, coordinates=at if with_coords else None)
        if not with_coords:
            self.coords[title] = at
        self.geo.append(GeoHit(title, distance_km(origin, at) * 1000))

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            raise ProviderError(f"{name} failed", provider_name='fake')

    def titles_called(self, name):
        return [c[1] for c in self.calls if c[0] == name]

    async def normalize_title(self, title):
        self._record('normalize', title)
        title = self.redirects.get(title, title)
        return title if title in self.pages else None

    async def fetch_summary(self, title):
        self._record('summary', title)
        data = self.pages.get(title)
        return ArticleSummary.from_rest(dict(data)) if data else None

    async def search_titles(self, query, limit=10):
        self._record('search', query)
        return list(self.searches.get(query, []))[:limit]

    async def search_near_match(self, query):
        self._record('near_match', query)
        return self.near.get(query)

    async def geo_search(self, lat, lng, radius_m=10000, limit=20):
        self._record('geo', (lat, lng))
        return sorted(self.geo, key=lambda h: h.dist_m)[:limit]

    async def fetch_coordinates(self, title):
        self._record('coords', title)
        return self.coords.get(title)


GREER = LatLng(34.9387, -82.2271)


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables before any tests run."""
    os.environ["ENVIRONMENT"] = "testing"
    yield
    os.environ.pop("ENVIRONMENT", None)


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def fake_wiki():
    return FakeWikipedia()


@pytest.fixture
def greer_place():
    return SelectedPlace(
        name="Greer",
        formatted_address="Greer, SC, USA",
        location=GREER,
        admin=AdminAreas(city="Greer", county="Greenville County", state="South Carolina",
                         state_code="SC", country="United States", country_code="US"),
        types=("locality", "political"),
    )


@pytest.fixture
def greer_wiki(fake_wiki):
    """Greer, SC: the bare title is a disambiguation page."""
    fake_wiki.add_page("Greer", "Topics referred to by the same term", type='disambiguation')
    fake_wiki.add_page("Greer, South Carolina", "City in South Carolina, United States", coordinates=GREER)
    fake_wiki.add_page("Greer City Council", "Local government body of Greer, South Carolina")
    return fake_wiki


class StubResponse:
    def __init__(self, status=200, payload=None, exc=None):
        self.status = status
        self.payload = payload
        self.exc = exc

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        if self.exc is not None:
            raise self.exc
        return self

    async def __aexit__(self, *exc_info):
        return False


class StubSession:
    """Replays canned responses and records (url, params) per request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        return self.responses.pop(0)


class GatedWikipedia(FakeWikipedia):
    """Blocks lookups of `gated` titles until `gate` is set."""

    def __init__(self, gated=()):
        super().__init__()
        self.gated = set(gated)
        self.gate = asyncio.Event()
        self.entered = asyncio.Event()

    async def normalize_title(self, title):
        if title in self.gated:
            self.entered.set()
            await self.gate.wait()
        return await super().normalize_title(title)
