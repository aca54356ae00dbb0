"""Wikipedia lookup provider

Thin async adapter over two Wikipedia endpoints:
  - REST page summary: /api/rest_v1/page/summary/{title}
  - MediaWiki action API: full-text search, near-match search, geosearch,
    title normalization (redirects) and coordinates

No ranking happens here. "Not found" comes back as None or [], while
transport failures and malformed bodies raise ProviderError.
"""
import asyncio
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp

from place_wiki.config import Config, get_config
from place_wiki.providers.base import (
    Provider,
    ProviderError,
    ProviderMetadata,
    ProviderNotAvailableError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from place_wiki.services.session_manager import get_session
from place_wiki.src.models import ArticleSummary, GeoHit, LatLng
from place_wiki.utils.async_utils import retry_async

PROVIDER_NAME = "wikipedia"


def summary_slug(title: str) -> str:
    """Title as it appears in a REST path segment."""
    return quote(title.strip().replace(' ', '_'), safe='')


class WikipediaProvider(Provider):
    """Remote lookups against one Wikipedia language edition."""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, config: Optional[Config] = None):
        super().__init__()
        self.config = config or get_config()
        self._session = session
        wiki = self.config.wikipedia_config
        self.api_url = wiki.api_url
        self.summary_url = wiki.summary_url.rstrip('/')
        self.timeout = self.config.get_timeout('wikipedia')
        self.max_geo_radius_m = wiki.geosearch_max_radius_m
        if wiki.max_retries > 0:
            self._request = retry_async(
                max_retries=wiki.max_retries,
                delay=wiki.retry_delay,
                exceptions=(ProviderTimeoutError, ProviderRateLimitError),
            )(self._request)

    async def get_metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name=PROVIDER_NAME,
            version="1.0.0",
            description=f"Wikipedia ({self.config.wikipedia_config.lang}) summaries, search and geosearch",
            capabilities=["summary", "search", "nearmatch", "geosearch", "normalize", "coordinates"],
            rate_limit=200,
        )

    async def search(self, query: str, **kwargs) -> List[str]:
        return await self.search_titles(query, limit=kwargs.get('limit', 10))

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None:
            if getattr(self._session, 'closed', False):
                raise ProviderNotAvailableError("HTTP session is closed", provider_name=PROVIDER_NAME)
            return self._session
        return await get_session()

    async def _request(self, url: str, params: Optional[Dict[str, Any]] = None) -> Tuple[int, Optional[Any]]:
        """GET url; returns (status, parsed JSON or None for non-200)."""
        session = await self._get_session()
        try:
            async with session.get(url, params=params, timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                if resp.status == 429:
                    raise ProviderRateLimitError(
                        f"Wikipedia rate limit hit for {url}", provider_name=PROVIDER_NAME
                    )
                if resp.status != 200:
                    self.logger.debug("Wikipedia returned status %s for %s %s", resp.status, url, params or '')
                    return resp.status, None
                try:
                    return resp.status, await resp.json(content_type=None)
                except ValueError as e:
                    raise ProviderError(
                        f"Malformed response from {url}: {e}",
                        provider_name=PROVIDER_NAME,
                        details={'params': params},
                    )
        except asyncio.TimeoutError:
            raise ProviderTimeoutError(
                f"Wikipedia request timed out after {self.timeout}s: {url}", provider_name=PROVIDER_NAME
            )
        except aiohttp.ClientError as e:
            raise ProviderError(f"Network error calling Wikipedia: {e}", provider_name=PROVIDER_NAME)

    async def _query(self, **params: Any) -> Dict[str, Any]:
        """Call the action API; any non-success is an error."""
        params = {
            "action": "query",
            "format": "json",
            "formatversion": "2",
            **{k: str(v) for k, v in params.items()},
        }
        status, data = await self._request(self.api_url, params=params)
        if status != 200 or not isinstance(data, dict):
            raise ProviderError(f"HTTP {status} from Wikipedia API", provider_name=PROVIDER_NAME,
                                details={'params': params})
        if 'error' in data:
            err = data['error']
            raise ProviderError(
                f"Wikipedia API error: {err.get('code')}: {err.get('info')}",
                provider_name=PROVIDER_NAME,
                details=err,
            )
        return data.get('query') or {}

    async def fetch_summary(self, title: str) -> Optional[ArticleSummary]:
        """Page summary for a title; None for an empty title or any non-200."""
        if not title or not title.strip():
            return None
        status, data = await self._request(f"{self.summary_url}/{summary_slug(title)}")
        if status != 200 or not isinstance(data, dict) or not data.get('title'):
            return None
        return ArticleSummary.from_rest(data)

    async def search_titles(self, query: str, limit: int = 10) -> List[str]:
        """Full-text search, in the service's relevance order."""
        if not query or not query.strip():
            return []
        result = await self._query(list="search", srsearch=query, srlimit=max(1, limit))
        return [s['title'] for s in result.get('search', []) if s.get('title')]

    async def search_near_match(self, query: str) -> Optional[str]:
        """Single best near-exact title match."""
        if not query or not query.strip():
            return None
        result = await self._query(list="search", srsearch=query, srwhat="nearmatch", srlimit=1)
        hits = result.get('search') or []
        return hits[0].get('title') if hits else None

    async def geo_search(self, lat: float, lng: float, radius_m: int = 10000, limit: int = 20) -> List[GeoHit]:
        """Pages around a coordinate, nearest first."""
        radius = min(int(radius_m), self.max_geo_radius_m)
        if radius < radius_m:
            self.logger.debug("geosearch radius %s clamped to %s", radius_m, radius)
        result = await self._query(
            list="geosearch",
            gscoord=f"{lat}|{lng}",
            gsradius=max(10, radius),
            gslimit=max(1, min(int(limit), 500)),
        )
        hits = [
            GeoHit(title=g['title'], dist_m=float(g.get('dist') or 0.0))
            for g in result.get('geosearch', [])
            if g.get('title')
        ]
        hits.sort(key=lambda h: h.dist_m)
        return hits

    async def normalize_title(self, title: str) -> Optional[str]:
        """Canonical title after redirects; None when the page does not exist."""
        if not title or not title.strip():
            return None
        result = await self._query(titles=title, redirects=1)
        pages = result.get('pages') or []
        if not pages:
            return None
        page = pages[0]
        if page.get('missing') or page.get('invalid'):
            return None
        return page.get('title') or None

    async def fetch_coordinates(self, title: str) -> Optional[LatLng]:
        """Primary coordinate of a page, following redirects."""
        if not title or not title.strip():
            return None
        result = await self._query(titles=title, prop="coordinates", redirects=1)
        pages = result.get('pages') or []
        if not pages:
            return None
        coords = pages[0].get('coordinates') or []
        return LatLng.from_any(coords[0]) if coords else None


async def lookup_summary(provider, title: str) -> Optional[ArticleSummary]:
    """Normalize-then-summary through any provider exposing the two calls."""
    canonical = await provider.normalize_title(title)
    return await provider.fetch_summary(canonical or title)
