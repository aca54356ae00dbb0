"""
Session management for the shared aiohttp client session.

One session is reused by every remote lookup so connections are pooled
across the many sequential calls a resolution run makes.
"""

import asyncio
import aiohttp
from typing import Optional

from place_wiki.config import get_config


class SessionManager:
    """Centralized HTTP session manager."""

    def __init__(self):
        self._session: Optional[aiohttp.ClientSession] = None
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        # created lazily so the lock binds to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def get_session(self) -> aiohttp.ClientSession:
        """Get the shared HTTP session, creating it if necessary.

        Uses a lock to prevent race conditions when multiple coroutines
        try to create the session simultaneously.
        """
        async with self._get_lock():
            if self._session is None or self._session.closed:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> aiohttp.ClientSession:
        """Create a new HTTP session with proper configuration."""
        config = get_config()
        timeout = aiohttp.ClientTimeout(total=config.get_timeout('api'))

        connector = aiohttp.TCPConnector(
            limit=100,
            limit_per_host=20,
            enable_cleanup_closed=True,
            keepalive_timeout=30.0,
            ttl_dns_cache=300,
        )

        return aiohttp.ClientSession(
            timeout=timeout,
            connector=connector,
            headers={
                'User-Agent': config.wikipedia_config.user_agent,
                'Accept': 'application/json',
            }
        )

    async def close(self):
        """Close the shared session and clean up resources."""
        async with self._get_lock():
            if self._session and not self._session.closed:
                await self._session.close()
            self._session = None

    async def health_check(self) -> bool:
        """True if the session is available and open."""
        try:
            session = await self.get_session()
            return not session.closed
        except Exception:
            return False


# Global session manager instance
session_manager = SessionManager()


async def get_session() -> aiohttp.ClientSession:
    """Get the global HTTP session."""
    return await session_manager.get_session()


async def close_session():
    """Close the global session manager.

    This should be called during application shutdown.
    """
    await session_manager.close()
