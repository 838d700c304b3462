"""Shared aiohttp session lifecycle for the external API clients."""

import aiohttp


class HTTPClient:
    """Owns (or borrows) one aiohttp.ClientSession.

    A session passed in by the caller is never closed here. Otherwise a
    session is created lazily on first use and closed by close().

    Usage:
        async with CoinGeckoClient(settings) as client:
            observations = await client.fetch_markets()
    """

    def __init__(
        self,
        request_timeout: float,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=request_timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
