"""Escalating fetch chain: plain HTTP, then a headless browser or a render proxy.

Strategy priority (cheapest first):
  1. Direct — ``httpx`` GET with browser-like headers and a short timeout.
  2. Browser — headless Chromium via Playwright, for JS-rendered pages.
  3. Proxy — a third-party rendering service (alternate deployment, used in
     place of the browser).

All strategies share a common interface: ``fetch(url) -> RawPage``, raising
on failure.  ``FetchChain`` tries each strategy in order and returns the
first page it gets.  If every strategy fails the chain raises
:class:`~reader.errors.FetchExhaustedError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx

from reader.config import settings
from reader.errors import FetchExhaustedError
from reader.scraper.models import RawPage

_BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_DEFAULT_HEADERS = {
    "User-Agent": _BROWSER_UA,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# Signatures of an anti-bot interstitial.  Only the interstitial itself
# carries these; the challenge-platform script also loads on normal pages.
_CHALLENGE_MARKERS = (
    "cf-browser-verification",
    "cf_chl_opt",
    "<title>Just a moment...</title>",
)

_BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]


class FetchStrategyError(Exception):
    """A single strategy could not produce usable HTML."""


def _has_challenge_marker(html: str) -> bool:
    return any(marker in html for marker in _CHALLENGE_MARKERS)


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class FetchStrategy(ABC):
    """Abstract base class for a single way of obtaining a page's HTML."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short strategy name recorded on the resulting :class:`RawPage`."""

    @abstractmethod
    def fetch(self, url: str) -> RawPage:
        """Return the page's HTML.  Raise any exception on failure."""


# ---------------------------------------------------------------------------
# Direct HTTP
# ---------------------------------------------------------------------------

class DirectFetchStrategy(FetchStrategy):
    """Plain GET with browser-like headers.

    The response only counts when it is 2xx, longer than
    ``settings.min_content_length`` and free of bot-challenge markers.
    """

    def __init__(
        self,
        timeout: float | None = None,
        min_content_length: int | None = None,
    ) -> None:
        self._timeout = settings.direct_fetch_timeout if timeout is None else timeout
        self._min_length = (
            settings.min_content_length if min_content_length is None else min_content_length
        )

    @property
    def name(self) -> str:
        return "direct"

    def fetch(self, url: str) -> RawPage:
        with httpx.Client(
            headers=_DEFAULT_HEADERS,
            timeout=self._timeout,
            follow_redirects=True,
        ) as client:
            response = client.get(url)
            response.raise_for_status()
            html = response.text

        if len(html) <= self._min_length:
            raise FetchStrategyError(
                f"body too short ({len(html)} chars, need > {self._min_length})"
            )
        if _has_challenge_marker(html):
            raise FetchStrategyError("bot challenge page detected")

        return RawPage(url=url, html=html, status_code=response.status_code, strategy=self.name)


# ---------------------------------------------------------------------------
# Headless browser
# ---------------------------------------------------------------------------

class BrowserFetchStrategy(FetchStrategy):
    """Render *url* with a headless Chromium browser and return its HTML.

    Navigation waits for DOM-ready only, then sleeps a short settle delay so
    client-side scripts can fill the page.  The browser is closed on every
    exit path.

    Playwright is imported lazily so deployments (and tests) that never
    reach this strategy don't need a browser installed.
    """

    def __init__(
        self,
        nav_timeout: float | None = None,
        settle_delay: float | None = None,
    ) -> None:
        self._nav_timeout = settings.browser_nav_timeout if nav_timeout is None else nav_timeout
        self._settle_delay = (
            settings.browser_settle_delay if settle_delay is None else settle_delay
        )

    @property
    def name(self) -> str:
        return "browser"

    def fetch(self, url: str) -> RawPage:
        from playwright.sync_api import sync_playwright  # noqa: PLC0415

        with sync_playwright() as pw:
            browser = pw.chromium.launch(headless=True, args=_BROWSER_ARGS)
            try:
                page = browser.new_page(user_agent=_BROWSER_UA)
                response = page.goto(
                    url,
                    timeout=int(self._nav_timeout * 1000),
                    wait_until="domcontentloaded",
                )
                page.wait_for_timeout(int(self._settle_delay * 1000))
                html = page.content()
            finally:
                browser.close()

        status_code = response.status if response is not None else 200
        return RawPage(url=url, html=html, status_code=status_code, strategy=self.name)


# ---------------------------------------------------------------------------
# Rendering proxy
# ---------------------------------------------------------------------------

class ProxyRenderStrategy(FetchStrategy):
    """Delegate rendering to a third-party proxy (ScrapingBee-style API).

    One GET to ``settings.render_proxy_url`` with ``api_key``, ``url`` and
    ``render_js=true``.  Any non-2xx response fails the strategy.
    """

    def __init__(
        self,
        endpoint: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._endpoint = settings.render_proxy_url if endpoint is None else endpoint
        self._api_key = settings.render_proxy_api_key if api_key is None else api_key
        self._timeout = settings.proxy_fetch_timeout if timeout is None else timeout

    @property
    def name(self) -> str:
        return "proxy"

    def fetch(self, url: str) -> RawPage:
        if not self._api_key:
            raise FetchStrategyError("RENDER_PROXY_API_KEY is not set")

        with httpx.Client(timeout=self._timeout) as client:
            response = client.get(
                self._endpoint,
                params={"api_key": self._api_key, "url": url, "render_js": "true"},
            )
            response.raise_for_status()

        return RawPage(
            url=url,
            html=response.text,
            status_code=response.status_code,
            strategy=self.name,
        )


# ---------------------------------------------------------------------------
# Strategy chain
# ---------------------------------------------------------------------------

class FetchChain:
    """Try strategies in order; return the first page any of them produces."""

    def __init__(self, strategies: list[FetchStrategy]) -> None:
        self._strategies = strategies

    @property
    def strategies(self) -> list[FetchStrategy]:
        return list(self._strategies)

    def fetch(self, url: str) -> RawPage:
        """Fetch *url*, escalating through the chain.

        Raises:
            FetchExhaustedError: If every strategy failed.  The exception
                carries each strategy's failure; the last one is chained as
                ``__cause__``.
        """
        failures: list[tuple[str, Exception]] = []
        for strategy in self._strategies:
            try:
                raw = strategy.fetch(url)
            except Exception as exc:
                print(f"[FETCH] {strategy.name} failed for {url}: {exc!r:.160}")
                failures.append((strategy.name, exc))
                continue
            print(f"[FETCH] ✓ {strategy.name} → {len(raw.html)} chars.")
            return raw

        cause = failures[-1][1] if failures else None
        raise FetchExhaustedError(url, failures) from cause


# ---------------------------------------------------------------------------
# Default chain factory
# ---------------------------------------------------------------------------

_STRATEGIES: dict[str, type[FetchStrategy]] = {
    "direct": DirectFetchStrategy,
    "browser": BrowserFetchStrategy,
    "proxy": ProxyRenderStrategy,
}


def build_default_chain(names: list[str] | None = None) -> FetchChain:
    """Build the chain named by ``settings.fetch_strategies``.

    ``direct,browser`` is the default deployment; ``direct,proxy`` swaps the
    headless browser for the rendering proxy.
    """
    names = settings.fetch_strategies if names is None else names
    strategies: list[FetchStrategy] = []
    for name in names:
        try:
            strategies.append(_STRATEGIES[name]())
        except KeyError:
            raise ValueError(
                f"Unknown fetch strategy {name!r}. Use: {', '.join(_STRATEGIES)}"
            ) from None
    return FetchChain(strategies)
