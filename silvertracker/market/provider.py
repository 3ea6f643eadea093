"""Silver price providers behind one ``fetch_quote()`` contract.

Supports three backends:
  - metals.dev (nested ``metals.silver`` payload, requires METALS_DEV_API_KEY)
  - goldapi.io (flat ``price`` payload, requires GOLDAPI_API_KEY)
  - Yahoo Finance silver futures via yfinance (optional dependency)

``fetch_quote()`` never raises. Any transport error, non-2xx status, or
malformed payload is logged and replaced with the fixed fallback quote.
There is exactly one attempt per call: no retry, no backoff, no cache.

Usage::

    from silvertracker.market.provider import get_provider

    provider = get_provider("metals-dev", settings)
    quote = provider.fetch_quote()
    print(quote.price, quote.source)
"""

from __future__ import annotations

import json
import logging
import os
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from silvertracker.market.history import simulate_history
from silvertracker.market.quote import Quote, fallback_quote, normalize_payload

if TYPE_CHECKING:
    from silvertracker.config import Settings

logger = logging.getLogger(__name__)

# goldapi.io is the only backend with an explicit request timeout (seconds)
GOLDAPI_TIMEOUT = 10.0


def _get_json(
    url: str,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
) -> Any:
    """GET a URL and decode its JSON body.

    Raises:
        urllib.error.URLError: On transport failure or non-2xx status.
        json.JSONDecodeError: If the body is not valid JSON.

    """
    req = urllib.request.Request(url, method="GET")
    req.add_header("Accept", "application/json")
    for name, value in (headers or {}).items():
        req.add_header(name, value)

    with urllib.request.urlopen(req, timeout=timeout) as resp:
        return json.loads(resp.read())


class PriceProvider(ABC):
    """Base class for silver price providers.

    Subclasses implement ``_fetch_payload()`` and may raise freely from it;
    ``fetch_quote()`` owns the fallback policy.
    """

    source: str = "unknown"

    @abstractmethod
    def _fetch_payload(self) -> Any:
        """Return the provider's decoded response body."""

    def fetch_quote(self) -> Quote:
        """Fetch and normalize the current silver quote.

        Returns:
            The live quote, or the fallback quote if anything went wrong.

        """
        try:
            payload = self._fetch_payload()
            quote = normalize_payload(payload, self.source)
        except Exception as exc:  # noqa: BLE001 - failures become the fallback quote
            logger.warning(
                "Silver price fetch from %s failed (%s); using fallback quote",
                self.source,
                exc,
            )
            return fallback_quote()

        logger.debug("Fetched silver quote from %s: %.4f", self.source, quote.price)
        return quote

    def fetch_history(self, days: int = 7, seed: int | None = None) -> list[Quote]:
        """Return a SIMULATED daily series anchored on the current quote.

        Args:
            days: Number of days to look back; the result has days + 1 items.
            seed: Optional random seed, for tests.

        Returns:
            Quotes oldest first, tagged with the "simulated" source.

        Raises:
            ValueError: If days is negative.

        """
        if days < 0:
            msg = f"days must be >= 0, got {days}"
            raise ValueError(msg)
        return simulate_history(self.fetch_quote(), days, seed=seed)


class MetalsDevProvider(PriceProvider):
    """metals.dev latest-rates endpoint.

    Responds with ``{"metals": {"silver": <usd per toz>, ...}}``. Only the
    current price is reported, so the other quote fields are derived.
    """

    source = "metals.dev"
    BASE_URL = "https://api.metals.dev/v1/latest"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or os.environ.get("METALS_DEV_API_KEY", "")
        if not self.api_key:
            raise OSError("METALS_DEV_API_KEY is required for metals.dev provider")
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout

    def _fetch_payload(self) -> Any:
        query = urllib.parse.urlencode(
            {"api_key": self.api_key, "currency": "USD", "unit": "toz"}
        )
        return _get_json(f"{self.base_url}?{query}", timeout=self.timeout)


class GoldApiProvider(PriceProvider):
    """goldapi.io spot endpoint for XAG/USD.

    Responds with a flat object carrying ``price`` plus
    ``prev_close_price``, ``open_price``, ``high_price`` and ``low_price``.
    Requests time out after ``GOLDAPI_TIMEOUT`` seconds.
    """

    source = "goldapi"
    BASE_URL = "https://www.goldapi.io/api"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = GOLDAPI_TIMEOUT,
    ) -> None:
        self.api_key = api_key or os.environ.get("GOLDAPI_API_KEY", "")
        if not self.api_key:
            raise OSError("GOLDAPI_API_KEY is required for goldapi provider")
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout

    def _fetch_payload(self) -> Any:
        return _get_json(
            f"{self.base_url}/XAG/USD",
            headers={"x-access-token": self.api_key},
            timeout=self.timeout,
        )


def _require_yfinance() -> Any:
    """Lazy-import yfinance.

    Raises:
        ImportError: If yfinance is not installed.

    """
    try:
        import yfinance as yf
    except ImportError as exc:
        msg = (
            "yfinance is required for the yahoo provider. "
            "Install with: pip install silvertracker[market]"
        )
        raise ImportError(msg) from exc
    return yf


class YahooProvider(PriceProvider):
    """Silver futures (``SI=F``) from Yahoo Finance via yfinance.

    The fast-info snapshot is mapped onto the flat payload shape so it goes
    through the same normalization as the HTTP providers. A missing
    yfinance install is treated like any other fetch failure.
    """

    source = "yahoo"
    SYMBOL = "SI=F"

    def __init__(self, symbol: str | None = None) -> None:
        self.symbol = symbol or self.SYMBOL

    def _fetch_payload(self) -> Any:
        yf = _require_yfinance()
        info = yf.Ticker(self.symbol).fast_info
        return {
            "price": info.last_price,
            "prev_close_price": info.previous_close,
            "open_price": info.open,
            "high_price": info.day_high,
            "low_price": info.day_low,
        }


# -- Provider registry -------------------------------------------------------

_PROVIDERS: dict[str, type[PriceProvider]] = {
    "metals-dev": MetalsDevProvider,
    "metals.dev": MetalsDevProvider,
    "goldapi": GoldApiProvider,
    "yahoo": YahooProvider,
}


def get_provider(
    preference: str = "metals-dev",
    settings: Settings | None = None,
) -> PriceProvider:
    """Instantiate a price provider by name.

    Args:
        preference: One of "metals-dev", "metals.dev", "goldapi", "yahoo".
        settings: Source of API keys. Without it, providers read their
            key from the environment.

    Returns:
        A provider ready for ``fetch_quote()`` calls.

    Raises:
        ValueError: If *preference* is not recognised.
        OSError: If the chosen provider's API key is missing.

    """
    cls = _PROVIDERS.get(preference)
    if cls is None:
        raise ValueError(
            f"Unknown provider '{preference}'. "
            f"Choose from: {', '.join(sorted(_PROVIDERS))}"
        )

    if cls is MetalsDevProvider:
        provider: PriceProvider = MetalsDevProvider(
            api_key=settings.metals_dev_api_key if settings else None,
        )
    elif cls is GoldApiProvider:
        provider = GoldApiProvider(
            api_key=settings.goldapi_api_key if settings else None,
        )
    else:
        provider = cls()

    logger.info("Initialized %s", type(provider).__name__)
    return provider
