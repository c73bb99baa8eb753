# src/scrapers/price_extractor.py

"""Retailer-aware price extraction with bounded linear-backoff retries."""

import asyncio
import logging
from dataclasses import dataclass

from src.config.settings import Settings
from src.models.errors import (
    ExtractionError,
    PriceNotFound,
    UnsupportedRetailer,
)
from src.models.money import detect_currency, parse_price
from src.scrapers.page_renderer import (
    HttpPageRenderer,
    PageRenderer,
    RenderedPage,
)
from src.scrapers.retailer_registry import (
    RetailerDescriptor,
    RetailerRegistry,
)

logger = logging.getLogger("price_alert.extractor")


@dataclass(frozen=True)
class ExtractionResult:
    """Structured price/title record pulled from one product page."""

    price_cents: int
    title: str
    retailer: str
    currency: str = Settings.DEFAULT_CURRENCY
    url: str = ""


def _first_text(
    page: RenderedPage, selectors: tuple[str, ...],
) -> tuple[str, str] | None:
    """Return ``(text, selector)`` for the first selector with text."""
    for selector in selectors:
        text = page.select_text(selector)
        if text:
            return text, selector
    return None


class PriceExtractor:
    """Detects the retailer for a URL and pulls its price and title."""

    def __init__(
        self,
        registry: RetailerRegistry | None = None,
        renderer: PageRenderer | None = None,
    ) -> None:
        self.settings = Settings()
        self.registry = registry or RetailerRegistry.from_settings()
        self.renderer = renderer or HttpPageRenderer()

    def _resolve(self, url: str) -> RetailerDescriptor:
        descriptor = self.registry.detect(url)
        if descriptor is None:
            supported = ", ".join(self.registry.supported_names())
            raise UnsupportedRetailer(
                f"Unsupported retailer. Supported sites: {supported}",
                url,
            )
        return descriptor

    async def extract(self, url: str) -> ExtractionResult:
        """Run a single extraction attempt against ``url``."""
        descriptor = self._resolve(url)

        async with self.renderer.open(url) as page:
            price_hit = _first_text(page, descriptor.price_selectors)
            if price_hit is None:
                raise PriceNotFound(
                    f"Could not find price on {descriptor.name} page",
                    url,
                )
            price_text, selector = price_hit
            logger.debug(
                "[%s] Found price %r using selector: %s",
                descriptor.key,
                price_text,
                selector,
            )

            title_hit = _first_text(page, descriptor.title_selectors)
            title = (
                title_hit[0] if title_hit else self.settings.UNKNOWN_TITLE
            )

            try:
                price_cents = parse_price(price_text)
            except ExtractionError as exc:
                exc.url = url
                raise

        return ExtractionResult(
            price_cents=price_cents,
            title=title,
            retailer=descriptor.name,
            currency=detect_currency(price_text),
            url=url,
        )

    async def extract_with_retry(
        self, url: str, max_attempts: int | None = None,
    ) -> ExtractionResult:
        """Retry :meth:`extract` with linear backoff.

        Waits ``RETRY_BASE_DELAY * attempt`` between attempts (never
        after the last one).  Unsupported URLs fail immediately; on
        exhaustion the most recent error is re-raised.
        """
        attempts = (
            max_attempts
            if max_attempts is not None
            else self.settings.MAX_RETRIES
        )
        if attempts < 1:
            raise ValueError(
                f"max_attempts must be >= 1, got {attempts}"
            )

        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                return await self.extract(url)
            except UnsupportedRetailer:
                raise
            except Exception as exc:
                last_error = exc
                if attempt >= attempts:
                    break
                delay = self.settings.RETRY_BASE_DELAY * attempt
                logger.warning(
                    "Attempt %d/%d for %s failed: %s. Retrying in %.1fs",
                    attempt,
                    attempts,
                    url,
                    exc,
                    delay,
                )
                await asyncio.sleep(delay)

        logger.error(
            "All %d attempts failed for %s: %s",
            attempts,
            url,
            last_error,
        )
        if last_error is None:
            raise RuntimeError(f"No extraction attempt was made for {url}")
        raise last_error
