# src/scrapers/retailer_registry.py

"""Static registry of supported retailers and their selector chains."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from src.config.settings import Settings

logger = logging.getLogger("price_alert.registry")


@dataclass(frozen=True)
class RetailerDescriptor:
    """How to recognise a retailer's URLs and where its price lives.

    Selector tuples are in priority order: the most specific and
    reliable candidate comes first.
    """

    key: str
    name: str
    domain: str
    price_selectors: tuple[str, ...]
    title_selectors: tuple[str, ...]

    def matches(self, url: str) -> bool:
        """True when ``url``'s host is the retailer domain or a subdomain."""
        candidate = url.strip()
        if "://" not in candidate:
            candidate = f"https://{candidate}"
        host = (urlparse(candidate).hostname or "").lower()
        return host == self.domain or host.endswith(f".{self.domain}")


class RetailerRegistry:
    """Ordered, read-only table of :class:`RetailerDescriptor` entries."""

    def __init__(
        self, descriptors: list[RetailerDescriptor],
    ) -> None:
        self._descriptors: tuple[RetailerDescriptor, ...] = tuple(
            descriptors
        )

    @classmethod
    def from_settings(
        cls, selectors_path: Path | None = None,
    ) -> "RetailerRegistry":
        """Build the registry from ``AVAILABLE_RETAILERS`` + selectors.json.

        Detection order follows ``Settings.AVAILABLE_RETAILERS``.
        """
        path = selectors_path or Settings.SELECTORS_PATH
        with open(path, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)

        descriptors: list[RetailerDescriptor] = []
        for source in Settings.AVAILABLE_RETAILERS:
            selectors: dict[str, list[str]] = all_selectors.get(
                source["id"], {}
            )
            if not selectors.get("price"):
                logger.warning(
                    "No price selectors configured for %s, skipping",
                    source["id"],
                )
                continue
            descriptors.append(
                RetailerDescriptor(
                    key=source["id"],
                    name=source["label"],
                    domain=source["domain"],
                    price_selectors=tuple(selectors["price"]),
                    title_selectors=tuple(selectors.get("title", [])),
                )
            )
        logger.debug(
            "Retailer registry loaded with %d retailers from %s",
            len(descriptors),
            path,
        )
        return cls(descriptors)

    @property
    def descriptors(self) -> tuple[RetailerDescriptor, ...]:
        return self._descriptors

    def detect(self, url: str) -> RetailerDescriptor | None:
        """Return the first descriptor whose URL predicate matches."""
        for descriptor in self._descriptors:
            if descriptor.matches(url):
                return descriptor
        return None

    def supported_names(self) -> list[str]:
        """Display names of every registered retailer, in detection order."""
        return [d.name for d in self._descriptors]
