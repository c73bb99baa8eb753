# src/models/product.py

"""Tracked product and retailer records, plus their partial-update patches.

The ``products.json`` document uses camelCase field names; the
dataclasses translate at the edges via
``to_dict`` / ``from_dict``.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from src.models.price_snapshot import PriceSnapshot


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string ending in ``Z``."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class RetailerRecord:
    """One retailer listing tracked for a product, keyed by URL."""

    url: str
    retailer: str
    current_price_cents: int | None = None
    last_checked: str | None = None
    price_history: list[PriceSnapshot] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the on-disk retailer shape."""
        data: dict[str, Any] = {
            "url": self.url,
            "retailer": self.retailer,
            "currentPriceCents": self.current_price_cents,
            "lastChecked": self.last_checked,
        }
        if self.price_history is not None:
            data["priceHistory"] = [s.to_dict() for s in self.price_history]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RetailerRecord":
        """Build a record from its on-disk shape."""
        raw_history = data.get("priceHistory")
        price = data.get("currentPriceCents")
        return cls(
            url=str(data["url"]),
            retailer=str(data.get("retailer", "")),
            current_price_cents=int(price) if price is not None else None,
            last_checked=data.get("lastChecked"),
            price_history=(
                [PriceSnapshot.from_dict(e) for e in raw_history]
                if raw_history is not None
                else None
            ),
        )


@dataclass
class TrackedProduct:
    """A product watched across one or more retailers."""

    id: str
    name: str
    target_price_cents: int
    created_at: str
    triggered: bool = False
    retailers: list[RetailerRecord] = field(
        default_factory=lambda: list[RetailerRecord]()
    )

    def find_retailer(self, url: str) -> RetailerRecord | None:
        """Return the retailer record tracking ``url``, if any."""
        for record in self.retailers:
            if record.url == url:
                return record
        return None

    def best_known_retailer(self) -> RetailerRecord | None:
        """Cheapest retailer by stored price; unchecked ones never win."""
        priced = [
            r for r in self.retailers if r.current_price_cents is not None
        ]
        if not priced:
            return None
        return min(priced, key=lambda r: r.current_price_cents or 0)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the on-disk product shape."""
        return {
            "id": self.id,
            "name": self.name,
            "targetPriceCents": self.target_price_cents,
            "createdAt": self.created_at,
            "triggered": self.triggered,
            "retailers": [r.to_dict() for r in self.retailers],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackedProduct":
        """Build a product from its on-disk shape."""
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            target_price_cents=int(data["targetPriceCents"]),
            created_at=str(data.get("createdAt", "")),
            triggered=bool(data.get("triggered", False)),
            retailers=[
                RetailerRecord.from_dict(r)
                for r in data.get("retailers", [])
            ],
        )


# ── Patches ─────────────────────────────────────────────


@dataclass(frozen=True)
class RetailerPatch:
    """Named optional updates for a retailer; ``None`` leaves a field alone."""

    current_price_cents: int | None = None
    retailer: str | None = None


@dataclass(frozen=True)
class ProductPatch:
    """Named optional updates for a product; ``None`` leaves a field alone."""

    name: str | None = None
    target_price_cents: int | None = None
    triggered: bool | None = None


def apply_retailer_patch(
    record: RetailerRecord, patch: RetailerPatch,
) -> RetailerRecord:
    """Return a copy of ``record`` with the patch's set fields applied."""
    changes: dict[str, Any] = {}
    if patch.current_price_cents is not None:
        changes["current_price_cents"] = patch.current_price_cents
    if patch.retailer is not None:
        changes["retailer"] = patch.retailer
    return replace(record, **changes)


def apply_product_patch(
    product: TrackedProduct, patch: ProductPatch,
) -> TrackedProduct:
    """Return a copy of ``product`` with the patch's set fields applied."""
    changes: dict[str, Any] = {}
    if patch.name is not None:
        changes["name"] = patch.name
    if patch.target_price_cents is not None:
        changes["target_price_cents"] = patch.target_price_cents
    if patch.triggered is not None:
        changes["triggered"] = patch.triggered
    return replace(product, **changes)
