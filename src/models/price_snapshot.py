# src/models/price_snapshot.py

"""Temporal price snapshot model for per-retailer price history."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PriceSnapshot:
    """A single price observation for a retailer at a point in time."""

    price_cents: int
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the on-disk ``priceHistory`` entry shape."""
        return {"priceCents": self.price_cents, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceSnapshot":
        """Build a snapshot from an on-disk ``priceHistory`` entry."""
        return cls(
            price_cents=int(data["priceCents"]),
            timestamp=str(data["timestamp"]),
        )
