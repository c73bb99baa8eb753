# src/storage/product_store.py

"""JSON-file store for tracked products with serialized writes.

Every operation starts from a fresh read of the data file; nothing is
cached between calls.  Read-modify-write cycles run under a single
``asyncio.Lock`` owned by the store, so queued updates are applied in
arrival order and never interleave.  Files are replaced atomically, so
a reader sees either the previous document or the new one.
"""

import asyncio
import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.errors import ProductNotFound, RetailerNotFound
from src.models.price_snapshot import PriceSnapshot
from src.models.product import (
    ProductPatch,
    RetailerPatch,
    RetailerRecord,
    TrackedProduct,
    apply_product_patch,
    apply_retailer_patch,
    utc_now_iso,
)

logger = logging.getLogger("price_alert.store")


def _find_product(
    products: list[TrackedProduct], product_id: str,
) -> TrackedProduct:
    for product in products:
        if product.id == product_id:
            return product
    raise ProductNotFound(product_id)


class ProductStore:
    """Durable record of tracked products and their retailers."""

    def __init__(
        self,
        data_file: Path | None = None,
        enable_history: bool | None = None,
        max_history: int | None = None,
    ) -> None:
        self.data_file: Path = data_file or Settings.DATA_FILE
        self.enable_history: bool = (
            enable_history
            if enable_history is not None
            else Settings.ENABLE_PRICE_HISTORY
        )
        self.max_history: int = (
            max_history
            if max_history is not None
            else Settings.MAX_HISTORY_ENTRIES
        )
        self._lock = asyncio.Lock()
        logger.debug(
            "ProductStore initialised, data_file=%s history=%s max=%d",
            self.data_file,
            self.enable_history,
            self.max_history,
        )

    # ── Raw file I/O (blocking, run in a worker thread) ──

    def _read_file(self) -> list[TrackedProduct]:
        try:
            with open(self.data_file, encoding="utf-8") as f:
                data: list[dict[str, Any]] = json.load(f)
        except FileNotFoundError:
            return []
        return [TrackedProduct.from_dict(p) for p in data]

    def _write_file(self, products: list[TrackedProduct]) -> None:
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        payload = [p.to_dict() for p in products]
        fd, tmp_name = tempfile.mkstemp(
            dir=self.data_file.parent,
            prefix=f".{self.data_file.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.data_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(
            "Wrote %d products to %s", len(products), self.data_file,
        )

    async def _load(self) -> list[TrackedProduct]:
        return await asyncio.to_thread(self._read_file)

    async def _save(self, products: list[TrackedProduct]) -> None:
        await asyncio.to_thread(self._write_file, products)

    # ── Public API ───────────────────────────────────────

    async def load_all(self) -> list[TrackedProduct]:
        """Return every product on disk; ``[]`` when no file exists yet."""
        return await self._load()

    async def get_product(self, product_id: str) -> TrackedProduct:
        """Return one product or raise :class:`ProductNotFound`."""
        return _find_product(await self._load(), product_id)

    async def save_all(self, products: list[TrackedProduct]) -> None:
        """Queue a full rewrite of the collection behind earlier writes."""
        async with self._lock:
            await self._save(products)

    async def upsert_retailer(
        self,
        product_name: str,
        url: str,
        retailer_name: str,
        target_price_cents: int,
    ) -> TrackedProduct:
        """Add ``url`` to the product called ``product_name``.

        The name match is case-insensitive.  An existing retailer with
        the same URL is updated in place; a missing product is created.
        The target price is overwritten either way.
        """
        async with self._lock:
            products = await self._load()
            wanted = product_name.lower()
            product = next(
                (p for p in products if p.name.lower() == wanted), None
            )

            if product is not None:
                existing = product.find_retailer(url)
                if existing is not None:
                    existing.retailer = retailer_name
                else:
                    product.retailers.append(
                        self._new_retailer(url, retailer_name)
                    )
                product.target_price_cents = target_price_cents
                logger.info(
                    "Merged retailer %s into product '%s' (%s)",
                    retailer_name,
                    product.name,
                    product.id,
                )
            else:
                product = TrackedProduct(
                    id=uuid.uuid4().hex,
                    name=product_name,
                    target_price_cents=target_price_cents,
                    created_at=utc_now_iso(),
                    triggered=False,
                    retailers=[self._new_retailer(url, retailer_name)],
                )
                products.append(product)
                logger.info(
                    "Created product '%s' (%s) with retailer %s",
                    product.name,
                    product.id,
                    retailer_name,
                )

            await self._save(products)
            return product

    async def remove_product(self, product_id: str) -> bool:
        """Delete a product; True if it existed."""
        async with self._lock:
            products = await self._load()
            remaining = [p for p in products if p.id != product_id]
            await self._save(remaining)
            removed = len(remaining) < len(products)
            logger.info(
                "Remove product %s: %s",
                product_id,
                "removed" if removed else "not found",
            )
            return removed

    async def remove_retailer(self, product_id: str, url: str) -> bool:
        """Drop a retailer; the product goes too if it was the last one."""
        async with self._lock:
            products = await self._load()
            product = _find_product(products, product_id)
            product.retailers = [
                r for r in product.retailers if r.url != url
            ]

            if not product.retailers:
                products = [p for p in products if p.id != product_id]
                logger.info(
                    "Removed last retailer of %s, product deleted",
                    product_id,
                )
            else:
                logger.info(
                    "Removed retailer %s from %s", url, product_id,
                )

            await self._save(products)
            return True

    async def update_retailer_price(
        self, product_id: str, url: str, patch: RetailerPatch,
    ) -> TrackedProduct:
        """Apply a checked-price update to one retailer.

        A history entry is appended first when history is enabled and
        the price actually changed; ``last_checked`` is always stamped.
        """
        async with self._lock:
            products = await self._load()
            product = _find_product(products, product_id)
            record = product.find_retailer(url)
            if record is None:
                raise RetailerNotFound(product_id, url)

            now = utc_now_iso()
            new_price = patch.current_price_cents
            if self.enable_history and new_price is not None:
                self._append_history(record, new_price, now)

            updated = apply_retailer_patch(record, patch)
            updated.last_checked = now
            index = product.retailers.index(record)
            product.retailers[index] = updated

            await self._save(products)
            return product

    async def update_product_fields(
        self, product_id: str, patch: ProductPatch,
    ) -> TrackedProduct:
        """Merge product-level fields (target, trigger latch, name)."""
        async with self._lock:
            products = await self._load()
            product = _find_product(products, product_id)
            updated = apply_product_patch(product, patch)
            products[products.index(product)] = updated
            await self._save(products)
            return updated

    # ── Helpers ──────────────────────────────────────────

    def _new_retailer(self, url: str, retailer_name: str) -> RetailerRecord:
        return RetailerRecord(
            url=url,
            retailer=retailer_name,
            price_history=[] if self.enable_history else None,
        )

    def _append_history(
        self, record: RetailerRecord, price_cents: int, timestamp: str,
    ) -> None:
        """Append a snapshot if the price moved, keeping the last N."""
        if record.price_history is None:
            record.price_history = []
        if record.current_price_cents == price_cents:
            return

        record.price_history.append(
            PriceSnapshot(price_cents=price_cents, timestamp=timestamp)
        )
        overflow = len(record.price_history) - self.max_history
        if overflow > 0:
            record.price_history = record.price_history[overflow:]
            logger.debug(
                "Trimmed %d old history entries for %s",
                overflow,
                record.url,
            )
