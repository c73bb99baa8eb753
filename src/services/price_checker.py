# src/services/price_checker.py

"""Runs a checking pass over every tracked product and raises alerts."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from src.config.settings import Settings
from src.models.errors import ExtractionError
from src.models.product import (
    ProductPatch,
    RetailerPatch,
    TrackedProduct,
)
from src.scrapers.price_extractor import PriceExtractor
from src.services.alert_evaluator import (
    AlertEvaluation,
    PriceObservation,
    evaluate,
)
from src.storage.product_store import ProductStore

logger = logging.getLogger("price_alert.checker")


@dataclass(frozen=True)
class AlertEvent:
    """Emitted once, the first time a product reaches its target."""

    product_id: str
    product_name: str
    retailer: str
    url: str
    price_cents: int
    target_price_cents: int


@dataclass
class RetailerCheck:
    """Result of checking one retailer during a pass."""

    retailer: str
    url: str
    price_cents: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.price_cents is not None


@dataclass
class ProductCheckResult:
    """Everything a pass learned about one product."""

    product_id: str
    name: str
    target_price_cents: int
    checks: list[RetailerCheck] = field(
        default_factory=lambda: list[RetailerCheck]()
    )
    evaluation: AlertEvaluation | None = None
    alert: AlertEvent | None = None

    @property
    def errors(self) -> list[str]:
        return [
            f"{c.retailer}: {c.error}" for c in self.checks if c.error
        ]


class PriceChecker:
    """Checks every retailer of every product, one request at a time."""

    def __init__(
        self,
        store: ProductStore | None = None,
        extractor: PriceExtractor | None = None,
        on_alert: Callable[[AlertEvent], None] | None = None,
    ) -> None:
        self.settings = Settings()
        self.store = store or ProductStore()
        self.extractor = extractor or PriceExtractor()
        self.on_alert = on_alert

    async def check_all(self) -> list[ProductCheckResult]:
        """Check all stored products sequentially."""
        products = await self.store.load_all()
        logger.info("Checking %d product(s)", len(products))
        results: list[ProductCheckResult] = []
        for product in products:
            results.append(await self.check_product(product))
        return results

    async def _check_retailer(
        self, product: TrackedProduct, url: str, retailer: str,
    ) -> RetailerCheck:
        """Extract and record one retailer's price; failures stay local."""
        check = RetailerCheck(retailer=retailer, url=url)
        try:
            result = await self.extractor.extract_with_retry(url)
        except ExtractionError as exc:
            check.error = str(exc)
            logger.warning(
                "[%s] %s check failed: %s", product.name, retailer, exc,
            )
            return check
        except Exception as exc:
            check.error = str(exc) or type(exc).__name__
            logger.error(
                "[%s] %s check failed unexpectedly: %s",
                product.name,
                retailer,
                exc,
                exc_info=True,
            )
            return check

        await self.store.update_retailer_price(
            product.id,
            url,
            RetailerPatch(current_price_cents=result.price_cents),
        )
        check.price_cents = result.price_cents
        logger.info(
            "[%s] %s: %d cents (target %d)",
            product.name,
            retailer,
            result.price_cents,
            product.target_price_cents,
        )

        # Rate-limit throttle between retailer requests
        await asyncio.sleep(self.settings.REQUEST_DELAY)
        return check

    async def check_product(
        self, product: TrackedProduct,
    ) -> ProductCheckResult:
        """Check each retailer of ``product`` and evaluate its alert."""
        outcome = ProductCheckResult(
            product_id=product.id,
            name=product.name,
            target_price_cents=product.target_price_cents,
        )

        for record in product.retailers:
            outcome.checks.append(
                await self._check_retailer(
                    product, record.url, record.retailer,
                )
            )

        observations = [
            PriceObservation(
                retailer=c.retailer,
                url=c.url,
                price_cents=c.price_cents,
            )
            for c in outcome.checks
            if c.ok and c.price_cents is not None
        ]
        outcome.evaluation = evaluate(product, observations)
        if outcome.evaluation is None:
            logger.warning(
                "[%s] No retailer returned a price this pass",
                product.name,
            )
            return outcome

        if outcome.evaluation.should_trigger:
            await self.store.update_product_fields(
                product.id, ProductPatch(triggered=True),
            )
            best = outcome.evaluation.best
            outcome.alert = AlertEvent(
                product_id=product.id,
                product_name=product.name,
                retailer=best.retailer,
                url=best.url,
                price_cents=best.price_cents,
                target_price_cents=product.target_price_cents,
            )
            logger.info(
                "[%s] Price alert triggered at %s (%d cents)",
                product.name,
                best.retailer,
                best.price_cents,
            )
            if self.on_alert is not None:
                self.on_alert(outcome.alert)

        return outcome
