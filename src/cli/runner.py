# src/cli/runner.py

"""Command handlers for the price_alert CLI.

Each handler is a coroutine returning a process exit code (0 ok, 1 fail).
Status and error messages go to stderr; tables go to stdout.
"""

import logging
from urllib.parse import urlparse

from rich.console import Console
from rich.table import Table

from src.models.errors import (
    ExtractionError,
    InvalidPriceFormat,
    PriceAlertError,
)
from src.models.money import parse_amount, to_decimal_string
from src.models.product import RetailerPatch, TrackedProduct
from src.scrapers.price_extractor import ExtractionResult, PriceExtractor
from src.services.price_checker import (
    AlertEvent,
    PriceChecker,
    ProductCheckResult,
)
from src.storage.product_store import ProductStore

logger = logging.getLogger("price_alert.cli")

# Stderr console for status messages so stdout stays clean for tables
_err = Console(stderr=True)


def is_valid_url(url: str) -> bool:
    """Accept absolute http(s) URLs with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _fmt(cents: int | None) -> str:
    return to_decimal_string(cents) if cents is not None else "—"


def _status_icon(price_cents: int, target_cents: int) -> str:
    return "✅" if price_cents <= target_cents else "⏳"


async def _track_url(
    store: ProductStore,
    extractor: PriceExtractor,
    product_name: str,
    url: str,
    target_cents: int,
) -> ExtractionResult | None:
    """Fetch ``url`` once, then merge it into the named product."""
    if not is_valid_url(url):
        _err.print(f"[red]❌ Invalid URL format: {url}[/red]")
        return None

    _err.print(f"[dim]⏳ Fetching price from {url}...[/dim]")
    try:
        result = await extractor.extract_with_retry(url)
    except ExtractionError as exc:
        logger.warning("Could not add %s: %s", url, exc)
        _err.print(f"[red]❌ Error: {exc}[/red]")
        return None
    except Exception as exc:
        logger.error(
            "Unexpected error adding %s: %s", url, exc, exc_info=True,
        )
        _err.print(f"[red]❌ Error: {str(exc) or type(exc).__name__}[/red]")
        return None

    _err.print(
        f"[green]✓ Found: {result.retailer} - "
        f"{to_decimal_string(result.price_cents)}[/green]"
    )
    product = await store.upsert_retailer(
        product_name, url, result.retailer, target_cents,
    )
    await store.update_retailer_price(
        product.id,
        url,
        RetailerPatch(current_price_cents=result.price_cents),
    )
    return result


def _print_found(
    found: list[ExtractionResult], target_cents: int,
) -> None:
    """Render the retailers just added, cheapest first."""
    ordered = sorted(found, key=lambda r: r.price_cents)
    table = Table(title="Tracked Retailers", title_style="bold cyan")
    table.add_column("", width=2)
    table.add_column("Retailer", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Title", max_width=50)
    for r in ordered:
        table.add_row(
            _status_icon(r.price_cents, target_cents),
            r.retailer,
            to_decimal_string(r.price_cents),
            r.title[:50],
        )
    Console().print(table)
    cheapest = ordered[0]
    Console().print(
        f"💰 Best current price: {cheapest.retailer} at "
        f"{to_decimal_string(cheapest.price_cents)}"
    )


async def add_product(
    name: str,
    target: str,
    urls: list[str],
    store: ProductStore | None = None,
    extractor: PriceExtractor | None = None,
) -> int:
    """Create (or merge into) a product and track each URL."""
    if not name.strip():
        _err.print("[red]❌ Please provide a product name[/red]")
        return 1
    try:
        target_cents = parse_amount(target)
    except InvalidPriceFormat:
        target_cents = 0
    if target_cents <= 0:
        _err.print("[red]❌ Please provide a valid price[/red]")
        return 1

    store = store or ProductStore()
    extractor = extractor or PriceExtractor()
    _err.print(
        "[yellow]⚠️  Please ensure your use complies with retailer "
        "Terms of Service.[/yellow]"
    )

    found: list[ExtractionResult] = []
    for url in urls:
        result = await _track_url(
            store, extractor, name.strip(), url.strip(), target_cents,
        )
        if result is not None:
            found.append(result)

    if not found:
        _err.print("[red]❌ No retailer could be added[/red]")
        return 1

    _err.print(
        f'[green]✓ Price tracking enabled for "{name.strip()}" '
        f"(target {to_decimal_string(target_cents)}, "
        f"{len(found)} retailer(s))[/green]"
    )
    _print_found(found, target_cents)
    return 0


async def append_retailers(
    product_id: str,
    urls: list[str],
    store: ProductStore | None = None,
    extractor: PriceExtractor | None = None,
) -> int:
    """Add retailer URLs to an existing product."""
    store = store or ProductStore()
    extractor = extractor or PriceExtractor()
    try:
        product = await store.get_product(product_id)
    except PriceAlertError as exc:
        _err.print(f"[red]❌ {exc}[/red]")
        return 1

    current = ", ".join(r.retailer for r in product.retailers)
    _err.print(f"Adding retailer to: [bold]{product.name}[/bold]")
    _err.print(f"[dim]Current retailers: {current}[/dim]")

    tracked = {r.url for r in product.retailers}
    added = 0
    for raw_url in urls:
        url = raw_url.strip()
        if url in tracked:
            _err.print(
                f"[red]❌ {url} is already tracked for this product[/red]"
            )
            continue
        result = await _track_url(
            store, extractor, product.name, url, product.target_price_cents,
        )
        if result is not None:
            tracked.add(url)
            added += 1
            _err.print(f'[green]✓ Retailer added to "{product.name}"[/green]')

    return 0 if added else 1


def _product_table(product: TrackedProduct) -> Table:
    """Retailer table for ``list``: cheapest first, unchecked last."""
    ordered = sorted(
        product.retailers,
        key=lambda r: (
            r.current_price_cents is None,
            r.current_price_cents or 0,
        ),
    )
    status = (
        "✅ Alert Triggered" if product.triggered else "⏳ Monitoring"
    )
    table = Table(
        title=f"[{product.id}] {product.name}",
        caption=(
            f"Target: {to_decimal_string(product.target_price_cents)}"
            f"  |  Status: {status}"
        ),
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("", width=2)
    table.add_column("Retailer", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Last checked", style="dim")
    table.add_column("URL", overflow="fold", style="dim")
    for r in ordered:
        if r.current_price_cents is None:
            table.add_row("⏳", r.retailer, "Not yet checked", "—", r.url)
            continue
        table.add_row(
            _status_icon(r.current_price_cents, product.target_price_cents),
            r.retailer,
            to_decimal_string(r.current_price_cents),
            r.last_checked or "—",
            r.url,
        )
    return table


async def list_products(store: ProductStore | None = None) -> int:
    """Print every tracked product with its best known price."""
    store = store or ProductStore()
    products = await store.load_all()
    if not products:
        _err.print("[yellow]No products tracked.[/yellow]")
        return 0

    console = Console()
    console.print(f"📋 Tracked Products ({len(products)})")
    for product in products:
        console.print(_product_table(product))
        best = product.best_known_retailer()
        if best is not None:
            console.print(
                f"  💰 Best price: {best.retailer} at "
                f"{_fmt(best.current_price_cents)}"
            )
    return 0


async def remove_product(
    product_id: str, store: ProductStore | None = None,
) -> int:
    """Delete a product by id."""
    store = store or ProductStore()
    if await store.remove_product(product_id):
        _err.print(f"[green]✓ Product {product_id} removed.[/green]")
        return 0
    _err.print(f"[red]❌ Product {product_id} not found.[/red]")
    return 1


async def remove_retailer(
    product_id: str, url: str, store: ProductStore | None = None,
) -> int:
    """Stop tracking a single retailer URL."""
    store = store or ProductStore()
    try:
        await store.remove_retailer(product_id, url)
    except PriceAlertError as exc:
        _err.print(f"[red]❌ {exc}[/red]")
        return 1
    _err.print(f"[green]✓ Retailer {url} removed.[/green]")
    return 0


def _print_alert(event: AlertEvent) -> None:
    """Alert banner shown the first time a product hits its target."""
    Console().print(
        f"[bold yellow]🔔 PRICE ALERT TRIGGERED! {event.product_name}: "
        f"{event.retailer} at {to_decimal_string(event.price_cents)} "
        f"(target {to_decimal_string(event.target_price_cents)})[/bold yellow]"
    )


def _print_check_result(result: ProductCheckResult) -> None:
    """Render one product's check pass."""
    console = Console()
    console.print(
        f"\n📦 [bold]{result.name}[/bold]  "
        f"Target: {to_decimal_string(result.target_price_cents)}"
    )
    for check in result.checks:
        if check.price_cents is not None:
            icon = _status_icon(check.price_cents, result.target_price_cents)
            console.print(
                f"   {icon} {check.retailer}: "
                f"{to_decimal_string(check.price_cents)}"
            )
        else:
            console.print(f"   [red]❌ {check.retailer}: {check.error}[/red]")

    evaluation = result.evaluation
    if evaluation is None:
        return
    console.print(
        f"   💰 BEST PRICE: {evaluation.best.retailer} at "
        f"{to_decimal_string(evaluation.best.price_cents)}"
    )
    console.print(f"   🔗 {evaluation.best.url}")
    if result.alert is not None:
        _print_alert(result.alert)
    diff = to_decimal_string(evaluation.difference_cents)
    if evaluation.is_savings:
        console.print(f"   💵 Savings: {diff} below target")
    else:
        console.print(f"   ⏳ Waiting for {diff} price drop")


async def check_prices(
    store: ProductStore | None = None,
    extractor: PriceExtractor | None = None,
) -> int:
    """Run a full checking pass over every product."""
    checker = PriceChecker(store=store, extractor=extractor)
    products = await checker.store.load_all()
    if not products:
        _err.print(
            "[yellow]No products configured. Add products using: "
            "price_alert add[/yellow]"
        )
        return 0

    _err.print(
        f"[bold]Checking {len(products)} product(s) across "
        f"multiple retailers...[/bold]"
    )
    for product in products:
        _print_check_result(await checker.check_product(product))

    _err.print("[green]✓ Price check complete![/green]")
    return 0


async def show_history(
    product_id: str, store: ProductStore | None = None,
) -> int:
    """Print recorded price history for each retailer of a product."""
    store = store or ProductStore()
    try:
        product = await store.get_product(product_id)
    except PriceAlertError as exc:
        _err.print(f"[red]❌ {exc}[/red]")
        return 1

    console = Console()
    for record in product.retailers:
        table = Table(
            title=f"{product.name} @ {record.retailer}",
            title_style="bold cyan",
        )
        table.add_column("Timestamp", style="dim")
        table.add_column("Price", justify="right", style="green")
        for snap in record.price_history or []:
            table.add_row(snap.timestamp, to_decimal_string(snap.price_cents))
        if not record.price_history:
            table.add_row("—", "No history recorded")
        console.print(table)
    return 0
