# src/models/errors.py

"""Exception hierarchy shared by the extraction engine and the store."""


class PriceAlertError(Exception):
    """Base class for every error raised by price_alert."""


# ── Extraction ──────────────────────────────────────────


class ExtractionError(PriceAlertError):
    """A single extraction attempt for ``url`` failed."""

    retryable: bool = True

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class UnsupportedRetailer(ExtractionError):
    """The URL matches no registered retailer."""

    retryable = False


class PriceNotFound(ExtractionError):
    """The page rendered but no price selector yielded text."""


class InvalidPriceFormat(ExtractionError, ValueError):
    """Price text could not be decoded into a decimal amount."""

    def __init__(self, text: str, url: str = "") -> None:
        super().__init__(f"Invalid price format: {text!r}", url)
        self.text = text


class RenderError(ExtractionError):
    """Page load failed (timeout, connection error, bad status)."""


# ── Persistence ─────────────────────────────────────────


class StoreError(PriceAlertError):
    """Base class for persistence lookup failures."""


class ProductNotFound(StoreError):
    """No product with the given id exists."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product with id {product_id} not found")
        self.product_id = product_id


class RetailerNotFound(StoreError):
    """The product has no retailer with the given URL."""

    def __init__(self, product_id: str, url: str) -> None:
        super().__init__(
            f"Retailer with url {url} not found on product {product_id}"
        )
        self.product_id = product_id
        self.url = url
