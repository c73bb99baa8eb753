# tests/test_page_renderer.py

"""Tests for the curl_cffi-backed page renderer."""

import unittest
from unittest.mock import MagicMock, patch

from src.models.errors import RenderError
from src.scrapers.page_renderer import HttpPageRenderer, RenderedPage

_HTML = """
<html><body>
  <h1 id="productTitle">  Apple AirPods Pro  </h1>
  <div class="a-price"><span class="a-offscreen">$249.99</span></div>
  <span class="empty"></span>
</body></html>
"""

SESSION_PATH = "src.scrapers.page_renderer.curl_requests.Session"


def _mock_session(status: int = 200, text: str = _HTML) -> MagicMock:
    """Build a fake curl_cffi session returning one canned response."""
    session = MagicMock()
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    session.get.return_value = resp
    return session


class TestRenderedPage(unittest.TestCase):
    """Selector queries against a parsed page."""

    def setUp(self) -> None:
        self.page = RenderedPage("https://example.com", _HTML)

    def test_select_text_strips(self) -> None:
        """Matched text is whitespace-stripped."""
        self.assertEqual(
            self.page.select_text("#productTitle"), "Apple AirPods Pro"
        )

    def test_select_text_nested(self) -> None:
        self.assertEqual(
            self.page.select_text(".a-price .a-offscreen"), "$249.99"
        )

    def test_select_text_missing(self) -> None:
        """No match returns None."""
        self.assertIsNone(self.page.select_text("#priceblock_ourprice"))

    def test_select_text_empty_element(self) -> None:
        """An empty element yields an empty string, not None."""
        self.assertEqual(self.page.select_text(".empty"), "")

    def test_closed_page_refuses_queries(self) -> None:
        self.page.close()
        with self.assertRaises(RuntimeError):
            self.page.select_text("h1")

    def test_close_twice_is_safe(self) -> None:
        self.page.close()
        self.page.close()


class TestHttpPageRenderer(unittest.IsolatedAsyncioTestCase):
    """Fetching, failure mapping, and resource release."""

    @patch(SESSION_PATH)
    async def test_open_yields_queryable_page(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """A 200 response is parsed and queryable inside the context."""
        session = _mock_session()
        mock_session_cls.return_value = session

        renderer = HttpPageRenderer(request_timeout=5, settle_delay=0)
        async with renderer.open("https://www.amazon.com/dp/1") as page:
            self.assertEqual(
                page.select_text(".a-offscreen"), "$249.99"
            )

        session.get.assert_called_once()
        self.assertEqual(session.get.call_args.kwargs["timeout"], 5)
        session.close.assert_called_once()

    @patch(SESSION_PATH)
    async def test_page_closed_after_exit(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """The parsed page is released once the context exits."""
        mock_session_cls.return_value = _mock_session()

        renderer = HttpPageRenderer(settle_delay=0)
        async with renderer.open("https://www.amazon.com/dp/1") as page:
            pass
        with self.assertRaises(RuntimeError):
            page.select_text("h1")

    @patch(SESSION_PATH)
    async def test_non_200_raises_render_error(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """HTTP errors surface as RenderError and still close the session."""
        session = _mock_session(status=503)
        mock_session_cls.return_value = session

        renderer = HttpPageRenderer(settle_delay=0)
        with self.assertRaises(RenderError) as ctx:
            async with renderer.open("https://www.amazon.com/dp/1"):
                self.fail("context body should not run")
        self.assertIn("503", str(ctx.exception))
        self.assertEqual(ctx.exception.url, "https://www.amazon.com/dp/1")
        session.close.assert_called_once()

    @patch(SESSION_PATH)
    async def test_timeout_raises_render_error(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Transport errors (timeouts) are wrapped as RenderError."""
        session = MagicMock()
        session.get.side_effect = TimeoutError("timed out")
        mock_session_cls.return_value = session

        renderer = HttpPageRenderer(settle_delay=0)
        with self.assertRaises(RenderError) as ctx:
            async with renderer.open("https://www.amazon.com/dp/1"):
                pass
        self.assertIsInstance(ctx.exception.__cause__, TimeoutError)
        self.assertTrue(ctx.exception.retryable)
        session.close.assert_called_once()

    @patch(SESSION_PATH)
    async def test_caller_error_still_releases(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """An exception inside the context body still closes the session."""
        session = _mock_session()
        mock_session_cls.return_value = session

        renderer = HttpPageRenderer(settle_delay=0)
        with self.assertRaises(ValueError):
            async with renderer.open("https://www.amazon.com/dp/1"):
                raise ValueError("boom")
        session.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
