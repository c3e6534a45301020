import sys
import threading
import unittest
from unittest.mock import MagicMock, patch

from linkcrawler.exceptions import RenderError
from linkcrawler.renderer import ScriptRenderer, _RenderRequest


def fake_playwright_modules():
    sync_api = MagicMock()
    playwright = sync_api.sync_playwright.return_value.__enter__.return_value
    context = playwright.chromium.launch.return_value.new_context.return_value
    return {"playwright": MagicMock(sync_api=sync_api), "playwright.sync_api": sync_api}, context


class TestScriptRenderer(unittest.TestCase):
    def test_renders_page_content(self):
        modules, context = fake_playwright_modules()
        context.new_page.return_value.content.return_value = "<html>rendered</html>"

        with patch.dict(sys.modules, modules):
            with ScriptRenderer() as renderer:
                self.assertEqual(renderer.render("http://a.test/"), "<html>rendered</html>")

        context.new_page.return_value.close.assert_called_once()
        context.close.assert_called_once()

    def test_page_creation_failure_is_reported_to_caller(self):
        modules, context = fake_playwright_modules()
        context.new_page.side_effect = Exception("Target closed")

        with patch.dict(sys.modules, modules):
            with ScriptRenderer() as renderer:
                with self.assertRaisesRegex(RenderError, "Target closed"):
                    renderer.render("http://a.test/")
                # The render thread keeps serving after a failed page
                context.new_page.side_effect = None
                context.new_page.return_value.content.return_value = "<html>ok</html>"
                self.assertEqual(renderer.render("http://a.test/next"), "<html>ok</html>")

    def test_serve_answers_request_when_new_page_fails(self):
        context = MagicMock()
        context.new_page.side_effect = Exception("browser has crashed")
        renderer = ScriptRenderer()
        request = _RenderRequest("http://a.test/")
        renderer._requests.put(request)
        renderer._requests.put(None)

        renderer._serve(context)

        self.assertIsInstance(request.result.get_nowait(), Exception)

    @patch("linkcrawler.renderer.POLL_INTERVAL_S", 0.01)
    def test_render_gives_up_when_thread_dies(self):
        release = threading.Event()
        renderer = ScriptRenderer()
        # Stands in for a render thread that exits without answering
        renderer._thread = threading.Thread(target=release.wait, daemon=True)
        renderer._thread.start()
        threading.Timer(0.05, release.set).start()

        with self.assertRaisesRegex(RenderError, "Render thread stopped"):
            renderer.render("http://a.test/")

    def test_render_before_start(self):
        with self.assertRaises(RenderError):
            ScriptRenderer().render("http://a.test/")

    def test_missing_playwright_raises_install_hint(self):
        with patch.dict(sys.modules, {"playwright": None, "playwright.sync_api": None}):
            with self.assertRaisesRegex(RenderError, "playwright install chromium"):
                ScriptRenderer().start()


if __name__ == "__main__":
    unittest.main()
