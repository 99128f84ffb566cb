"""Screenshot capture through the rendering service, and serving stored files."""

import asyncio

import httpx
import pytest

from storefront_lab import screenshots
from storefront_lab.models import Submission

PNG = screenshots.PNG_SIGNATURE + b"fake image body"
GREEN = {"object": "Checkout Button", "action": "Change Color", "value": "Green", "reasoning": "Green means go"}


@pytest.fixture
def shots_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(screenshots.settings, "screenshots_dir", str(tmp_path))
    return tmp_path


@pytest.fixture
def submission_id(client, student):
    r = client.post("/submissions", json={"student_id": "student001", "design_choices": [GREEN]})
    return r.json()["submission"]["id"]


class TestFilenames:
    @pytest.mark.parametrize("name, ok", [
        ("12-1700000000000.png", True),
        ("../secret.png", False),
        ("a/b.png", False),
        ("a\\b.png", False),
        ("", False),
    ])
    def test_is_safe_filename(self, name, ok):
        assert screenshots.is_safe_filename(name) is ok


class TestRenderPng:
    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(screenshots.settings, "screenshot_service_url", None)
        with pytest.raises(screenshots.ScreenshotNotConfigured):
            asyncio.run(screenshots.render_png("<html></html>"))

    def test_rejects_non_png(self, monkeypatch):
        real_client = httpx.AsyncClient

        def fake_client(**kwargs):
            return real_client(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"nope")))

        monkeypatch.setattr(screenshots.httpx, "AsyncClient", fake_client)
        with pytest.raises(screenshots.ScreenshotError, match="PNG"):
            asyncio.run(screenshots.render_png("<html></html>", service_url="http://renderer/screenshot"))

    def test_sends_html_and_viewport(self, monkeypatch):
        real_client = httpx.AsyncClient
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(200, content=PNG)

        monkeypatch.setattr(screenshots.httpx, "AsyncClient", lambda **kwargs: real_client(transport=httpx.MockTransport(handler)))
        image = asyncio.run(screenshots.render_png("<p>hi</p>", service_url="http://renderer/screenshot"))
        assert image == PNG
        assert seen["url"] == "http://renderer/screenshot"
        assert b"<p>hi</p>" in seen["body"]
        assert b'"width":1280' in seen["body"].replace(b" ", b"")


class TestScreenshotEndpoints:
    def test_capture_and_serve(self, client, submission_id, shots_dir, monkeypatch, db):
        async def fake_render(html, **kwargs):
            return PNG

        monkeypatch.setattr(screenshots, "render_png", fake_render)
        r = client.post("/screenshots", json={"submission_id": submission_id, "html": "<html></html>"})
        assert r.status_code == 200
        path = r.json()["screenshot_path"]
        assert path.startswith(f"/screenshots/{submission_id}-")
        assert db.get(Submission, submission_id).screenshot_path == path

        served = client.get(path)
        assert served.status_code == 200
        assert served.headers["content-type"] == "image/png"
        assert served.content == PNG

    def test_requires_html(self, client, submission_id):
        r = client.post("/screenshots", json={"submission_id": submission_id})
        assert r.status_code == 400

    def test_unknown_submission(self, client):
        r = client.post("/screenshots", json={"submission_id": 404, "html": "<p></p>"})
        assert r.status_code == 404

    def test_renderer_not_configured(self, client, submission_id, monkeypatch):
        monkeypatch.setattr(screenshots.settings, "screenshot_service_url", None)
        r = client.post("/screenshots", json={"submission_id": submission_id, "html": "<p></p>"})
        assert r.status_code == 503

    def test_renderer_failure(self, client, submission_id, monkeypatch):
        async def broken(html, **kwargs):
            raise screenshots.ScreenshotError("renderer down")

        monkeypatch.setattr(screenshots, "render_png", broken)
        r = client.post("/screenshots", json={"submission_id": submission_id, "html": "<p></p>"})
        assert r.status_code == 502

    def test_missing_file(self, client, shots_dir):
        assert client.get("/screenshots/1-1.png").status_code == 404

    def test_rejects_traversal(self, client, shots_dir):
        assert client.get("/screenshots/..").status_code in (400, 404)
        assert client.get("/screenshots/..%5Csecret.png").status_code == 400
