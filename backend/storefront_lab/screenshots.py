"""Submission screenshots via an external headless-browser rendering service.

The service receives the storefront HTML and returns a full-page PNG. Files
are written to SCREENSHOTS_DIR and served back through /screenshots/<name>.
"""

from __future__ import annotations
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from .settings import settings

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1280, "height": 1080}
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class ScreenshotError(RuntimeError):
	pass


class ScreenshotNotConfigured(ScreenshotError):
	pass


def screenshots_dir() -> Path:
	return Path(settings.screenshots_dir)


def is_safe_filename(filename: str) -> bool:
	return bool(filename) and ".." not in filename and "/" not in filename and "\\" not in filename


def public_path(filename: str) -> str:
	return f"/screenshots/{filename}"


async def render_png(html: str, *, service_url: Optional[str] = None) -> bytes:
	url = service_url or settings.screenshot_service_url
	if not url:
		raise ScreenshotNotConfigured("SCREENSHOT_SERVICE_URL is not configured")
	payload: Dict[str, Any] = {
		"html": html,
		"viewport": VIEWPORT,
		"fullPage": True,
		"type": "png",
		"waitUntil": "networkidle0",
	}
	async with httpx.AsyncClient(timeout=settings.screenshot_timeout_seconds) as client:
		try:
			r = await client.post(url, json=payload)
			r.raise_for_status()
		except httpx.HTTPError as e:
			raise ScreenshotError(f"rendering service failed: {e}") from e
	content = r.content
	if not content.startswith(PNG_SIGNATURE):
		raise ScreenshotError("rendering service did not return a PNG")
	return content


async def capture_submission(submission_id: int, html: str) -> str:
	"""Render and store a screenshot; returns the stored filename."""
	image = await render_png(html)
	directory = screenshots_dir()
	filename = f"{submission_id}-{int(time.time() * 1000)}.png"
	try:
		directory.mkdir(parents=True, exist_ok=True)
		(directory / filename).write_bytes(image)
	except OSError as e:
		raise ScreenshotError(f"failed to save screenshot: {e}") from e
	logger.info("Saved screenshot for submission %s as %s", submission_id, filename)
	return filename
