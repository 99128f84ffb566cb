from __future__ import annotations
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import screenshots
from ..db import get_db
from ..models import Submission

router = APIRouter(prefix="/screenshots", tags=["screenshots"])
logger = logging.getLogger(__name__)


class ScreenshotRequest(BaseModel):
	submission_id: Optional[int] = None
	html: Optional[str] = None


@router.post("")
async def create_screenshot(req: ScreenshotRequest, db: Session = Depends(get_db)):
	if req.submission_id is None or not req.html:
		raise HTTPException(status_code=400, detail="Submission ID and HTML are required")
	row = db.get(Submission, req.submission_id)
	if row is None:
		raise HTTPException(status_code=404, detail="Submission not found")
	logger.info("Generating screenshot for submission %s", row.id)
	try:
		filename = await screenshots.capture_submission(row.id, req.html)
	except screenshots.ScreenshotNotConfigured as e:
		raise HTTPException(status_code=503, detail=str(e))
	except screenshots.ScreenshotError:
		logger.exception("Screenshot failed for submission %s", row.id)
		raise HTTPException(status_code=502, detail="Failed to generate screenshot")
	row.screenshot_path = screenshots.public_path(filename)
	db.add(row)
	db.commit()
	return {"success": True, "screenshot_path": row.screenshot_path}


@router.get("/{filename}")
async def get_screenshot(filename: str):
	if not screenshots.is_safe_filename(filename):
		raise HTTPException(status_code=400, detail="Invalid filename")
	path = screenshots.screenshots_dir() / filename
	if not path.is_file():
		raise HTTPException(status_code=404, detail="Screenshot not found")
	return FileResponse(
		path,
		media_type="image/png",
		headers={"Cache-Control": "public, max-age=31536000, immutable"},
	)
