from __future__ import annotations
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..metrics import DesignChoice, score
from ..models import Student, Submission
from ..reports import REPORT_FAILED_TEXT, ReportGenerationError, generate_report
from ..schemas import (
	dump_design_choices,
	load_design_choices,
	parse_design_choices,
	serialize_submission,
	submission_metrics,
)
from ..validation import are_all_design_choices_complete, get_incomplete_fields

router = APIRouter(prefix="/submissions", tags=["submissions"])
logger = logging.getLogger(__name__)


class CreateSubmissionRequest(BaseModel):
	student_id: Optional[str] = None
	design_choices: Any = None


class RetryReportRequest(BaseModel):
	submission_id: Optional[int] = None


@router.post("")
async def create_submission(req: CreateSubmissionRequest, db: Session = Depends(get_db)):
	student_id = (req.student_id or "").strip()
	if not student_id or not isinstance(req.design_choices, list):
		raise HTTPException(status_code=400, detail="Student ID and design choices are required")
	choices = parse_design_choices(req.design_choices)
	if not are_all_design_choices_complete(choices):
		raise HTTPException(
			status_code=400,
			detail={
				"message": "Every design choice needs an element, action, value and reasoning",
				"incomplete": [
					{"index": i, "fields": fields}
					for i, fields in enumerate(map(get_incomplete_fields, choices))
					if fields
				],
			},
		)
	student = db.query(Student).filter(Student.student_id == student_id).first()
	if student is None:
		raise HTTPException(status_code=404, detail="Student not found")

	snapshot = score(choices)
	try:
		ai_report: Optional[str] = await generate_report(choices, snapshot)
	except ReportGenerationError:
		logger.exception("AI report generation failed for student %s", student_id)
		ai_report = REPORT_FAILED_TEXT

	row = Submission(
		student_id=student_id,
		design_choices=dump_design_choices(choices),
		ai_report=ai_report,
		**snapshot.to_dict(),
	)
	db.add(row)
	db.commit()
	db.refresh(row)
	return {"success": True, "submission": serialize_submission(row)}


@router.get("")
async def list_submissions(student_id: Optional[str] = None, db: Session = Depends(get_db)):
	if not student_id:
		raise HTTPException(status_code=400, detail="Student ID is required")
	rows = (
		db.query(Submission)
		.filter(Submission.student_id == student_id)
		.order_by(Submission.created_at.desc(), Submission.id.desc())
		.all()
	)
	return {"success": True, "submissions": [serialize_submission(r) for r in rows]}


@router.post("/retry-report")
async def retry_report(req: RetryReportRequest, db: Session = Depends(get_db)):
	if req.submission_id is None:
		raise HTTPException(status_code=400, detail="Submission ID is required")
	logger.info("Regenerating AI report for submission %s", req.submission_id)
	row = db.get(Submission, req.submission_id)
	if row is None:
		raise HTTPException(status_code=404, detail="Submission not found")
	choices = [DesignChoice.from_dict(c) for c in load_design_choices(row.design_choices) if isinstance(c, dict)]
	try:
		row.ai_report = await generate_report(choices, submission_metrics(row))
	except ReportGenerationError:
		logger.exception("Retrying AI report failed for submission %s", row.id)
		raise HTTPException(status_code=502, detail="Failed to generate AI report")
	db.add(row)
	db.commit()
	db.refresh(row)
	logger.info("Regenerated AI report for submission %s (student %s)", row.id, row.student_id)
	return {"success": True, "submission": serialize_submission(row)}
