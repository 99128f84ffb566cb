from __future__ import annotations
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Student
from ..schemas import load_design_choices

router = APIRouter(prefix="/drafts", tags=["drafts"])
logger = logging.getLogger(__name__)


class SaveDraftRequest(BaseModel):
	student_id: Optional[str] = None
	design_choices: Any = None


def _get_student(db: Session, student_id: Optional[str]) -> Student:
	if not student_id:
		raise HTTPException(status_code=400, detail="Student ID is required")
	student = db.query(Student).filter(Student.student_id == student_id).first()
	if student is None:
		raise HTTPException(status_code=404, detail="Student not found")
	return student


@router.get("")
async def get_draft(student_id: Optional[str] = None, db: Session = Depends(get_db)):
	student = _get_student(db, student_id)
	return {"success": True, "draft_design_choices": load_design_choices(student.draft_design_choices)}


@router.post("")
async def save_draft(req: SaveDraftRequest, db: Session = Depends(get_db)):
	if not isinstance(req.design_choices, list):
		raise HTTPException(status_code=400, detail="Design choices must be an array")
	student = _get_student(db, req.student_id)
	# Drafts are stored as sent; incomplete choices are expected here
	student.draft_design_choices = json.dumps(req.design_choices, ensure_ascii=False)
	db.add(student)
	db.commit()
	logger.info("Saved draft with %d choices for %s", len(req.design_choices), student.student_id)
	return {"success": True, "message": "Draft saved successfully"}


@router.delete("")
async def clear_draft(student_id: Optional[str] = None, db: Session = Depends(get_db)):
	student = _get_student(db, student_id)
	student.draft_design_choices = None
	db.add(student)
	db.commit()
	return {"success": True, "message": "Draft cleared successfully"}
