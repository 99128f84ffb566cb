from __future__ import annotations
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import get_db
from ..metrics import BASELINE, METRIC_FIELDS, MetricsSnapshot, compare_to_baseline, round2
from ..models import Student, Submission
from ..schemas import serialize_student, serialize_submission
from .auth import Admin, get_current_admin

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)

MAX_BULK_STUDENTS = 100


class CreateStudentRequest(BaseModel):
	student_id: Optional[str] = None
	name: Optional[str] = None


class BulkCreateRequest(BaseModel):
	count: Any = None
	name_prefix: Optional[str] = None
	start_number: Optional[int] = None


@router.get("/students")
async def list_students(admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	rows = db.query(Student).order_by(Student.created_at.desc(), Student.id.desc()).all()
	logger.info("Fetched %d students", len(rows))
	return {"success": True, "students": [serialize_student(r) for r in rows]}


@router.post("/students")
async def create_student(req: CreateStudentRequest, admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	student_id = (req.student_id or "").strip()
	if not student_id:
		raise HTTPException(status_code=400, detail="Student ID is required")
	if db.query(Student).filter(Student.student_id == student_id).first() is not None:
		logger.info("Student ID already exists: %s", student_id)
		raise HTTPException(status_code=400, detail="Student ID already exists")
	row = Student(student_id=student_id, name=(req.name or "").strip() or None)
	db.add(row)
	db.commit()
	db.refresh(row)
	logger.info("Created student %s (%s)", student_id, row.name or "No name")
	return {"success": True, "student": serialize_student(row)}


@router.post("/students/bulk")
async def bulk_create_students(req: BulkCreateRequest, admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	count = req.count
	if isinstance(count, bool) or not isinstance(count, int) or count < 1 or count > MAX_BULK_STUDENTS:
		raise HTTPException(status_code=400, detail=f"Count must be a number between 1 and {MAX_BULK_STUDENTS}")
	start = req.start_number if req.start_number is not None else 1
	prefix = (req.name_prefix or "").strip()
	created = []
	for i in range(count):
		row = Student(student_id=str(uuid.uuid4()), name=f"{prefix} {start + i}" if prefix else None)
		db.add(row)
		try:
			db.commit()
		except IntegrityError:
			# uuid4 collision; skip this one
			db.rollback()
			logger.warning("Skipped duplicate generated student id %s", row.student_id)
			continue
		db.refresh(row)
		created.append(serialize_student(row))
	logger.info("Bulk created %d students", len(created))
	return {"success": True, "students": created, "count": len(created)}


@router.delete("/students")
async def delete_student(student_id: Optional[str] = None, admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	if not student_id:
		raise HTTPException(status_code=400, detail="Student ID is required")
	row = db.query(Student).filter(Student.student_id == student_id).first()
	if row is None:
		raise HTTPException(status_code=404, detail="Student not found")
	name = row.name
	# Submissions go with the student (delete-orphan cascade)
	db.delete(row)
	db.commit()
	logger.info("Deleted student %s (%s)", student_id, name or "No name")
	return {"success": True}


@router.get("/submissions")
async def list_all_submissions(admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	rows = db.query(Submission).order_by(Submission.created_at.desc(), Submission.id.desc()).all()
	return {"success": True, "submissions": [serialize_submission(r, include_student=True) for r in rows]}


@router.get("/summary")
async def cohort_summary(admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	columns = [func.avg(getattr(Submission, name)) for name in METRIC_FIELDS]
	count, *averages = db.query(func.count(Submission.id), *columns).one()
	data: Dict[str, Any] = {
		"success": True,
		"submission_count": count,
		"student_count": db.query(func.count(Student.id)).scalar(),
		"baseline": BASELINE.to_dict(),
		"averages": None,
		"comparison": [],
	}
	if count:
		mean = MetricsSnapshot(**{name: round2(float(avg)) for name, avg in zip(METRIC_FIELDS, averages)})
		data["averages"] = mean.to_dict()
		data["comparison"] = compare_to_baseline(mean)
	return data
