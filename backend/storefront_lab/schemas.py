from __future__ import annotations
import json
from typing import Any, Dict, List, Optional

from .metrics import DesignChoice, MetricsSnapshot
from .models import Student, Submission


def parse_design_choices(raw: Any) -> List[DesignChoice]:
	"""Coerce a JSON list into DesignChoice records; non-objects become blank choices."""
	return [DesignChoice.from_dict(item) if isinstance(item, dict) else DesignChoice() for item in raw]


def dump_design_choices(choices: List[DesignChoice]) -> str:
	return json.dumps([c.to_dict() for c in choices], ensure_ascii=False)


def load_design_choices(text: Optional[str]) -> List[Dict[str, Any]]:
	if not text:
		return []
	try:
		data = json.loads(text)
	except ValueError:
		return []
	return data if isinstance(data, list) else []


def submission_metrics(row: Submission) -> MetricsSnapshot:
	return MetricsSnapshot(
		conversion_rate=row.conversion_rate,
		bounce_rate=row.bounce_rate,
		click_through_rate=row.click_through_rate,
		avg_time_on_page=row.avg_time_on_page,
		cart_abandonment_rate=row.cart_abandonment_rate,
	)


def serialize_submission(row: Submission, *, include_student: bool = False) -> Dict[str, Any]:
	data: Dict[str, Any] = {
		"id": row.id,
		"design_choices": load_design_choices(row.design_choices),
		"metrics": submission_metrics(row).to_dict(),
		"ai_report": row.ai_report,
		"screenshot_path": row.screenshot_path,
		"created_at": row.created_at.isoformat() if row.created_at else None,
	}
	if include_student:
		data["student_id"] = row.student_id
		data["student_name"] = row.student.name if row.student else None
	return data


def serialize_student(row: Student, *, with_submissions: bool = True) -> Dict[str, Any]:
	data: Dict[str, Any] = {
		"id": row.id,
		"student_id": row.student_id,
		"name": row.name,
		"created_at": row.created_at.isoformat() if row.created_at else None,
		"submission_count": len(row.submissions),
	}
	if with_submissions:
		data["submissions"] = [serialize_submission(s) for s in row.submissions]
	return data
