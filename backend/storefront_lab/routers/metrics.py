from __future__ import annotations
from typing import Any, List

from fastapi import APIRouter
from pydantic import BaseModel

from ..metrics import BASELINE, METRIC_BOUNDS, compare_to_baseline, get_weight_table, score
from ..schemas import parse_design_choices
from ..validation import get_completion_status

router = APIRouter(prefix="/metrics", tags=["metrics"])


class PreviewRequest(BaseModel):
	design_choices: List[Any] = []


@router.get("/options")
def get_options():
	return get_weight_table().options()


@router.get("/baseline")
def get_baseline():
	return {
		"baseline": BASELINE.to_dict(),
		"bounds": {name: {"min": low, "max": high} for name, (low, high) in METRIC_BOUNDS.items()},
	}


@router.post("/preview")
def preview(req: PreviewRequest):
	choices = parse_design_choices(req.design_choices)
	snapshot = score(choices)
	return {
		"metrics": snapshot.to_dict(),
		"comparison": compare_to_baseline(snapshot),
		"completion": get_completion_status(choices),
	}
