"""Completeness checks run by request handlers before a submission is scored.

Scoring itself accepts anything; these predicates only gate submission.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .metrics import DesignChoice

# Field name -> label shown to students
_FIELD_LABELS = (
	("object", "element"),
	("action", "action"),
	("value", "value"),
	("reasoning", "reasoning"),
)


def _blank(value: Any) -> bool:
	return not isinstance(value, str) or not value.strip()


def get_incomplete_fields(choice: DesignChoice) -> List[str]:
	return [label for name, label in _FIELD_LABELS if _blank(getattr(choice, name, None))]


def is_design_choice_complete(choice: DesignChoice) -> bool:
	return not get_incomplete_fields(choice)


def are_all_design_choices_complete(choices: Sequence[DesignChoice]) -> bool:
	if not choices:
		return False
	return all(is_design_choice_complete(c) for c in choices)


def get_completion_status(choices: Sequence[DesignChoice]) -> Dict[str, Any]:
	total = len(choices)
	complete = sum(1 for c in choices if is_design_choice_complete(c))
	incomplete = total - complete
	return {
		"total": total,
		"complete": complete,
		"incomplete": incomplete,
		"is_valid": total > 0 and incomplete == 0,
	}
