"""Metrics scoring engine for the storefront A/B simulator.

Every design choice a student makes nudges five simulated page metrics.
Scoring is a weighted-additive model:

  baseline -> + delta per choice -> clamp per metric -> round to 2 dp

Deltas come from a static weight table keyed by (object, action, value).
Unknown combinations still contribute DEFAULT_WEIGHTS, so every choice
counts and no input is ever rejected.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields
from decimal import Decimal, ROUND_HALF_UP
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .settings import settings


DEFAULT_WEIGHTS_FILE = Path(__file__).resolve().parent / "weights.json"


@dataclass(frozen=True)
class DesignChoice:
	object: str = ""
	action: str = ""
	value: str = ""
	reasoning: str = ""

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "DesignChoice":
		# Non-string fields become "" so they behave as unknown keys
		return cls(**{
			f.name: data.get(f.name) if isinstance(data.get(f.name), str) else ""
			for f in fields(cls)
		})

	def to_dict(self) -> Dict[str, str]:
		return asdict(self)


@dataclass(frozen=True)
class MetricDelta:
	conversion_rate: float = 0.0
	bounce_rate: float = 0.0
	click_through_rate: float = 0.0
	avg_time_on_page: float = 0.0
	cart_abandonment_rate: float = 0.0


@dataclass(frozen=True)
class MetricsSnapshot:
	conversion_rate: float
	bounce_rate: float
	click_through_rate: float
	avg_time_on_page: float
	cart_abandonment_rate: float

	def to_dict(self) -> Dict[str, float]:
		return asdict(self)


METRIC_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(MetricsSnapshot))

# "No customization" control page; also the reference shown to students
BASELINE = MetricsSnapshot(
	conversion_rate=2.5,
	bounce_rate=45.0,
	click_through_rate=3.5,
	avg_time_on_page=120.0,
	cart_abandonment_rate=70.0,
)

DEFAULT_WEIGHTS = MetricDelta(conversion_rate=0.1, click_through_rate=0.1)

METRIC_BOUNDS: Mapping[str, Tuple[float, float]] = MappingProxyType({
	"conversion_rate": (0.1, 15.0),
	"bounce_rate": (10.0, 90.0),
	"click_through_rate": (0.5, 20.0),
	"avg_time_on_page": (10.0, 300.0),
	"cart_abandonment_rate": (20.0, 95.0),
})

# For these a drop is an improvement
LOWER_IS_BETTER = frozenset({"bounce_rate", "cart_abandonment_rate"})


class WeightTableError(ValueError):
	pass


class WeightTable:
	"""Immutable (object, action, value) -> MetricDelta lookup.

	Built once from nested configuration data and never mutated. Entries are
	exposed flat through `entries`, keyed by 3-tuples; the nested view backs
	the per-level fallback in `lookup` and the customization catalogue.
	"""

	def __init__(self, nested: Mapping[str, Mapping[str, Mapping[str, MetricDelta]]]) -> None:
		self._nested = MappingProxyType({
			obj: MappingProxyType({
				action: MappingProxyType(dict(values))
				for action, values in actions.items()
			})
			for obj, actions in nested.items()
		})
		self.entries: Mapping[Tuple[str, str, str], MetricDelta] = MappingProxyType({
			(obj, action, value): delta
			for obj, actions in self._nested.items()
			for action, values in actions.items()
			for value, delta in values.items()
		})

	@classmethod
	def from_dict(cls, data: Any) -> "WeightTable":
		if not isinstance(data, dict):
			raise WeightTableError("weight table must be an object keyed by element name")
		nested: Dict[str, Dict[str, Dict[str, MetricDelta]]] = {}
		for obj, actions in data.items():
			if not isinstance(actions, dict):
				raise WeightTableError(f"{obj!r}: actions must be an object")
			nested[obj] = {}
			for action, values in actions.items():
				if not isinstance(values, dict):
					raise WeightTableError(f"{obj!r}/{action!r}: values must be an object")
				nested[obj][action] = {
					value: _parse_delta(raw, f"{obj!r}/{action!r}/{value!r}")
					for value, raw in values.items()
				}
		return cls(nested)

	def lookup(self, obj: Any, action: Any, value: Any) -> MetricDelta:
		if not isinstance(obj, str) or obj not in self._nested:
			return DEFAULT_WEIGHTS
		actions = self._nested[obj]
		if not isinstance(action, str) or action not in actions:
			return DEFAULT_WEIGHTS
		values = actions[action]
		if not isinstance(value, str) or value not in values:
			return DEFAULT_WEIGHTS
		return values[value]

	def options(self) -> Dict[str, Any]:
		"""Customization catalogue in file order, as offered to students."""
		return {
			"objects": list(self._nested),
			"actions": {obj: list(actions) for obj, actions in self._nested.items()},
			"values": {
				obj: {action: list(values) for action, values in actions.items()}
				for obj, actions in self._nested.items()
			},
		}

	def __len__(self) -> int:
		return len(self.entries)

	def __contains__(self, key: object) -> bool:
		return key in self.entries


def _parse_delta(raw: Any, where: str) -> MetricDelta:
	if not isinstance(raw, dict):
		raise WeightTableError(f"{where}: delta must be an object")
	missing = [name for name in METRIC_FIELDS if name not in raw]
	if missing:
		raise WeightTableError(f"{where}: missing {', '.join(missing)}")
	values: Dict[str, float] = {}
	for name in METRIC_FIELDS:
		v = raw[name]
		# bool is an int subclass; reject it explicitly
		if isinstance(v, bool) or not isinstance(v, (int, float)):
			raise WeightTableError(f"{where}: {name} must be a number")
		if not math.isfinite(v):
			raise WeightTableError(f"{where}: {name} must be finite")
		values[name] = float(v)
	return MetricDelta(**values)


def load_weight_table(path: str | Path) -> WeightTable:
	with open(path, "r", encoding="utf-8") as f:
		try:
			data = json.load(f)
		except json.JSONDecodeError as e:
			raise WeightTableError(f"{path}: invalid JSON ({e})") from e
	return WeightTable.from_dict(data)


@lru_cache(maxsize=1)
def get_weight_table() -> WeightTable:
	"""Process-wide table, loaded on first use."""
	return load_weight_table(settings.weights_path or DEFAULT_WEIGHTS_FILE)


def _field(choice: Any, name: str) -> Any:
	if isinstance(choice, Mapping):
		return choice.get(name)
	return getattr(choice, name, None)


def round2(value: float) -> float:
	return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def score(choices: Iterable[Any], table: Optional[WeightTable] = None) -> MetricsSnapshot:
	"""Score an ordered list of design choices.

	Accepts DesignChoice instances or plain mappings with the same keys.
	Never raises for odd input: unknown or malformed keys apply DEFAULT_WEIGHTS.
	"""
	if table is None:
		table = get_weight_table()
	totals = BASELINE.to_dict()
	for choice in choices or ():
		delta = table.lookup(_field(choice, "object"), _field(choice, "action"), _field(choice, "value"))
		for name in METRIC_FIELDS:
			totals[name] += getattr(delta, name)

	result: Dict[str, float] = {}
	for name in METRIC_FIELDS:
		low, high = METRIC_BOUNDS[name]
		result[name] = round2(max(low, min(high, totals[name])))
	return MetricsSnapshot(**result)


def compare_to_baseline(snapshot: MetricsSnapshot) -> List[Dict[str, Any]]:
	rows: List[Dict[str, Any]] = []
	for name in METRIC_FIELDS:
		value = getattr(snapshot, name)
		baseline = getattr(BASELINE, name)
		diff = round2(value - baseline)
		if diff == 0:
			verdict = "unchanged"
		elif (diff < 0) == (name in LOWER_IS_BETTER):
			verdict = "improved"
		else:
			verdict = "worse"
		rows.append({
			"metric": name,
			"value": value,
			"baseline": baseline,
			"difference": diff,
			"percent_change": round(diff / baseline * 100, 1),
			"lower_is_better": name in LOWER_IS_BETTER,
			"verdict": verdict,
		})
	return rows
