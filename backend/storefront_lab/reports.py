from __future__ import annotations
import logging
from typing import Optional, Sequence

from .llm_client import AnthropicClient
from .metrics import BASELINE, LOWER_IS_BETTER, DesignChoice, MetricsSnapshot

logger = logging.getLogger(__name__)

REPORT_FAILED_TEXT = "AI report generation failed. Please try again later."

# metric field -> (label, unit suffix)
_METRIC_LABELS = {
	"conversion_rate": ("Conversion Rate", "%"),
	"bounce_rate": ("Bounce Rate", "%"),
	"click_through_rate": ("Click-Through Rate", "%"),
	"avg_time_on_page": ("Average Time on Page", "s"),
	"cart_abandonment_rate": ("Cart Abandonment Rate", "%"),
}


class ReportGenerationError(RuntimeError):
	pass


def build_report_prompt(choices: Sequence[DesignChoice], snapshot: MetricsSnapshot) -> str:
	changes = []
	for i, choice in enumerate(choices, start=1):
		changes.append(
			f"### Change {i}\n"
			f"- Element: {choice.object}\n"
			f"- Action: {choice.action}\n"
			f"- New value: {choice.value}\n"
			f"- Student's reasoning: {choice.reasoning or 'No reasoning provided'}\n"
		)
	metric_lines = []
	for name, (label, unit) in _METRIC_LABELS.items():
		line = f"- {label}: {getattr(snapshot, name)}{unit} (baseline: {getattr(BASELINE, name)}{unit})"
		if name in LOWER_IS_BETTER:
			line += " - lower is better"
		metric_lines.append(line)
	return (
		"You are an expert in UX design and A/B testing for e-commerce websites. A student changed a simulated "
		"shopping website as part of an exercise on A/B testing.\n\n"
		"## Design choices\n\n"
		+ "\n".join(changes)
		+ "\n## Resulting metrics (simulated)\n\n"
		+ "\n".join(metric_lines)
		+ "\n\n## Task\n\n"
		"Write an educational report in markdown with: a short summary of overall effectiveness; an analysis of each "
		"change (was it effective, which UX principles apply, was the student's hypothesis right); a breakdown of how "
		"each metric moved and why; 2-3 recommendations for what to test next; and a brief note on A/B testing "
		"principles the exercise illustrates. Keep the tone encouraging and cite principles such as Fitts's Law, "
		"visual hierarchy or color psychology where relevant."
	)


async def generate_report(
	choices: Sequence[DesignChoice],
	snapshot: MetricsSnapshot,
	*,
	client: Optional[AnthropicClient] = None,
) -> str:
	"""Ask the language model for feedback on a scored submission."""
	owns_client = client is None
	try:
		if client is None:
			client = AnthropicClient()
		text = await client.generate(build_report_prompt(choices, snapshot))
	except Exception as e:
		raise ReportGenerationError(str(e)) from e
	finally:
		if owns_client and client is not None:
			await client.aclose()
	if not isinstance(text, str):
		raise ReportGenerationError(f"language model returned {type(text).__name__} instead of text")
	text = text.strip()
	if not text:
		raise ReportGenerationError("language model returned an empty report")
	return text
