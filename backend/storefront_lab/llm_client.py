from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, List, Optional
from .settings import settings

logger = logging.getLogger(__name__)


class AnthropicClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		max_tokens: Optional[int] = None,
		timeout: float = 30,
	) -> None:
		self.api_key = api_key or settings.anthropic_api_key
		if not self.api_key:
			raise ValueError("ANTHROPIC_API_KEY is not configured")
		self.model = model or settings.anthropic_model
		self.max_tokens = max_tokens or settings.anthropic_max_tokens
		self.base_url = base_url or settings.anthropic_base_url
		self._headers = {
			"x-api-key": self.api_key,
			"anthropic-version": settings.anthropic_version,
			"content-type": "application/json",
		}
		self._client = httpx.AsyncClient(timeout=timeout)
		self._fallback_client: Optional[httpx.AsyncClient] = None
		self._fallback_enabled = bool(settings.openrouter_api_key)
		self._openrouter_api_key = settings.openrouter_api_key
		self._openrouter_model = settings.openrouter_model
		self._openrouter_base_url = settings.openrouter_base_url
		self._openrouter_headers = {
			"Authorization": f"Bearer {self._openrouter_api_key}" if self._openrouter_api_key else "",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.openrouter_referer,
			"X-Title": settings.openrouter_title,
		}
		if self._fallback_enabled:
			self._fallback_client = httpx.AsyncClient(timeout=timeout)

	async def generate(self, prompt: str, *, system: Optional[str] = None) -> str:
		payload: Dict[str, Any] = {
			"model": self.model,
			"max_tokens": self.max_tokens,
			"messages": [{"role": "user", "content": prompt}],
		}
		if system:
			payload["system"] = system
		return await self._post_payload(payload, fallback_prompt=prompt)

	async def _post_payload(
		self,
		payload: Dict[str, Any],
		*,
		fallback_prompt: Optional[str],
		allow_fallback: bool = True,
	) -> str:
		last_error: Optional[Exception] = None
		try:
			r = await self._client.post(self.base_url, headers=self._headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			last_error = http_err
		except httpx.RequestError as net_err:
			last_error = net_err
		if last_error is None:
			try:
				return _first_text_block(r.json()["content"])
			except Exception:
				last_error = RuntimeError(f"Unexpected Anthropic response: {r.text}")
		if not allow_fallback or not self._fallback_enabled:
			raise last_error
		if fallback_prompt is None:
			raise last_error
		logger.warning("Anthropic call failed (%s); trying OpenRouter fallback", last_error)
		return await self._fallback_generate(fallback_prompt, last_error)

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()

	async def _fallback_generate(self, prompt: str, primary_error: Optional[Exception]) -> str:
		if not self._fallback_client or not self._openrouter_api_key:
			raise primary_error or RuntimeError("Fallback requested but OpenRouter is not configured")
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		payload: Dict[str, Any] = {
			"model": self._openrouter_model,
			"max_tokens": self.max_tokens,
			"messages": [{"role": "user", "content": prompt}],
		}
		try:
			r = await self._fallback_client.post(
				self._openrouter_base_url,
				headers=headers,
				json=payload,
			)
			r.raise_for_status()
			data = r.json()
			content = data["choices"][0]["message"]["content"]
			if not isinstance(content, str):
				raise RuntimeError(f"Unexpected OpenRouter response: {r.text}")
			return content
		except Exception as fallback_err:
			if primary_error is not None:
				raise RuntimeError(
					f"Anthropic primary call failed ({primary_error}); fallback via OpenRouter also failed"
				) from fallback_err
			raise fallback_err


def _first_text_block(blocks: List[Dict[str, Any]]) -> str:
	for block in blocks:
		if block.get("type") == "text":
			return block["text"]
	raise ValueError("no text block in response")
