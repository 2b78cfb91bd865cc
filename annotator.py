"""
Annotation Service Client -- Gemini-backed link annotation.

Asks a Gemini model for a category, three tags and a five-word summary of
a URL, with the JSON shape pinned by a declared response schema. Every
failure (no key, network, timeout, HTTP error, empty or malformed reply)
collapses into the fixed fallback annotation, so link creation never
depends on the remote service being healthy.

Usage:
    from annotator import Annotator
    annotator = Annotator()

    result = await annotator.analyze("https://example.com")
    result.tags, result.summary, result.category

    # Same call, but tells you whether the fallback was used
    outcome = await annotator.analyze_outcome("https://example.com")
    if outcome.fallback:
        print(outcome.reason)
"""

import json
import asyncio
import httpx
from typing import Optional

from pydantic import ValidationError as SchemaError

from config import GEMINI_API_KEY, GEMINI_MODEL, GEMINI_API_BASE, ANNOTATION_TIMEOUT
from errors import AnnotationServiceError
from models import AnnotationResult, AnalysisOutcome
from prompts import annotation_prompt, ANNOTATION_SCHEMA


class Annotator:
    """Gemini client for link annotations. One request per analyze() call."""

    def __init__(self, api_key: str = None, model: str = None, api_base: str = None,
                 timeout: float = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = GEMINI_API_KEY if api_key is None else api_key
        self.model = model or GEMINI_MODEL
        self.api_base = (api_base or GEMINI_API_BASE).rstrip("/")
        self.timeout = ANNOTATION_TIMEOUT if timeout is None else timeout
        self._transport = transport  # tests pass an httpx.MockTransport
        self._http = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    async def close(self):
        if self._http:
            await self._http.aclose()
            self._http = None

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    async def analyze(self, url: str) -> AnnotationResult:
        """Annotation for `url`; the fallback annotation if anything goes wrong."""
        outcome = await self.analyze_outcome(url)
        return outcome.annotation

    async def analyze_outcome(self, url: str) -> AnalysisOutcome:
        if not self.api_key:
            print("[Annotator] No Gemini API key configured, using fallback annotation")
            return AnalysisOutcome.fallback_for("Gemini API key not configured")

        try:
            text = await asyncio.wait_for(
                self._call_gemini(annotation_prompt(url)), timeout=self.timeout
            )
            annotation = self._parse_annotation(text)
        except asyncio.TimeoutError:
            print(f"[Annotator] Gemini analysis timed out after {self.timeout}s for {url}")
            return AnalysisOutcome.fallback_for("Gemini request timed out")
        except AnnotationServiceError as e:
            print(f"[Annotator] Gemini analysis failed for {url}: {e}")
            return AnalysisOutcome.fallback_for(str(e))
        except Exception as e:
            # Unexpected client-side bug; still never surfaces to the caller
            print(f"[Annotator] Unexpected error analyzing {url}: {type(e).__name__}: {e}")
            return AnalysisOutcome.fallback_for(f"{type(e).__name__}: {e}")

        return AnalysisOutcome.ok(annotation)

    # --------------------------------------------------------
    # Gemini API
    # --------------------------------------------------------

    async def _call_gemini(self, prompt: str) -> str:
        """POST generateContent and return the concatenated candidate text."""
        endpoint = f"{self.api_base}/models/{self.model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": ANNOTATION_SCHEMA,
            },
        }
        headers = {
            "x-goog-api-key": self.api_key,
            "content-type": "application/json",
        }

        try:
            resp = await self.http.post(endpoint, json=payload, headers=headers)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as e:
            raise AnnotationServiceError(f"Gemini request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise AnnotationServiceError(f"Gemini returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise AnnotationServiceError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            raise AnnotationServiceError("Gemini returned a non-JSON body") from e

        text = _candidate_text(data)
        if not text.strip():
            raise AnnotationServiceError("No response from AI")
        return text

    def _parse_annotation(self, text: str) -> AnnotationResult:
        data = self._parse_json_response(text)
        if not isinstance(data, dict):
            raise AnnotationServiceError("AI response is not a JSON object")
        try:
            return AnnotationResult.model_validate(data)
        except SchemaError as e:
            raise AnnotationServiceError(f"AI response failed schema validation: {e.error_count()} error(s)") from e

    def _parse_json_response(self, text: str):
        """Extract JSON from a model response (handles markdown code blocks)."""
        text = text.strip()
        if text.startswith("```"):
            lines = [l for l in text.split("\n") if not l.strip().startswith("```")]
            text = "\n".join(lines).strip()
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            start = text.find("{")
            end = text.rfind("}")
            if start != -1 and end > start:
                try:
                    return json.loads(text[start:end + 1])
                except json.JSONDecodeError:
                    pass
            return None


def _candidate_text(data) -> str:
    """Text of the first candidate in a generateContent response, or ''."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts") or []
    return "".join(
        p["text"] for p in parts
        if isinstance(p, dict) and isinstance(p.get("text"), str)
    )
