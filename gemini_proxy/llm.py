import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from .config import GEMINI_BASE_URL, GEMINI_MODEL, GEMINI_TIMEOUT_SEC

logger = logging.getLogger("gemini-proxy")

DEFAULT_UPSTREAM_ERROR = "Google API request failed."


class LLMError(RuntimeError):
    pass


class UpstreamStatusError(LLMError):
    """Non-2xx answer from the Google API, carrying what the caller may see."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Google API responded with status: {status_code}")
        self.status_code = status_code
        self.message = message


class ExtractionError(LLMError):
    pass


class Part(BaseModel):
    text: Optional[str] = None


class Content(BaseModel):
    role: Optional[str] = None
    parts: Optional[List[Part]] = None


class Candidate(BaseModel):
    content: Optional[Content] = None


class GenerateContentResult(BaseModel):
    candidates: Optional[List[Candidate]] = None


def build_payload(prompt: Any, is_json: bool) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
    }
    if is_json:
        payload["generationConfig"] = {
            "responseMimeType": "application/json",
            "responseSchema": {"type": "ARRAY", "items": {"type": "STRING"}},
        }
    return payload


def generate_content_url() -> str:
    return f"{GEMINI_BASE_URL.rstrip('/')}/v1beta/models/{GEMINI_MODEL}:generateContent"


def extract_text(result: GenerateContentResult) -> Optional[str]:
    """Return candidates[0].content.parts[0].text, or None if any level is missing."""
    if not result.candidates:
        return None
    content = result.candidates[0].content
    if content is None or not content.parts:
        return None
    text = content.parts[0].text
    return text if text else None


def _upstream_error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return DEFAULT_UPSTREAM_ERROR

    error = data.get("error") if isinstance(data, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    if not isinstance(message, str) or not message:
        return DEFAULT_UPSTREAM_ERROR
    return message


def _raise_for_upstream(resp: httpx.Response, error_mode: str) -> None:
    if resp.is_success:
        return

    if error_mode == "mask":
        logger.error("Google API Error: %s", resp.text)
        raise LLMError(f"Google API responded with status: {resp.status_code}")

    message = _upstream_error_message(resp)
    logger.error("Google API Error (status=%s): %s", resp.status_code, message)
    raise UpstreamStatusError(resp.status_code, message)


async def generate_content(api_key: str, payload: Dict[str, Any], error_mode: str = "forward") -> str:
    """Send one generateContent request and return the trimmed answer text.

    In "forward" mode a non-2xx answer raises UpstreamStatusError with the
    upstream status and error.message; in "mask" mode it raises a plain
    LLMError. httpx.HTTPError and JSON decode errors propagate unchanged.
    """
    async with httpx.AsyncClient(timeout=GEMINI_TIMEOUT_SEC) as client:
        resp = await client.post(
            generate_content_url(),
            params={"key": api_key},
            json=payload,
            headers={"Content-Type": "application/json"},
        )

    _raise_for_upstream(resp, error_mode)

    result = GenerateContentResult.model_validate(resp.json())
    text = extract_text(result)
    if text is None:
        raise ExtractionError("Could not extract text from Gemini response.")

    return text.strip()
