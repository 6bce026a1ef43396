"""OpenAI REST adapter using aiohttp — implements LanguagePort.

Classification, audio transcription and image description. Errors from the
API raise RuntimeError with the API's message; callers decide what to tell
the user.
"""

import base64
import json
import sys
from typing import Any, Dict, Optional

import aiohttp

from brainbot.config import CONFIG
from brainbot.domain.categories import CATEGORIES, normalize_category
from brainbot.domain.models import ClassificationResult

OPENAI_API_BASE = "https://api.openai.com/v1"

CLASSIFY_PROMPT = """You are a Second Brain classifier. Analyze the input and categorize it.

RULES:
1. People = names, contacts, networking, follow-ups, meetings with individuals
2. Project = tasks with deliverables, multi-step work, deadlines
3. Idea = insights, quotes, observations, "shower thoughts", learnings
4. Admin = errands, appointments, logistics, bills, personal tasks

OUTPUT STRICT JSON:
{
  "category": "People" | "Project" | "Idea" | "Admin",
  "confidence": 0.0-1.0,
  "extracted_data": { ... category-specific fields ... },
  "reasoning": "Brief explanation"
}

For People: {"name": "PersonName", "company": "", "context": "..."}
For Project: {"name": "ProjectTitle", "next_action": "..."}
For Idea: {"title": "IdeaTitle", "raw_insight": "..."}
For Admin: {"task": "TaskDescription", "priority": "Medium"}"""

DESCRIBE_PROMPT = (
    "Describe this image in one or two sentences so it can be saved as a note. "
    "If it contains text, transcribe the important parts."
)

FALLBACK_CONFIDENCE = 0.5


def _log(msg: str):
    print(msg, file=sys.stderr)


def parse_classification(content: str, text: str) -> ClassificationResult:
    """Model reply to a ClassificationResult. Unparseable replies become Admin."""
    try:
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("classification is not an object")
    except ValueError:
        _log(f"[openai] unparseable classification, defaulting to Admin: {content[:80]!r}")
        return ClassificationResult(
            category="Admin",
            confidence=FALLBACK_CONFIDENCE,
            fields={"task": text},
            reasoning="Parse error, defaulting to Admin",
        )

    category = normalize_category(str(data.get("category", "")))
    if category not in CATEGORIES:
        category = "Admin"

    try:
        confidence = float(data.get("confidence", FALLBACK_CONFIDENCE))
    except (TypeError, ValueError):
        confidence = FALLBACK_CONFIDENCE
    confidence = min(max(confidence, 0.0), 1.0)

    raw_fields = data.get("extracted_data") or {}
    fields = {
        str(k): str(v) for k, v in raw_fields.items() if v is not None
    } if isinstance(raw_fields, dict) else {}

    return ClassificationResult(
        category=category,
        confidence=confidence,
        fields=fields,
        reasoning=str(data.get("reasoning", "")),
    )


class OpenAIAdapter:
    """Async OpenAI client over plain REST."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        classify_model: Optional[str] = None,
        vision_model: Optional[str] = None,
        transcribe_model: Optional[str] = None,
    ):
        self._api_key = api_key if api_key is not None else CONFIG["openai_api_key"]
        self._classify_model = classify_model or CONFIG["openai_classify_model"]
        self._vision_model = vision_model or CONFIG["openai_vision_model"]
        self._transcribe_model = transcribe_model or CONFIG["openai_transcribe_model"]

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _chat(self, payload: Dict[str, Any]) -> str:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                f"{OPENAI_API_BASE}/chat/completions",
                json=payload,
                headers=self._headers,
            ) as resp:
                data = await resp.json()
        if "choices" not in data:
            raise RuntimeError(data.get("error", {}).get("message", str(data)))
        return data["choices"][0]["message"].get("content") or ""

    async def classify(self, text: str) -> ClassificationResult:
        content = await self._chat({
            "model": self._classify_model,
            "temperature": 0,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": CLASSIFY_PROMPT},
                {"role": "user", "content": text},
            ],
        })
        return parse_classification(content, text)

    async def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str:
        form = aiohttp.FormData()
        form.add_field("model", self._transcribe_model)
        form.add_field("file", audio, filename=filename, content_type="audio/ogg")
        async with aiohttp.ClientSession() as session:
            async with session.post(
                f"{OPENAI_API_BASE}/audio/transcriptions",
                data=form,
                headers=self._headers,
            ) as resp:
                data = await resp.json()
        if "text" not in data:
            raise RuntimeError(data.get("error", {}).get("message", str(data)))
        return data["text"].strip()

    async def describe_image(self, image: bytes) -> str:
        data_uri = "data:image/jpeg;base64," + base64.b64encode(image).decode("ascii")
        content = await self._chat({
            "model": self._vision_model,
            "max_tokens": 300,
            "messages": [{
                "role": "user",
                "content": [
                    {"type": "text", "text": DESCRIBE_PROMPT},
                    {"type": "image_url", "image_url": {"url": data_uri}},
                ],
            }],
        })
        return content.strip()
