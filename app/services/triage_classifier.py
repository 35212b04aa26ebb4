"""
Feedback 分類器（AI Triage）
============================

將單筆 feedback 原文送交 LLM，取得 product area / severity / sentiment、
簡短理由與草擬回覆。模型輸出必須是固定 key 的 JSON，否則拋出
ClassificationError（不重試、不 fallback）。
"""
import json
import logging
from typing import Optional

from openai import AsyncOpenAI, APIError
from pydantic import ValidationError

from app.config import settings
from app.models.feedback import PRODUCT_AREAS, SEVERITIES, SENTIMENTS
from app.schemas.feedback import TriageResult

logger = logging.getLogger(__name__)

SEVERITY_RUBRIC = """Use:
P0: outage/data loss/security, many users blocked
P1: core feature broken, limited workaround
P2: degraded experience, workaround exists
P3: minor bug or suggestion"""

REQUIRED_KEYS = ("product_area", "severity", "sentiment")


class ClassificationError(Exception):
    """The model call failed or its output did not match the expected JSON."""

    def __init__(self, message: str, raw_output: Optional[str] = None):
        super().__init__(message)
        self.raw_output = raw_output


def build_prompt(text: str) -> str:
    return f"""
{SEVERITY_RUBRIC}

Classify this feedback into:
- product_area: one of {", ".join(PRODUCT_AREAS)}
- severity: P0/P1/P2/P3
- sentiment: positive/neutral/negative
- ai_reason: <= 20 words explaining why
- draft_reply: concise helpful support reply (2-4 sentences)

Return ONLY valid JSON with keys:
product_area, severity, sentiment, ai_reason, draft_reply.

Feedback:
\"\"\"{text}\"\"\""""


def strip_markdown_json(content: str) -> str:
    """Strip ```json fences some models wrap around their answer."""
    content = content.strip()
    if content.startswith("```"):
        # Remove first line (```json or ```)
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]
    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]
    return content.strip()


def parse_triage_output(content: str) -> TriageResult:
    """Parse raw model output into a TriageResult.

    Unknown product areas collapse to "Other"; severity and sentiment must
    be one of the allowed values.
    """
    try:
        data = json.loads(strip_markdown_json(content))
    except json.JSONDecodeError as e:
        raise ClassificationError(f"Model returned invalid JSON: {e}", raw_output=content) from e

    if not isinstance(data, dict):
        raise ClassificationError("Model returned JSON that is not an object", raw_output=content)

    missing = [k for k in REQUIRED_KEYS if not data.get(k)]
    if missing:
        raise ClassificationError(f"Model output missing keys: {', '.join(missing)}", raw_output=content)

    area = str(data["product_area"]).strip()
    area = next((a for a in PRODUCT_AREAS if a.lower() == area.lower()), "Other")

    severity = str(data["severity"]).strip().upper()
    if severity not in SEVERITIES:
        raise ClassificationError(f"Unknown severity {severity!r}", raw_output=content)

    sentiment = str(data["sentiment"]).strip().lower()
    if sentiment not in SENTIMENTS:
        raise ClassificationError(f"Unknown sentiment {sentiment!r}", raw_output=content)

    try:
        return TriageResult(
            product_area=area,
            severity=severity,
            sentiment=sentiment,
            ai_reason=data.get("ai_reason"),
            draft_reply=data.get("draft_reply"),
        )
    except ValidationError as e:
        raise ClassificationError(f"Model output has wrong field types: {e}", raw_output=content) from e


class FeedbackClassifier:
    """Interface: classify(text) -> TriageResult."""

    async def classify(self, text: str) -> TriageResult:
        raise NotImplementedError


class OpenAIFeedbackClassifier(FeedbackClassifier):
    """Classifier backed by an OpenAI-compatible chat completions endpoint.

    The client is built on first use, so constructing the classifier never
    fails; a missing API key surfaces from classify().
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self._client = client
        self.model_name = settings.OPENAI_MODEL

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                raise ClassificationError("OpenAI API key not found. Set OPENAI_API_KEY in environment.")
            self._client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.OPENAI_TIMEOUT,
                max_retries=0,
            )
        return self._client

    async def classify(self, text: str) -> TriageResult:
        client = self.client
        try:
            response = await client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": build_prompt(text)}],
                temperature=settings.OPENAI_TEMPERATURE,
                max_tokens=settings.TRIAGE_MAX_TOKENS,
            )
        except APIError as e:
            raise ClassificationError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content or ""
        return parse_triage_output(content)
