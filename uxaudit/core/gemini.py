import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from uxaudit import config
from uxaudit.core.page_context import PageContext, fetch_page_context
from uxaudit.models.schema import AuditResult

log = logging.getLogger("uxaudit")


class AuditCapabilityError(Exception):
    """The AI audit could not be produced (transport, model or schema failure)."""


AUDIT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "OBJECT",
            "properties": {
                "product": {"type": "STRING", "description": "Explanation of the product/service"},
                "targetAudience": {"type": "STRING", "description": "Target audience description"},
            },
            "required": ["product", "targetAudience"],
        },
        "scores": {
            "type": "OBJECT",
            "properties": {
                "elegance": {"type": "INTEGER", "description": "Score from 0-100"},
                "clarity": {"type": "INTEGER", "description": "Score from 0-100"},
                "modernity": {"type": "INTEGER", "description": "Score from 0-100"},
            },
            "required": ["elegance", "clarity", "modernity"],
        },
        "problems": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "problem": {
                        "type": "STRING",
                        "description": "Short title of the heuristic violation (max 5-7 words)",
                    },
                    "whyItMatters": {"type": "STRING"},
                },
                "required": ["problem", "whyItMatters"],
            },
        },
        "improvements": {
            "type": "ARRAY",
            "items": {
                "type": "STRING",
                "description": (
                    "Specific idea on how to implement AI features (chatbots, personalization, "
                    "automation) on this site."
                ),
            },
        },
        "aiOpportunity": {
            "type": "STRING",
            "description": "The most impactful AI feature implementation for this specific business.",
        },
    },
    "required": ["summary", "scores", "problems", "improvements", "aiOpportunity"],
}

PROMPT = """
You are a senior UX designer and product expert.
Your task is to perform a QUICK UX audit of a website based only on its URL.

IMPORTANT:
* Do NOT say you cannot access the website.
* Assume the website exists and infer its purpose from the URL if you cannot access it directly.
* Be realistic and practical, not generic.
* Keep the output concise and structured.
* Identify ALL major heuristic violations you can find, do not limit to just 3.
* SCORING: Be strict and varied. Use the full range (0-100) based on the likely quality of the site.
  Famous tech sites might be high, but random or older sites should be lower.
* AI OPPORTUNITIES: The 'improvements' and 'aiOpportunity' fields MUST focus PURELY on how to implement
  Artificial Intelligence on this site. Do not give generic UX advice there. Suggest specific AI features
  like LLM chatbots, predictive personalization, computer vision, automated workflows, etc.

INPUT URL: {url}
"""


def build_prompt(url: str, context: Optional[PageContext] = None) -> str:
    prompt = PROMPT.format(url=url)
    if context:
        prompt += "\nPAGE SNAPSHOT (fetched just now):\n"
        if context.title:
            prompt += f"Title: {context.title}\n"
        if context.description:
            prompt += f"Description: {context.description}\n"
    return prompt


def parse_audit(payload: dict) -> AuditResult:
    """Pull the JSON audit out of a generateContent response body."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise AuditCapabilityError("No response from AI")
    if not text:
        raise AuditCapabilityError("No response from AI")
    try:
        return AuditResult.model_validate(json.loads(text))
    except json.JSONDecodeError as e:
        raise AuditCapabilityError(f"AI response is not JSON: {e}") from e
    except ValidationError as e:
        raise AuditCapabilityError(f"AI response does not match the audit schema: {e}") from e


class GeminiAuditor:
    def __init__(
        self,
        api_key: Optional[str] = config.GEMINI_API_KEY,
        model: str = config.GEMINI_MODEL,
        api_base: str = config.GEMINI_API_BASE,
        timeout: float = config.GEMINI_TIMEOUT,
        page_context: bool = config.AUDIT_PAGE_CONTEXT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.page_context = page_context
        self.client = client

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    async def request_audit(self, url: str) -> AuditResult:
        if not self.api_key:
            raise AuditCapabilityError("GEMINI_API_KEY is not set")

        context = await fetch_page_context(url, self.client) if self.page_context else None
        body = {
            "contents": [{"role": "user", "parts": [{"text": build_prompt(url, context)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": AUDIT_SCHEMA,
                "temperature": 0,
            },
        }
        headers = {"x-goog-api-key": self.api_key}

        try:
            if self.client is not None:
                r = await self.client.post(self.endpoint, json=body, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    r = await client.post(self.endpoint, json=body, headers=headers)
        except httpx.HTTPError as e:
            log.error("Gemini request failed: %s", e)
            raise AuditCapabilityError(str(e)) from e

        if r.status_code != 200:
            log.error("Gemini returned %s: %s", r.status_code, r.text[:200])
            raise AuditCapabilityError(f"Gemini returned {r.status_code}")

        try:
            payload = r.json()
        except ValueError as e:
            raise AuditCapabilityError("Gemini response is not JSON") from e

        try:
            return parse_audit(payload)
        except AuditCapabilityError as e:
            log.error("Error auditing %s: %s", url, e)
            raise
