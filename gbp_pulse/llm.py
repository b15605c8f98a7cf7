"""OpenAI-backed generation gateway for diagnosis, content, audits and chat."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from textwrap import dedent
from typing import Any, Dict, Protocol, Sequence

from openai import APIError, AsyncOpenAI

from .config import PulseSettings, get_settings
from .errors import GatewayError, ResponseShapeError
from .schemas import BusinessContext, NewProfileData, ToolId

logger = logging.getLogger(__name__)

ASSISTANT_SYSTEM_INSTRUCTION = dedent(
    """
    You are GBP Pulse, a world-class Google Business Profile expert.
    Your goal is to help businesses navigate complex issues like account suspensions,
    video verification hurdles, and ranking drops.
    Always reference current Google Business Profile guidelines.
    Be concise, professional, and empathetic.
    When diagnosing, ask clarifying questions if the user provides vague details.
    """
).strip()

TOOL_PROMPTS: Dict[ToolId, str] = {
    ToolId.DESCRIPTION: (
        "Write a professional, SEO-friendly GBP description (max 750 chars). "
        "Focus on trustworthiness and local expertise."
    ),
    ToolId.POST: (
        "Write a Google Business Profile 'Update' post (max 1500 chars) with a clear Call to Action. "
        "Focus on local engagement."
    ),
    ToolId.REPLY: (
        "Write a professional, empathetic response to a customer review. "
        "Ensure a polite and solution-oriented tone."
    ),
    ToolId.CHALLENGE: (
        "Write a persuasive appeal that establishes the business is legitimate, using the owner's "
        "history and unique selling points as evidence. Keep it factual and policy-aware."
    ),
    ToolId.BLOG: (
        "Write a 400-word local SEO blog post for the company website. Focus on a topic relevant to the "
        "business and its local community. Use clear headers and a call to action."
    ),
    ToolId.REVIEW_REMOVAL: (
        "Write a formal request for review removal identifying specific Google policy violations "
        "(e.g., spam, harassment, off-topic)."
    ),
    ToolId.Q_AND_A: "Generate 3 high-value Q&A pairs that highlight key services or common customer concerns.",
    ToolId.PHOTO_IDEAS: (
        "Generate 8 photo ideas for their profile, specifically categorized (Interior, Exterior, Team, Product)."
    ),
}


class GenerationGateway(Protocol):
    """Request/response contract of the generative service."""

    async def diagnose(self, context: BusinessContext) -> Dict[str, Any]: ...

    async def generate_content(self, tool: ToolId, context: BusinessContext, details: str) -> str: ...

    async def validate_profile(self, draft: NewProfileData) -> Dict[str, Any]: ...

    async def generate_guide(
        self, step_title: str, step_description: str, context: BusinessContext
    ) -> Dict[str, Any]: ...

    async def chat(
        self,
        history: Sequence[Dict[str, str]],
        message: str,
        context: BusinessContext | None = None,
    ) -> str: ...


@dataclass(frozen=True)
class PromptSpec:
    """Container describing how to call the LLM for one request."""

    system_prompt: str
    user_prompt: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 900
    structured: bool = False


def _parse_structured_response(raw_text: str) -> Dict[str, Any]:
    """Coerce the model output into a JSON object or raise."""

    text = raw_text.strip()
    if text.startswith("```"):
        lines = [line.rstrip() for line in text.splitlines()]
        if len(lines) >= 2:
            lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ResponseShapeError("Model response was not valid JSON") from exc
    if not isinstance(data, dict):
        raise ResponseShapeError("Model response was not a JSON object")
    return data


def _context_hint(context: BusinessContext | None) -> str:
    if context is None or not context.has_identity:
        return ""
    return f"\n\nCONTEXT: Business is {context.name}, Industry is {context.industry}."


class OpenAIGateway:
    """Generation gateway speaking to the OpenAI chat completions API."""

    def __init__(self, settings: PulseSettings | None = None) -> None:
        self._settings = settings or get_settings()
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        api_key = self._settings.openai_api_key
        if not api_key:
            raise GatewayError("OPENAI_API_KEY is not configured")
        self._client = AsyncOpenAI(api_key=api_key)
        return self._client

    async def _complete(self, messages: list[dict[str, str]], spec: PromptSpec) -> str:
        client = self._get_client()
        kwargs: Dict[str, Any] = {
            "model": spec.model,
            "messages": messages,
            "temperature": spec.temperature,
            "max_tokens": spec.max_tokens,
        }
        if spec.structured:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await client.chat.completions.create(**kwargs)
        except APIError as exc:
            raise GatewayError(f"Generation request failed: {exc}") from exc

        message = response.choices[0].message.content if response.choices else None
        return message or ""

    async def _invoke(self, spec: PromptSpec) -> str:
        messages = [
            {"role": "system", "content": spec.system_prompt.strip()},
            {"role": "user", "content": spec.user_prompt.strip()},
        ]
        return await self._complete(messages, spec)

    async def _invoke_structured(self, spec: PromptSpec) -> Dict[str, Any]:
        text = await self._invoke(spec)
        if not text:
            raise ResponseShapeError("Model returned an empty response")
        return _parse_structured_response(text)

    # -- gateway contract --------------------------------------------------

    async def diagnose(self, context: BusinessContext) -> Dict[str, Any]:
        user_prompt = dedent(
            f"""
            Analyze the following Google Business Profile issue based on official Google guidelines:
            Business Name: {context.name}
            Industry: {context.industry}
            Issue Description: {context.issue_description}

            1. Categorize the issue into one of these: SUSPENSION, VERIFICATION, RANKING, REVIEWS, OTHER.
            2. Provide a clear, professional analysis (2-3 sentences) explaining the likely root cause.
            3. Create a step-by-step action plan to resolve this issue.

            Return JSON with this structure:
            {{
              "category": string,
              "analysis": string,
              "steps": [{{"title": string, "description": string}}]
            }}
            """
        )
        spec = PromptSpec(
            system_prompt=ASSISTANT_SYSTEM_INSTRUCTION,
            user_prompt=user_prompt,
            model=self._settings.reasoning_model,
            temperature=0.4,
            max_tokens=1200,
            structured=True,
        )
        return await self._invoke_structured(spec)

    async def generate_content(self, tool: ToolId, context: BusinessContext, details: str) -> str:
        user_prompt = dedent(
            f"""
            Business: "{context.name}" in "{context.industry}"
            Task: {TOOL_PROMPTS[tool]}
            User Details: "{details}"

            CRITICAL INSTRUCTION: Provide ONLY the generated content text.
            Do NOT include any introductory phrases or conversational filler.
            """
        )
        spec = PromptSpec(
            system_prompt=ASSISTANT_SYSTEM_INSTRUCTION,
            user_prompt=user_prompt,
            model=self._settings.model,
            temperature=0.8,
            max_tokens=1200,
        )
        text = await self._invoke(spec)
        return text.strip()

    async def validate_profile(self, draft: NewProfileData) -> Dict[str, Any]:
        user_prompt = dedent(
            f"""
            Audit this GBP data for compliance and optimization:
            Name: {draft.business_name}
            Category: {draft.category}
            Address: {draft.address}
            Type: {"Service Area" if draft.is_service_area else "Storefront"}
            Phone: {draft.phone}
            Website: {draft.website}
            Description: {draft.description}

            Return JSON with:
            {{
              "isValid": boolean,
              "issues": [string],
              "suggestions": [string],
              "optimizedDescription": string,
              "verificationAdvice": {{"method": string, "tips": [string]}}
            }}

            When isValid is false, list every guideline violation in issues.
            """
        )
        spec = PromptSpec(
            system_prompt=ASSISTANT_SYSTEM_INSTRUCTION,
            user_prompt=user_prompt,
            model=self._settings.reasoning_model,
            temperature=0.3,
            max_tokens=1000,
            structured=True,
        )
        return await self._invoke_structured(spec)

    async def generate_guide(
        self, step_title: str, step_description: str, context: BusinessContext
    ) -> Dict[str, Any]:
        user_prompt = dedent(
            f"""
            Provide a deep-dive educational guide for the following Google Business Profile task.
            Task: {step_title}
            Context Description: {step_description}
            Business Name: {context.name}

            Return JSON with:
            {{
              "title": string,
              "bigPicture": string,
              "steps": [string],
              "pitfalls": [string],
              "proTips": [string]
            }}
            """
        )
        spec = PromptSpec(
            system_prompt=ASSISTANT_SYSTEM_INSTRUCTION,
            user_prompt=user_prompt,
            model=self._settings.model,
            temperature=0.6,
            max_tokens=1000,
            structured=True,
        )
        return await self._invoke_structured(spec)

    async def chat(
        self,
        history: Sequence[Dict[str, str]],
        message: str,
        context: BusinessContext | None = None,
    ) -> str:
        spec = PromptSpec(
            system_prompt=ASSISTANT_SYSTEM_INSTRUCTION + _context_hint(context),
            user_prompt=message,
            model=self._settings.model,
            temperature=0.7,
            max_tokens=700,
        )
        messages = [{"role": "system", "content": spec.system_prompt}]
        for turn in history:
            role = "assistant" if turn.get("role") == "model" else "user"
            messages.append({"role": role, "content": turn.get("text", "")})
        messages.append({"role": "user", "content": message})
        return await self._complete(messages, spec)
