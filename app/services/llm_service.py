"""Generative fallback via OpenAI-compatible chat completion APIs (Groq, OpenRouter)."""

import asyncio
import traceback
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.services.candidates import FAQCandidate, NoteCandidate
from app.services.pattern_service import DEFINE, EXPLAIN, WHAT_IS, PatternMatch

logger = get_logger("llm")

# Platform configurations
PLATFORMS: Dict[str, Dict] = {
    "groq": {
        "url": "https://api.groq.com/openai/v1/chat/completions",
        "key_setting": "GROQ_API_KEY",
        "model_setting": "GROQ_MODEL",
    },
    "openrouter": {
        "url": "https://openrouter.ai/api/v1/chat/completions",
        "key_setting": "OPENROUTER_API_KEY",
        "model_setting": "OPENROUTER_MODEL",
    },
}

RETRY_BASE_DELAY = 3

PERSONA = (
    "You are a {course} Introduction to Computer Science teaching assistant. "
    "Your goal is to help students learn computer science concepts.\n\n"
    "IMPORTANT GUIDELINES:\n"
    "1. ONLY answer questions related to computer science fundamentals, programming, "
    "algorithms, data structures, computer architecture, operating systems, networking, "
    "or software development.\n"
    "2. If the question is not related to computer science, politely explain that you "
    "can only help with computer science topics.\n"
    "3. Keep your answers educational, clear, and concise.\n"
    "4. If you're not sure about something, acknowledge the limitations of your knowledge.\n"
    "5. Never make up facts or information that could be misleading."
)

TERM_PROMPTS = {
    WHAT_IS: (
        "A student asked what \"{term}\" is. Give a clear, concise definition of "
        "\"{term}\" in the context of computer science, with one short example."
    ),
    EXPLAIN: (
        "A student asked you to explain \"{term}\". Give a detailed explanation of how "
        "\"{term}\" works and describe where it is applied in practice."
    ),
    DEFINE: (
        "A student asked you to define \"{term}\". Give a precise, textbook-style "
        "definition of \"{term}\" in one or two sentences."
    ),
}


@dataclass(frozen=True)
class LLMResult:
    """Outcome of a completion call: either ``text`` or ``error`` is set."""

    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)

    @classmethod
    def success(cls, text: str) -> "LLMResult":
        return cls(text=text)

    @classmethod
    def failure(cls, error: str) -> "LLMResult":
        return cls(error=error)


def build_system_prompt(
    faqs: Sequence[FAQCandidate],
    notes: Sequence[NoteCandidate],
    course: Optional[str] = None,
) -> str:
    """Persona and scope rules plus a small sample of the knowledge base."""
    faq_sample = faqs[: settings.LLM_CONTEXT_FAQS]
    note_sample = notes[: settings.LLM_CONTEXT_NOTES]
    preview = settings.LLM_NOTE_PREVIEW_CHARS

    faq_context = "\n\n".join(f"Q: {faq.question}\nA: {faq.answer}" for faq in faq_sample)
    note_context = "\n\n".join(
        f"Topic: {note.title}\nContent: {note.content[:preview]}..." for note in note_sample
    )

    return (
        f"{PERSONA.format(course=course or settings.COURSE_NAME)}\n\n"
        "AVAILABLE COURSE CONTEXT (use this to inform your responses):\n"
        f"FAQs:\n{faq_context or '(none)'}\n\n"
        f"Notes:\n{note_context or '(none)'}"
    )


def build_user_prompt(message: str, pattern: Optional[PatternMatch] = None) -> str:
    """The raw message, or a kind-specific request when a definition question was detected."""
    if pattern is None or pattern.kind not in TERM_PROMPTS:
        return message
    return TERM_PROMPTS[pattern.kind].format(term=pattern.term)


class LLMService:
    """Thin client for chat completions with failures returned, not raised."""

    def _get_platform_config(self, platform: str) -> dict:
        """Get URL, API key, and model for the given platform."""
        if platform not in PLATFORMS:
            raise ValueError(
                f"Unknown platform '{platform}'. "
                f"Supported: {', '.join(PLATFORMS.keys())}"
            )

        config = PLATFORMS[platform]
        api_key = getattr(settings, config["key_setting"], None)
        model = getattr(settings, config["model_setting"])

        if not api_key:
            raise ValueError(
                f"{config['key_setting']} is not set. "
                f"Add it to your .env file."
            )

        return {
            "url": config["url"],
            "api_key": api_key,
            "model": model,
        }

    async def _call_llm(self, url: str, api_key: str, payload: dict) -> str:
        """POST a chat completion request; 429s are retried up to LLM_MAX_RETRIES times."""
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        max_retries = settings.LLM_MAX_RETRIES

        for attempt in range(max_retries + 1):
            async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS) as client:
                response = await client.post(url, headers=headers, json=payload)

            if response.status_code == 200:
                data = response.json()
                choices = data.get("choices", [])
                if not choices:
                    raise RuntimeError("LLM returned no choices in the response.")
                return choices[0]["message"]["content"]

            if response.status_code == 429 and attempt < max_retries:
                delay = RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    f"Rate limited (429). Retry {attempt + 1}/{max_retries} in {delay}s..."
                )
                await asyncio.sleep(delay)
                continue

            raise RuntimeError(
                f"LLM API returned {response.status_code}: {response.text[:500]}"
            )

        raise RuntimeError("LLM API retries exhausted")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        platform: Optional[str] = None,
    ) -> LLMResult:
        """Run one completion. Never raises: every failure comes back as ``LLMResult.failure``."""
        platform = platform or settings.DEFAULT_LLM_PLATFORM
        try:
            config = self._get_platform_config(platform)
            payload = {
                "model": config["model"],
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "max_tokens": max_tokens or settings.LLM_MAX_TOKENS,
                "temperature": settings.LLM_TEMPERATURE if temperature is None else temperature,
            }
            text = await self._call_llm(config["url"], config["api_key"], payload)
            if not isinstance(text, str):
                raise TypeError(f"LLM content is {type(text).__name__}, expected str")
        except Exception as e:
            logger.error(f"LLM completion via {platform} failed: {e.__class__.__name__}: {e}")
            if settings.DEBUG:
                logger.error(f"Traceback:\n{traceback.format_exc()}")
            return LLMResult.failure(f"{e.__class__.__name__}: {e}")

        text = text.strip()
        if not text:
            logger.warning(f"LLM completion via {platform} returned empty content")
            return LLMResult.failure("empty completion")

        logger.info(f"LLM completion via {platform} ({config['model']}): {len(text)} chars")
        return LLMResult.success(text)


# Singleton instance
llm_service = LLMService()
