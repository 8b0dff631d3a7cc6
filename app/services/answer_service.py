"""Answer resolution for the chat widget.

A message goes through, in order:

1. definition-pattern check ("what is X", "explain X", "define X");
2. term-lookup scoring of the extracted term (when a pattern matched);
3. free-query scoring of the whole message;
4. the generative fallback, prompted with a sample of the knowledge base;
5. a static message listing the topics currently in the database.

The first step to produce an answer wins, and the exchange is always logged.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import InternalFailureError, InvalidInputError
from app.core.logging import get_logger
from app.services import chat_log_service, knowledge_service, scoring_service
from app.services.candidates import Candidate, FAQCandidate, NoteCandidate
from app.services.llm_service import (
    LLMResult,
    LLMService,
    build_system_prompt,
    build_user_prompt,
    llm_service,
)
from app.services.pattern_service import PatternMatch, detect_pattern
from app.services.scoring_service import QUERY_MODE, TERM_MODE, ScoredCandidate, ScoringWeights

logger = get_logger("answer")

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class ResolvedAnswer:
    response: str
    chat_log_id: uuid.UUID
    topic: Optional[str]
    source: str


def build_fallback_response(topic_names: Sequence[str], course: Optional[str] = None) -> str:
    """Final answer when neither the knowledge base nor the AI produced one."""
    course = course or settings.COURSE_NAME
    lines = [
        "I don't have specific information about that topic in my knowledge base. "
        f"I can only answer questions based on the {course} course materials that have "
        "been uploaded to the system."
    ]
    if topic_names:
        lines.append("")
        lines.append("You can try asking about:")
        lines.extend(f"• {name}" for name in topic_names)
    lines.append("")
    lines.append(
        "If you need information about a specific topic that's not covered, "
        "please ask your instructor or check the course materials."
    )
    return "\n".join(lines)


class AnswerService:
    """Resolves a student message to a response and records the exchange."""

    def __init__(self, llm: Optional[LLMService] = None, weights: Optional[ScoringWeights] = None):
        self.llm = llm or llm_service
        self.weights = weights or ScoringWeights.from_settings(settings)

    def find_database_answer(
        self,
        message: str,
        candidates: Sequence[Candidate],
        pattern: Optional[PatternMatch] = None,
    ) -> Optional[ScoredCandidate]:
        """Best FAQ or note that clears its mode's confidence threshold, if any."""
        candidates = [c for c in candidates if c.body and c.body.strip()]
        if not candidates:
            return None

        if pattern is not None:
            ranked = scoring_service.score_term(pattern.term, candidates, self.weights)
            best = scoring_service.select_best(ranked, TERM_MODE, self.weights)
            self._log_ranking(TERM_MODE, ranked, best)
            if best is not None:
                return best

        ranked = scoring_service.score_query(message, candidates, self.weights)
        best = scoring_service.select_best(ranked, QUERY_MODE, self.weights)
        self._log_ranking(QUERY_MODE, ranked, best)
        return best

    def _log_ranking(self, mode: str, ranked: List[ScoredCandidate], best: Optional[ScoredCandidate]) -> None:
        if not ranked:
            logger.info(f"[{mode}] no candidates matched")
            return
        top = ranked[0]
        logger.info(
            f"[{mode}] {len(ranked)} candidate(s), best {top.candidate.kind} "
            f"'{top.candidate.title[:60]}' score={top.score:.2f} "
            f"threshold={self.weights.threshold_for(mode)} accepted={best is not None}"
        )
        logger.debug(f"[{mode}] reasons: {list(top.reasons)}")

    async def generate_answer(
        self,
        message: str,
        faqs: Sequence[FAQCandidate],
        notes: Sequence[NoteCandidate],
        pattern: Optional[PatternMatch] = None,
    ) -> LLMResult:
        system_prompt = build_system_prompt(faqs, notes)
        user_prompt = build_user_prompt(message, pattern)
        temperature = settings.LLM_TERM_TEMPERATURE if pattern else settings.LLM_TEMPERATURE
        return await self.llm.complete(
            system_prompt,
            user_prompt,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=temperature,
        )

    async def resolve_message(self, db: AsyncSession, message: str, session_id: str) -> ResolvedAnswer:
        """Answer ``message`` for ``session_id`` and log it.

        Raises:
            InvalidInputError: message or session id is missing or blank.
            InternalFailureError: the knowledge base could not be read or the
                exchange could not be recorded.
        """
        message = (message or "").strip()
        session_id = (session_id or "").strip()
        if not message or not session_id:
            raise InvalidInputError("Message and sessionId are required")

        pattern = detect_pattern(message)
        if pattern:
            logger.info(f"Detected '{pattern.kind}' question about '{pattern.term}'")

        try:
            faqs = await knowledge_service.list_faqs(db)
            notes = await knowledge_service.list_notes(db, active_only=True)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load knowledge base: {e}")
            raise InternalFailureError("Could not load the knowledge base") from e

        logger.info(f"Scoring message against {len(faqs)} FAQs and {len(notes)} notes")
        best = self.find_database_answer(message, [*faqs, *notes], pattern)

        match: Optional[Candidate] = None
        if best is not None:
            match = best.candidate
            response = match.body
            source = match.kind
        else:
            result = await self.generate_answer(message, faqs, notes, pattern)
            if result.ok:
                response = result.text
                source = SOURCE_AI
            else:
                logger.info(f"AI fallback unavailable ({result.error}); using static response")
                try:
                    topics = await knowledge_service.list_topics(db)
                except SQLAlchemyError as e:
                    logger.error(f"Failed to load topics for fallback: {e}")
                    raise InternalFailureError("Could not load topics") from e
                response = build_fallback_response([topic.name for topic in topics])
                source = SOURCE_FALLBACK

        try:
            logged = await chat_log_service.log_exchange(db, session_id, message, response, match)
        except SQLAlchemyError as e:
            logger.error(f"Failed to record chat log for session {session_id}: {e}")
            raise InternalFailureError("Could not record the chat exchange") from e

        return ResolvedAnswer(
            response=response,
            chat_log_id=logged.chat_log_id,
            topic=logged.topic,
            source=source,
        )


# Singleton instance
answer_service = AnswerService()
