"""Rule-based relevance scoring of FAQs and Notes against a student query.

Two modes:

* free-query mode scores a whole chat message against each candidate;
* term-lookup mode scores a short canonical term pulled out of a
  "what is X" / "explain X" / "define X" question.

Scores are additive and deterministic. Every weight and both confidence
thresholds come from :class:`ScoringWeights`, which is built from settings.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence

from app.core.config import Settings, settings as app_settings
from app.services.candidates import Candidate

QUERY_MODE = "query"
TERM_MODE = "term"

STOPWORDS: FrozenSet[str] = frozenset({
    "a", "about", "after", "all", "also", "an", "and", "any", "are", "as",
    "at", "be", "because", "been", "but", "by", "can", "could", "do", "does",
    "for", "from", "had", "has", "have", "he", "her", "his", "i", "if",
    "in", "into", "is", "it", "its", "me", "more", "my", "no", "not",
    "of", "on", "or", "other", "our", "she", "so", "some", "such", "than",
    "that", "the", "their", "them", "then", "there", "these", "they", "this",
    "those", "to", "use", "used", "was", "we", "were", "will", "with",
    "would", "you", "your",
})

QUESTION_WORDS: FrozenSet[str] = frozenset({
    "what", "how", "why", "when", "where", "which", "who", "whom", "whose",
    "is", "are", "does", "do", "can", "explain", "define", "tell", "describe",
})

# Words that, right before a term in a title, mark the term as the thing being defined
DEFINING_WORDS: FrozenSet[str] = frozenset({
    "what", "is", "are", "define", "defining", "explain", "explaining", "about",
})

ARTICLES: FrozenSet[str] = frozenset({"a", "an", "the"})

SIGNIFICANT_WORD_MIN_LENGTH = 5   # title words longer than 4 chars
MAIN_WORD_MIN_LENGTH = 4          # query words longer than 3 chars
MIN_KEYWORD_LENGTH = 3
PRIMARY_FOCUS_MIN_OCCURRENCES = 3
SHORT_TITLE_MAX_WORDS = 3

_WORD_RE = re.compile(r"[a-z0-9+#]+(?:['-][a-z0-9]+)*")


@dataclass(frozen=True)
class ScoringWeights:
    title_phrase: float = 10.0
    keyword: float = 6.0
    topic: float = 5.0
    title_word: float = 2.0
    semantic_max: float = 4.0

    term_title: float = 10.0
    term_body: float = 4.0
    term_keyword: float = 3.0
    term_topic: float = 2.0
    term_partial: float = 1.0
    term_main_subject: float = 2.0
    term_primary_focus: float = 2.0

    query_threshold: float = 5.0
    term_threshold: float = 4.0

    @classmethod
    def from_settings(cls, config: Settings = app_settings) -> "ScoringWeights":
        return cls(
            title_phrase=config.WEIGHT_TITLE_PHRASE,
            keyword=config.WEIGHT_KEYWORD,
            topic=config.WEIGHT_TOPIC,
            title_word=config.WEIGHT_TITLE_WORD,
            semantic_max=config.WEIGHT_SEMANTIC_MAX,
            term_title=config.WEIGHT_TERM_TITLE,
            term_body=config.WEIGHT_TERM_BODY,
            term_keyword=config.WEIGHT_TERM_KEYWORD,
            term_topic=config.WEIGHT_TERM_TOPIC,
            term_partial=config.WEIGHT_TERM_PARTIAL,
            term_main_subject=config.WEIGHT_TERM_MAIN_SUBJECT,
            term_primary_focus=config.WEIGHT_TERM_PRIMARY_FOCUS,
            query_threshold=config.MATCH_THRESHOLD_QUERY,
            term_threshold=config.MATCH_THRESHOLD_TERM,
        )

    def threshold_for(self, mode: str) -> float:
        if mode == QUERY_MODE:
            return self.query_threshold
        if mode == TERM_MODE:
            return self.term_threshold
        raise ValueError(f"Unknown scoring mode '{mode}'")


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: Candidate
    score: float
    reasons: tuple = ()


# ─── Text helpers ────────────────────────────────────────────────────────────

def normalize(text: Optional[str]) -> str:
    """Lower-case and collapse whitespace."""
    return " ".join((text or "").lower().split())


def tokenize(text: Optional[str]) -> List[str]:
    return _WORD_RE.findall(normalize(text))


def significant_words(text: str, stopwords: FrozenSet[str] = STOPWORDS) -> List[str]:
    """Distinct title words long enough to carry meaning, in order of appearance."""
    seen = []
    for word in tokenize(text):
        if len(word) >= SIGNIFICANT_WORD_MIN_LENGTH and word not in stopwords and word not in seen:
            seen.append(word)
    return seen


def main_words(text: str, stopwords: FrozenSet[str] = STOPWORDS) -> set:
    return {
        word for word in tokenize(text)
        if len(word) >= MAIN_WORD_MIN_LENGTH
        and word not in stopwords
        and word not in QUESTION_WORDS
    }


def _clean_keywords(keywords: Iterable[str]) -> List[str]:
    cleaned = []
    for keyword in keywords:
        if not isinstance(keyword, str):
            continue
        keyword = normalize(keyword)
        if keyword:
            cleaned.append(keyword)
    return cleaned


# ─── Free-query mode ─────────────────────────────────────────────────────────

def _score_query_candidate(
    query: str,
    query_main: set,
    candidate: Candidate,
    weights: ScoringWeights,
    stopwords: FrozenSet[str],
) -> ScoredCandidate:
    score = 0.0
    reasons = []
    title = normalize(candidate.title)

    # (a) whole query restated inside the title
    if query and query in title:
        score += weights.title_phrase
        reasons.append("title phrase")

    # (b) keywords mentioned in the query
    for keyword in _clean_keywords(candidate.keywords):
        if len(keyword) >= MIN_KEYWORD_LENGTH and keyword in query:
            score += weights.keyword
            reasons.append(f"keyword '{keyword}'")

    # (c) topic name mentioned in the query
    topic = normalize(candidate.topic_name)
    if topic and topic in query:
        score += weights.topic
        reasons.append(f"topic '{topic}'")

    # (d) significant title words; a single stray word is noise unless it is the whole title
    title_words = significant_words(title, stopwords)
    matched = [word for word in title_words if word in query]
    if len(matched) >= 2 or (len(tokenize(title)) == 1 and len(matched) == 1):
        score += weights.title_word * len(matched)
        reasons.append(f"title words {matched}")

    # (e) semantic overlap of main words, capped at semantic_max
    if query_main:
        candidate_main = main_words(
            " ".join([candidate.title, candidate.body, " ".join(candidate.keywords)]),
            stopwords,
        )
        overlap = query_main & candidate_main
        if overlap:
            bonus = weights.semantic_max * len(overlap) / len(query_main)
            score += bonus
            reasons.append(f"semantic overlap {len(overlap)}/{len(query_main)}")

    return ScoredCandidate(candidate=candidate, score=score, reasons=tuple(reasons))


def score_query(
    query: str,
    candidates: Sequence[Candidate],
    weights: Optional[ScoringWeights] = None,
    stopwords: FrozenSet[str] = STOPWORDS,
) -> List[ScoredCandidate]:
    """Rank candidates against a free-text chat message."""
    weights = weights or ScoringWeights()
    normalized = normalize(query)
    if not normalized:
        return []

    query_main = main_words(normalized, stopwords)
    scored = [
        _score_query_candidate(normalized, query_main, candidate, weights, stopwords)
        for candidate in candidates
    ]
    return rank(scored)


# ─── Term-lookup mode ────────────────────────────────────────────────────────

def is_main_subject(term: str, title: str) -> bool:
    """True when the title is *about* the term rather than mentioning it in passing.

    The term must sit in the first half of the title, or directly follow a
    defining word such as "what", "define", "explain" or "about".
    """
    term = normalize(term)
    title = normalize(title)
    index = title.find(term)
    if not term or index < 0:
        return False

    if index < len(title) / 2:
        return True

    preceding = [word for word in tokenize(title[:index]) if word not in ARTICLES]
    return bool(preceding) and preceding[-1] in DEFINING_WORDS


def is_primary_focus(term: str, title: str, body: str) -> bool:
    """True when the content as a whole is devoted to the term."""
    term = normalize(term)
    title = normalize(title)
    if not term or term not in title:
        return False

    if normalize(body).count(term) >= PRIMARY_FOCUS_MIN_OCCURRENCES:
        return True
    return len(title.split()) <= SHORT_TITLE_MAX_WORDS


def _score_term_candidate(
    term: str,
    term_words: List[str],
    candidate: Candidate,
    weights: ScoringWeights,
) -> ScoredCandidate:
    score = 0.0
    reasons = []
    title = normalize(candidate.title)
    body = normalize(candidate.body)

    if term in title:
        score += weights.term_title
        reasons.append("term in title")

    if term in body:
        score += weights.term_body
        reasons.append("term in body")

    # keyword is a part of the term ("binary search tree" contains "binary search")
    for keyword in _clean_keywords(candidate.keywords):
        if len(keyword) >= MIN_KEYWORD_LENGTH and keyword in term:
            score += weights.term_keyword
            reasons.append(f"keyword '{keyword}'")

    topic = normalize(candidate.topic_name)
    if topic and topic in term:
        score += weights.term_topic
        reasons.append(f"topic '{topic}'")

    content_words = set(tokenize(title)) | set(tokenize(body))
    for word in term_words:
        if word in content_words:
            score += weights.term_partial
            reasons.append(f"partial '{word}'")

    if score > 0:
        if is_main_subject(term, title):
            score += weights.term_main_subject
            reasons.append("main subject")
        if is_primary_focus(term, title, body):
            score += weights.term_primary_focus
            reasons.append("primary focus")

    return ScoredCandidate(candidate=candidate, score=score, reasons=tuple(reasons))


def score_term(
    term: str,
    candidates: Sequence[Candidate],
    weights: Optional[ScoringWeights] = None,
    stopwords: FrozenSet[str] = STOPWORDS,
) -> List[ScoredCandidate]:
    """Rank candidates against a canonical term such as "stack" or "recursion"."""
    weights = weights or ScoringWeights()
    normalized = normalize(term)
    if not normalized:
        return []

    term_words = [word for word in tokenize(normalized) if word not in stopwords]
    scored = [
        _score_term_candidate(normalized, term_words, candidate, weights)
        for candidate in candidates
    ]
    return rank(scored)


# ─── Ranking and threshold gate ──────────────────────────────────────────────

def rank(scored: Iterable[ScoredCandidate]) -> List[ScoredCandidate]:
    """Drop zero scores and sort descending; ties keep input order."""
    return sorted((item for item in scored if item.score > 0), key=lambda item: -item.score)


def passes_threshold(scored: ScoredCandidate, mode: str, weights: Optional[ScoringWeights] = None) -> bool:
    weights = weights or ScoringWeights()
    return scored.score >= weights.threshold_for(mode)


def select_best(
    ranked: Sequence[ScoredCandidate],
    mode: str,
    weights: Optional[ScoringWeights] = None,
) -> Optional[ScoredCandidate]:
    """Top candidate if it clears the confidence threshold for ``mode``, else None."""
    if not ranked:
        return None
    best = ranked[0]
    return best if passes_threshold(best, mode, weights) else None
