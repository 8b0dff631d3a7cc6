"""Detection of definition-style questions ("what is X", "explain X", "define X")."""

import re
from dataclasses import dataclass
from typing import Optional

WHAT_IS = "what-is"
EXPLAIN = "explain"
DEFINE = "define"

_WHAT_IS_RE = re.compile(r"^what\s+is\s+(?:(?:a|an)\s+)?(.+)$", re.IGNORECASE | re.DOTALL)
_EXPLAIN_RE = re.compile(r"^explain\s+(.+)$", re.IGNORECASE | re.DOTALL)
_DEFINE_RE = re.compile(r"^define\s+(.+)$", re.IGNORECASE | re.DOTALL)

# "explain what recursion is" -> "recursion"
_EXPLAIN_WRAPPER_RE = re.compile(r"^what\s+(.+?)\s+(?:is|are)$", re.IGNORECASE | re.DOTALL)

_PATTERNS = (
    (WHAT_IS, _WHAT_IS_RE),
    (EXPLAIN, _EXPLAIN_RE),
    (DEFINE, _DEFINE_RE),
)


@dataclass(frozen=True)
class PatternMatch:
    kind: str
    term: str


def _clean_term(raw: str) -> str:
    return raw.strip().rstrip("?.!").strip()


def detect_pattern(query: Optional[str]) -> Optional[PatternMatch]:
    """Return the detected question kind and its target term, or None."""
    if not query:
        return None

    text = query.strip()
    for kind, regex in _PATTERNS:
        match = regex.match(text)
        if not match:
            continue

        term = _clean_term(match.group(1))
        if kind == EXPLAIN:
            wrapped = _EXPLAIN_WRAPPER_RE.match(term)
            if wrapped:
                term = _clean_term(wrapped.group(1))

        if not term:
            return None
        return PatternMatch(kind=kind, term=term.lower())

    return None
