"""
Unit tests for the rule-based candidate scorer and the threshold gate.
"""
import uuid

import pytest

from app.core.config import Settings
from app.services.candidates import FAQCandidate, NoteCandidate
from app.services.scoring_service import (
    QUERY_MODE,
    TERM_MODE,
    ScoredCandidate,
    ScoringWeights,
    is_main_subject,
    is_primary_focus,
    passes_threshold,
    score_query,
    score_term,
    select_best,
)


def faq(question, answer="Answer.", keywords=(), topic=None):
    return FAQCandidate(id=uuid.uuid4(), title=question, body=answer, keywords=list(keywords), topic_name=topic)


def note(title, content="Notes.", keywords=(), topic=None):
    return NoteCandidate(id=uuid.uuid4(), title=title, body=content, keywords=list(keywords), topic_name=topic)


class TestFreeQueryScoring:
    """Free-text chat messages."""

    def test_restated_question_scores_at_least_title_phrase_weight(self):
        target = faq("How does binary search work?", keywords=["binary search"])
        others = [
            faq("What is a stack?", keywords=["stack"]),
            note("Sorting", "Bubble sort and merge sort.", keywords=["sorting"]),
        ]

        ranked = score_query("How does binary search work?", others + [target])

        assert ranked[0].candidate is target
        assert ranked[0].score >= 10

    def test_unrelated_query_yields_no_candidates(self):
        candidates = [
            faq("What is a stack?", "A LIFO collection.", keywords=["stack"], topic="Data Structures"),
            note("Processes", "A running program.", keywords=["process"], topic="Operating Systems"),
        ]

        assert score_query("quantum entanglement physics", candidates) == []

    def test_keyword_and_semantic_overlap(self):
        """'What is a variable?' against a variables FAQ: keyword +6, overlap +4."""
        candidate = faq(
            "What are variables in programming?",
            "A variable is a named storage location.",
            keywords=["variable"],
            topic="Programming Basics",
        )

        ranked = score_query("What is a variable?", [candidate])

        assert ranked[0].score == pytest.approx(10.0)

    def test_short_keywords_are_ignored(self):
        candidate = faq("Operating systems", keywords=["os"])

        assert score_query("what does it cost", [candidate]) == []

    def test_topic_name_in_query(self):
        candidate = note("Trees", keywords=[], topic="Data Structures")

        ranked = score_query("help with data structures", [candidate])

        assert ranked[0].score == pytest.approx(5.0)
        assert "topic 'data structures'" in ranked[0].reasons

    def test_single_title_word_match_is_ignored_for_long_titles(self):
        candidate = note("Sorting Algorithms Overview")

        ranked = score_query("sorting basics", [candidate])

        # only the semantic bonus: 1 of 2 main words
        assert ranked[0].score == pytest.approx(2.0)

    def test_two_title_words_score(self):
        candidate = note("Sorting Algorithms Overview")

        ranked = score_query("compare algorithms for sorting", [candidate])

        # two title words (+2 each) and 2 of 3 main words overlapping
        assert ranked[0].score == pytest.approx(4.0 + 4.0 * 2 / 3)

    def test_single_word_title_scores_its_only_word(self):
        candidate = note("Recursion")

        ranked = score_query("tell me recursion stuff", [candidate])

        assert ranked[0].score == pytest.approx(2.0 + 2.0)

    def test_one_significant_word_in_longer_title_is_not_enough(self):
        candidate = faq("How does recursion work?", "Recursion examples include factorial.")

        ranked = score_query("recursion examples", [candidate])

        # semantic overlap only; the question goes to the AI
        assert ranked[0].score == pytest.approx(4.0)
        assert not any(reason.startswith("title words") for reason in ranked[0].reasons)
        assert select_best(ranked, QUERY_MODE) is None

    def test_ties_keep_input_order(self):
        first = faq("Stack basics", keywords=["stack"])
        second = faq("Stack basics", keywords=["stack"])

        ranked = score_query("stack please", [first, second])

        assert [item.candidate for item in ranked] == [first, second]

    def test_results_sorted_descending(self):
        weak = note("Queues", "Waiting lines.", keywords=["queue"])
        strong = faq("What is a queue?", keywords=["queue", "fifo"])

        ranked = score_query("what is a queue? fifo", [weak, strong])

        assert [item.candidate for item in ranked] == [strong, weak]
        assert ranked[0].score > ranked[1].score


class TestTermScoring:
    """Terms extracted from definition questions."""

    def test_definition_faq_scores_all_rules(self):
        candidate = faq("What is a stack?", "A stack is a last-in, first-out collection.", keywords=["stack"])

        ranked = score_term("stack", [candidate])

        # title 10 + body 4 + keyword 3 + partial 1 + main subject 2
        assert ranked[0].score == pytest.approx(20.0)

    def test_keyword_contained_in_term(self):
        candidate = note("Trees", "Hierarchical data.", keywords=["binary search", "tree traversal"])

        ranked = score_term("binary search tree", [candidate])

        assert "keyword 'binary search'" in ranked[0].reasons
        assert "keyword 'tree traversal'" not in ranked[0].reasons

    def test_topic_contained_in_term(self):
        candidate = note("Misc", "Nothing relevant.", topic="Networking")

        ranked = score_term("networking protocols", [candidate])

        assert ranked[0].score == pytest.approx(2.0)

    def test_body_only_mention_stays_below_title_match(self):
        in_title = note("Recursion", "Functions calling themselves.")
        in_body = note("Functions", "A function may use recursion.")

        ranked = score_term("recursion", [in_body, in_title])

        assert ranked[0].candidate is in_title

    def test_no_match(self):
        assert score_term("quantum entanglement", [faq("What is a stack?", "LIFO.")]) == []


class TestSubjectHelpers:
    """Main-subject and primary-focus refinements."""

    def test_main_subject_in_first_half(self):
        assert is_main_subject("recursion", "Recursion and the call stack explained")

    def test_main_subject_after_defining_word(self):
        assert is_main_subject("stack", "What is a stack?")
        assert is_main_subject("hashing", "A gentle introduction to data structures: all about hashing")

    def test_not_main_subject_when_mentioned_late(self):
        assert not is_main_subject("stack", "Memory layout of programs with heap and stack")

    def test_primary_focus_by_repetition(self):
        body = "A queue stores items. The queue is FIFO. Every queue has a front."
        assert is_primary_focus("queue", "Working with a queue in practice today", body)

    def test_primary_focus_by_short_title(self):
        assert is_primary_focus("queue", "The Queue", "FIFO.")

    def test_not_primary_focus_without_title_mention(self):
        assert not is_primary_focus("queue", "Data Structures", "queue queue queue")


class TestThresholdGate:
    """Confidence thresholds per mode."""

    def test_query_threshold_boundary(self):
        candidate = faq("Q")
        assert passes_threshold(ScoredCandidate(candidate, 5.0), QUERY_MODE)
        assert not passes_threshold(ScoredCandidate(candidate, 4.99), QUERY_MODE)

    def test_term_threshold_boundary(self):
        candidate = faq("Q")
        assert passes_threshold(ScoredCandidate(candidate, 4.0), TERM_MODE)
        assert not passes_threshold(ScoredCandidate(candidate, 3.99), TERM_MODE)

    def test_select_best_rejects_weak_top_candidate(self):
        candidate = faq("Q")
        assert select_best([ScoredCandidate(candidate, 4.99)], QUERY_MODE) is None
        assert select_best([], QUERY_MODE) is None

    def test_select_best_returns_top(self):
        top = ScoredCandidate(faq("A"), 9.0)
        assert select_best([top, ScoredCandidate(faq("B"), 6.0)], QUERY_MODE) is top

    def test_thresholds_come_from_settings(self):
        weights = ScoringWeights.from_settings(Settings(MATCH_THRESHOLD_QUERY=7.5, MATCH_THRESHOLD_TERM=2.0))

        assert weights.threshold_for(QUERY_MODE) == 7.5
        assert weights.threshold_for(TERM_MODE) == 2.0
        assert not passes_threshold(ScoredCandidate(faq("Q"), 6.0), QUERY_MODE, weights)

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            ScoringWeights().threshold_for("fuzzy")
