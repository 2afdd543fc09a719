"""Lexical metadata extraction for stage text."""
from typing import Iterable, List, Sequence

from extraction.classifiers import is_heading, mentions_learning_outcome
from extraction.vocabulary import KEY_TERMS, OUTCOME_VERBS

MAX_LEARNING_OUTCOMES = 8
MAX_KEY_TERMS = 8


def _starts_with_outcome_verb(line: str, verbs: Iterable[str]) -> bool:
    lowered = line.lower()
    return any(lowered.startswith(verb) for verb in verbs)


def extract_learning_outcomes(
    text: str,
    verbs: Sequence[str] = OUTCOME_VERBS,
    limit: int = MAX_LEARNING_OUTCOMES
) -> List[str]:
    """Extract learning outcome statements from text.

    Collection starts after any line mentioning "learning outcome" (that line
    is not collected). Lines opening with an outcome verb are collected until
    a heading follows at least one collected outcome.

    Args:
        text: Stage text
        verbs: Verb stems that open an outcome statement
        limit: Maximum number of outcomes returned

    Returns:
        Outcome lines in encounter order
    """
    outcomes: List[str] = []
    collecting = False

    for line in (raw.strip() for raw in text.split('\n')):
        if mentions_learning_outcome(line):
            collecting = True
            continue
        if not collecting:
            continue
        if _starts_with_outcome_verb(line, verbs):
            outcomes.append(line)
        elif outcomes and is_heading(line):
            break

    return outcomes[:limit]


def extract_key_terms(
    text: str,
    vocabulary: Sequence[str] = KEY_TERMS,
    limit: int = MAX_KEY_TERMS
) -> List[str]:
    """Return vocabulary terms found in text, in vocabulary order."""
    lowered = text.lower()
    return [term for term in vocabulary if term.lower() in lowered][:limit]
