"""Fixed word lists used by the lexical classifiers and the boundary detector.

Kept as plain data so a different curriculum can swap them out without
touching the matching code.
"""
from typing import FrozenSet, Tuple

# Title tokens that carry no signal about where a reading starts.
# Common English words plus words that show up in almost every reading title.
STOP_WORDS: FrozenSet[str] = frozenset({
    "about", "above", "after", "again", "against", "among", "another",
    "based", "being", "below", "between", "could", "during", "every",
    "their", "there", "these", "thing", "those", "three", "through",
    "under", "until", "where", "which", "while", "within", "without",
    "would", "other", "should", "first", "second", "using",
    "introduction", "overview", "reading", "readings", "topic", "topics",
    "chapter", "section", "level", "study", "session", "practice",
    "portfolio", "portfolios", "investment", "investments", "investor",
    "investors", "management", "manager", "managers", "analysis",
    "approach", "approaches", "considerations", "issues", "applications",
    "application", "framework", "principles", "concepts", "process",
    "strategy", "strategies",
})

# Stems that open a learning-outcome statement. Matched as a line prefix,
# so "analyze" also catches "analyzes".
OUTCOME_VERBS: Tuple[str, ...] = (
    "describe", "explain", "demonstrate", "evaluate", "analyze",
    "calculate", "compare", "contrast", "identify", "discuss",
    "distinguish", "formulate", "construct", "interpret", "recommend",
    "justify", "critique", "appraise", "assess",
)

# Reference vocabulary for key-term tagging. Order is the output order.
KEY_TERMS: Tuple[str, ...] = (
    "efficient frontier", "sharpe ratio", "treynor ratio", "information ratio",
    "tracking error", "alpha", "beta", "duration", "convexity", "immunization",
    "liability-driven", "factor model", "mean-variance", "Monte Carlo",
    "value at risk", "CVaR", "behavioral bias", "anchoring", "framing",
    "prospect theory", "momentum", "rebalancing", "overlay", "GIPS",
    "absolute return", "relative return", "benchmark", "attribution",
    "Black-Litterman", "ALM", "liability matching", "futures overlay",
    "currency hedge", "carry trade", "volatility", "correlation",
)
