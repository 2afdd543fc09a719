"""Line classifiers for study-text structure.

Each predicate looks at a single trimmed line and documents the exact
condition it accepts. ``is_heading`` chains them in a fixed order.
"""
import re
from typing import Callable, List, Optional

MIN_HEADING_LENGTH = 3
MAX_HEADING_LENGTH = 120
MAX_CAPS_HEADING_LENGTH = 80

_LEARNING_OUTCOME_RE = re.compile(r'learning\s+outcome', re.IGNORECASE)
_LOS_MARKER_RE = re.compile(r'^\s*LOS\s+\d+', re.IGNORECASE)
_CAPS_LINE_RE = re.compile(r'^[A-Z0-9\s\-:,.&/()]+$')
_NUMBERED_SECTION_RE = re.compile(
    r'^(Section\s+\d+|\d+\.\d*|[A-Z]\.|[IVX]+\.)\s+',
    re.IGNORECASE
)
_BULLET_RE = re.compile(r'^[•\-*]\s')
_NUMERIC_ITEM_RE = re.compile(r'^\d+\.\s')
_LIST_MARKER_RE = re.compile(r'^(?:[•\-*]|\d+\.)\s+')


def is_out_of_heading_range(line: str) -> bool:
    """Empty, shorter than 3 or longer than 120 characters."""
    return not line or len(line) < MIN_HEADING_LENGTH or len(line) > MAX_HEADING_LENGTH


def mentions_learning_outcome(line: str) -> bool:
    """Contains "learning outcome" anywhere, case-insensitive."""
    return bool(_LEARNING_OUTCOME_RE.search(line))


def is_los_marker(line: str) -> bool:
    """Starts with "LOS" followed by a number, case-insensitive."""
    return bool(_LOS_MARKER_RE.match(line))


def is_caps_title(line: str) -> bool:
    """Only uppercase letters, digits, whitespace and - : , . & / ( ),
    shorter than 80 characters and at least two words long."""
    if len(line) >= MAX_CAPS_HEADING_LENGTH or not _CAPS_LINE_RE.match(line):
        return False
    return len(line.split()) >= 2


def is_numbered_section(line: str) -> bool:
    """Starts with "Section <n>", "<n>." / "<n>.<n>", "<letter>." or a roman
    numeral followed by a dot, then whitespace."""
    return bool(_NUMBERED_SECTION_RE.match(line))


# Acceptance rules in evaluation order
HEADING_RULES: List[Callable[[str], bool]] = [
    mentions_learning_outcome,
    is_los_marker,
    is_caps_title,
    is_numbered_section,
]


def heading_rule(line: str) -> Optional[str]:
    """Name of the first rule that accepts ``line`` as a heading, or None."""
    trimmed = line.strip()
    if is_out_of_heading_range(trimmed):
        return None
    for rule in HEADING_RULES:
        if rule(trimmed):
            return rule.__name__
    return None


def is_heading(line: str) -> bool:
    """Classify a single line as a structural heading."""
    return heading_rule(line) is not None


def is_list_item(line: str) -> bool:
    """Starts with a bullet (•, -, *) or "<digits>." marker followed by a space."""
    return bool(_BULLET_RE.match(line) or _NUMERIC_ITEM_RE.match(line))


def strip_list_marker(line: str) -> str:
    return _LIST_MARKER_RE.sub('', line, count=1)
