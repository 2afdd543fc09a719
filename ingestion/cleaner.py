"""Text cleaning utilities."""
import re


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens.

    Args:
        text: Input text

    Returns:
        Number of words (0 for empty or blank text)
    """
    return len(text.split())


def clean_text(text: str) -> str:
    """Clean extracted page text by normalizing whitespace and fixing common issues.

    Blank-line paragraph breaks are kept, since the chunker splits on them.

    Args:
        text: Raw text from one PDF page

    Returns:
        Cleaned text
    """
    text = text.replace('\r\n', '\n').replace('\r', '\n')

    # Rejoin words hyphenated at a line break, keeping the hyphen so compounds
    # like "liability-driven" and ranges like "1990-2000" survive
    text = re.sub(r'(\w+)-[ \t]*\n[ \t]*(\w+)', r'\1-\2', text)

    # Normalize whitespace within lines
    text = re.sub(r'[ \t\u00a0]+', ' ', text)

    # Remove leading/trailing whitespace from each line
    lines = [line.strip() for line in text.split('\n')]
    text = '\n'.join(lines)

    # Remove excessive blank lines while preserving paragraph breaks
    text = re.sub(r'\n{3,}', '\n\n', text)

    return text.strip()
