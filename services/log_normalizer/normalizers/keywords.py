"""Keyword-based classification shared by the parsers."""
from typing import Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

# Each rule: (label, [keywords]); ordered by priority (first match wins)
Rules = Sequence[Tuple[T, Sequence[str]]]


def contains_any(text: str, keywords: Sequence[str]) -> bool:
    lower = text.lower()
    return any(kw in lower for kw in keywords)


def classify(text: str, rules: Rules, default: Optional[T] = None) -> Optional[T]:
    """Return the label of the first rule with a keyword in ``text``."""
    lower = text.lower()
    for label, keywords in rules:
        if any(kw in lower for kw in keywords):
            return label
    return default
