"""
Advice Filter - Detects questions asking for advice, opinions or comparisons
Such questions are refused before any retrieval happens.
"""
import re
from typing import List, Optional

from constants import ADVICE_ALLOW_TERMS, ADVICE_PATTERNS


class AdviceFilter:
    """Word-boundary advice patterns with a statement/download allow-list"""

    def __init__(self, patterns: Optional[List[str]] = None, allow_terms: Optional[List[str]] = None):
        """
        Args:
            patterns: Advice regexes, matched against the lowercased question
            allow_terms: Substrings that mark a question as factual regardless of patterns
        """
        self.allow_terms = list(ADVICE_ALLOW_TERMS if allow_terms is None else allow_terms)
        self.patterns = [
            re.compile(pattern, re.IGNORECASE)
            for pattern in (ADVICE_PATTERNS if patterns is None else patterns)
        ]

    def is_allowed(self, question: str) -> bool:
        """True when an allow-listed term appears (e.g. "tax statement")"""
        question_lower = question.lower()
        return any(term in question_lower for term in self.allow_terms)

    def matching_pattern(self, question: str) -> Optional[str]:
        """First advice pattern that matches, or None"""
        question_lower = question.lower()
        for pattern in self.patterns:
            if pattern.search(question_lower):
                return pattern.pattern
        return None

    def is_advice_question(self, question: str) -> bool:
        """
        Check whether a question seeks advice rather than a fact

        Statement and download questions are always factual; they would
        otherwise trip patterns such as "which ... best".
        """
        if self.is_allowed(question):
            return False
        return self.matching_pattern(question) is not None
