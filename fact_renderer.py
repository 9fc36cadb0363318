"""
Fact Renderer - Turns the best search result into an answer sentence
"""
from typing import Dict, List, Optional

from constants import (
    CONFIDENCE_THRESHOLD, GENERIC_STATEMENT_TEMPLATE, LOW_CONFIDENCE_MESSAGE,
    NO_RESULTS_MESSAGE, PLATFORM_ANSWER_TEMPLATES
)
from knowledge_base import Fact, KnowledgeBase


class FactRenderer:
    def __init__(self, knowledge_base: KnowledgeBase, confidence_threshold: float = CONFIDENCE_THRESHOLD):
        """
        Args:
            knowledge_base: Used to widen a single match into a complete answer
            confidence_threshold: Minimum top similarity for a factual answer
        """
        self.knowledge_base = knowledge_base
        self.confidence_threshold = confidence_threshold

    def render(self, question: str, results: List[Dict]) -> Dict:
        """
        Render an answer from ranked search results

        Args:
            question: Original user question
            results: Output of VectorStore.search, best first

        Returns:
            Dict with 'answer' and 'source_url' (may be None)
        """
        if not results:
            return {'answer': NO_RESULTS_MESSAGE, 'source_url': None}

        top_result = results[0]
        fact: Fact = top_result['metadata']

        if top_result['similarity'] < self.confidence_threshold:
            return {'answer': LOW_CONFIDENCE_MESSAGE, 'source_url': fact.source_url or None}

        if fact.fact_type == 'expense_ratio':
            return self._render_expense_ratio(question, fact)
        if fact.fact_type == 'statement_download':
            return self._render_statement_download(question, fact)

        return {'answer': f"{fact.scheme}: {fact.value}", 'source_url': fact.source_url or None}

    def _render_expense_ratio(self, question: str, fact: Fact) -> Dict:
        question_lower = question.lower()

        # The match only identifies the scheme unless the question names a plan
        if 'direct' not in question_lower and 'regular' not in question_lower:
            expense_ratio = self.knowledge_base.fact(fact.scheme, 'expense_ratio')
            if expense_ratio:
                return {
                    'answer': (
                        f"The expense ratio for {fact.scheme} is {expense_ratio['direct']} for Direct plan "
                        f"and {expense_ratio['regular']} for Regular plan."
                    ),
                    'source_url': expense_ratio.get('source_url') or fact.source_url or None
                }

        if fact.fact_sub_type not in ('direct', 'regular'):
            return {'answer': f"{fact.scheme}: {fact.value}", 'source_url': fact.source_url or None}

        plan = fact.fact_sub_type.capitalize()
        return {
            'answer': f"The expense ratio for {fact.scheme} {plan} plan is {fact.value}.",
            'source_url': fact.source_url or None
        }

    def _render_statement_download(self, question: str, fact: Fact) -> Dict:
        platform = self._mentioned_platform(question)
        if platform:
            info = self.knowledge_base.platform(platform)
            if info:
                return {
                    'answer': PLATFORM_ANSWER_TEMPLATES[platform].format(url=info['source_url']),
                    'source_url': info['source_url']
                }

        return {
            'answer': GENERIC_STATEMENT_TEMPLATE.format(platform=fact.platform, url=fact.source_url),
            'source_url': fact.source_url or None
        }

    @staticmethod
    def _mentioned_platform(question: str) -> Optional[str]:
        question_lower = question.lower()
        for platform in PLATFORM_ANSWER_TEMPLATES:
            if platform in question_lower:
                return platform
        return None
