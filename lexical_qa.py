"""
Lexical Q&A - Offline answers without embeddings
Finds the scheme through the alias table and the fact type through keywords,
then answers straight from the knowledge base.
"""
from typing import Dict, Optional

from advice_filter import AdviceFilter
from constants import (
    EMPTY_QUESTION_MESSAGE, PLATFORM_ANSWER_TEMPLATES, PLATFORM_DISPLAY_NAMES,
    REFUSAL_MESSAGE, UNKNOWN_FACT_MESSAGE
)
from knowledge_base import KnowledgeBase

# Checked in order; first hit wins
FACT_TYPE_KEYWORDS = [
    ('expense_ratio', ['expense ratio', 'expense']),
    ('exit_load', ['exit load']),
    ('minimum_sip', ['minimum sip', 'sip minimum']),
    ('minimum_lump_sum', ['minimum lump', 'lump sum', 'minimum investment', 'minimum amount']),
    ('lock_in', ['lock-in', 'lock in', 'lockin', 'lock']),
    ('riskometer', ['riskometer', 'risk']),
    ('benchmark', ['benchmark']),
    ('statement_download', ['statement', 'download', 'capital gain', 'account statement', 'tax statement'])
]


class LexicalQA:
    def __init__(self, knowledge_base: KnowledgeBase, advice_filter: Optional[AdviceFilter] = None):
        self.knowledge_base = knowledge_base
        self.advice_filter = advice_filter or AdviceFilter()

    def extract_scheme_name(self, question: str) -> Optional[str]:
        """Alias phrases first, then full scheme names"""
        question_lower = question.lower()
        for alias, scheme_name in self.knowledge_base.aliases.items():
            if alias in question_lower:
                return scheme_name
        for scheme_name in self.knowledge_base.scheme_names:
            if scheme_name.lower() in question_lower:
                return scheme_name
        return None

    def extract_fact_type(self, question: str) -> Optional[str]:
        question_lower = question.lower()
        for fact_type, keywords in FACT_TYPE_KEYWORDS:
            if any(keyword in question_lower for keyword in keywords):
                return fact_type
        return None

    def answer(self, question: str) -> Dict:
        """
        Answer a question from the knowledge base alone

        Returns:
            Dict with 'answer' and 'source_url'
        """
        if not question or not question.strip():
            return {'answer': EMPTY_QUESTION_MESSAGE, 'source_url': None}

        if self.advice_filter.is_advice_question(question):
            return {'answer': REFUSAL_MESSAGE, 'source_url': None}

        fact_type = self.extract_fact_type(question)
        if fact_type == 'statement_download':
            return self._answer_statement_download(question)

        scheme_name = self.extract_scheme_name(question)
        if not scheme_name:
            return {'answer': self._unknown_scheme_message(), 'source_url': None}

        if not fact_type:
            return {'answer': UNKNOWN_FACT_MESSAGE, 'source_url': None}

        fact = self.knowledge_base.fact(scheme_name, fact_type)
        if not fact:
            return {
                'answer': f"I don't have information about {fact_type.replace('_', ' ')} for {scheme_name}.",
                'source_url': None
            }

        if fact_type == 'expense_ratio':
            answer = (
                f"The expense ratio for {scheme_name} is {fact['direct']} for Direct plan "
                f"and {fact['regular']} for Regular plan."
            )
        else:
            answer = f"{scheme_name}: {fact['value']}"

        return {'answer': answer, 'source_url': fact.get('source_url')}

    def _answer_statement_download(self, question: str) -> Dict:
        question_lower = question.lower()
        platforms = self.knowledge_base.statement_download

        for platform, template in PLATFORM_ANSWER_TEMPLATES.items():
            if platform in question_lower and platform in platforms:
                url = platforms[platform]['source_url']
                return {'answer': template.format(url=url), 'source_url': url}

        if not platforms:
            return {'answer': UNKNOWN_FACT_MESSAGE, 'source_url': None}

        options = [
            f"from {PLATFORM_DISPLAY_NAMES.get(platform, platform)} at {info['source_url']}"
            for platform, info in platforms.items()
        ]
        first_url = next(iter(platforms.values()))['source_url']
        return {
            'answer': f"You can download statements {' or '.join(options)}",
            'source_url': first_url
        }

    def _unknown_scheme_message(self) -> str:
        names = self.knowledge_base.scheme_names
        if not names:
            return "I don't have information about any schemes yet."
        return (
            f"I can only answer questions about the following schemes: {', '.join(names)}. "
            "Please specify which scheme you're asking about."
        )
