"""
Knowledge Base - Scheme facts, statement download platforms and scheme aliases
Loaded once at startup and passed to the components that read it.
"""
import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from constants import DEFAULT_SCHEME_ALIASES, FACT_TYPES


@dataclass(frozen=True)
class Fact:
    """One embedded piece of information about a scheme or platform"""
    scheme: Optional[str]
    fact_type: str
    value: str
    source_url: str
    text: str
    fact_sub_type: Optional[str] = None
    platform: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot record (camelCase keys, unset optional keys omitted)"""
        record = {
            'scheme': self.scheme,
            'factType': self.fact_type,
            'value': self.value,
            'sourceUrl': self.source_url,
            'text': self.text
        }
        if self.fact_sub_type is not None:
            record['factSubType'] = self.fact_sub_type
        if self.platform is not None:
            record['platform'] = self.platform
        if self.description is not None:
            record['description'] = self.description
        return record

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> 'Fact':
        description = record.get('description')
        value = record.get('value')
        if value is None:
            # Statement download records written without a value field
            value = description or ''
        return cls(
            scheme=record.get('scheme'),
            fact_type=record.get('factType', ''),
            value=value,
            source_url=record.get('sourceUrl') or '',
            text=record.get('text', ''),
            fact_sub_type=record.get('factSubType'),
            platform=record.get('platform'),
            description=description
        )


def _freeze(value: Any) -> Any:
    """Read-only view of nested JSON data"""
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


class KnowledgeBase:
    """Immutable scheme -> fact type -> payload table"""

    def __init__(self, schemes: Mapping[str, Mapping[str, Any]],
                 statement_download: Mapping[str, Mapping[str, Any]],
                 aliases: Optional[Mapping[str, str]] = None):
        """
        Args:
            schemes: Scheme name -> fact type -> payload
            statement_download: Platform name -> {description, source_url}
            aliases: Lowercase phrase -> scheme name (defaults to DEFAULT_SCHEME_ALIASES)
        """
        self._schemes = _freeze(dict(schemes))
        self._statement_download = _freeze(dict(statement_download))
        self._aliases = _freeze(dict(DEFAULT_SCHEME_ALIASES if aliases is None else aliases))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'KnowledgeBase':
        return cls(
            schemes=data.get('schemes', {}),
            statement_download=data.get('statement_download', {}),
            aliases=data.get('aliases')
        )

    @classmethod
    def from_file(cls, path) -> 'KnowledgeBase':
        with open(Path(path), 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    @property
    def schemes(self) -> Mapping[str, Mapping[str, Any]]:
        return self._schemes

    @property
    def statement_download(self) -> Mapping[str, Mapping[str, Any]]:
        return self._statement_download

    @property
    def aliases(self) -> Mapping[str, str]:
        return self._aliases

    @property
    def scheme_names(self) -> List[str]:
        return list(self._schemes.keys())

    @property
    def platform_names(self) -> List[str]:
        return list(self._statement_download.keys())

    def scheme(self, name: Optional[str]) -> Optional[Mapping[str, Any]]:
        if name is None:
            return None
        return self._schemes.get(name)

    def fact(self, scheme_name: Optional[str], fact_type: str) -> Optional[Mapping[str, Any]]:
        scheme = self.scheme(scheme_name)
        if scheme is None:
            return None
        return scheme.get(fact_type)

    def platform(self, name: str) -> Optional[Mapping[str, Any]]:
        return self._statement_download.get(name)

    def iter_facts(self) -> List[Fact]:
        """
        Flatten the knowledge base into embeddable facts, in file order.
        Expense ratios produce a direct and a regular fact.
        """
        facts = []

        for scheme_name, scheme_data in self._schemes.items():
            for fact_type, fact_data in scheme_data.items():
                if fact_type == 'expense_ratio':
                    for plan in ('direct', 'regular'):
                        value = fact_data[plan]
                        facts.append(Fact(
                            scheme=scheme_name,
                            fact_type='expense_ratio',
                            fact_sub_type=plan,
                            value=value,
                            source_url=fact_data['source_url'],
                            text=f"{scheme_name} expense ratio {plan} plan is {value}"
                        ))
                else:
                    if fact_type not in FACT_TYPES:
                        raise ValueError(f"Unknown fact type '{fact_type}' for scheme '{scheme_name}'")
                    value = fact_data['value']
                    facts.append(Fact(
                        scheme=scheme_name,
                        fact_type=fact_type,
                        value=value,
                        source_url=fact_data['source_url'],
                        text=f"{scheme_name} {fact_type.replace('_', ' ')} is {value}"
                    ))

        for platform, info in self._statement_download.items():
            facts.append(Fact(
                scheme=None,
                fact_type='statement_download',
                platform=platform,
                description=info['description'],
                value=info['description'],
                source_url=info['source_url'],
                text=f"How to download statements from {platform}: {info['description']}"
            ))

        return facts
