"""
Selector-chain extraction.

A field is resolved by trying its rules in declaration order against a
parsed page. The first rule whose selector matches and whose (optionally
post-processed) text is non-empty wins; when every rule fails the field's
sentinel is returned. Absence is never an exception.
"""

from types import MappingProxyType
from typing import Iterable, Optional, Sequence

from bs4 import BeautifulSoup

from .base import ExtractionField, ExtractionResult, ScrapeContext, SelectorRule
from .utils.extractors import node_attr, node_text


def text_rule(selector: str, postprocess=None, description: str = '') -> SelectorRule:
    """Rule reading the text of the first node matching ``selector``."""
    return SelectorRule(selector, node_text, postprocess, description or selector)


def attr_rule(selector: str, attribute: str, postprocess=None, description: str = '') -> SelectorRule:
    """Rule reading ``attribute`` of the first node matching ``selector``."""
    return SelectorRule(
        selector, node_attr(attribute), postprocess,
        description or f"{selector}[{attribute}]",
    )


def scan_rule(selector: str, keywords: Sequence[str], postprocess, description: str = '') -> SelectorRule:
    """
    Rule scanning every node matching ``selector``.

    Nodes whose text contains one of ``keywords`` are refined with
    ``postprocess`` in document order; the first refined value wins. The
    combined postprocess step is folded into the extractor so that a node
    mentioning the keyword but lacking the pattern does not hide a later one.
    """
    keywords = tuple(keywords)

    def extract(nodes: Sequence) -> str:
        for node in nodes:
            text = node_text([node])
            if not any(keyword in text for keyword in keywords):
                continue
            value = postprocess(text)
            if value:
                return value
        return ''

    return SelectorRule(selector, extract, None, description or f"{selector} ~ {'/'.join(keywords)}")


def _apply_rule(document: BeautifulSoup, rule: SelectorRule) -> str:
    nodes = document.select(rule.selector)
    if not nodes:
        return ''
    raw = (rule.extract(nodes) or '').strip()
    if not raw:
        return ''
    if rule.postprocess is None:
        return raw
    return (rule.postprocess(raw) or '').strip()


def extract_field(
    document: BeautifulSoup,
    field: ExtractionField,
    context: Optional[ScrapeContext] = None,
) -> str:
    """
    Resolve one field against a parsed document.

    Args:
        document: Parsed page (BeautifulSoup)
        field: Field descriptor with its ordered rule chain
        context: Optional request context receiving field events

    Returns:
        The first non-empty rule result, or ``field.sentinel``
    """
    if document is None:
        raise TypeError(f"Cannot extract '{field.name}' without a document")

    for index, rule in enumerate(field.rules):
        value = _apply_rule(document, rule)
        if value:
            if context:
                context.debug('field_resolved', field=field.name, rule=index, selector=rule.description)
            return value

    if context:
        context.debug('field_missing', field=field.name, rules=len(field.rules))
    return field.sentinel


def extract_all(
    document: BeautifulSoup,
    fields: Iterable[ExtractionField],
    context: Optional[ScrapeContext] = None,
) -> ExtractionResult:
    """
    Resolve every field independently and return a read-only mapping.

    Raises:
        ValueError: If two fields share a name
    """
    values = {}
    for field in fields:
        if field.name in values:
            raise ValueError(f"Duplicate extraction field: {field.name}")
        values[field.name] = extract_field(document, field, context)
    return MappingProxyType(values)


def merge_results(*results: ExtractionResult) -> ExtractionResult:
    """Combine results of disjoint field sets into one read-only mapping."""
    merged = {}
    for result in results:
        merged.update(result)
    return MappingProxyType(merged)

