"""Packaging of extraction results into the book metadata record."""

from dataclasses import dataclass
from typing import Dict

from .base import ExtractionResult, NOT_FOUND


@dataclass(frozen=True)
class BookMetadata:
    """Product metadata returned for one retailer page."""
    asin: str
    title: str
    author: str
    year_published: str
    page_length: str
    description: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'asin': self.asin,
            'title': self.title,
            'author': self.author,
            'yearPublished': self.year_published,
            'pageLength': self.page_length,
            'description': self.description,
            'url': self.url,
        }


# Record attribute -> extraction field name
RECORD_FIELDS = {
    'asin': 'asin',
    'title': 'title',
    'author': 'author',
    'year_published': 'yearPublished',
    'page_length': 'pageLength',
    'description': 'description',
}


def assemble(result: ExtractionResult, source_url: str, sentinel: str = NOT_FOUND) -> BookMetadata:
    """Map extracted values onto a BookMetadata, using the sentinel for absent or empty fields."""
    values = {
        attribute: (result.get(field_name) or sentinel)
        for attribute, field_name in RECORD_FIELDS.items()
    }
    return BookMetadata(url=source_url, **values)

