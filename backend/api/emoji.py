"""
Book emoji generator.

Asks a Claude model for two emoji that represent a book's plot. Replies
that do not contain two emoji fall back to a random stock pair, and any
client failure returns the default pair.
"""

import logging
import random
import re
from typing import List, Optional

from anthropic import Anthropic

from api.config import settings

logger = logging.getLogger(__name__)

DEFAULT_EMOJIS = '📚📖'
FALLBACK_EMOJIS = ['📚🔍', '📖✨', '📘🧠', '📕❤️', '📙🌟', '📗🌱']

# Pictographs, symbols and dingbats; variation selectors are not counted
EMOJI_PATTERN = re.compile(
    '['
    '\U0001F000-\U0001FAFF'
    '\u2600-\u27BF'
    '\u2B00-\u2BFF'
    '\u2300-\u23FF'
    '\u2190-\u21FF'  # arrows
    '\u25A0-\u25FF'  # geometric shapes (play button, squares)
    '\u2934-\u2935'
    '\u203C\u2049'
    '\u2122\u2139'
    '\u00A9\u00AE'
    ']'
)

PROMPT_TEMPLATE = """Based on this book information, generate exactly two emojis that playfully represent the book's unique plot:

{book_info}

Return exactly two emojis with no explanation or other text. Try to be more creative than just a rocket ship for books about space."""


def build_prompt(description: str, title: Optional[str] = None, author: Optional[str] = None) -> str:
    lines = []
    if title:
        lines.append(f"Title: {title}")
    if author:
        lines.append(f"Author: {author}")
    lines.append(f"Description: {description}")
    return PROMPT_TEMPLATE.format(book_info='\n'.join(lines))


def find_emojis(text: str) -> List[str]:
    """All emoji characters in ``text``, in order."""
    return EMOJI_PATTERN.findall(text or '')


def _reply_text(response) -> str:
    return ''.join(getattr(block, 'text', '') for block in response.content)


def generate_book_emojis(
    description: str,
    title: Optional[str] = None,
    author: Optional[str] = None,
    client=None,
) -> str:
    """
    Generate two emoji for a book.

    Args:
        description: Book description (required by callers)
        title: Optional book title
        author: Optional author name
        client: Anthropic client; built from settings when omitted

    Returns:
        Two emoji as one string
    """
    if client is None:
        if not settings.anthropic_api_key:
            logger.warning("ANTHROPIC_API_KEY not set, returning default emojis")
            return DEFAULT_EMOJIS
        client = Anthropic(api_key=settings.anthropic_api_key)

    try:
        response = client.messages.create(
            model=settings.emoji_model,
            max_tokens=10,
            messages=[{"role": "user", "content": build_prompt(description, title, author)}],
        )
        matches = find_emojis(_reply_text(response).strip())
    except Exception as e:
        logger.error(f"Error generating emojis: {e}")
        return DEFAULT_EMOJIS

    if len(matches) >= 2:
        return ''.join(matches[:2])

    logger.info(f"Model returned {len(matches)} emoji, using a fallback pair")
    return random.choice(FALLBACK_EMOJIS)
