"""
Walk parsed HTML and typeset its text nodes in place.

Text under a verbatim container (see rules.IGNORED_ELEMENTS) is not
typeset, nor are comments, doctypes and other declarations. What survives
is the text, not the source bytes: the parser decodes character
references and void tags are written back as <br/>.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .models import TypesetOptions
from .rules import IGNORED_ELEMENTS
from .typeset import transform

logger = logging.getLogger(__name__)


def _is_verbatim(node: NavigableString, ignored: frozenset) -> bool:
    current = node.parent
    while current is not None:
        if isinstance(current, Tag) and current.name in ignored:
            return True
        current = current.parent
    return False


def typeset_html(
    html: str,
    options: Optional[TypesetOptions] = None,
    ignored: Iterable[str] = IGNORED_ELEMENTS,
) -> Tuple[str, Dict[str, int]]:
    """
    Typeset every eligible text node of an HTML document or fragment.

    Returns the serialized markup and counts of text nodes seen,
    changed, and skipped as verbatim.
    """
    options = options or TypesetOptions()
    ignored = frozenset(name.lower() for name in ignored)

    soup = BeautifulSoup(html, "html.parser")

    stats = {"text_nodes": 0, "changed": 0, "skipped": 0}

    # Collect first: replace_with() detaches nodes mid-iteration otherwise
    text_nodes = [
        node for node in soup.descendants
        if isinstance(node, NavigableString) and not isinstance(node, PreformattedString)
    ]

    for node in text_nodes:
        stats["text_nodes"] += 1

        if _is_verbatim(node, ignored):
            stats["skipped"] += 1
            continue

        original = str(node)
        updated = transform(original, options)
        if updated != original:
            node.replace_with(updated)
            stats["changed"] += 1

    logger.debug(
        "typeset %d text nodes (changed=%d, skipped=%d)",
        stats["text_nodes"], stats["changed"], stats["skipped"],
    )

    return str(soup), stats
