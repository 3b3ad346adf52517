"""
Typographic rewriting of plain-text fragments.

Three stages, always applied in this order:
- quotes: straight quotes -> curly quotes, apostrophes and primes
- punctuation: numeric-range dashes, hyphen sequences, ellipsis, nbsp
- spaces: hair spaces around en/em dashes and operators

Each stage is an ordered list of regex substitutions. Order matters:
later rules only see what earlier rules left unclaimed.

Run time is linear in the fragment length. Rules that start at an
opening quote and look ahead for its partner go through
_sub_from_openers(), which never rescans the same stretch twice, and the
backwards-apostrophe lookahead is a single right-to-left scan.
"""

from __future__ import annotations

import re
from typing import Optional

from .models import PunctuationOptions, SpacesOptions, TypesetOptions
from .rules import (
    DOUBLE_PRIME,
    ELLIPSIS,
    EM_DASH,
    EN_DASH,
    HAIR_SPACE,
    LEADING_PUNCTUATION,
    LEFT_DOUBLE_QUOTE,
    LEFT_SINGLE_QUOTE,
    MULTIPLICATION_SIGN,
    NBSP,
    PRIME,
    RIGHT_DOUBLE_QUOTE,
    RIGHT_SINGLE_QUOTE,
    TRAILING_PUNCTUATION,
    TRIPLE_PRIME,
)

_TRAILING = re.escape(TRAILING_PUNCTUATION)

# Any letter, accented ones included
_LETTER = r"[^\W\d_]"

# --- quotes ---

# Opening "
_OPENING_DOUBLE = re.compile(r'(\W|^)"([^\s' + _TRAILING + r'])')

# Closing " paired with the nearest opener
_CLOSING_DOUBLE = re.compile(
    "(" + LEFT_DOUBLE_QUOTE + r'[^"]*)"'
    r'([^"]*$|[^' + LEFT_DOUBLE_QUOTE + r'"]*' + LEFT_DOUBLE_QUOTE + ")"
)

# Remaining " at the end of a word
_TRAILING_DOUBLE = re.compile(r'([^0-9])"')

# Opening '
_OPENING_SINGLE = re.compile(r"(\W|^)'(\S)")

# Contraction or possessive: don't, fox's, café's
_APOSTROPHE = re.compile("(" + _LETTER + ")'(" + _LETTER + ")")

# Closing '
_CLOSING_SINGLE = re.compile(
    "((" + LEFT_SINGLE_QUOTE + "[^']*)|" + _LETTER + ")'([^0-9]|$)"
)
_CLOSING_SINGLE_STARTS = re.compile(LEFT_SINGLE_QUOTE + "|" + _LETTER + "(?=')")

# Clipped years: '93
_CLIPPED_YEAR = re.compile(
    LEFT_SINGLE_QUOTE + "([0-9]{2}[^" + RIGHT_SINGLE_QUOTE + "]*)"
    "(" + LEFT_SINGLE_QUOTE + "([^0-9]|$)|$|" + RIGHT_SINGLE_QUOTE + _LETTER + ")"
)
_CLIPPED_YEAR_PREFIX = re.compile(LEFT_SINGLE_QUOTE + "[0-9]{2}")

_PRIME_RULES: list[tuple[str, str]] = [
    ("'''", TRIPLE_PRIME),
    ('"', DOUBLE_PRIME),
    ("''", DOUBLE_PRIME),
    ("'", PRIME),
]

# Backslash keeps the author's straight quote
_ESCAPES: list[tuple[str, str]] = [
    ("\\" + LEFT_DOUBLE_QUOTE, '"'),
    ("\\" + RIGHT_DOUBLE_QUOTE, '"'),
    ("\\" + DOUBLE_PRIME, '"'),
    ("\\" + RIGHT_SINGLE_QUOTE, "'"),
    ("\\" + LEFT_SINGLE_QUOTE, "'"),
    ("\\" + PRIME, "'"),
]

# --- punctuation ---

# (?<!\d): only try from the start of a digit run
_RANGE_DASHES = [
    re.compile(r"(?<!\d)(\d+\s?)-(\s?\d+)"),
    re.compile(r"(?<!\d)(\d+\s?)(?:&ndash;|&#8211;)(\s?\d+)"),
    re.compile(r"(?<!\d)(\d+\s?)(?:&mdash;|&#8212;|" + EM_DASH + r")(\s?\d+)"),
]

_NBSP_START = re.compile(r"([" + re.escape(LEADING_PUNCTUATION) + r"]) ")
_NBSP_END = re.compile(r" ([" + _TRAILING + r"])")

# --- spaces ---

_EN_DASH_RANGE = re.compile(r"(?<!\d)(\d+)\s?" + EN_DASH + r"\s?(\d+)")


def _is_word(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _sub_from_openers(
    pattern: re.Pattern[str],
    repl: str,
    text: str,
    opener: str,
    stop: str,
    starts: Optional[re.Pattern[str]] = None,
    prefix: Optional[re.Pattern[str]] = None,
) -> str:
    """
    pattern.sub(repl, text) for a rule whose matches begin at `opener`
    (or at a position found by `starts`).

    If the attempt at an opener fails, every later opener before the next
    `stop` character would fail the same way, so those are skipped. With
    `prefix`, that only holds once the opener's prefix has matched.
    """
    starts = starts or re.compile(re.escape(opener))
    out = []
    pos = 0
    blocked_until = -1

    found = starts.search(text, pos)
    while found is not None:
        i = found.start()
        at_opener = text[i] == opener
        if at_opener and i < blocked_until:
            found = starts.search(text, i + 1)
            continue

        match = pattern.match(text, i)
        if match is not None:
            out.append(text[pos:i])
            out.append(match.expand(repl))
            pos = match.end()
            found = starts.search(text, pos)
            continue

        if at_opener and (prefix is None or prefix.match(text, i)):
            end = text.find(stop, i + 1)
            blocked_until = end if end != -1 else len(text)
        found = starts.search(text, i + 1)

    out.append(text[pos:])
    return "".join(out)


def _backwards_apostrophes(text: str) -> str:
    """
    Turn an opening single quote into an apostrophe when what follows
    does not read as a quotation ('Tis, 'em).

    elides[c] says whether the text from c on reads as an apostrophe
    context: no further single quote, a quote right after a non-word
    character and before a word, or a closing quote glued to the next
    word followed by such a context.
    """
    n = len(text)
    quotes = (LEFT_SINGLE_QUOTE, RIGHT_SINGLE_QUOTE)

    def word(k: int) -> bool:
        return k < n and _is_word(text[k])

    elides = [False] * (n + 1)
    elides[n] = True
    next_quote = n
    next_close = n
    for c in range(n - 1, -1, -1):
        if text[c] in quotes:
            next_quote = c
            if text[c] == RIGHT_SINGLE_QUOTE:
                next_close = c

        r = next_quote
        if r == n:
            elides[c] = True
        elif r > c and not word(r - 1) and word(r + 1):
            elides[c] = True
        elif r + 1 < n and text[r + 1] in quotes and word(r + 2):
            elides[c] = True
        else:
            q = next_close
            elides[c] = q < n and word(q + 1) and elides[q + 1]

    out = []
    for i, ch in enumerate(text):
        if ch == LEFT_SINGLE_QUOTE and (i == 0 or not word(i - 1)) and elides[i + 1]:
            ch = RIGHT_SINGLE_QUOTE
        out.append(ch)
    return "".join(out)


def replace_quotes(text: str) -> str:
    text = text.replace("&#39;", "'")
    text = text.replace("&quot;", '"')

    if '"' in text:
        text = _OPENING_DOUBLE.sub(r"\1" + LEFT_DOUBLE_QUOTE + r"\2", text)
        text = _sub_from_openers(
            _CLOSING_DOUBLE, r"\1" + RIGHT_DOUBLE_QUOTE + r"\2", text,
            opener=LEFT_DOUBLE_QUOTE, stop='"',
        )
        text = _TRAILING_DOUBLE.sub(r"\1" + RIGHT_DOUBLE_QUOTE, text)

    if "'" in text:
        text = _OPENING_SINGLE.sub(r"\1" + LEFT_SINGLE_QUOTE + r"\2", text)
        text = _APOSTROPHE.sub(r"\1" + RIGHT_SINGLE_QUOTE + r"\2", text)
        text = _sub_from_openers(
            _CLOSING_SINGLE, r"\1" + RIGHT_SINGLE_QUOTE + r"\3", text,
            opener=LEFT_SINGLE_QUOTE, stop="'", starts=_CLOSING_SINGLE_STARTS,
        )

    if LEFT_SINGLE_QUOTE in text:
        text = _sub_from_openers(
            _CLIPPED_YEAR, RIGHT_SINGLE_QUOTE + r"\1\2", text,
            opener=LEFT_SINGLE_QUOTE, stop=RIGHT_SINGLE_QUOTE, prefix=_CLIPPED_YEAR_PREFIX,
        )
        text = _backwards_apostrophes(text)

    # Primes only catch what no quote rule claimed
    for old, new in _PRIME_RULES:
        text = text.replace(old, new)

    if "\\" in text:
        for old, new in _ESCAPES:
            text = text.replace(old, new)

    return text


def replace_punctuation(text: str, options: Optional[PunctuationOptions] = None) -> str:
    """
    Dashes, ellipsis and non-breaking spaces.

    Numeric ranges are unified to an en dash before hyphen sequences are
    looked at, so "1880--1912" keeps the em dash its author typed. A
    second pass then reads that em dash as a mistyped range dash.
    """
    options = options or PunctuationOptions()

    for pattern in _RANGE_DASHES:
        text = pattern.sub(r"\1" + EN_DASH + r"\2", text)

    if options.em_dash_replacement == "triple":
        text = text.replace("---", EM_DASH)
        text = text.replace("--", EN_DASH)
    else:
        text = text.replace("--", EM_DASH)

    text = text.replace("...", ELLIPSIS)

    text = _NBSP_START.sub(r"\1" + NBSP, text)
    text = _NBSP_END.sub(NBSP + r"\1", text)

    return text


def replace_spaces(text: str, options: Optional[SpacesOptions] = None) -> str:
    options = options or SpacesOptions()

    if options.en_dash_spacing == "closed":
        text = _EN_DASH_RANGE.sub(r"\1" + EN_DASH + r"\2", text)
    else:
        text = _EN_DASH_RANGE.sub(r"\1" + HAIR_SPACE + EN_DASH + HAIR_SPACE + r"\2", text)

    text = text.replace(f" {EM_DASH} ", f"{HAIR_SPACE}{EM_DASH}{HAIR_SPACE}")

    text = text.replace(f" {MULTIPLICATION_SIGN} ", f"{HAIR_SPACE}{MULTIPLICATION_SIGN}{HAIR_SPACE}")
    text = text.replace(" / ", f"{HAIR_SPACE}/{HAIR_SPACE}")

    return text


def transform(text: str, options: Optional[TypesetOptions] = None) -> str:
    """
    Run every enabled stage over one text fragment.

    Total and deterministic: any string in, a string out. The empty
    string comes back unchanged.
    """
    if not text:
        return text

    options = options or TypesetOptions()

    if options.quotes is not None:
        text = replace_quotes(text)
    if options.punctuation is not None:
        text = replace_punctuation(text, options.punctuation)
    if options.spaces is not None:
        text = replace_spaces(text, options.spaces)

    return text
