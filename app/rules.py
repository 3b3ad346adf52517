"""
Fixed typographic rules.

Glyph table and element/extension sets shared by the engine and the
HTML adapter. Nothing here is mutated at runtime.
"""

LEFT_DOUBLE_QUOTE = "“"
RIGHT_DOUBLE_QUOTE = "”"
LEFT_SINGLE_QUOTE = "‘"
RIGHT_SINGLE_QUOTE = "’"

PRIME = "′"
DOUBLE_PRIME = "″"
TRIPLE_PRIME = "‴"

EN_DASH = "–"
EM_DASH = "—"
ELLIPSIS = "…"
MULTIPLICATION_SIGN = "×"

HAIR_SPACE = "\u200a"
NBSP = "\u00a0"

# Marks that bind to the word after them / before them
LEADING_PUNCTUATION = "«¿¡"
TRAILING_PUNCTUATION = "!?:;.,‽»"

# Verbatim containers: their subtrees are never rewritten
IGNORED_ELEMENTS = frozenset({"script", "style", "pre", "code"})

HTML_EXTENSIONS = (".html", ".htm", ".xhtml")

# Largest HTML document or text fragment accepted over HTTP, in characters
# (bytes for uploads)
MAX_DOCUMENT_LENGTH = 1_000_000
