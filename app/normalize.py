"""
Document-level typesetting.

Responsibilities:
- encoding detection + decoding of uploaded HTML
- running the HTML adapter
- building the response envelope (output hash + report)
"""

from __future__ import annotations

import hashlib
from typing import Any, Dict, Optional

from charset_normalizer import from_bytes

from .markup import typeset_html
from .models import TypesetOptions


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def decode_html_bytes(raw: bytes) -> tuple[str, Dict[str, Any]]:
    """
    Decode uploaded HTML bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is stripped (utf-8-sig) rather than kept as text.
    - If decode fails, try UTF-8, then fall back to UTF-8 with
      replacement characters and report it.
    """
    detected = None

    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8")):
        decode_used = "utf-8-sig"

    decode_fallback = False

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8")
            decode_used = "utf-8"
        except UnicodeDecodeError:
            # Last resort: keep going with replacement characters
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
        decode_fallback = True

    report = {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
    }
    return text, report


def typeset_document(html: str, options: Optional[TypesetOptions] = None) -> Dict[str, Any]:
    """
    Typeset an HTML string.
    Returns a dict matching the API's response envelope.
    """
    options = options or TypesetOptions()
    out, stats = typeset_html(html, options)

    return {
        "html": out,
        "sha256": _sha256_hex(out.encode("utf-8")),
        "report": {
            **stats,
            "options": options,
            "encoding": None,
        },
    }


def typeset_html_bytes(raw: bytes, options: Optional[TypesetOptions] = None) -> Dict[str, Any]:
    text, enc_report = decode_html_bytes(raw)

    result = typeset_document(text, options)
    result["report"]["encoding"] = enc_report
    return result
