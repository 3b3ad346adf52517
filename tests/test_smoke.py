import hashlib
import json

from fastapi.testclient import TestClient
from app.main import app
from app.rules import MAX_DOCUMENT_LENGTH

client = TestClient(app)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_typeset_html():
    r = client.post("/typeset", json={"html": '<p>"Hello," said the fox.</p>'})
    assert r.status_code == 200

    data = r.json()
    assert data["html"] == "<p>“Hello,” said the fox.</p>"
    assert data["sha256"] == hashlib.sha256(data["html"].encode("utf-8")).hexdigest()
    assert data["report"]["changed"] == 1
    assert data["report"]["options"]["punctuation"] == {"em-dash-replacement": "double"}
    assert data["report"]["encoding"] is None

def test_typeset_html_with_options():
    payload = {
        "html": "<p>a---b and c--d</p>",
        "options": {"punctuation": {"em-dash-replacement": "triple"}, "spaces": False},
    }
    r = client.post("/typeset", json=payload)
    assert r.status_code == 200
    assert r.json()["html"] == "<p>a—b and c–d</p>"
    assert r.json()["report"]["options"]["spaces"] is None

def test_quotes_disabled():
    r = client.post("/typeset", json={"html": '<p>"Hi"</p>', "options": {"quotes": False}})
    assert r.status_code == 200
    assert r.json()["html"] == '<p>"Hi"</p>'

def test_invalid_option_value():
    payload = {"html": "<p>x</p>", "options": {"punctuation": {"em-dash-replacement": "quadruple"}}}
    r = client.post("/typeset", json=payload)
    assert r.status_code == 422

def test_typeset_text():
    r = client.post("/typeset/text", json={"text": "Wait for it..."})
    assert r.status_code == 200
    assert r.json() == {"text": "Wait for it…"}

def test_upload_latin1():
    # Include a Latin-1 character to force non-ASCII handling
    raw = '<p>"Montréal" -- café</p>'.encode("latin-1")

    files = {"file": ("page.html", raw, "text/html")}
    r = client.post("/typeset/file", files=files)
    assert r.status_code == 200

    data = r.json()
    assert "“Montréal”\u200a—\u200acafé" in data["html"]
    assert isinstance(data["report"]["encoding"]["decode_used"], str)

def test_upload_strips_utf8_bom():
    raw = b"\xef\xbb\xbf" + "<p>it's</p>".encode("utf-8")

    files = {"file": ("page.htm", raw, "text/html")}
    r = client.post("/typeset/file", files=files)
    assert r.status_code == 200
    assert r.json()["html"] == "<p>it’s</p>"
    assert r.json()["report"]["encoding"]["decode_used"] == "utf-8-sig"

def test_upload_with_options():
    raw = "<p>a -- b</p>".encode("utf-8")

    files = {"file": ("page.html", raw, "text/html")}
    r = client.post("/typeset/file", files=files, data={"options": json.dumps({"spaces": False})})
    assert r.status_code == 200
    assert r.json()["html"] == "<p>a — b</p>"

def test_upload_with_bad_options():
    files = {"file": ("page.html", b"<p>x</p>", "text/html")}
    r = client.post("/typeset/file", files=files, data={"options": "{not json"})
    assert r.status_code == 422
    assert r.json()["detail"] == "Invalid options"

def test_upload_rejects_non_html():
    files = {"file": ("notes.txt", b"hello", "text/plain")}
    r = client.post("/typeset/file", files=files)
    assert r.status_code == 422
    assert r.json()["detail"] == "Only HTML files are supported"

def test_oversized_html_is_rejected():
    r = client.post("/typeset", json={"html": "a" * (MAX_DOCUMENT_LENGTH + 1)})
    assert r.status_code == 422

def test_oversized_text_is_rejected():
    r = client.post("/typeset/text", json={"text": "a" * (MAX_DOCUMENT_LENGTH + 1)})
    assert r.status_code == 422

def test_upload_too_large():
    files = {"file": ("big.html", b"a" * (MAX_DOCUMENT_LENGTH + 1), "text/html")}
    r = client.post("/typeset/file", files=files)
    assert r.status_code == 413
    assert r.json()["detail"] == "File too large"
