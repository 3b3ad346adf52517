import logging
from typing import Optional

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from pydantic import ValidationError

from .models import (
    HealthResponse,
    TextRequest,
    TextResponse,
    TypesetOptions,
    TypesetRequest,
    TypesetResponse,
)
from .normalize import typeset_document, typeset_html_bytes
from .rules import HTML_EXTENSIONS, MAX_DOCUMENT_LENGTH
from .typeset import transform

logger = logging.getLogger(__name__)

app = FastAPI(
    title="html-typeset",
    description="Smart quotes, dashes and spacing for HTML text",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/typeset", response_model=TypesetResponse)
def typeset(req: TypesetRequest):
    return typeset_document(req.html, req.options)

@app.post("/typeset/text", response_model=TextResponse)
def typeset_text(req: TextRequest):
    return {"text": transform(req.text, req.options)}

@app.post("/typeset/file", response_model=TypesetResponse)
async def typeset_file(
    file: UploadFile = File(...),
    options: Optional[str] = Form(default=None),
):
    if not file.filename.lower().endswith(HTML_EXTENSIONS):
        raise HTTPException(status_code=422, detail="Only HTML files are supported")

    try:
        opts = TypesetOptions.model_validate_json(options) if options else TypesetOptions()
    except ValidationError as e:
        raise HTTPException(status_code=422, detail="Invalid options") from e

    raw = await file.read(MAX_DOCUMENT_LENGTH + 1)
    if len(raw) > MAX_DOCUMENT_LENGTH:
        raise HTTPException(status_code=413, detail="File too large")

    logger.debug("typeset upload %s (%d bytes)", file.filename, len(raw))
    return typeset_html_bytes(raw, opts)
