"""FastAPI service for weekly report comparison.

POST /api/compare takes both revisions as base64 and returns the annotated
(or delta) document, either raw or inside a JSON envelope with the summary.
"""

import base64
import binascii
import logging
import os
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .config import CompareOptions, Metadata
from .errors import DocumentFormatError, InputError, InternalError, ReportDeltaError
from .report_compare import compare_reports

logger = logging.getLogger(__name__)

RESPONSE_KINDS = ("json", "file")

app = FastAPI(title="Report Delta API", version=__version__)


# ============================================================================
# REQUEST MODELS
# ============================================================================

class CompareRequestOptions(BaseModel):
    """Optional tuning of one comparison; omitted fields keep their defaults."""
    model_config = ConfigDict(populate_by_name=True)

    segmentation: Optional[str] = None
    match_threshold: Optional[float] = Field(None, alias="matchThreshold")
    body_similarity_threshold: Optional[float] = Field(None, alias="bodySimilarityThreshold")
    token_change_threshold: Optional[float] = Field(None, alias="tokenChangeThreshold")
    include_removed: Optional[bool] = Field(None, alias="includeRemoved")
    numeric_deltas: Optional[bool] = Field(None, alias="numericDeltas")
    significant_only: Optional[bool] = Field(None, alias="significantOnly")
    include_highlights: Optional[bool] = Field(None, alias="includeHighlights")
    max_highlights: Optional[int] = Field(None, alias="maxHighlights")
    author: Optional[str] = None
    initials: Optional[str] = None
    mode: Optional[str] = None
    output_format: Optional[str] = Field(None, alias="outputFormat")
    response: str = "json"

    def to_compare_options(self) -> CompareOptions:
        return CompareOptions.from_dict(self.model_dump(exclude_none=True, exclude={"response"}))


class CompareRequest(BaseModel):
    """Request body of POST /api/compare"""
    model_config = ConfigDict(populate_by_name=True)

    baseline_docx_base64: Optional[str] = Field(None, alias="baselineDocxBase64")
    current_docx_base64: Optional[str] = Field(None, alias="currentDocxBase64")
    options: Optional[CompareRequestOptions] = None
    metadata: Optional[Dict[str, Any]] = None


# ============================================================================
# HELPERS
# ============================================================================

def decode_document(value: str, field_name: str) -> bytes:
    """Decode a base64 document, tolerating a data URL prefix and MIME line breaks."""
    data = value.strip()
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    data = "".join(data.split())
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputError(f"{field_name} is not valid base64.") from e


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _error(400, f"Invalid request: {exc.errors()}")


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    logger.warning(f"Rejected request: {exc}")
    return _error(400, str(exc))


@app.exception_handler(DocumentFormatError)
async def document_format_handler(request: Request, exc: DocumentFormatError):
    logger.warning(f"Unreadable document: {exc}")
    return _error(422, str(exc))


@app.exception_handler(ReportDeltaError)
async def report_delta_error_handler(request: Request, exc: ReportDeltaError):
    return _error(500, f"Error: {exc}")


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/api/health")
def health_check():
    return {"status": "healthy", "service": "report-delta", "version": __version__}


@app.post("/api/compare")
def compare(body: CompareRequest):
    """Compare the baseline and current reports of the request."""
    if not (body.baseline_docx_base64 or "").strip() or not (body.current_docx_base64 or "").strip():
        raise InputError("Missing baselineDocxBase64/currentDocxBase64.")

    request_options = body.options or CompareRequestOptions()
    if request_options.response not in RESPONSE_KINDS:
        raise InputError(f"response must be one of {', '.join(RESPONSE_KINDS)}")

    options = request_options.to_compare_options()
    metadata = Metadata.from_dict(body.metadata)
    baseline = decode_document(body.baseline_docx_base64, "baselineDocxBase64")
    current = decode_document(body.current_docx_base64, "currentDocxBase64")

    try:
        result = compare_reports(baseline, current, options, metadata)
    except ReportDeltaError as e:
        if isinstance(e, InternalError):
            logger.exception(f"Comparison failed in stage '{e.stage}'")
        raise
    except Exception as e:
        logger.exception("Comparison failed")
        raise InternalError("compare", str(e) or type(e).__name__, e) from e

    logger.info(f"Compared reports: {result.summary.to_dict()}")

    if request_options.response == "file":
        return Response(
            content=result.document,
            media_type=result.media_type,
            headers={"Content-Disposition": f'attachment; filename="{result.file_name}"'}
        )

    return {
        "fileName": result.file_name,
        "mediaType": result.media_type,
        "docxBase64": base64.b64encode(result.document).decode("ascii"),
        "summary": result.summary.to_dict(),
    }


def main():
    """Run the API with uvicorn."""
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        app,
        host=os.environ.get("REPORT_DELTA_HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000"))
    )


if __name__ == "__main__":
    main()
