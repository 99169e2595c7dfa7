import traceback
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from cypress_extractor.core.config import get_settings
from cypress_extractor.core.errors import InvalidCommandNameError, SourceParseError
from cypress_extractor.core.logging import logger
from cypress_extractor.core.utils import safe_decode
from cypress_extractor.models.schemas import AnalysisResult, AnalyzeOptions
from cypress_extractor.services.extractor import analyze
from cypress_extractor.services.loader import load_text
from cypress_extractor.services.vocabulary import Vocabulary


settings = get_settings()
router = APIRouter()


def build_options(scenarios: Optional[bool], include_nested: Optional[bool]) -> AnalyzeOptions:
    """Form flags override the configured analysis defaults."""
    return AnalyzeOptions(
        include_nested_calls=(
            settings.INCLUDE_NESTED_CALLS if include_nested is None else include_nested
        ),
        scenarios=settings.ENABLE_SCENARIOS if scenarios is None else scenarios,
    )


def count_records(result: AnalysisResult) -> int:
    hooks = sum(len(found) for found in (result.hooks or {}).values())
    return (
        len(result.added or [])
        + len(result.used or [])
        + len(result.tests or [])
        + len(result.scenarios or [])
        + hooks
    )


def audit(request: Request, **fields) -> None:
    """Attach analysis metadata to the request's audit record."""
    request.state.audit = {**getattr(request.state, "audit", {}), **fields}


def analysis_error_response(exc: Exception, filename: Optional[str]) -> JSONResponse:
    """422 body for a file that cannot be analysed."""
    if isinstance(exc, SourceParseError):
        detail = {
            "error": "SyntaxError",
            "message": exc.message,
            "file": exc.filename or filename,
            "line": exc.line,
            "column": exc.column,
        }
    else:
        detail = {
            "error": "InvalidCommandName",
            "message": str(exc),
            "file": getattr(exc, "filename", None) or filename,
            "location": getattr(exc, "location", None),
        }
    return JSONResponse(status_code=422, content={"detail": detail})


@router.post(
    "/",
    summary="Analyse a Cypress test or support file and return its structure as JSON",
)
async def analyze_script(
    request: Request,
    file: Optional[UploadFile] = File(None),
    script: Optional[str] = Form(None),
    scenarios: Optional[bool] = Form(None),
    include_nested: Optional[bool] = Form(None),
):
    """
    Accepts a Cypress JavaScript file (upload or pasted text) and returns
    its command definitions, command usages, tests, hooks and diagnostics.
    """

    # --------------------------------------------------------------
    # Input validation
    # --------------------------------------------------------------
    if not file and (not script or script.strip() == ""):
        raise HTTPException(
            status_code=400,
            detail="Provide either a file or a 'script' text field.",
        )

    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024

    if file:
        filename = file.filename or "uploaded_cypress_script.js"
        raw_bytes = await file.read()
        if len(raw_bytes) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Max allowed is {settings.MAX_UPLOAD_MB} MB",
            )
        source_text = safe_decode(raw_bytes)
    else:
        filename = "pasted_cypress_script.js"
        source_text = script
        if len(source_text.encode("utf-8")) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"Script too large. Max allowed is {settings.MAX_UPLOAD_MB} MB",
            )

    audit(request, file_name=filename, file_count=1)

    try:
        # ----------------------------------------------------------
        # Parse and analyse
        # ----------------------------------------------------------
        parsed = load_text(source_text, filename=filename)
        result = analyze(
            parsed,
            build_options(scenarios, include_nested),
            Vocabulary.from_settings(settings),
        )

        audit(
            request,
            record_count=count_records(result),
            diagnostic_count=len(result.errors),
        )
        return result.to_json_dict()

    except (SourceParseError, InvalidCommandNameError) as exc:
        logger.warning(f"analyze rejected {filename}: {exc}")
        audit(request, error=str(exc))
        return analysis_error_response(exc, filename)

    except Exception as exc:
        logger.error(f"analyze failed: {exc}\n{traceback.format_exc()}")
        audit(request, error=str(exc), traceback=traceback.format_exc())

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error during Cypress script analysis"},
        )
