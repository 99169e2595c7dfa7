from fastapi import APIRouter, UploadFile, File, Form, Request, HTTPException
from fastapi.responses import JSONResponse
from typing import Iterator, Optional, Tuple
import io
import zipfile
import traceback

from cypress_extractor.core.config import get_settings
from cypress_extractor.core.errors import InvalidCommandNameError, SourceParseError
from cypress_extractor.core.utils import safe_decode
from cypress_extractor.core.logging import logger

from cypress_extractor.services.project import analyze_sources
from cypress_extractor.services.vocabulary import Vocabulary
from cypress_extractor.routes.analyze import (
    analysis_error_response,
    audit,
    build_options,
    count_records,
)

settings = get_settings()
router = APIRouter()


# ---------------------------------------------------------
# ZIP traversal rules
# ---------------------------------------------------------
IGNORE_DIRS = (
    "node_modules/",
    "dist/",
    "build/",
    "coverage/",
    ".git/",
    "cypress/videos/",
)

PROJECT_EXTENSION = ".js"


def is_ignored(name: str) -> bool:
    # matches at the archive root and below a wrapping project folder
    path = "/" + name
    return any(f"/{d}" in path for d in IGNORE_DIRS)


def iter_cypress_sources(zip_bytes: bytes) -> Iterator[Tuple[str, str]]:
    """
    Iterate over (path, text) of the JavaScript files inside a ZIP archive
    with safety limits.
    """

    max_total_bytes = settings.MAX_ZIP_TOTAL_UNCOMPRESSED_MB * 1024 * 1024
    max_file_bytes = settings.MAX_SINGLE_FILE_MB * 1024 * 1024
    max_file_count = settings.MAX_ZIP_FILE_COUNT

    total_uncompressed = 0
    file_count = 0

    with zipfile.ZipFile(io.BytesIO(zip_bytes)) as zf:
        for info in zf.infolist():

            file_count += 1
            if file_count > max_file_count:
                raise HTTPException(
                    status_code=413,
                    detail="ZIP contains too many files",
                )

            if info.is_dir():
                continue

            name = info.filename

            if is_ignored(name):
                continue

            if not name.endswith(PROJECT_EXTENSION):
                continue

            if info.file_size > max_file_bytes:
                raise HTTPException(
                    status_code=413,
                    detail=f"File too large inside ZIP: {name}",
                )

            total_uncompressed += info.file_size
            if total_uncompressed > max_total_bytes:
                raise HTTPException(
                    status_code=413,
                    detail="ZIP expands beyond allowed uncompressed size",
                )

            yield name, safe_decode(zf.read(info))


# ---------------------------------------------------------
# API: Analyse a Cypress project ZIP
# ---------------------------------------------------------
@router.post(
    "/",
    summary="Analyse every Cypress JavaScript file of a ZIP project",
)
async def analyze_project(
    request: Request,
    zip_file: UploadFile = File(...),
    scenarios: Optional[bool] = Form(None),
    include_nested: Optional[bool] = Form(None),
):
    if not (zip_file.filename or "").lower().endswith(".zip"):
        raise HTTPException(
            status_code=400,
            detail="Uploaded file must be a ZIP archive",
        )

    max_zip_bytes = settings.MAX_ZIP_SIZE_MB * 1024 * 1024
    if zip_file.size and zip_file.size > max_zip_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"ZIP file too large. Max allowed is {settings.MAX_ZIP_SIZE_MB} MB",
        )

    audit(request, file_name=zip_file.filename)

    options = build_options(scenarios, include_nested)
    vocabulary = Vocabulary.from_settings(settings)

    try:
        zip_bytes = await zip_file.read()

        # -------------------------------------------------
        # Per-file analysis on the shared worker pool
        # -------------------------------------------------
        results = analyze_sources(
            iter_cypress_sources(zip_bytes),
            options,
            vocabulary,
            max_workers=settings.MAX_WORKERS,
        )

        if not results:
            raise HTTPException(
                status_code=400,
                detail="No Cypress JavaScript files found in ZIP",
            )

        logger.info(f"analyze-project: {len(results)} file(s) from {zip_file.filename}")
        audit(
            request,
            file_count=len(results),
            record_count=sum(count_records(r) for r in results.values()),
            diagnostic_count=sum(len(r.errors) for r in results.values()),
        )

        return {name: results[name].to_json_dict() for name in sorted(results)}

    except HTTPException:
        raise

    except zipfile.BadZipFile:
        raise HTTPException(
            status_code=400,
            detail="Uploaded file is not a valid ZIP archive",
        )

    except (SourceParseError, InvalidCommandNameError) as exc:
        logger.warning(f"analyze-project rejected {exc.filename}: {exc}")
        audit(request, error=str(exc))
        return analysis_error_response(exc, exc.filename)

    except Exception as exc:
        logger.error(
            f"analyze-project failed: {exc}\n{traceback.format_exc()}"
        )
        audit(request, error=str(exc), traceback=traceback.format_exc())

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error during Cypress project analysis"
            },
        )
