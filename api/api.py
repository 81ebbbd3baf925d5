import os
import json
import logging
import threading
from typing import List, Optional
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.responses import FileResponse
from fastapi.middleware.cors import CORSMiddleware

from photoscore.core import ImageAnalyzer
from photoscore.detector import load_face_detector
from photoscore.errors import AnalysisError, DecodeError, DetectionFailure, InvalidInput
from photoscore.loader import validate_image_format
from photoscore.models import (AnalysisResult, AnalyzeResponse, BatchResponse,
                               PhotoResult, ValidationResponse)

# ------------ Config & folders ------------
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "outputs")
DETECTOR_BACKEND = os.getenv("DETECTOR_BACKEND", "retinaface")
SAVE_RESULTS = os.getenv("SAVE_RESULTS", "0").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
JSON_DIR = os.path.join(OUTPUT_DIR, "json")

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("photoscore.api")

# ------------ App ------------
app = FastAPI(title="Profile Photo Quality API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

_analyzer: Optional[ImageAnalyzer] = None
_analyzer_lock = threading.Lock()


def get_analyzer() -> ImageAnalyzer:
    """Build the analyzer (and load face models) once, on first use."""
    global _analyzer
    with _analyzer_lock:
        if _analyzer is None:
            logger.info("Loading face detector (backend=%s)", DETECTOR_BACKEND)
            try:
                detector = load_face_detector(DETECTOR_BACKEND)
            except Exception as e:
                logger.exception("Face detector failed to load")
                raise _http_error(DetectionFailure(f"Face detector failed to load: {e}")) from e
            _analyzer = ImageAnalyzer(detector=detector)
        return _analyzer


# ------------ Helpers ------------
def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


def _basename_from(filename: Optional[str]) -> str:
    if not filename:
        return f"capture_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    return os.path.splitext(os.path.basename(filename))[0]


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (DecodeError, InvalidInput)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, DetectionFailure):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=f"Analysis error: {exc}")


def _response(result: AnalysisResult, image_filename: str) -> AnalyzeResponse:
    payload = result.to_dict()
    payload["analyzedAt"] = _now_iso()
    payload["imageFilename"] = image_filename
    return AnalyzeResponse.model_validate(payload)


def save_json(response: AnalyzeResponse, base_name: str) -> str:
    os.makedirs(JSON_DIR, exist_ok=True)
    path = os.path.join(JSON_DIR, f"{base_name}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(response.model_dump(by_alias=True, exclude_none=True), f, ensure_ascii=False, indent=2)
    return path


def _log_scores(name: str, result: AnalysisResult) -> None:
    logger.info("%s: overall=%d blur=%d lighting=%d smile=%d", name, result.overall_score,
                result.blur.score, result.lighting.score, result.smile.score)
    if result.warnings:
        logger.info("%s warnings: %s", name, ", ".join(result.warnings))


# ------------ Endpoints ------------
@app.get("/health")
async def health():
    return {"status": "ok", "time": _now_iso(), "output_dir": OUTPUT_DIR, "backend": DETECTOR_BACKEND}


@app.post("/validate", response_model=ValidationResponse, response_model_exclude_none=True)
async def validate(file: UploadFile = File(...)):
    raw = await file.read()
    return ValidationResponse.model_validate(validate_image_format(raw).to_dict())


@app.post("/analyze", response_model=AnalyzeResponse, response_model_exclude_none=True)
async def analyze(file: UploadFile = File(...), analyzer: ImageAnalyzer = Depends(get_analyzer)):
    raw = await file.read()
    basename = _basename_from(file.filename)
    origin_name = file.filename or f"{basename}.jpg"

    try:
        result = analyzer.analyze(raw)
    except AnalysisError as e:
        logger.warning("Analysis of %s failed: %s", origin_name, e)
        raise _http_error(e)
    except Exception as e:
        logger.exception("Unexpected error analyzing %s", origin_name)
        raise _http_error(e)

    _log_scores(origin_name, result)
    response = _response(result, origin_name)
    if SAVE_RESULTS:
        save_json(response, basename)
    return response


@app.post("/analyze/batch", response_model=BatchResponse, response_model_exclude_none=True)
async def analyze_batch(files: List[UploadFile] = File(...), analyzer: ImageAnalyzer = Depends(get_analyzer)):
    logger.info("Starting batch analysis of %d photos", len(files))
    results: List[PhotoResult] = []
    errors = 0

    for i, file in enumerate(files):
        name = file.filename or f"photo_{i}"
        raw = await file.read()
        try:
            result = analyzer.analyze(raw)
        except Exception as e:
            # reported per photo, the batch carries on
            errors += 1
            logger.error("[%d/%d] Error analyzing %s: %s", i + 1, len(files), name, e)
            results.append(PhotoResult(image_filename=name, error=str(e) or "Failed to analyze photo"))
            continue
        _log_scores(name, result)
        results.append(PhotoResult(image_filename=name, analysis=_response(result, name)))

    logger.info("Batch finished: %d ok, %d failed", len(files) - errors, errors)
    return BatchResponse(
        total_photos=len(files),
        success_count=len(files) - errors,
        error_count=errors,
        results=results,
    )


@app.get("/results/{basename}")
async def get_result(basename: str):
    path = os.path.join(JSON_DIR, f"{os.path.basename(basename)}.json")
    if not os.path.exists(path):
        raise HTTPException(status_code=404, detail="Result not found")
    return FileResponse(path, media_type="application/json", filename=f"{basename}.json")
