from datetime import datetime, timezone
from typing import List, Literal, Optional
import logging

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import uvicorn

import config
from log import configure_logging, log_query
from pipeline import InteractionPipeline, create_pipeline

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=config.SERVICE_NAME, version=config.SERVICE_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

SIDE_EFFECTS = {
    "combined": {
        "common": ["nausea", "breast tenderness", "spotting", "mood changes", "headache", "acne improvements"],
        "placebo_week": ["withdrawal bleeding", "cramps", "fatigue"],
    },
    "progestin_only": {
        "common": ["irregular bleeding", "acne", "breast tenderness", "mood changes"],
    },
}


class CheckRequest(BaseModel):
    pillType: Literal["combined", "progestin_only"] = "combined"
    meds: List[str] = Field(default_factory=list, max_length=config.MAX_MEDS)


class TriageRequest(CheckRequest):
    symptoms: str = Field(default="", max_length=config.MAX_SYMPTOM_CHARS)


_pipeline: Optional[InteractionPipeline] = None


def get_pipeline() -> InteractionPipeline:
    global _pipeline
    if _pipeline is None:
        logger.info("Building interaction pipeline...")
        _pipeline = create_pipeline()
    return _pipeline


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.info(f"❌ Rejected {request.url.path}: {len(details)} validation error(s)")
    return JSONResponse(status_code=400, content={"error": "Invalid body", "details": details})


@app.post("/interactions/check")
def check_interactions(body: Optional[CheckRequest] = None):
    """
    Interaction check for a pill type + medication list.

    Workflow:
    1. Expand pill type into its hormonal ingredients
    2. Resolve names to RxCUIs and query RxNav (failures → rules only)
    3. Apply rule overlay and custom rulebook
    4. Merge by pair with rulebook precedence, add low-risk placeholders if nothing was found
    """
    body = body or CheckRequest()
    try:
        logger.info(f"💊 Interaction check: pillType={body.pillType} meds={body.meds}")
        result = get_pipeline().check(body.pillType, body.meds)
        logger.info(f"✅ {len(result['interactions'])} interaction(s), overall={result['overall']}")
        log_query("/interactions/check", body.model_dump(), result)
        return result
    except Exception as e:
        logger.error(f"❌ Interaction check failed: {str(e)}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "interaction check failed"})


@app.post("/triage")
def triage(body: Optional[TriageRequest] = None):
    """
    Interaction check plus symptom attribution.

    Returns the check payload extended with:
    - attribution: drug → ranked label snippets similar to the symptoms
    - advice: deterministic rulebook guidance (no AI needed)
    - message: template summary; summary: LLM summary when configured
    """
    body = body or TriageRequest()
    try:
        logger.info(f"🩺 Triage: pillType={body.pillType} meds={body.meds} symptoms={len(body.symptoms)} chars")
        result = get_pipeline().triage(body.pillType, body.meds, body.symptoms)
        logger.info(f"✅ Triage done, overall={result['overall']}, attributed drugs={len(result['attribution'])}")
        log_query("/triage", body.model_dump(), result)
        return result
    except Exception as e:
        logger.error(f"❌ Triage failed: {str(e)}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "triage failed"})


@app.post("/interactions/assistant")
def interaction_assistant(body: Optional[TriageRequest] = None):
    """Deterministic one-paragraph answer over the interaction check (no LLM)."""
    body = body or TriageRequest()
    try:
        result = get_pipeline().assistant(body.pillType, body.meds, body.symptoms)
        log_query("/interactions/assistant", body.model_dump(), result)
        return result
    except Exception as e:
        logger.error(f"❌ Assistant failed: {str(e)}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "assistant failed"})


@app.get("/side-effects")
def side_effects(kind: str = Query("combined")):
    kind = "progestin_only" if kind == "progestin_only" else "combined"
    return {"kind": kind, "effects": SIDE_EFFECTS[kind]}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": config.SERVICE_NAME,
        "version": config.SERVICE_VERSION,
        "time": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    uvicorn.run(
        "API:app",
        host=config.HOST,
        port=config.PORT,
        reload=True
    )
