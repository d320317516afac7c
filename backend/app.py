"""
Halal recipe conversion FastAPI application.

Endpoints:
    GET  /                    Health check
    POST /evaluate            Single-ingredient ruling (knowledge graph, remote fallback)
    POST /convert             Recipe text -> converted text, flagged ingredients, score
    GET  /convert/last        Most recent cached conversion (offline replay)
    GET  /ingredients/{name}  Known flag plus full evaluation for one ingredient
"""
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Dict, Optional
import logging
from dotenv import load_dotenv
from pathlib import Path

# Load env vars
load_dotenv(Path(__file__).parent / ".env")

# Initialize App
app = FastAPI(title="Halal Recipe Conversion API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from halal_core import get_default_converter
from halal_core.config import log_config
from halal_core.enrichment import log_unknown_ingredient
from halal_core.external_apis import RemoteClassifier
from halal_core.models.preferences import Preferences
from halal_core.normalization import normalize_ingredient_id
from caching import cache_conversion, get_last_conversion

log_config()

converter = get_default_converter()
evaluator = converter.evaluator
remote_classifier = RemoteClassifier()


# --- Request Models ---
class EvaluateRequest(BaseModel):
    ingredient: str
    strictness: Optional[str] = None
    madhab: Optional[str] = None


class ConvertRequest(BaseModel):
    recipe: str
    preferences: Optional[Dict[str, str]] = None


# --- Helper Functions ---

def _evaluate_with_fallback(raw_name: str, prefs: Preferences):
    """Knowledge base first; unknown items go to the remote classifier (when configured) and the unknown log."""
    result = evaluator.get_details(raw_name, prefs)
    if result.is_known:
        return result
    override = remote_classifier.classify(result.ingredient_id)
    if override is not None:
        result = evaluator.apply_override(result, override, prefs)
    log_unknown_ingredient(
        raw_name,
        normalize_ingredient_id(raw_name),
        preferences=prefs.to_dict(),
        remote_status=override.status.value if override else None,
    )
    return result


# --- Endpoints ---

@app.get("/")
def health_check():
    store = evaluator.store
    return {
        "status": "ok",
        "service": "Halal Recipe Conversion",
        "knowledge_version": store.get_version(),
        "records": len(store),
    }


@app.post("/evaluate")
async def evaluate(request: EvaluateRequest):
    """Ruling for one ingredient under the requested strictness and school of thought."""
    prefs = Preferences.from_dict({"strictness": request.strictness, "madhab": request.madhab})
    logger.info("Evaluate request ingredient=%s strictness=%s madhab=%s",
                request.ingredient[:60], prefs.strictness.value, prefs.madhab)
    try:
        return _evaluate_with_fallback(request.ingredient, prefs).to_dict()
    except Exception as e:
        logger.error("Evaluate failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/convert")
async def convert(request: ConvertRequest):
    """Detect -> substitute -> score. Successful results are cached for offline replay."""
    logger.info("Convert request chars=%d preferences=%s", len(request.recipe), request.preferences)
    try:
        result = converter.convert(request.recipe, request.preferences)
        if result.ok:
            cache_conversion(result)
        return result.to_dict()
    except Exception as e:
        logger.error("Convert failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/convert/last")
async def last_conversion():
    """Most recent successful conversion with the time it was stored."""
    try:
        cached = get_last_conversion()
    except Exception as e:
        logger.error("Cache read failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    if cached is None:
        raise HTTPException(status_code=404, detail="No cached conversion")
    result, timestamp = cached
    return {"timestamp": timestamp, "result": result.to_dict()}


@app.get("/ingredients/{name}")
async def ingredient_details(name: str, strictness: Optional[str] = None, madhab: Optional[str] = None):
    prefs = Preferences.from_dict({"strictness": strictness, "madhab": madhab})
    try:
        return {
            "known": evaluator.is_known(name),
            "details": evaluator.get_details(name, prefs).to_dict(),
        }
    except Exception as e:
        logger.error("Ingredient lookup failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
