"""
Image Studio Backend
====================
FastAPI backend proxying text-to-image generation to the configured provider
and keeping a capped generation history.
"""

import os
import sys
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

# Add project root to path so we can import studio
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from studio.batch import MAX_BATCH_SIZE, batch_status, generate_one, run_batch
from studio.errors import NotFoundError, ProviderError, ValidationError
from studio.history import HistoryStore, JsonFileBackend
from studio.images import generate_image
from studio.log import setup_logging
from studio.models import (
    DEFAULT_GUIDANCE_SCALE,
    DEFAULT_HEIGHT,
    DEFAULT_INFERENCE_STEPS,
    DEFAULT_WIDTH,
    GenerationRequest,
    GenerationStatus,
    HistoryEntry,
)
from studio.presets import RESOLUTION_PRESETS, list_styles
from studio.provider_client import get_config, resolve_model

logger = setup_logging()

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

def get_allowed_origins() -> list[str]:
    origins = os.environ.get("ALLOWED_ORIGINS", "")
    parsed = [o.strip() for o in origins.split(",") if o.strip()]
    return parsed or ["*"]

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class GenerateBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # checked by hand so a missing prompt is a 400, not a 422
    prompt: str | None = None
    system_prompt: str | None = Field(default=None, alias="systemPrompt")
    width: int = Field(default=DEFAULT_WIDTH, gt=0)
    height: int = Field(default=DEFAULT_HEIGHT, gt=0)
    guidance_scale: float = Field(default=DEFAULT_GUIDANCE_SCALE, gt=0)
    num_inference_steps: int = Field(default=DEFAULT_INFERENCE_STEPS, gt=0)
    seed: int | None = None
    style: str | None = None

    def to_request(self) -> GenerationRequest:
        return GenerationRequest(
            prompt=self.prompt or "",
            system_prompt=self.system_prompt,
            width=self.width,
            height=self.height,
            guidance_scale=self.guidance_scale,
            num_inference_steps=self.num_inference_steps,
            seed=self.seed,
            style=self.style,
        )


class BatchGenerateBody(GenerateBody):
    count: int = 1


class HistoryBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    system_prompt: str | None = Field(default=None, alias="systemPrompt")
    settings: dict | None = None

# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_history(request: Request) -> HistoryStore:
    return request.app.state.history


def get_generator(request: Request):
    return request.app.state.generate

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

router = APIRouter()


@router.get("/api/health")
async def health():
    return {"status": "ok"}


@router.get("/api/generate")
async def describe_generate():
    cfg = get_config()
    return {
        "message": "AI Image Generation API",
        "model": resolve_model(cfg["model"]),
        "endpoint": "/api/generate",
        "methods": ["POST"],
        "parameters": {
            "prompt": "string (required)",
            "systemPrompt": "string (optional)",
            "width": f"number (default: {DEFAULT_WIDTH})",
            "height": f"number (default: {DEFAULT_HEIGHT})",
            "guidance_scale": f"number (default: {DEFAULT_GUIDANCE_SCALE})",
            "num_inference_steps": f"number (default: {DEFAULT_INFERENCE_STEPS})",
            "seed": "number (optional)",
            "style": "string (optional)",
        },
        "batch": {"endpoint": "/api/generate/batch", "max_count": MAX_BATCH_SIZE},
    }


@router.post("/api/generate")
def generate(
    body: GenerateBody,
    history: HistoryStore = Depends(get_history),
    generator=Depends(get_generator),
):
    try:
        result = generate_one(body.to_request(), generate=generator, history=history)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except ProviderError as e:
        logger.error("Generation error: %s", e)
        raise HTTPException(500, f"Image generation failed: {e}")

    return {
        "success": True,
        "id": result.id,
        "imageUrl": result.image_url,
        "prompt": result.prompt,
        "systemPrompt": result.system_prompt,
        "parameters": result.parameters.model_dump(exclude_none=True),
        "timestamp": result.created_at,
    }


@router.post("/api/generate/batch")
def generate_batch(
    body: BatchGenerateBody,
    history: HistoryStore = Depends(get_history),
    generator=Depends(get_generator),
):
    try:
        results = run_batch(body.to_request(), count=body.count, generate=generator, history=history)
    except ValidationError as e:
        raise HTTPException(400, str(e))

    status = batch_status(results)
    return {
        "success": status != "failed",
        "batchId": str(uuid.uuid4()),
        "images": [r.to_dict() for r in results],
        "totalCount": len(results),
        "completedCount": sum(1 for r in results if r.status == GenerationStatus.COMPLETED),
        "status": status,
    }


@router.get("/api/styles")
async def styles():
    return {"styles": list_styles()}


@router.get("/api/resolutions")
async def resolutions():
    return {"resolutions": RESOLUTION_PRESETS}


@router.get("/api/history")
async def list_history(history: HistoryStore = Depends(get_history)):
    entries = history.list()
    return {
        "success": True,
        "data": [e.to_dict() for e in entries],
        "count": len(entries),
    }


@router.post("/api/history")
async def add_history(body: HistoryBody, history: HistoryStore = Depends(get_history)):
    if not body.prompt or not body.image_url:
        raise HTTPException(400, "Prompt and imageUrl are required")

    entry = history.add(HistoryEntry(
        prompt=body.prompt,
        image_url=body.image_url,
        system_prompt=body.system_prompt,
        settings=body.settings or {},
    ))
    return {"success": True, "data": entry.to_dict()}


@router.delete("/api/history/all")
async def clear_history(history: HistoryStore = Depends(get_history)):
    history.clear()
    return {"success": True, "cleared": True}


@router.get("/api/history/{entry_id}")
async def get_history_entry(entry_id: str, history: HistoryStore = Depends(get_history)):
    try:
        return {"success": True, "data": history.get(entry_id).to_dict()}
    except NotFoundError:
        raise HTTPException(404, "Image not found")


@router.delete("/api/history")
async def delete_history_entry(
    id: str | None = Query(default=None),
    history: HistoryStore = Depends(get_history),
):
    if not id:
        raise HTTPException(400, "Image ID is required")
    try:
        history.delete_by_id(id)
    except NotFoundError:
        raise HTTPException(404, "Image not found")
    return {"success": True, "message": "Image deleted from history"}

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

def create_app(history: HistoryStore | None = None, generate=None) -> FastAPI:
    """
    Build the FastAPI application.

    The history store is created once here and shared with every request
    through ``app.state``; pass one in to swap the backend (tests use an
    in-memory one).
    """
    if history is None:
        cfg = get_config()
        history = HistoryStore(
            JsonFileBackend(cfg["history_path"]),
            max_entries=cfg["history_max_entries"],
        )

    app = FastAPI(title="Image Studio API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.history = history
    app.state.generate = generate or generate_image
    app.include_router(router)
    return app


app = create_app()
