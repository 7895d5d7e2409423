"""Pydantic models for generation requests, results and history entries."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 1024
DEFAULT_GUIDANCE_SCALE = 7.5
DEFAULT_INFERENCE_STEPS = 50


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class GenerationStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerationParameters(BaseModel):
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    guidance_scale: float = DEFAULT_GUIDANCE_SCALE
    num_inference_steps: int = DEFAULT_INFERENCE_STEPS
    style: str | None = None
    seed: int | None = None


class GenerationRequest(BaseModel):
    """A single prompt plus its settings. Frozen once built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prompt: str
    system_prompt: str | None = Field(default=None, alias="systemPrompt")
    width: int = Field(default=DEFAULT_WIDTH, gt=0)
    height: int = Field(default=DEFAULT_HEIGHT, gt=0)
    guidance_scale: float = Field(default=DEFAULT_GUIDANCE_SCALE, gt=0)
    num_inference_steps: int = Field(default=DEFAULT_INFERENCE_STEPS, gt=0)
    seed: int | None = None
    style: str | None = None

    def parameters(self) -> GenerationParameters:
        return GenerationParameters(
            width=self.width,
            height=self.height,
            guidance_scale=self.guidance_scale,
            num_inference_steps=self.num_inference_steps,
            style=self.style,
            seed=self.seed,
        )

    def with_seed(self, seed: int | None) -> "GenerationRequest":
        """Return a copy that differs only in its seed."""
        return self.model_copy(update={"seed": seed})


class GenerationResult(BaseModel):
    """
    Outcome of one generation slot.

    Starts out pending and is updated in place through complete() or fail()
    once the provider call settles.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_id)
    prompt: str
    system_prompt: str | None = Field(default=None, alias="systemPrompt")
    image_url: str | None = Field(default=None, alias="imageUrl")
    parameters: GenerationParameters
    created_at: str = Field(default_factory=_now, alias="createdAt")
    status: GenerationStatus = GenerationStatus.PENDING
    error: str | None = None

    @classmethod
    def pending(cls, request: GenerationRequest) -> "GenerationResult":
        return cls(
            prompt=request.prompt,
            system_prompt=request.system_prompt,
            parameters=request.parameters(),
        )

    def complete(self, image_url: str) -> None:
        self.image_url = image_url
        self.status = GenerationStatus.COMPLETED
        self.error = None

    def fail(self, error: str) -> None:
        self.image_url = None
        self.status = GenerationStatus.FAILED
        self.error = error

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HistoryEntry(BaseModel):
    """A persisted snapshot of a generation. Never linked back to the live result."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_id)
    prompt: str
    image_url: str | None = Field(default=None, alias="imageUrl")
    system_prompt: str | None = Field(default=None, alias="systemPrompt")
    settings: dict[str, Any] = Field(default_factory=dict)
    status: GenerationStatus = GenerationStatus.COMPLETED
    error: str | None = None
    created_at: str = Field(default_factory=_now, alias="createdAt")

    @classmethod
    def from_result(cls, result: GenerationResult) -> "HistoryEntry":
        return cls(
            id=result.id,
            prompt=result.prompt,
            image_url=result.image_url,
            system_prompt=result.system_prompt,
            settings=result.parameters.model_dump(exclude_none=True),
            status=result.status,
            error=result.error,
            created_at=result.created_at,
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
