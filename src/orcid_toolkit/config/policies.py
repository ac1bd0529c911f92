"""Policy models controlling the ingestion and transform pipeline."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PipelinePolicy(BaseModel):
    """Tunables for the producer/consumer pipeline.

    ``queue_capacity`` is the backpressure knob: it bounds the number of
    decoded-but-untransformed batches held in memory at any point.
    """

    model_config = ConfigDict(extra="forbid")

    batch_size: int = Field(default=256, gt=0, description="Archive entries per batch.")
    queue_capacity: int = Field(
        default=8,
        gt=0,
        description="Maximum number of batches waiting between producer and transform stage.",
    )
    workers: int | None = Field(
        default=None,
        ge=1,
        description="Transform worker count; defaults to the available CPU count.",
    )
    record_suffix: str = Field(
        default=".xml",
        min_length=1,
        description="Entry name suffix identifying a single record document.",
    )

    @field_validator("record_suffix")
    @classmethod
    def _normalize_suffix(cls, value: str) -> str:
        return value.strip()

    @property
    def effective_workers(self) -> int:
        return self.workers or os.cpu_count() or 1


__all__ = ["PipelinePolicy"]
