"""Ingestion pipeline and background job helpers."""

from .jobs import run_background_job, submit_job
from .pipeline import IngestionOutcome, IngestionPipeline, PipelineRun, PipelineStage

__all__ = [
    "IngestionOutcome",
    "IngestionPipeline",
    "PipelineRun",
    "PipelineStage",
    "run_background_job",
    "submit_job",
]
