"""
ScriptReel Data Models (Pydantic Schemas)
"""

from .models import (
    PipelineStage,
    OptionSource,
    Segment,
    Character,
    PhotoOption,
    VideoOption,
    ProcessedSegment,
    PipelineSettings,
    PipelineState,
    CompiledClip,
    CompilationResult,
    new_id,
)

__all__ = [
    "PipelineStage",
    "OptionSource",
    "Segment",
    "Character",
    "PhotoOption",
    "VideoOption",
    "ProcessedSegment",
    "PipelineSettings",
    "PipelineState",
    "CompiledClip",
    "CompilationResult",
    "new_id",
]
