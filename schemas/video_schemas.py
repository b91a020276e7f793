"""
Mealwise Video Schemas
Pydantic models for video import, analysis and queue requests
"""

from typing import Dict, Optional, Any
from pydantic import BaseModel, Field


class VideoURLImportRequest(BaseModel):
    url: Optional[str] = None
    platform: Optional[str] = None
    priority: str = "normal"


class AnalysisOptions(BaseModel):
    extract_audio: bool = True
    analyze_frames: bool = True
    detect_motion: bool = True
    ocr_text: bool = True


class VideoAnalysisRequest(BaseModel):
    video_id: Optional[str] = None
    analysis_type: str = "full"
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)


class ExtractionOptions(BaseModel):
    confidence_threshold: float = Field(0.7, ge=0, le=1)
    include_timing: bool = True
    include_nutrition: bool = False
    language: str = "en"


class RecipeExtractionRequest(BaseModel):
    analysis_id: Optional[str] = None
    extraction_options: ExtractionOptions = Field(default_factory=ExtractionOptions)


class QueueJobRequest(BaseModel):
    video_id: Optional[str] = None
    platform: Optional[str] = None
    url: Optional[str] = None
    user_id: Optional[str] = None
    priority: str = "normal"
    processing_options: Dict[str, Any] = Field(default_factory=dict)


class QueueActionRequest(BaseModel):
    job_id: Optional[str] = None
    action: Optional[str] = None  # retry or priority
    priority: Optional[str] = None
