"""
Mealwise Video Import Service
Recipe extraction from short-form cooking videos (uploaded files or platform URLs)
"""

import time
import logging
from typing import Dict, List, Optional, Any, Tuple
from dataclasses import dataclass, field, asdict

from core.config import get_settings
from models.recipe_models import ImportSource
from utils.date_utils import utcnow

settings = get_settings()
logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ["tiktok", "instagram", "youtube", "facebook"]
SUPPORTED_FORMATS = ["mp4", "mov", "avi", "mkv", "webm", "m4v"]
MAX_DURATION = 10 * 60  # seconds


@dataclass
class VideoMetadata:
    platform: str
    title: str
    description: str
    creator: str
    duration: int
    aspect_ratio: str
    width: int
    height: int
    format: str
    size: int
    upload_date: Optional[str] = None


@dataclass
class VideoAnalysis:
    """Signals gathered from frames, audio, overlays and motion"""
    frames: List[Dict[str, Any]] = field(default_factory=list)
    audio_segments: List[Dict[str, Any]] = field(default_factory=list)
    text_overlays: List[Dict[str, Any]] = field(default_factory=list)
    cooking_actions: List[str] = field(default_factory=list)
    confidence: float = 0.0


@dataclass
class VideoImportResult:
    success: bool
    recipe: Dict[str, Any]
    confidence: float
    extraction_method: str
    processing_time: int  # milliseconds
    error: Optional[str] = None
    video_file: Optional[str] = None
    video_metadata: Optional[VideoMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def empty_recipe() -> Dict[str, Any]:
    return {
        "title": "",
        "description": "",
        "image_url": None,
        "prep_time": 0,
        "cook_time": 0,
        "servings": 0,
        "difficulty": "easy",
        "cuisine": "",
        "tags": [],
        "instructions": [],
        "ingredients": [],
        "source_url": "",
        "import_source": ImportSource.VIDEO.value,
    }


class VideoImportService:
    """
    Imports recipes from videos.
    Download, metadata probing, analysis and extraction are mocked.
    """

    def __init__(self):
        self.max_file_size = settings.MAX_VIDEO_SIZE

    def detect_platform(self, url: str) -> Optional[str]:
        lowered = (url or "").lower()
        for platform in SUPPORTED_PLATFORMS:
            if platform in lowered:
                return platform
        return None

    def validate_video_file(self, filename: str, content_type: Optional[str], size: int) -> Tuple[bool, Optional[str]]:
        if not content_type or not content_type.startswith("video/"):
            return False, "Invalid file type. Please upload a video file."

        if size > self.max_file_size:
            return False, f"File too large. Maximum size: {round(self.max_file_size / (1024 * 1024))}MB"

        extension = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""
        if extension not in SUPPORTED_FORMATS:
            return False, f"Unsupported format. Supported formats: {', '.join(SUPPORTED_FORMATS)}"

        return True, None

    def get_import_limits(self) -> Dict[str, Any]:
        return {
            "max_file_size": self.max_file_size,
            "max_duration": MAX_DURATION,
            "supported_formats": list(SUPPORTED_FORMATS),
            "supported_platforms": list(SUPPORTED_PLATFORMS),
        }

    async def import_from_video_file(self, filename: str, content_type: Optional[str], size: int) -> VideoImportResult:
        start_time = time.time()
        logger.info(f"Starting video file import: {filename} ({size} bytes)")

        valid, error = self.validate_video_file(filename, content_type, size)
        if not valid:
            return self._failure(error, "validation-failed", start_time)

        try:
            metadata = await self.extract_video_metadata(size=size)
            analysis = await self.analyze_video(filename)
            recipe, confidence = await self.extract_recipe_from_analysis(analysis, metadata)
        except Exception as e:
            logger.error(f"Video file import failed for {filename}: {str(e)}")
            return self._failure(str(e), "ai-video-analysis", start_time)

        processing_time = self._elapsed_ms(start_time)
        logger.info(f"Video file import completed: {filename} (confidence {confidence})")

        return VideoImportResult(
            success=True,
            recipe=recipe,
            confidence=confidence,
            extraction_method="ai-video-analysis",
            processing_time=processing_time,
            video_file=filename,
            video_metadata=metadata,
        )

    async def import_from_video_url(self, url: str) -> VideoImportResult:
        start_time = time.time()
        logger.info(f"Starting video URL import: {url}")

        platform = self.detect_platform(url)
        if not platform:
            return self._failure("Unsupported platform or invalid URL", "url-validation-failed", start_time)

        try:
            video_file = await self.download_video(url, platform)
            metadata = await self.extract_video_metadata(platform=platform)
            analysis = await self.analyze_video(video_file)
            recipe, confidence = await self.extract_recipe_from_analysis(analysis, metadata)
        except Exception as e:
            logger.error(f"Video URL import failed for {url}: {str(e)}")
            return self._failure(str(e), "ai-video-analysis", start_time)

        processing_time = self._elapsed_ms(start_time)
        logger.info(f"Video URL import completed: {url} ({platform}, confidence {confidence})")

        return VideoImportResult(
            success=True,
            recipe=recipe,
            confidence=confidence,
            extraction_method="ai-video-analysis",
            processing_time=processing_time,
            video_metadata=metadata,
        )

    async def download_video(self, url: str, platform: str) -> str:
        # TODO: platform-specific downloaders; a placeholder file name is returned for now
        return f"downloaded-{platform}-video.mp4"

    async def extract_video_metadata(self, platform: str = "custom", size: int = 0) -> VideoMetadata:
        return VideoMetadata(
            platform=platform,
            title="Imported Video Recipe",
            description="Recipe extracted from video content",
            creator="Unknown",
            duration=120,
            aspect_ratio="vertical",
            width=1080,
            height=1920,
            format="mp4",
            size=size,
            upload_date=utcnow().isoformat(),
        )

    async def analyze_video(self, video_file: str) -> VideoAnalysis:
        analysis = VideoAnalysis(
            frames=[
                {
                    "timestamp": 0,
                    "objects": ["bowl", "spoon", "flour", "eggs"],
                    "text": ["Mix ingredients", "2 cups flour"],
                    "actions": ["mixing", "pouring"],
                    "confidence": 0.95,
                },
                {
                    "timestamp": 30,
                    "objects": ["oven", "baking sheet", "dough"],
                    "text": ["Preheat oven", "375°F"],
                    "actions": ["preheating", "shaping"],
                    "confidence": 0.92,
                },
            ],
            audio_segments=[
                {"start_time": 0, "end_time": 30, "transcript": "First, mix two cups of flour with one cup of sugar", "confidence": 0.88, "language": "en"},
                {"start_time": 30, "end_time": 60, "transcript": "Then add two eggs and mix until combined", "confidence": 0.91, "language": "en"},
            ],
            text_overlays=[
                {"timestamp": 15, "text": "2 cups flour", "confidence": 0.94},
                {"timestamp": 45, "text": "375°F for 12 minutes", "confidence": 0.89},
            ],
            cooking_actions=["mixing", "shaping", "baking"],
            confidence=0.91,
        )
        logger.info(f"Video analysis completed for {video_file} (confidence {analysis.confidence})")
        return analysis

    async def extract_recipe_from_analysis(self, analysis: VideoAnalysis, metadata: VideoMetadata) -> Tuple[Dict[str, Any], float]:
        recipe = {
            "title": "Homemade Cookies",
            "description": "Delicious cookies made from scratch",
            "image_url": None,
            "prep_time": 15,
            "cook_time": 12,
            "servings": 24,
            "difficulty": "easy",
            "cuisine": "American",
            "tags": ["dessert", "cookies", "baking", "homemade"],
            "instructions": [
                "Mix flour and sugar in a large bowl",
                "Add eggs and mix until combined",
                "Shape dough into balls and place on baking sheet",
                "Bake at 375°F for 12 minutes",
            ],
            "ingredients": [
                {"quantity": 2, "unit": "cup", "name": "all-purpose flour", "notes": ""},
                {"quantity": 1, "unit": "cup", "name": "granulated sugar", "notes": ""},
                {"quantity": 2, "unit": "piece", "name": "eggs", "notes": "large"},
                {"quantity": 1, "unit": "teaspoon", "name": "vanilla extract", "notes": ""},
            ],
            "source_url": "video://imported",
            "import_source": ImportSource.VIDEO.value,
        }
        return recipe, analysis.confidence

    def _failure(self, error: str, method: str, start_time: float) -> VideoImportResult:
        logger.warning(f"Video import rejected: {error}")
        return VideoImportResult(
            success=False,
            recipe=empty_recipe(),
            confidence=0,
            extraction_method=method,
            processing_time=self._elapsed_ms(start_time),
            error=error,
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)


# Global service instance
video_import_service = VideoImportService()
