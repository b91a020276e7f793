"""
Mealwise Video Processing Queue
In-process priority queue that runs video import jobs on the event loop
"""

import time
import random
import string
import asyncio
import itertools
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

from core.config import get_settings
from services.video_import_service import video_import_service, VideoImportResult
from middleware.logging import log_business_event
from utils.date_utils import utcnow

settings = get_settings()
logger = logging.getLogger(__name__)

PRIORITY_WEIGHTS = {"high": 3, "normal": 2, "low": 1}

# (step name, duration in seconds, progress when done)
PROCESSING_STEPS = [
    ("Downloading video", 30, 20),
    ("Validating video format", 10, 30),
    ("Extracting video frames", 60, 50),
    ("Analyzing video content", 120, 70),
    ("Transcribing audio", 90, 85),
    ("Extracting recipe data", 60, 95),
    ("Finalizing results", 20, 100),
]

INITIAL_ESTIMATE = 300  # seconds
CANCELLED_ERROR = "Job cancelled by user"

_sequence = itertools.count()


def generate_job_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"job_{int(time.time() * 1000)}_{suffix}"


@dataclass
class ProcessingJob:
    id: str
    video_id: str
    platform: str
    user_id: Optional[str] = None
    url: Optional[str] = None
    status: str = "queued"  # queued, processing, completed, failed
    priority: str = "normal"
    created_at: datetime = field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    progress: int = 0
    current_step: str = "Queued"
    estimated_time: int = INITIAL_ESTIMATE
    error: Optional[str] = None
    result: Optional[VideoImportResult] = None
    retry_count: int = 0
    max_retries: int = 3
    processing_options: Dict[str, Any] = field(default_factory=dict)
    sequence: int = field(default_factory=lambda: next(_sequence))

    @property
    def is_finished(self) -> bool:
        return self.status in ("completed", "failed")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "video_id": self.video_id,
            "user_id": self.user_id,
            "url": self.url,
            "platform": self.platform,
            "status": self.status,
            "priority": self.priority,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "progress": self.progress,
            "current_step": self.current_step,
            "estimated_time": self.estimated_time,
            "error": self.error,
            "result": self.result.to_dict() if self.result else None,
            "retry_count": self.retry_count,
            "max_retries": self.max_retries,
            "processing_options": self.processing_options,
        }


class VideoProcessingQueue:
    """
    Priority queue of video jobs, processed concurrently up to a limit.

    Jobs live in memory only: queued jobs in priority order, running jobs
    with their asyncio tasks, and finished jobs until cleanup_old_jobs
    drops them.
    """

    def __init__(self, max_concurrent_jobs: Optional[int] = None, step_time_scale: Optional[float] = None):
        self.max_concurrent_jobs = max_concurrent_jobs or settings.VIDEO_MAX_CONCURRENT_JOBS
        self.step_time_scale = settings.VIDEO_STEP_TIME_SCALE if step_time_scale is None else step_time_scale
        self.max_retries = settings.VIDEO_MAX_RETRIES

        self.queue: List[ProcessingJob] = []
        self.processing: Dict[str, ProcessingJob] = {}
        self.finished: Dict[str, ProcessingJob] = {}
        self.tasks: Dict[str, asyncio.Task] = {}
        self._shutting_down = False

    def add_job(
        self,
        video_id: str,
        platform: str,
        url: Optional[str] = None,
        user_id: Optional[str] = None,
        priority: str = "normal",
        processing_options: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Queue a job and start it if a slot is free; returns the job id"""
        if priority not in PRIORITY_WEIGHTS:
            raise ValueError(f"Invalid priority: {priority}")

        job = ProcessingJob(
            id=generate_job_id(),
            video_id=video_id,
            platform=platform,
            user_id=user_id,
            url=url,
            priority=priority,
            max_retries=self.max_retries,
            processing_options=processing_options or {},
        )
        self._enqueue(job)

        logger.info(f"Queued video job {job.id} for video {video_id} ({priority})")
        log_business_event("video_job_queued", {"job_id": job.id, "platform": platform, "priority": priority})

        self._process_queue()
        return job.id

    def get_job_status(self, job_id: str) -> Optional[ProcessingJob]:
        if job_id in self.processing:
            return self.processing[job_id]
        if job_id in self.finished:
            return self.finished[job_id]
        return next((job for job in self.queue if job.id == job_id), None)

    def get_user_jobs(self, user_id: str) -> List[ProcessingJob]:
        jobs = [job for job in self._all_jobs() if job.user_id == user_id]
        return sorted(jobs, key=lambda job: (job.created_at, job.sequence), reverse=True)

    def cancel_job(self, job_id: str) -> bool:
        """
        Cancel a job

        Queued jobs are removed; a running job is marked failed and its task
        cancelled. Finished or unknown jobs cannot be cancelled.
        """
        for job in self.queue:
            if job.id == job_id:
                self.queue.remove(job)
                logger.info(f"Removed queued video job {job_id}")
                return True

        job = self.processing.get(job_id)
        if not job:
            return False

        job.status = "failed"
        job.error = CANCELLED_ERROR
        job.completed_at = utcnow()

        task = self.tasks.get(job_id)
        if task and not task.done():
            task.cancel()
        else:
            self._finish(job)

        logger.info(f"Cancelled running video job {job_id}")
        return True

    def retry_job(self, job_id: str) -> bool:
        """Re-queue a failed job that has retries left"""
        job = self.finished.get(job_id)
        if not job or job.status != "failed" or job.retry_count >= job.max_retries:
            return False

        del self.finished[job_id]
        job.status = "queued"
        job.progress = 0
        job.current_step = "Queued for retry"
        job.estimated_time = INITIAL_ESTIMATE
        job.error = None
        job.result = None
        job.started_at = None
        job.completed_at = None
        job.retry_count += 1
        self._enqueue(job)

        logger.info(f"Retrying video job {job_id} (attempt {job.retry_count})")
        self._process_queue()
        return True

    def update_priority(self, job_id: str, priority: str) -> bool:
        """Change the priority of a job that has not started yet"""
        if priority not in PRIORITY_WEIGHTS:
            return False

        job = next((queued for queued in self.queue if queued.id == job_id), None)
        if not job:
            return False

        job.priority = priority
        self._sort_queue()
        return True

    def get_queue_stats(self) -> Dict[str, Any]:
        finished = list(self.finished.values())
        completed = [job for job in finished if job.status == "completed" and job.started_at and job.completed_at]

        average = 0.0
        if completed:
            total = sum((job.completed_at - job.started_at).total_seconds() for job in completed)
            average = round(total / len(completed), 2)

        return {
            "total_jobs": len(self.queue) + len(self.processing) + len(finished),
            "queued_jobs": len(self.queue),
            "processing_jobs": len(self.processing),
            "completed_jobs": sum(1 for job in finished if job.status == "completed"),
            "failed_jobs": sum(1 for job in finished if job.status == "failed"),
            "average_processing_time": average,
        }

    def cleanup_old_jobs(self, max_age_hours: int = 24) -> int:
        """Forget finished jobs older than the cutoff; returns how many were dropped"""
        cutoff = utcnow() - timedelta(hours=max_age_hours)
        stale = [
            job_id for job_id, job in self.finished.items()
            if (job.completed_at or job.created_at) < cutoff
        ]
        for job_id in stale:
            del self.finished[job_id]

        if stale:
            logger.info(f"Cleaned up {len(stale)} old video jobs")
        return len(stale)

    async def shutdown(self):
        """Cancel running jobs; queued jobs are left in place"""
        self._shutting_down = True
        tasks = [task for task in self.tasks.values() if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"Video processing queue stopped ({len(tasks)} running jobs cancelled)")

    def _enqueue(self, job: ProcessingJob):
        self.queue.append(job)
        self._sort_queue()

    def _sort_queue(self):
        self.queue.sort(key=lambda job: (-PRIORITY_WEIGHTS[job.priority], job.created_at, job.sequence))

    def _all_jobs(self) -> List[ProcessingJob]:
        return list(self.queue) + list(self.processing.values()) + list(self.finished.values())

    def _process_queue(self):
        """Start queued jobs while slots are free; needs a running event loop"""
        if self._shutting_down:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; video jobs stay queued")
            return

        while self.queue and len(self.processing) < self.max_concurrent_jobs:
            job = self.queue.pop(0)
            job.status = "processing"
            job.started_at = utcnow()
            self.processing[job.id] = job
            task = loop.create_task(self._run_job(job))
            # Runs even when the task is cancelled before it starts
            task.add_done_callback(lambda _task, job=job: self._finish(job))
            self.tasks[job.id] = task

    async def _run_job(self, job: ProcessingJob):
        logger.info(f"Processing video job {job.id}")
        try:
            for index, (step, duration, progress) in enumerate(PROCESSING_STEPS):
                job.current_step = step
                job.estimated_time = sum(remaining for _, remaining, _ in PROCESSING_STEPS[index:])
                await asyncio.sleep(duration * self.step_time_scale)
                job.progress = progress

            if job.url:
                result = await video_import_service.import_from_video_url(job.url)
                if not result.success:
                    raise RuntimeError(result.error or "Video import failed")
                job.result = result

            job.status = "completed"
            job.progress = 100
            job.current_step = "Completed"
            job.estimated_time = 0
            job.completed_at = utcnow()
            logger.info(f"Video job {job.id} completed")

        except Exception as e:
            job.status = "failed"
            job.error = str(e)
            job.completed_at = utcnow()
            logger.error(f"Video job {job.id} failed: {str(e)}")

    def _finish(self, job: ProcessingJob):
        if not job.is_finished:
            # Task was cancelled by shutdown rather than by the user
            job.status = "failed"
            job.error = "Processing interrupted"
            job.completed_at = utcnow()

        self.processing.pop(job.id, None)
        self.tasks.pop(job.id, None)
        self.finished[job.id] = job
        self._process_queue()


# Global queue instance
video_processing_queue = VideoProcessingQueue()
