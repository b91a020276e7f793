"""Unit tests for the in-process video processing queue.

Tests cover:
- Priority ordering and queue management without an event loop
- Job execution, failure, retry and cancellation on a running loop
- Stats and cleanup
"""

import asyncio
from datetime import timedelta

import pytest

from services.video_processing_queue import CANCELLED_ERROR, VideoProcessingQueue, generate_job_id
from utils.date_utils import utcnow

TIKTOK_URL = "https://www.tiktok.com/@chef/video/1"


async def _drain(queue: VideoProcessingQueue) -> None:
    while queue.tasks:
        await asyncio.gather(*list(queue.tasks.values()), return_exceptions=True)


@pytest.fixture
def queue() -> VideoProcessingQueue:
    return VideoProcessingQueue(max_concurrent_jobs=2, step_time_scale=0)


class TestQueueManagement:
    """Tests that run without an event loop, so jobs stay queued."""

    def test_job_id_format(self) -> None:
        """Should build ids from a timestamp and a random suffix."""
        prefix, millis, suffix = generate_job_id().split("_")

        assert prefix == "job"
        assert millis.isdigit()
        assert len(suffix) == 9

    def test_jobs_stay_queued_without_loop(self, queue) -> None:
        """Should queue the job when no loop is running."""
        job_id = queue.add_job("video-1", "tiktok")

        job = queue.get_job_status(job_id)
        assert job.status == "queued"
        assert queue.processing == {}

    def test_orders_by_priority_then_age(self, queue) -> None:
        """Should put high priority first and keep FIFO within a priority."""
        low = queue.add_job("v1", "tiktok", priority="low")
        first_normal = queue.add_job("v2", "tiktok")
        high = queue.add_job("v3", "tiktok", priority="high")
        second_normal = queue.add_job("v4", "tiktok")

        assert [job.id for job in queue.queue] == [high, first_normal, second_normal, low]

    def test_invalid_priority_raises(self, queue) -> None:
        """Should reject unknown priorities."""
        with pytest.raises(ValueError, match="Invalid priority"):
            queue.add_job("v1", "tiktok", priority="urgent")

    def test_update_priority_reorders(self, queue) -> None:
        """Should move a bumped job ahead."""
        first = queue.add_job("v1", "tiktok")
        second = queue.add_job("v2", "tiktok")

        assert queue.update_priority(second, "high") is True

        assert [job.id for job in queue.queue] == [second, first]
        assert queue.update_priority(second, "urgent") is False
        assert queue.update_priority("job_missing", "low") is False

    def test_cancel_queued_job(self, queue) -> None:
        """Should drop queued jobs entirely."""
        job_id = queue.add_job("v1", "tiktok")

        assert queue.cancel_job(job_id) is True
        assert queue.get_job_status(job_id) is None
        assert queue.cancel_job(job_id) is False

    def test_user_jobs_newest_first(self, queue) -> None:
        """Should list only the user's jobs, newest first."""
        older = queue.add_job("v1", "tiktok", user_id="7")
        queue.add_job("v2", "tiktok", user_id="8")
        newer = queue.add_job("v3", "tiktok", user_id="7", priority="low")

        assert [job.id for job in queue.get_user_jobs("7")] == [newer, older]

    def test_cleanup_drops_old_finished_jobs(self, queue) -> None:
        """Should forget finished jobs past the cutoff."""
        # Arrange
        old_id = queue.add_job("v1", "tiktok")
        recent_id = queue.add_job("v2", "tiktok")
        for job_id, age in ((old_id, 30), (recent_id, 1)):
            job = queue.get_job_status(job_id)
            queue.queue.remove(job)
            job.status = "completed"
            job.completed_at = utcnow() - timedelta(hours=age)
            queue.finished[job_id] = job

        # Act
        removed = queue.cleanup_old_jobs(max_age_hours=24)

        # Assert
        assert removed == 1
        assert list(queue.finished) == [recent_id]


class TestJobExecution:
    """Tests that run jobs on the event loop."""

    async def test_runs_job_to_completion(self, queue) -> None:
        """Should walk every step and store the import result."""
        # Act
        job_id = queue.add_job("video-1", "tiktok", url=TIKTOK_URL, user_id="7")
        await _drain(queue)

        # Assert
        job = queue.get_job_status(job_id)
        assert job.status == "completed"
        assert job.progress == 100
        assert job.current_step == "Completed"
        assert job.result.success is True
        assert job.to_dict()["result"]["recipe"]["import_source"] == "video"
        assert queue.get_queue_stats()["completed_jobs"] == 1

    async def test_respects_concurrency_limit(self) -> None:
        """Should start at most max_concurrent_jobs at once."""
        queue = VideoProcessingQueue(max_concurrent_jobs=1, step_time_scale=0)

        first = queue.add_job("v1", "tiktok")
        second = queue.add_job("v2", "tiktok")

        assert list(queue.processing) == [first]
        assert [job.id for job in queue.queue] == [second]

        await _drain(queue)

        assert queue.get_job_status(second).status == "completed"

    async def test_failed_import_marks_job_failed(self, queue) -> None:
        """Should record the import error."""
        job_id = queue.add_job("video-2", "vimeo", url="https://vimeo.com/1")
        await _drain(queue)

        job = queue.get_job_status(job_id)
        assert job.status == "failed"
        assert job.error == "Unsupported platform or invalid URL"
        assert queue.get_queue_stats()["failed_jobs"] == 1

    async def test_retry_until_exhausted(self, queue) -> None:
        """Should re-queue failed jobs until retries run out."""
        job_id = queue.add_job("video-2", "vimeo", url="https://vimeo.com/1")
        await _drain(queue)

        for attempt in range(1, 4):
            assert queue.retry_job(job_id) is True
            await _drain(queue)
            assert queue.get_job_status(job_id).retry_count == attempt

        assert queue.retry_job(job_id) is False

    async def test_completed_job_cannot_be_retried(self, queue) -> None:
        """Should only retry failed jobs."""
        job_id = queue.add_job("video-1", "tiktok")
        await _drain(queue)

        assert queue.retry_job(job_id) is False

    async def test_cancel_running_job(self) -> None:
        """Should cancel the task and mark the job as cancelled."""
        # Arrange
        queue = VideoProcessingQueue(max_concurrent_jobs=1, step_time_scale=1)
        job_id = queue.add_job("video-1", "tiktok")
        await asyncio.sleep(0)

        # Act
        cancelled = queue.cancel_job(job_id)
        await _drain(queue)

        # Assert
        job = queue.get_job_status(job_id)
        assert cancelled is True
        assert job.status == "failed"
        assert job.error == CANCELLED_ERROR
        assert job_id in queue.finished

    async def test_shutdown_interrupts_running_jobs(self) -> None:
        """Should cancel running jobs and leave queued ones alone."""
        queue = VideoProcessingQueue(max_concurrent_jobs=1, step_time_scale=1)
        running = queue.add_job("v1", "tiktok")
        waiting = queue.add_job("v2", "tiktok")

        await queue.shutdown()

        assert queue.get_job_status(running).error == "Processing interrupted"
        assert queue.get_job_status(waiting).status == "queued"
        assert queue.tasks == {}
