"""Unit tests for video import and queue endpoints."""

from http import HTTPStatus
from unittest.mock import Mock, patch

import pytest

from api.endpoints import videos


@pytest.fixture
def client(make_client):
    return make_client(videos.router, "/videos")


@pytest.fixture
def mock_queue():
    with patch("api.endpoints.videos.video_processing_queue") as queue:
        yield queue


class TestImportVideoUrl:
    """Tests for POST /videos/import-url."""

    def test_imports_and_queues_job(self, client, mock_queue) -> None:
        """Should extract the recipe and queue a tracking job."""
        # Arrange
        mock_queue.add_job.return_value = "job_1_abc"
        url = "https://www.tiktok.com/@chef/video/1"

        # Act
        response = client.post("/videos/import-url", json={"url": url, "priority": "high"})

        # Assert
        body = response.json()
        assert response.status_code == HTTPStatus.OK
        assert body["job_id"] == "job_1_abc"
        assert body["platform"] == "tiktok"
        assert body["result"]["success"] is True
        assert body["video_id"].startswith("video_")
        mock_queue.add_job.assert_called_once_with(
            body["video_id"], "tiktok", url=url, user_id="1", priority="high"
        )

    @pytest.mark.parametrize(
        "payload, detail",
        [
            ({}, "Video URL is required"),
            ({"url": "not a url"}, "Invalid URL format"),
            ({"url": "https://vimeo.com/1"}, "Unsupported platform: custom"),
            ({"url": "https://youtube.com/shorts/x", "priority": "urgent"}, "Invalid priority: urgent"),
        ],
    )
    def test_rejects_bad_requests(self, client, mock_queue, payload, detail) -> None:
        """Should validate the URL, platform and priority before importing."""
        response = client.post("/videos/import-url", json=payload)

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == detail
        mock_queue.add_job.assert_not_called()

    def test_info_lists_platforms(self, client) -> None:
        """Should describe the supported platforms."""
        response = client.get("/videos/import-url")

        assert response.json()["supported_platforms"] == ["tiktok", "instagram", "youtube", "facebook"]


class TestUploadVideo:
    """Tests for POST /videos/upload."""

    def test_requires_file(self, client) -> None:
        """Should 400 without a file."""
        response = client.post("/videos/upload", data={"platform": "tiktok"})

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "No video file provided"

    def test_rejects_non_video(self, client) -> None:
        """Should surface the validation message."""
        response = client.post(
            "/videos/upload", files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "Invalid file type. Please upload a video file."

    def test_accepts_video(self, client) -> None:
        """Should extract a recipe from an uploaded clip."""
        with patch("api.endpoints.videos.log_business_event") as log_event:
            response = client.post(
                "/videos/upload", files={"file": ("clip.mp4", b"\x00" * 64, "video/mp4")}
            )

        body = response.json()
        assert response.status_code == HTTPStatus.OK
        assert body["result"]["success"] is True
        assert log_event.call_args[0][0] == "video_uploaded"


class TestAnalysis:
    """Tests for /videos/analyze and /videos/extract-recipe."""

    def test_analyze_requires_video_id(self, client) -> None:
        """Should 400 without a video id."""
        response = client.post("/videos/analyze", json={})

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "Video ID is required"

    def test_analyze_queues_analysis(self, client) -> None:
        """Should return a queued analysis id."""
        response = client.post("/videos/analyze", json={"video_id": "video_1"})

        body = response.json()
        assert body["status"] == "queued"
        assert body["analysis_id"].startswith("analysis_")

    def test_status_requires_analysis_id(self, client) -> None:
        """Should 400 without an analysis id."""
        response = client.get("/videos/analyze")

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "Analysis ID is required"

    def test_extract_requires_analysis_id(self, client) -> None:
        """Should 400 when extracting without an analysis id."""
        response = client.post("/videos/extract-recipe", json={})

        assert response.status_code == HTTPStatus.BAD_REQUEST


class TestQueue:
    """Tests for /videos/queue."""

    def test_get_job(self, client, mock_queue) -> None:
        """Should return one job by id."""
        job = Mock()
        job.to_dict.return_value = {"id": "job_1", "status": "queued"}
        mock_queue.get_job_status.return_value = job

        response = client.get("/videos/queue", params={"job_id": "job_1"})

        assert response.json() == {"success": True, "job": {"id": "job_1", "status": "queued"}}

    def test_get_missing_job_is_404(self, client, mock_queue) -> None:
        """Should 404 for unknown jobs."""
        mock_queue.get_job_status.return_value = None

        response = client.get("/videos/queue", params={"job_id": "missing"})

        assert response.status_code == HTTPStatus.NOT_FOUND
        assert response.json()["detail"] == "Job not found"

    def test_get_user_jobs(self, client, mock_queue) -> None:
        """Should list a user's jobs with a count."""
        job = Mock()
        job.to_dict.return_value = {"id": "job_1"}
        mock_queue.get_user_jobs.return_value = [job]

        response = client.get("/videos/queue", params={"user_id": "7"})

        assert response.json() == {"success": True, "jobs": [{"id": "job_1"}], "count": 1}
        mock_queue.get_user_jobs.assert_called_once_with("7")

    def test_get_stats(self, client, mock_queue) -> None:
        """Should fall back to queue statistics."""
        mock_queue.get_queue_stats.return_value = {"queue_length": 0}

        response = client.get("/videos/queue")

        assert response.json() == {"success": True, "stats": {"queue_length": 0}}

    def test_add_job_defaults_user(self, client, mock_queue) -> None:
        """Should attribute the job to the caller when no user is given."""
        mock_queue.add_job.return_value = "job_2"

        response = client.post("/videos/queue", json={"video_id": "v1", "platform": "tiktok"})

        assert response.json()["job_id"] == "job_2"
        assert mock_queue.add_job.call_args.kwargs["user_id"] == "1"

    def test_add_job_requires_fields(self, client, mock_queue) -> None:
        """Should require video id and platform."""
        response = client.post("/videos/queue", json={"video_id": "v1"})

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "Video ID and platform are required"

    def test_add_job_bad_priority_is_400(self, client, mock_queue) -> None:
        """Should map queue validation errors to 400."""
        mock_queue.add_job.side_effect = ValueError("Invalid priority: urgent")

        response = client.post(
            "/videos/queue", json={"video_id": "v1", "platform": "tiktok", "priority": "urgent"}
        )

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "Invalid priority: urgent"

    def test_cancel_requires_job_id(self, client, mock_queue) -> None:
        """Should 400 without a job id."""
        response = client.delete("/videos/queue")

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "Job ID is required"

    def test_cancel_missing_job_is_404(self, client, mock_queue) -> None:
        """Should 404 when nothing was cancelled."""
        mock_queue.cancel_job.return_value = False

        response = client.delete("/videos/queue", params={"job_id": "job_1"})

        assert response.status_code == HTTPStatus.NOT_FOUND
        assert response.json()["detail"] == "Job not found or already completed"

    def test_cancel_job(self, client, mock_queue) -> None:
        """Should confirm cancellation."""
        mock_queue.cancel_job.return_value = True

        response = client.delete("/videos/queue", params={"job_id": "job_1"})

        assert response.json()["message"] == "Video processing job cancelled successfully"

    def test_retry_exhausted_is_400(self, client, mock_queue) -> None:
        """Should 400 when the job cannot be retried."""
        mock_queue.retry_job.return_value = False

        response = client.patch("/videos/queue", json={"job_id": "job_1", "action": "retry"})

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "Job cannot be retried or max retries exceeded"

    def test_change_priority(self, client, mock_queue) -> None:
        """Should bump a queued job."""
        mock_queue.update_priority.return_value = True

        response = client.patch(
            "/videos/queue", json={"job_id": "job_1", "action": "priority", "priority": "high"}
        )

        assert response.json() == {"success": True, "message": "Job priority updated"}
        mock_queue.update_priority.assert_called_once_with("job_1", "high")

    def test_unknown_action_is_400(self, client, mock_queue) -> None:
        """Should reject actions other than retry and priority."""
        response = client.patch("/videos/queue", json={"job_id": "job_1", "action": "pause"})

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json()["detail"] == "Invalid action"
