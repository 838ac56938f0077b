"""Tests for the upload-and-poll state machine."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, call, patch

import pytest

from conftest import chunks_of, make_status_error, remote_file
from transcript_srt.errors import ProcessingFailed, ServiceUnavailable, UploadError
from transcript_srt.models import JobState
from transcript_srt.poller import RemoteJobPoller, is_transient_error


@pytest.fixture
def sleep():
    return AsyncMock()


def _poller(provider, sleep):
    return RemoteJobPoller(provider, poll_interval=5.0, max_retries=3, initial_delay=1.0, sleep=sleep)


class TestIsTransientError:
    def test_server_error(self):
        assert is_transient_error(make_status_error(500))
        assert is_transient_error(make_status_error(503))

    def test_client_error(self):
        assert not is_transient_error(make_status_error(404))

    def test_message_heuristic(self):
        assert is_transient_error(RuntimeError("[500 Internal Server Error] boom"))

    def test_other_error(self):
        assert not is_transient_error(ValueError("nope"))


class TestUpload:
    @pytest.mark.asyncio
    async def test_spools_and_cleans_up(self, mock_provider, sleep):
        seen = {}

        async def upload_file(path, mime_type, display_name=""):
            seen["path"] = Path(path)
            seen["data"] = Path(path).read_bytes()
            return remote_file(JobState.PROCESSING)

        mock_provider.upload_file = AsyncMock(side_effect=upload_file)
        result = await _poller(mock_provider, sleep).upload(
            chunks_of(b"abc", b"def"), "talk.mp3", "audio/mpeg"
        )

        assert result.name == "files/abc"
        assert seen["data"] == b"abcdef"
        assert seen["path"].suffix == ".mp3"
        assert not seen["path"].exists()
        mock_provider.upload_file.assert_awaited_once_with(
            seen["path"], "audio/mpeg", display_name="talk.mp3"
        )

    @pytest.mark.asyncio
    async def test_writes_off_the_event_loop(self, mock_provider, sleep):
        with patch("transcript_srt.poller.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            await _poller(mock_provider, sleep).upload(
                chunks_of(b"abc", b"def"), "talk.mp3", "audio/mpeg"
            )
        assert to_thread.await_count == 2

    @pytest.mark.asyncio
    async def test_submit_failure(self, mock_provider, sleep):
        seen = {}

        async def upload_file(path, mime_type, display_name=""):
            seen["path"] = Path(path)
            raise make_status_error(400)

        mock_provider.upload_file = AsyncMock(side_effect=upload_file)
        with pytest.raises(UploadError):
            await _poller(mock_provider, sleep).upload(chunks_of(b"x"), "a.wav", "audio/wav")
        assert not seen["path"].exists()

    @pytest.mark.asyncio
    async def test_stream_failure(self, mock_provider, sleep):
        async def broken():
            yield b"partial"
            raise OSError("client went away")

        with pytest.raises(UploadError):
            await _poller(mock_provider, sleep).upload(broken(), "a.wav", "audio/wav")
        mock_provider.upload_file.assert_not_awaited()


class TestAwaitReady:
    @pytest.mark.asyncio
    async def test_ready_immediately(self, mock_provider, sleep):
        result = await _poller(mock_provider, sleep).await_ready(remote_file(JobState.PROCESSING))
        assert result.state is JobState.ACTIVE
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_processing_twice_then_ready(self, mock_provider, sleep):
        mock_provider.get_file = AsyncMock(side_effect=[
            remote_file(JobState.PROCESSING),
            remote_file(JobState.PROCESSING),
            remote_file(JobState.ACTIVE),
        ])
        result = await _poller(mock_provider, sleep).await_ready(remote_file(JobState.PROCESSING))
        assert result.state is JobState.ACTIVE
        assert sleep.await_args_list == [call(5.0), call(5.0)]
        mock_provider.get_file.assert_awaited_with("files/abc")

    @pytest.mark.asyncio
    async def test_three_server_errors_then_success(self, mock_provider, sleep):
        mock_provider.get_file = AsyncMock(side_effect=[
            make_status_error(500),
            make_status_error(500),
            make_status_error(503),
            remote_file(JobState.ACTIVE),
        ])
        result = await _poller(mock_provider, sleep).await_ready(remote_file(JobState.PROCESSING))
        assert result.state is JobState.ACTIVE
        assert sleep.await_args_list == [call(1.0), call(2.0), call(4.0)]

    @pytest.mark.asyncio
    async def test_fourth_server_error_gives_up(self, mock_provider, sleep):
        mock_provider.get_file = AsyncMock(side_effect=[make_status_error(500)] * 4)
        with pytest.raises(ServiceUnavailable):
            await _poller(mock_provider, sleep).await_ready(remote_file(JobState.PROCESSING))
        assert sleep.await_args_list == [call(1.0), call(2.0), call(4.0)]
        assert mock_provider.get_file.await_count == 4

    @pytest.mark.asyncio
    async def test_success_resets_retries(self, mock_provider, sleep):
        mock_provider.get_file = AsyncMock(side_effect=[
            make_status_error(500),
            make_status_error(500),
            remote_file(JobState.PROCESSING),
            make_status_error(500),
            remote_file(JobState.ACTIVE),
        ])
        await _poller(mock_provider, sleep).await_ready(remote_file(JobState.PROCESSING))
        assert sleep.await_args_list == [call(1.0), call(2.0), call(5.0), call(1.0)]

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, mock_provider, sleep):
        mock_provider.get_file = AsyncMock(side_effect=make_status_error(403))
        with pytest.raises(Exception) as exc_info:
            await _poller(mock_provider, sleep).await_ready(remote_file(JobState.PROCESSING))
        assert exc_info.value.response.status_code == 403
        sleep.assert_not_awaited()
        assert mock_provider.get_file.await_count == 1

    @pytest.mark.asyncio
    async def test_failed_state(self, mock_provider, sleep):
        mock_provider.get_file = AsyncMock(side_effect=[
            remote_file(JobState.PROCESSING),
            remote_file(JobState.FAILED),
        ])
        with pytest.raises(ProcessingFailed):
            await _poller(mock_provider, sleep).await_ready(remote_file(JobState.PROCESSING))
        assert sleep.await_args_list == [call(5.0)]

    @pytest.mark.asyncio
    async def test_unspecified_state_counts_as_ready(self, mock_provider, sleep):
        mock_provider.get_file = AsyncMock(return_value=remote_file(JobState.STATE_UNSPECIFIED))
        result = await _poller(mock_provider, sleep).await_ready(remote_file(JobState.PROCESSING))
        assert result.state is JobState.STATE_UNSPECIFIED
