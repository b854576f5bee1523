"""Tests for streamed and recursive downloads."""
import pytest
import requests

from wdbridge.core.api import OperationResult
from wdbridge.core.errors import RetryExhaustedError
from wdbridge.models.entry import RemoteEntry
from wdbridge.services.download import WDDownloader


@pytest.fixture
def downloader(client, reporter):
    return WDDownloader(client, reporter)


class TestDownloadFile:
    """Test suite for WDDownloader.download_file."""

    def test_appends_chunks_and_reports_progress(
        self, downloader, api, response_factory, tmp_path
    ):
        response = response_factory(200, chunks=[b"01234", b"", b"56789"])
        api.get_file_size.return_value = OperationResult.ok(10)
        api.open_download.return_value = OperationResult.ok(response)
        target = tmp_path / "out.bin"
        progress = []

        assert downloader.download_file("f1", str(target), progress.append) is True

        assert target.read_bytes() == b"0123456789"
        assert [(p.offset, p.total) for p in progress] == [(5, 10), (10, 10)]
        assert progress[-1].percentage == 100
        response.close.assert_called_once()

    def test_token_passed_without_bearer_prefix(
        self, downloader, api, response_factory, tmp_path
    ):
        api.get_file_size.return_value = OperationResult.ok(1)
        api.open_download.return_value = OperationResult.ok(
            response_factory(200, chunks=[b"x"])
        )

        downloader.download_file("f1", str(tmp_path / "x"))

        api.get_file_size.assert_called_once_with("Bearer token", "f1")
        api.open_download.assert_called_once_with("token", "f1")

    def test_zero_byte_file(self, downloader, api, tmp_path):
        api.get_file_size.return_value = OperationResult.ok(0)
        target = tmp_path / "empty.txt"
        progress = []

        downloader.download_file("f1", str(target), progress.append)

        assert target.exists()
        assert target.read_bytes() == b""
        assert len(progress) == 1
        assert progress[0].percentage == 100
        api.open_download.assert_not_called()

    def test_expired_session_on_open_reauthenticates(
        self, downloader, api, auth, response_factory, tmp_path
    ):
        api.get_file_size.return_value = OperationResult.ok(3)
        api.open_download.side_effect = [
            OperationResult.expired(),
            OperationResult.ok(response_factory(200, chunks=[b"abc"])),
        ]
        target = tmp_path / "out.bin"

        downloader.download_file("f1", str(target))

        assert auth.reauthenticate.call_count == 1
        assert api.get_file_size.call_count == 2
        assert target.read_bytes() == b"abc"

    def test_retried_download_appends_to_partial_file(
        self, downloader, api, response_factory, tmp_path
    ):
        def broken_stream(chunk_size):
            yield b"012"
            raise requests.exceptions.ChunkedEncodingError("connection broken")

        broken = response_factory(200)
        broken.iter_content.side_effect = broken_stream
        api.get_file_size.return_value = OperationResult.ok(6)
        api.open_download.side_effect = [
            OperationResult.ok(broken),
            OperationResult.ok(response_factory(200, chunks=[b"012345"])),
        ]
        target = tmp_path / "out.bin"

        downloader.download_file("f1", str(target))

        # The destination is not truncated between attempts
        assert target.read_bytes() == b"012" + b"012345"
        broken.close.assert_called_once()

    def test_exhausted_download_raises(self, downloader, api, client, tmp_path):
        api.get_file_size.return_value = OperationResult.failed(ValueError("bad size"))

        with pytest.raises(RetryExhaustedError, match="download file"):
            downloader.download_file("f1", str(tmp_path / "out.bin"))

        assert api.get_file_size.call_count == 10
        assert client.stats.get_stats()["failed_downloads"] == 1

    def test_stats_updated(self, downloader, api, client, response_factory, tmp_path):
        api.get_file_size.return_value = OperationResult.ok(4)
        api.open_download.return_value = OperationResult.ok(
            response_factory(200, chunks=[b"abcd"])
        )

        downloader.download_file("f1", str(tmp_path / "out.bin"))

        stats = client.stats.get_stats()
        assert stats["successful_downloads"] == 1
        assert stats["downloaded_size"] == 4


class TestDownloadFolder:
    """Test suite for WDDownloader.download_folder."""

    LISTINGS = {
        "rf": [
            RemoteEntry("s1", "sub", True),
            RemoteEntry("fa", "a.txt", False),
            RemoteEntry("fb", "b.txt", False),
        ],
        "s1": [RemoteEntry("fc", "c.txt", False)],
    }
    CONTENT = {"fa": b"aaa", "fb": b"bbb", "fc": b"cc"}

    @pytest.fixture
    def tree_api(self, api, client, response_factory):
        listed = []

        def list_folder(authorization, folder_id):
            listed.append(folder_id)
            return OperationResult.ok(self.LISTINGS[folder_id])

        def get_file_size(authorization, file_id):
            if file_id == "fb":
                return OperationResult.failed(requests.exceptions.ConnectionError())
            return OperationResult.ok(len(self.CONTENT[file_id]))

        def open_download(access_token, file_id):
            return OperationResult.ok(
                response_factory(200, chunks=[self.CONTENT[file_id]])
            )

        api.list_folder.side_effect = list_folder
        api.get_file_size.side_effect = get_file_size
        api.open_download.side_effect = open_download
        api.listed = listed
        return api

    def test_downloads_tree(self, downloader, tree_api, tmp_path):
        destination = tmp_path / "copy"

        results = downloader.download_folder("rf", str(destination))

        outcome = {result.name: result.success for result in results}
        assert outcome == {"a.txt": True, "b.txt": False, "c.txt": True}
        assert (destination / "a.txt").read_bytes() == b"aaa"
        assert (destination / "sub").is_dir()
        assert (destination / "sub" / "c.txt").read_bytes() == b"cc"
        assert tree_api.listed == ["rf", "s1"]

    def test_path_stack_restored(self, downloader, tree_api, client, tmp_path):
        client.enter_directory("start")

        downloader.download_folder("rf", str(tmp_path / "copy"))

        assert client.path_stack.snapshot() == ["start"]

    def test_empty_remote_folder(self, downloader, api, tmp_path):
        api.list_folder.return_value = OperationResult.ok([])
        destination = tmp_path / "empty"

        assert downloader.download_folder("rf", str(destination)) == []
        assert destination.is_dir()

    def test_reporter_notified(self, downloader, tree_api, reporter, tmp_path):
        downloader.download_folder("rf", str(tmp_path / "copy"))

        assert reporter.file_started.call_count == 3
        assert reporter.file_done.call_count == 2
        assert reporter.file_failed.call_args.args[0] == "b.txt"
