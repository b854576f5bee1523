"""Download operations for WD Bridge (wdbridge)."""

import os
from typing import List

import requests

from wdbridge.core.api import OperationResult
from wdbridge.core.config import DOWNLOAD_CHUNK_SIZE
from wdbridge.core.errors import WDBridgeError
from wdbridge.models.entry import TransferProgress, TransferResult
from wdbridge.utils.logger import get_api_logger
from wdbridge.utils.progress import ConsoleReporter

log = get_api_logger()


class WDDownloader:
    """Handles file and folder downloads from the cloud device."""

    def __init__(self, client, reporter=None, chunk_size=DOWNLOAD_CHUNK_SIZE):
        """Initialize with a WDClient instance."""
        self.client = client
        self.reporter = reporter or ConsoleReporter()
        self.chunk_size = chunk_size

    def download_file(self, file_id, local_file_path, progress_callback=None):
        """
        Download a remote file, appending its content to ``local_file_path``.

        The destination is not truncated between attempts, so a download that
        fails half-way and is retried leaves the earlier bytes in place.
        """

        def download_request():
            return self._download_once(file_id, local_file_path, progress_callback)

        try:
            size = self.client.retry_limited(
                self.client.max_attempts, "download file", download_request
            )
        except WDBridgeError:
            self.client.stats.update(failed_downloads=1)
            raise

        self.client.stats.update(successful_downloads=1, downloaded_size=size)
        return True

    def _download_once(self, file_id, local_file_path, progress_callback):
        api = self.client.api
        session = self.client.session

        size_result = api.get_file_size(session.authorization, file_id)
        if not size_result.success:
            return size_result
        total_size = size_result.result

        if total_size == 0:
            with open(local_file_path, "ab"):
                pass
            if progress_callback:
                progress_callback(TransferProgress(0, 0))
            return OperationResult.ok(0)

        stream = api.open_download(session.access_token, file_id)
        if not stream.success:
            return stream

        response = stream.result
        offset = 0
        try:
            with open(local_file_path, "ab") as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    offset += len(chunk)
                    if progress_callback:
                        progress_callback(TransferProgress(offset, total_size))
        except requests.exceptions.RequestException as e:
            log.error("Download stream of %s broke at byte %d: %s", file_id, offset, e)
            return OperationResult.failed(e)
        finally:
            response.close()

        return OperationResult.ok(offset)

    def download_folder(self, folder_id, local_path) -> List[TransferResult]:
        """
        Download a remote folder tree into ``local_path``.

        ``local_path`` is the destination including the folder's own name and
        is created first. The remote working folder is the same after the
        call as before it.
        """
        os.makedirs(local_path, exist_ok=True)
        results: List[TransferResult] = []
        depth = self.client.path_stack.depth

        try:
            self._download_level(folder_id, local_path, results)
        finally:
            self.client.remove_path_stack_entries(self.client.path_stack.depth - depth)

        return results

    def _download_level(self, folder_id, local_path, results):
        self.client.enter_directory(folder_id)

        entries = self.client.list_files()
        folders = [entry for entry in entries if entry.is_dir]
        files = [entry for entry in entries if not entry.is_dir]

        for folder in folders:
            os.makedirs(os.path.join(local_path, folder.name), exist_ok=True)

        for entry in files:
            results.append(
                self._download_tree_file(entry, os.path.join(local_path, entry.name))
            )

        for folder in folders:
            self._download_level(folder.id, os.path.join(local_path, folder.name), results)
            self.client.enter_parent_directory()

    def _download_tree_file(self, entry, file_path):
        self.reporter.file_started(entry.name, "download")
        try:
            self.download_file(
                entry.id,
                file_path,
                lambda progress: self.reporter.file_progress(entry.name, progress),
            )
        except (WDBridgeError, OSError) as e:
            if isinstance(e, OSError):
                self.client.stats.update(failed_downloads=1)
            self.reporter.file_failed(entry.name, e)
            return TransferResult(name=entry.name, path=file_path, success=False, error=e)

        self.reporter.file_done(entry.name, file_path)
        return TransferResult(name=entry.name, path=file_path, success=True)
