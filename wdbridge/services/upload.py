"""Upload operations for WD Bridge (wdbridge)."""

import os
from typing import List

from wdbridge.core.api import OperationResult, format_mtime
from wdbridge.core.config import UPLOAD_BLOCK_SIZE
from wdbridge.core.errors import WDBridgeError
from wdbridge.models.entry import TransferProgress, TransferResult
from wdbridge.utils.progress import ConsoleReporter


class WDUploader:
    """Handles file and folder uploads to the cloud device."""

    def __init__(self, client, reporter=None, block_size=UPLOAD_BLOCK_SIZE):
        """Initialize with a WDClient instance."""
        self.client = client
        self.reporter = reporter or ConsoleReporter()
        self.block_size = block_size

    def upload_file(self, file_path, progress_callback=None):
        """
        Upload a local file into the current remote folder.

        The whole upload is one retryable operation: a failed chunk or an
        expired session restarts it from byte 0 with a new activity.
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")
        if os.path.isdir(file_path):
            raise IsADirectoryError(f"Use upload_folder for directories: {file_path}")

        def upload_request():
            return self._upload_once(file_path, progress_callback)

        try:
            self.client.retry_limited(
                self.client.max_attempts, "upload file", upload_request
            )
        except WDBridgeError:
            self.client.stats.update(failed_uploads=1)
            raise

        self.client.stats.update(
            successful_uploads=1, uploaded_size=os.path.getsize(file_path)
        )
        return True

    def _upload_once(self, file_path, progress_callback):
        api = self.client.api
        authorization = self.client.session.authorization
        parent_id = self.client.get_current_folder()

        activity = api.start_activity(authorization)
        if not activity.success:
            return activity
        activity_tag = activity.result

        upload_session = api.open_upload_session(
            authorization,
            activity_tag,
            parent_id,
            os.path.basename(file_path),
            format_mtime(),
        )
        if not upload_session.success:
            return upload_session

        return self._stream_file(
            file_path, upload_session.result, authorization, activity_tag, progress_callback
        )

    def _stream_file(self, file_path, url, authorization, activity_tag, progress_callback):
        """Send the file block by block; the short block carries done=true."""
        api = self.client.api
        total_size = os.path.getsize(file_path)

        if total_size == 0:
            if progress_callback:
                progress_callback(TransferProgress(0, 0))
            return OperationResult.ok(True)

        offset = 0
        with open(file_path, "rb") as f:
            while True:
                chunk = f.read(self.block_size)
                done = len(chunk) < self.block_size

                result = api.put_chunk(authorization, activity_tag, url, offset, done, chunk)
                if not result.success:
                    return result

                if progress_callback:
                    progress_callback(TransferProgress(offset, total_size))

                if done:
                    return OperationResult.ok(True)
                offset += len(chunk)

    def upload_folder(self, folder_path) -> List[TransferResult]:
        """
        Upload a local folder tree into the current remote folder.

        Subfolders of each level are created before its files are uploaded,
        and the files before the subfolders are descended into. A file that
        fails is recorded and the walk goes on. The remote working folder is
        the same after the call as before it.
        """
        if not os.path.isdir(folder_path):
            raise NotADirectoryError(f"Not a directory: {folder_path}")

        folder_path = os.path.abspath(folder_path)
        results: List[TransferResult] = []
        depth = self.client.path_stack.depth

        try:
            root_name = os.path.basename(folder_path)
            root_id = self.client.create_directory(root_name)
            self._folder_created(root_name)
            self._upload_level(folder_path, root_id, results)
        finally:
            self.client.remove_path_stack_entries(self.client.path_stack.depth - depth)

        return results

    def _upload_level(self, local_path, folder_id, results):
        self.client.enter_directory(folder_id)

        folders = []
        files = []
        for entry in sorted(os.listdir(local_path)):
            if os.path.isdir(os.path.join(local_path, entry)):
                folders.append(entry)
            else:
                files.append(entry)

        folder_ids = []
        for name in folders:
            folder_ids.append(self.client.create_directory(name))
            self._folder_created(name)

        for name in files:
            results.append(self._upload_tree_file(os.path.join(local_path, name)))

        for name, child_id in zip(folders, folder_ids):
            self._upload_level(os.path.join(local_path, name), child_id, results)
            self.client.enter_parent_directory()

    def _upload_tree_file(self, file_path):
        name = os.path.basename(file_path)
        self.reporter.file_started(name, "upload")
        try:
            self.upload_file(
                file_path, lambda progress: self.reporter.file_progress(name, progress)
            )
        except (WDBridgeError, OSError) as e:
            if isinstance(e, OSError):
                self.client.stats.update(failed_uploads=1)
            self.reporter.file_failed(name, e)
            return TransferResult(name=name, path=file_path, success=False, error=e)

        self.reporter.file_done(name)
        return TransferResult(name=name, path=file_path, success=True)

    def _folder_created(self, name):
        self.client.stats.update(folders_created=1)
        self.reporter.folder_created(name)
