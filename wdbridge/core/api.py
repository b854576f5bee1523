"""Remote API primitives for WD Bridge (wdbridge).

Every primitive issues exactly one request and reports the outcome as an
``OperationResult`` instead of raising, so the retry supervisor can tell an
expired session (HTTP 401) apart from any other failure.
"""

import json
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import requests

from wdbridge.core.config import (
    API_ORIGIN_TEMPLATE,
    BATCH_BOUNDARY,
    DIRECTORY_MIME_TYPE,
)
from wdbridge.models.entry import RemoteEntry
from wdbridge.utils.logger import get_api_logger

log = get_api_logger()

BATCH_STATUS_PATTERN = re.compile(r"HTTP/1\.[01] (\d{3})")


@dataclass
class OperationResult:
    """Outcome of a single remote call."""

    success: bool
    session_valid: bool = True
    error: Optional[BaseException] = None
    result: Any = None

    @classmethod
    def ok(cls, result=None):
        return cls(success=True, result=result)

    @classmethod
    def expired(cls):
        return cls(success=False, session_valid=False)

    @classmethod
    def failed(cls, error):
        return cls(success=False, error=error)


def format_mtime(moment=None):
    """Format a modification time the way the device expects it."""
    moment = moment or datetime.now()
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.isoformat(timespec="seconds")


def build_multipart(parts, boundary=None, subtype="related"):
    """
    Build a multipart body from a list of part bodies.

    Returns the content type and the encoded body.
    """
    boundary = boundary or str(uuid.uuid4())
    chunks = []
    for part in parts:
        chunks.append(f"--{boundary}\r\n\r\n{part}\r\n")
    chunks.append(f"--{boundary}--")
    return f"multipart/{subtype}; boundary={boundary}", "".join(chunks).encode()


class WDApi:
    """Stateless request builders for one cloud device."""

    def __init__(self, host):
        """Initialize with the device host (the tenant part of the origin)."""
        self.host = host
        self.origin = API_ORIGIN_TEMPLATE.format(host=host)

    def _report_failure(self, error, response=None):
        log.error("Something went wrong: %s", error)
        if response is not None:
            log.debug("Status code: %s", response.status_code)
        return OperationResult.failed(error)

    def list_folder(self, authorization, folder_id):
        """List the entries of a folder."""
        list_url = (
            f"{self.origin}/sdk/v2/filesSearch/parents?ids={folder_id}"
            "&fields=id,mimeType,name&pretty=false&orderBy=name&order=asc"
        )

        response = None
        try:
            response = requests.get(list_url, headers={"authorization": authorization})
            if response.status_code == 401:
                return OperationResult.expired()
            response.raise_for_status()
            data = response.json()
            if data is None:
                return OperationResult.ok([])
            if not isinstance(data, dict):
                raise TypeError(f"Unexpected listing body: {type(data).__name__}")
            entries = [
                RemoteEntry.from_api_response(item) for item in data.get("files") or []
            ]
        except (
            requests.exceptions.RequestException,
            ValueError,
            KeyError,
            AttributeError,
            TypeError,
        ) as e:
            return self._report_failure(e, response)

        return OperationResult.ok(entries)

    def make_directory(self, authorization, parent_id, name):
        """Create a folder and return its id."""
        mkdir_url = f"{self.origin}/sdk/v2/files?resolveNameConflict=true"
        content_type, body = build_multipart(
            [
                json.dumps(
                    {
                        "name": name,
                        "parentID": parent_id,
                        "mimeType": DIRECTORY_MIME_TYPE,
                    },
                    separators=(",", ":"),
                )
            ]
        )

        response = None
        try:
            response = requests.post(
                mkdir_url,
                headers={"authorization": authorization, "content-type": content_type},
                data=body,
            )
            if response.status_code == 401:
                return OperationResult.expired()
            response.raise_for_status()
            # The new folder id is only sent back in the location header
            folder_id = response.headers["location"].rstrip("/").split("/")[-1]
        except (requests.exceptions.RequestException, KeyError) as e:
            return self._report_failure(e, response)

        return OperationResult.ok(folder_id)

    def remove(self, authorization, entry_id):
        """Delete a file or folder through the batch endpoint."""
        batch_url = f"{self.origin}/sdk/v1/batch"
        inner_request = (
            "Content-Id: 0\r\n\r\n"
            f"DELETE /sdk/v2/files/{entry_id} HTTP/1.1\r\n"
            f"Host: {self.host}.remotewd.com\r\n"
            f"Authorization: {authorization}\r\n\r\n"
        )
        body = f"--{BATCH_BOUNDARY}\r\n{inner_request}\r\n--{BATCH_BOUNDARY}--".encode()

        response = None
        try:
            response = requests.post(
                batch_url,
                headers={
                    "authorization": authorization,
                    "content-type": f"multipart/mixed; boundary={BATCH_BOUNDARY}",
                    "content-length": str(len(body)),
                },
                data=body,
            )
            if response.status_code == 401:
                return OperationResult.expired()
            response.raise_for_status()
            content = response.text
        except requests.exceptions.RequestException as e:
            return self._report_failure(e, response)

        match = BATCH_STATUS_PATTERN.search(content or "")
        status = int(match.group(1)) if match else response.status_code
        if status == 401:
            return OperationResult.expired()
        if status != 200:
            return OperationResult.failed(
                requests.exceptions.HTTPError(
                    f"Batched delete of {entry_id} returned status {status}",
                    response=response,
                )
            )
        return OperationResult.ok(True)

    def get_file_size(self, authorization, file_id):
        """Query the size of a file in bytes."""
        size_url = f"{self.origin}/sdk/v2/files/{file_id}?pretty=false&fields=size"

        response = None
        try:
            response = requests.get(size_url, headers={"authorization": authorization})
            if response.status_code == 401:
                return OperationResult.expired()
            response.raise_for_status()
            size = int(response.json()["size"])
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError) as e:
            return self._report_failure(e, response)

        return OperationResult.ok(size)

    def start_activity(self, authorization):
        """Start an activity grouping the writes of one upload."""
        activity_url = f"{self.origin}/sdk/v1/activityStart"

        response = None
        try:
            response = requests.post(activity_url, headers={"authorization": authorization})
            if response.status_code == 401:
                return OperationResult.expired()
            response.raise_for_status()
            tag = response.json()["tag"]
        except (requests.exceptions.RequestException, ValueError, KeyError) as e:
            return self._report_failure(e, response)

        return OperationResult.ok(tag)

    def open_upload_session(self, authorization, activity_tag, parent_id, name, mtime):
        """Open a resumable upload session and return its chunk URL."""
        session_url = (
            f"{self.origin}/sdk/v2/files/resumable?resolveNameConflict=1&done=false"
        )
        content_type, body = build_multipart(
            [
                json.dumps(
                    {"name": name, "parentID": parent_id, "mTime": mtime},
                    separators=(",", ":"),
                ),
                "",
            ]
        )

        response = None
        try:
            response = requests.post(
                session_url,
                headers={
                    "authorization": authorization,
                    "x-activity-tag": activity_tag,
                    "content-type": content_type,
                },
                data=body,
            )
            if response.status_code == 401:
                return OperationResult.expired()
            response.raise_for_status()
            location = response.headers["location"]
        except (requests.exceptions.RequestException, KeyError) as e:
            return self._report_failure(e, response)

        return OperationResult.ok(f"{self.origin}{location}/resumable/content")

    def put_chunk(self, authorization, activity_tag, url, offset, done, data):
        """Write one block of an upload at the given offset."""
        chunk_url = f"{url}?offset={offset}&done={'true' if done else 'false'}"

        response = None
        try:
            response = requests.put(
                chunk_url,
                headers={"authorization": authorization, "x-activity-tag": activity_tag},
                data=data,
            )
            if response.status_code == 401:
                return OperationResult.expired()
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            return self._report_failure(e, response)

        return OperationResult.ok(True)

    def open_download(self, access_token, file_id):
        """
        Open a streaming download of a file's content.

        The token goes into the query string rather than a header. On success
        the result is the open response; the caller must close it.
        """
        download_url = (
            f"{self.origin}/sdk/v2/files/{file_id}/content"
            f"?download=true&access_token={access_token}"
        )

        response = None
        try:
            response = requests.get(download_url, stream=True)
            if response.status_code == 401:
                response.close()
                return OperationResult.expired()
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            if response is not None:
                response.close()
                # The error text carries the URL and with it the access token
                log.error(
                    "Download of %s failed with status %s", file_id, response.status_code
                )
            else:
                log.error("Download of %s failed: %s", file_id, type(e).__name__)
            return OperationResult.failed(e)

        return OperationResult.ok(response)
