"""Tests for the client and its retry/re-authentication loop."""
import pytest
import requests
from unittest.mock import Mock

from wdbridge.core.api import OperationResult
from wdbridge.core.errors import AuthenticationError, RetryExhaustedError
from wdbridge.models.entry import RemoteEntry


class TestRetryLimited:
    """Test suite for WDClient.retry_limited."""

    def test_returns_data_on_first_success(self, client, auth):
        operation = Mock(return_value=OperationResult.ok("data"))

        assert client.retry_limited(10, "list files", operation) == "data"
        assert operation.call_count == 1
        auth.reauthenticate.assert_not_called()

    def test_retries_operational_failure(self, client, auth):
        operation = Mock(
            side_effect=[
                OperationResult.failed(requests.exceptions.ConnectionError()),
                OperationResult.failed(requests.exceptions.ConnectionError()),
                OperationResult.ok("data"),
            ]
        )

        assert client.retry_limited(10, "list files", operation) == "data"
        assert operation.call_count == 3
        auth.reauthenticate.assert_not_called()

    def test_expired_session_reauthenticates_once_then_replays(self, client, auth):
        calls = []

        def operation():
            calls.append(auth.reauthenticate.call_count)
            if len(calls) == 1:
                return OperationResult.expired()
            return OperationResult.ok("data")

        assert client.retry_limited(10, "list files", operation) == "data"
        assert auth.reauthenticate.call_count == 1
        # The replay happens after the re-authentication
        assert calls == [0, 1]

    def test_expiry_consumes_an_attempt(self, client, auth):
        operation = Mock(
            side_effect=[OperationResult.expired()]
            + [OperationResult.failed(ValueError("boom"))] * 9
            + [OperationResult.ok("late")]
        )

        with pytest.raises(RetryExhaustedError):
            client.retry_limited(10, "upload file", operation)

        assert operation.call_count == 10
        assert auth.reauthenticate.call_count == 1

    def test_raises_naming_action_after_ceiling(self, client):
        error = requests.exceptions.ConnectionError("down")
        operation = Mock(return_value=OperationResult.failed(error))

        with pytest.raises(RetryExhaustedError, match="tried to remove file 10 times") as exc_info:
            client.retry_limited(10, "remove file", operation)

        assert operation.call_count == 10
        assert exc_info.value.action == "remove file"
        assert exc_info.value.last_error is error

    def test_eleventh_attempt_never_made(self, client):
        outcomes = [OperationResult.failed(ValueError())] * 10 + [OperationResult.ok("x")]
        operation = Mock(side_effect=outcomes)

        with pytest.raises(RetryExhaustedError):
            client.retry_limited(10, "list files", operation)

        assert operation.call_count == 10

    def test_failed_reauthentication_surfaces(self, client, auth):
        auth.reauthenticate.side_effect = AuthenticationError("rejected")
        operation = Mock(return_value=OperationResult.expired())

        with pytest.raises(AuthenticationError):
            client.retry_limited(10, "list files", operation)

        assert operation.call_count == 1

    def test_no_reauthentication_after_final_attempt(self, client, auth):
        operation = Mock(return_value=OperationResult.expired())

        with pytest.raises(RetryExhaustedError, match="tried to list files 10 times"):
            client.retry_limited(10, "list files", operation)

        assert operation.call_count == 10
        assert auth.reauthenticate.call_count == 9

    def test_final_expiry_raises_retry_exhausted(self, client, auth):
        # A rejected login would only surface if the last 401 re-authenticated
        auth.reauthenticate.side_effect = [None, AuthenticationError("rejected")]
        operation = Mock(
            side_effect=[OperationResult.expired(), OperationResult.expired()]
        )

        with pytest.raises(RetryExhaustedError):
            client.retry_limited(2, "list files", operation)

        assert auth.reauthenticate.call_count == 1


class TestClientOperations:
    """Test suite for the folder operations of WDClient."""

    def test_list_files_uses_current_folder(self, client, api):
        entries = [RemoteEntry("f1", "a.txt", False)]
        api.list_folder.return_value = OperationResult.ok(entries)
        client.enter_directory("folder-7")

        assert client.list_files() == entries
        api.list_folder.assert_called_once_with("Bearer token", "folder-7")

    def test_list_files_at_root(self, client, api):
        api.list_folder.return_value = OperationResult.ok([])

        assert client.list_files() == []
        api.list_folder.assert_called_once_with("Bearer token", "root")

    def test_replay_uses_fresh_token(self, client, api, auth):
        api.list_folder.side_effect = [OperationResult.expired(), OperationResult.ok([])]
        auth.reauthenticate.side_effect = lambda: client.session.replace_token("fresh")

        client.list_files()

        tokens = [call.args[0] for call in api.list_folder.call_args_list]
        assert tokens == ["Bearer token", "Bearer fresh"]

    def test_create_directory_in_current_folder(self, client, api):
        api.make_directory.return_value = OperationResult.ok("new-id")
        client.enter_directory("parent")

        assert client.create_directory("Docs") == "new-id"
        api.make_directory.assert_called_once_with("Bearer token", "parent", "Docs")

    def test_remove_entry(self, client, api):
        api.remove.return_value = OperationResult.ok(True)

        assert client.remove_entry("e1") is True
        api.remove.assert_called_once_with("Bearer token", "e1")

    def test_remove_entry_exhausted(self, client, api):
        api.remove.return_value = OperationResult.failed(ValueError("batch 500"))

        with pytest.raises(RetryExhaustedError, match="remove file"):
            client.remove_entry("e1")

        assert api.remove.call_count == 10

    def test_navigation_helpers(self, client):
        client.enter_directory("a")
        client.enter_directory("b")
        client.enter_directory("c")
        client.remove_path_stack_entries(2)
        assert client.get_current_folder() == "a"

        assert client.enter_parent_directory() is True
        assert client.get_current_folder() == "root"

        client.set_path("z")
        assert client.get_current_folder() == "z"
