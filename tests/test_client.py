"""Tests for the RTM client."""

import os
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from conftest import FAIL_98, Recorder

from rtm_api import (
    ConfigurationError,
    Priority,
    RtmClient,
    RtmConfig,
    RtmServerError,
    TaskRef,
)

OK = b'<rsp stat="ok"><transaction id="1" undoable="0"/></rsp>'
MODIFIED = (
    b'<rsp stat="ok"><transaction id="2" undoable="1"/>'
    b'<list id="100"><taskseries id="10" name="Buy bananas"><task id="11" priority="1"/></taskseries></list>'
    b"</rsp>"
)
TASK = TaskRef(id="11", taskseries_id="10", list_id="100")


def make_client(*bodies, config=None):
    recorder = Recorder(*bodies)
    config = config or RtmConfig(api_key="K", shared_secret="S", token="T")
    return RtmClient(config=config, transport=recorder.transport()), recorder


class TestRtmClientBasics:
    """Test client construction."""

    def test_init_with_params(self):
        """Should initialize with explicit parameters."""
        with patch.dict(os.environ, {}, clear=True):
            client = RtmClient(api_key="key", shared_secret="secret", token="token")
        assert client.api_key == "key"
        assert client.token == "token"
        assert client.config.response_format == "json"

    def test_init_from_env(self):
        """Should read configuration from environment variables."""
        env = {
            "RTM_API_KEY": "env-key",
            "RTM_SHARED_SECRET": "env-secret",
            "RTM_AUTH_TOKEN": "env-token",
            "RTM_RESPONSE_FORMAT": "rest",
        }
        with patch.dict(os.environ, env, clear=True):
            client = RtmClient()
        assert client.api_key == "env-key"
        assert client.config.shared_secret == "env-secret"
        assert client.token == "env-token"
        assert client.config.response_format == "rest"

    def test_requires_api_key(self):
        """Should raise error when no api key is available."""
        with (
            patch.dict(os.environ, {}, clear=True),
            pytest.raises(ConfigurationError, match="api_key is required"),
        ):
            RtmClient()

    def test_context_manager(self):
        """Should work as context manager."""
        with RtmClient(api_key="key") as client:
            assert client.api_key == "key"


class TestEndToEnd:
    """Test complete calls against a stubbed server."""

    def test_invalid_token_surfaces_code_98(self):
        """Should raise the server failure once, without retrying."""
        client, recorder = make_client(FAIL_98)
        with pytest.raises(RtmServerError) as exc_info:
            client.tasks_get_list()

        assert exc_info.value.code == 98
        assert exc_info.value.message == "Login failed / Invalid auth token"
        assert len(recorder.requests) == 1
        sent = recorder.params
        assert sent["method"] == "rtm.tasks.getList"
        assert sent["api_key"] == "K"
        assert sent["auth_token"] == "T"
        assert "api_sig" in sent

    def test_execute_returns_failure_value(self):
        """Should hand back failed responses without raising."""
        client, _ = make_client(FAIL_98)
        response = client.execute("rtm.tasks.getList")
        assert not response.ok
        assert response.failure.code == 98

    def test_reserved_param_makes_no_call(self):
        """Should fail before any network call on a reserved name."""
        client, recorder = make_client(OK)
        with pytest.raises(ConfigurationError):
            client.execute("rtm.tasks.getList", {"api_key": "other"})
        assert recorder.requests == []

    def test_echo_reserved_method_name(self):
        """Should reject an echoed 'method' parameter like any reserved name."""
        client, recorder = make_client(OK)
        with pytest.raises(ConfigurationError, match="Reserved"):
            client.test_echo(method="x")
        assert recorder.requests == []

    def test_missing_token_makes_no_call(self):
        """Should refuse authenticated methods without a token."""
        client, recorder = make_client(OK, config=RtmConfig(api_key="K", shared_secret="S"))
        with pytest.raises(ConfigurationError, match="auth token"):
            client.lists_get_list()
        assert recorder.requests == []

    def test_echo_is_plain(self):
        """Should call rtm.test.echo without signature or token."""
        client, recorder = make_client(b'{"rsp": {"stat": "ok", "method": "rtm.test.echo", "foo": "bar"}}')
        echoed = client.test_echo(foo="bar")
        assert echoed["foo"] == "bar"
        assert "api_sig" not in recorder.params
        assert "auth_token" not in recorder.params

    def test_time_convert_is_signed_only(self):
        """Should sign time conversions without sending the token."""
        client, recorder = make_client(
            b'<rsp stat="ok"><time timezone="Europe/Rome">2012-03-14T11:00:00</time></rsp>'
        )
        converted = client.time_convert("Europe/Rome", datetime(2012, 3, 14, 10, tzinfo=timezone.utc))
        assert converted.hour == 11
        assert recorder.params["to_timezone"] == "Europe/Rome"
        assert recorder.params["time"] == "2012-03-14T10:00:00Z"
        assert "from_timezone" not in recorder.params
        assert "auth_token" not in recorder.params
        assert "api_sig" in recorder.params


class TestConvenienceOperations:
    """Test parameter assembly of the convenience methods."""

    def test_timelines_create(self):
        """Should return the timeline string."""
        client, _ = make_client(b'<rsp stat="ok"><timeline>12741021</timeline></rsp>')
        assert client.timelines_create() == "12741021"

    def test_tasks_add(self):
        """Should send name, list and smart-add flag."""
        client, recorder = make_client(MODIFIED)
        task = client.tasks_add("tl", "Buy bananas ^tomorrow", list_id="100", parse=True)
        assert task.id == "11"
        assert task.priority is Priority.HIGH
        assert recorder.params["parse"] == "1"
        assert recorder.params["list_id"] == "100"

    def test_tasks_get_list_omits_unset_filters(self):
        """Should not send parameters left as None."""
        client, recorder = make_client(b'<rsp stat="ok"><tasks/></rsp>')
        assert client.tasks_get_list(filter="status:incomplete") == []
        assert recorder.params["filter"] == "status:incomplete"
        assert "list_id" not in recorder.params

    def test_task_reference(self):
        """Should address tasks by list, series and task id."""
        client, recorder = make_client(MODIFIED)
        client.tasks_complete("tl", TASK)
        assert recorder.params["method"] == "rtm.tasks.complete"
        assert recorder.params["timeline"] == "tl"
        assert recorder.params["list_id"] == "100"
        assert recorder.params["taskseries_id"] == "10"
        assert recorder.params["task_id"] == "11"

    def test_task_object_accepted(self):
        """Should accept a decoded Task wherever a TaskRef is expected."""
        client, recorder = make_client(MODIFIED)
        task = client.tasks_add("tl", "Buy bananas")
        client.tasks_postpone("tl", task)
        assert recorder.params["task_id"] == "11"

    def test_tags_joined(self):
        """Should send tags as a comma separated list."""
        client, recorder = make_client(MODIFIED)
        client.tasks_add_tags("tl", TASK, ["food", "errand"])
        assert recorder.params["tags"] == "food,errand"

    def test_unset_values(self):
        """Should omit the value parameter to clear it."""
        client, recorder = make_client(MODIFIED)
        client.tasks_set_due_date("tl", TASK)
        assert "due" not in recorder.params
        client.tasks_set_estimate("tl", TASK)
        assert "estimate" not in recorder.params
        client.tasks_set_tags("tl", TASK)
        assert "tags" not in recorder.params

    def test_due_date(self):
        """Should send due dates in wire format."""
        client, recorder = make_client(MODIFIED)
        client.tasks_set_due_date("tl", TASK, datetime(2012, 3, 5, 17, tzinfo=timezone.utc), has_due_time=True)
        assert recorder.params["due"] == "2012-03-05T17:00:00Z"
        assert recorder.params["has_due_time"] == "1"

    def test_priority(self):
        """Should send priority codes."""
        client, recorder = make_client(MODIFIED)
        client.tasks_set_priority("tl", TASK, Priority.MEDIUM)
        assert recorder.params["priority"] == "2"
        client.tasks_set_priority("tl", TASK)
        assert recorder.params["priority"] == "N"

    def test_move_to(self):
        """Should send source and destination lists."""
        client, recorder = make_client(MODIFIED)
        client.tasks_move_to("tl", TASK, "200")
        assert recorder.params["from_list_id"] == "100"
        assert recorder.params["to_list_id"] == "200"
        assert "list_id" not in recorder.params

    def test_move_priority(self):
        """Should send the direction."""
        client, recorder = make_client(MODIFIED)
        client.tasks_move_priority("tl", TASK, up=False)
        assert recorder.params["direction"] == "down"

    def test_boolean_operations(self):
        """Should return True for acknowledged calls."""
        client, recorder = make_client(OK)
        assert client.lists_set_default("tl", "100") is True
        assert recorder.params["method"] == "rtm.lists.setDefaultList"
        assert client.groups_add_contact("tl", "9", "1") is True
        assert client.contacts_delete("tl", "1") is True
        assert client.tasks_notes_delete("tl", "n1") is True

    def test_boolean_operation_failure(self):
        """Should raise instead of returning False."""
        client, _ = make_client(b'<rsp stat="fail"><err code="320" msg="contact_id invalid"/></rsp>')
        with pytest.raises(RtmServerError):
            client.contacts_delete("tl", "bogus")

    def test_notes_add(self):
        """Should send the note title and text."""
        client, recorder = make_client(
            b'<rsp stat="ok"><transaction id="3"/><note id="n1" title="T">Body</note></rsp>'
        )
        note = client.tasks_notes_add("tl", TASK, "T", "Body")
        assert note.text == "Body"
        assert recorder.params["note_title"] == "T"
        assert recorder.params["note_text"] == "Body"

    def test_lists_add_smart(self):
        """Should send the filter for smart lists."""
        client, recorder = make_client(
            b'<rsp stat="ok"><list id="5" name="Urgent" smart="1"><filter>priority:1</filter></list></rsp>'
        )
        created = client.lists_add("tl", "Urgent", filter="priority:1")
        assert created.smart is True
        assert recorder.params["filter"] == "priority:1"

    def test_synched_list(self):
        """Should send last_sync and partition the reply."""
        client, recorder = make_client(
            b'<rsp stat="ok"><tasks><list id="1" current="2012-03-05T00:00:00Z">'
            b'<taskseries id="1" created="2012-03-04T00:00:00Z" name="New"><task id="11"/></taskseries>'
            b"</list></tasks></rsp>"
        )
        synched = client.tasks_get_synched_list(datetime(2012, 3, 3, tzinfo=timezone.utc))
        assert recorder.params["last_sync"] == "2012-03-03T00:00:00Z"
        assert [task.id for task in synched.created] == ["11"]

    def test_time_parse_european(self):
        """Should flag European date order."""
        client, recorder = make_client(b'<rsp stat="ok"><time precision="date">2012-03-04T00:00:00Z</time></rsp>')
        client.time_parse("04/03/2012", european=True)
        assert recorder.params["dateformat"] == "0"


# Integration tests - skip if no credentials
skip_no_rtm = pytest.mark.skipif(
    not os.environ.get("RTM_API_KEY")
    or not os.environ.get("RTM_SHARED_SECRET")
    or not os.environ.get("RTM_AUTH_TOKEN"),
    reason="RTM_API_KEY, RTM_SHARED_SECRET and RTM_AUTH_TOKEN required",
)


@skip_no_rtm
class TestRtmIntegration:
    """Integration tests for the RTM API (requires credentials)."""

    @pytest.fixture
    def client(self):
        """Create a client from environment variables."""
        with RtmClient() as client:
            yield client

    def test_check_token(self, client):
        """Should accept the configured token."""
        assert client.check_token().token == client.token

    def test_lists_get_list(self, client):
        """Should retrieve lists."""
        assert isinstance(client.lists_get_list(), list)
