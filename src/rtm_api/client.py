"""Remember The Milk API client.

Usage:
    from rtm_api import RtmClient

    # Reads RTM_API_KEY, RTM_SHARED_SECRET and RTM_AUTH_TOKEN if not given
    client = RtmClient()

    timeline = client.timelines_create()
    task = client.tasks_add(timeline, "Buy bananas")
    client.tasks_complete(timeline, task)

Modifying methods need a timeline from ``timelines_create``. Task methods
take a TaskRef; a Task works as well.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime

import httpx

from rtm_api import methods
from rtm_api.config import RtmConfig
from rtm_api.dates import to_wire
from rtm_api.models import (
    Contact,
    Group,
    Location,
    MethodInfo,
    Note,
    Priority,
    Settings,
    SynchedTasks,
    Task,
    TaskList,
    TaskRef,
    Timezone,
    Token,
    User,
)
from rtm_api.request import Request, RequestKind, build_request
from rtm_api.response import RtmResponse, decode
from rtm_api.transport import Transport

logger = logging.getLogger(__name__)


class RtmClient:
    """Remember The Milk API client.

    Every call performs one signed HTTP request and decodes the reply.
    Server refusals raise RtmServerError, broken responses RtmApiError and
    network problems TransportError. Nothing is retried.

    Example:
        >>> with RtmClient(api_key="key", shared_secret="secret", token="token") as client:
        ...     lists = client.lists_get_list()
    """

    def __init__(
        self,
        api_key: str | None = None,
        shared_secret: str | None = None,
        token: Token | str | None = None,
        response_format: str | None = None,
        timeout: float | None = None,
        config: RtmConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize RTM client.

        Args:
            api_key: API key. If None, reads from RTM_API_KEY env var.
            shared_secret: Shared secret. If None, reads from RTM_SHARED_SECRET.
            token: Auth token. If None, reads from RTM_AUTH_TOKEN.
            response_format: "json" or "rest". If None, reads from
                RTM_RESPONSE_FORMAT (default: "json").
            timeout: HTTP timeout in seconds.
            config: Complete configuration; overrides the other arguments.
            transport: Optional httpx transport (e.g., httpx.MockTransport).
        """
        if config is None:
            extra = {"timeout": timeout} if timeout is not None else {}
            config = RtmConfig.from_env(
                api_key=api_key,
                shared_secret=shared_secret,
                token=str(token) if token else None,
                response_format=response_format,
                **extra,
            )
        self.config = config
        self._transport = Transport(timeout=config.timeout, transport=transport)

    @property
    def api_key(self) -> str:
        return self.config.api_key

    @property
    def token(self) -> str | None:
        return self.config.token

    # =========================================================================
    # Core
    # =========================================================================

    def build(
        self,
        method: str,
        params: Mapping[str, str] | None = None,
        kind: RequestKind | None = None,
    ) -> Request:
        """Build the request for ``method`` without sending it."""
        return build_request(kind or methods.request_kind(method), method, self.config, params)

    def execute(
        self,
        method: str,
        params: Mapping[str, str] | None = None,
        kind: RequestKind | None = None,
    ) -> RtmResponse:
        """Call any RTM method and return the decoded response.

        A ``stat="fail"`` reply is returned, not raised; its ``failure``
        holds the server code and message.

        Args:
            method: RTM method name.
            params: Method parameters.
            kind: Request kind. Looked up from the method table if None.

        Returns:
            Decoded RtmResponse.
        """
        request = self.build(method, params, kind)
        response = decode(self._transport.send(request))
        if not response.ok:
            logger.debug(f"{method} failed with code {response.failure.code}")
        return response

    def _call(self, rtm_method: str, /, **params: str | None) -> RtmResponse:
        return self.execute(rtm_method, {k: v for k, v in params.items() if v is not None})

    def _task_call(
        self, rtm_method: str, timeline: str, task: TaskRef, /, **params: str | None
    ) -> list[Task]:
        return self._call(
            rtm_method,
            timeline=timeline,
            list_id=task.list_id,
            taskseries_id=task.taskseries_id,
            task_id=task.id,
            **params,
        ).get_modified_tasks()

    # =========================================================================
    # Test, auth, settings
    # =========================================================================

    def test_echo(self, **params: str) -> dict[str, str]:
        """Echo the parameters back."""
        return self._call(methods.TEST_ECHO, **params).get_echo()

    def test_login(self) -> User:
        """Return the user the token belongs to."""
        return self._call(methods.TEST_LOGIN).get_login()

    def check_token(self) -> Token:
        """Check the client's token.

        Raises:
            RtmServerError: Code 98 if the token is invalid.
        """
        return self._call(methods.AUTH_CHECK_TOKEN).get_token()

    def locations_get_list(self) -> list[Location]:
        return self._call(methods.LOCATIONS_GET_LIST).get_locations()

    def settings_get_list(self) -> Settings:
        return self._call(methods.SETTINGS_GET_LIST).get_settings()

    def timezones_get_list(self) -> list[Timezone]:
        return self._call(methods.TIMEZONES_GET_LIST).get_timezones()

    def timelines_create(self) -> str:
        """Create a timeline for a series of modifying calls."""
        return self._call(methods.TIMELINES_CREATE).get_string("timeline")

    # =========================================================================
    # Lists
    # =========================================================================

    def lists_get_list(self) -> list[TaskList]:
        return self._call(methods.LISTS_GET_LIST).get_lists()

    def lists_add(self, timeline: str, name: str, filter: str | None = None) -> TaskList:
        """Create a list, or a smart list when ``filter`` is given."""
        return self._call(methods.LISTS_ADD, timeline=timeline, name=name, filter=filter).get_list()

    def lists_delete(self, timeline: str, list_id: str) -> TaskList:
        return self._call(methods.LISTS_DELETE, timeline=timeline, list_id=list_id).get_list()

    def lists_archive(self, timeline: str, list_id: str) -> TaskList:
        return self._call(methods.LISTS_ARCHIVE, timeline=timeline, list_id=list_id).get_list()

    def lists_unarchive(self, timeline: str, list_id: str) -> TaskList:
        return self._call(methods.LISTS_UNARCHIVE, timeline=timeline, list_id=list_id).get_list()

    def lists_set_name(self, timeline: str, list_id: str, name: str) -> TaskList:
        return self._call(
            methods.LISTS_SET_NAME, timeline=timeline, list_id=list_id, name=name
        ).get_list()

    def lists_set_default(self, timeline: str, list_id: str) -> bool:
        return self._call(
            methods.LISTS_SET_DEFAULT, timeline=timeline, list_id=list_id
        ).get_status()

    # =========================================================================
    # Contacts and groups
    # =========================================================================

    def contacts_get_list(self) -> list[Contact]:
        return self._call(methods.CONTACTS_GET_LIST).get_contacts()

    def contacts_add(self, timeline: str, contact: str) -> Contact:
        """Add a contact.

        Args:
            timeline: Timeline string.
            contact: Username or email address of an RTM user.
        """
        return self._call(methods.CONTACTS_ADD, timeline=timeline, contact=contact).get_contact()

    def contacts_delete(self, timeline: str, contact_id: str) -> bool:
        return self._call(
            methods.CONTACTS_DELETE, timeline=timeline, contact_id=contact_id
        ).get_status()

    def groups_get_list(self) -> list[Group]:
        return self._call(methods.GROUPS_GET_LIST).get_groups()

    def groups_add(self, timeline: str, group: str) -> Group:
        return self._call(methods.GROUPS_ADD, timeline=timeline, group=group).get_group()

    def groups_add_contact(self, timeline: str, group_id: str, contact_id: str) -> bool:
        return self._call(
            methods.GROUPS_ADD_CONTACT, timeline=timeline, group_id=group_id, contact_id=contact_id
        ).get_status()

    def groups_remove_contact(self, timeline: str, group_id: str, contact_id: str) -> bool:
        return self._call(
            methods.GROUPS_REMOVE_CONTACT,
            timeline=timeline,
            group_id=group_id,
            contact_id=contact_id,
        ).get_status()

    def groups_delete(self, timeline: str, group_id: str) -> bool:
        return self._call(methods.GROUPS_DELETE, timeline=timeline, group_id=group_id).get_status()

    # =========================================================================
    # Time and reflection
    # =========================================================================

    def time_convert(
        self,
        to_timezone: str,
        time: datetime | None = None,
        from_timezone: str | None = None,
    ) -> datetime:
        """Convert a time (now if None) to another timezone.

        Args:
            to_timezone: Target timezone name (e.g., "Europe/Rome").
            time: Time to convert.
            from_timezone: Timezone of ``time``. UTC if None.
        """
        return self._call(
            methods.TIME_CONVERT,
            to_timezone=to_timezone,
            from_timezone=from_timezone,
            time=to_wire(time) if time is not None else None,
        ).get_date("time")

    def time_parse(
        self, text: str, timezone: str | None = None, european: bool = False
    ) -> datetime:
        """Parse free text (e.g., "tomorrow 5pm") into a time.

        Args:
            text: Text to parse.
            timezone: Timezone the text refers to.
            european: Read dates as dd/mm/yy instead of mm/dd/yy.
        """
        return self._call(
            methods.TIME_PARSE,
            text=text,
            timezone=timezone,
            dateformat="0" if european else None,
        ).get_date("time")

    def reflection_get_methods(self) -> list[str]:
        return self._call(methods.REFLECTION_GET_METHODS).get_methods()

    def reflection_get_method_info(self, method_name: str) -> MethodInfo:
        return self._call(
            methods.REFLECTION_GET_METHOD_INFO, method_name=method_name
        ).get_method_info()

    # =========================================================================
    # Tasks
    # =========================================================================

    def tasks_get_list(self, list_id: str | None = None, filter: str | None = None) -> list[Task]:
        """List tasks.

        Args:
            list_id: Restrict to one list.
            filter: RTM search filter (e.g., "status:incomplete").

        Returns:
            List of Task objects.
        """
        return self._call(methods.TASKS_GET_LIST, list_id=list_id, filter=filter).get_tasks()

    def tasks_get_synched_list(
        self,
        last_sync: datetime,
        list_id: str | None = None,
        filter: str | None = None,
    ) -> SynchedTasks:
        """List tasks created, modified or deleted since ``last_sync``."""
        return self._call(
            methods.TASKS_GET_LIST,
            list_id=list_id,
            filter=filter,
            last_sync=to_wire(last_sync),
        ).get_synched_tasks(last_sync)

    def tasks_add(
        self,
        timeline: str,
        name: str,
        list_id: str | None = None,
        parse: bool = False,
    ) -> Task:
        """Add a task.

        Args:
            timeline: Timeline string.
            name: Task name.
            list_id: Target list. The default list if None.
            parse: Let the server parse Smart Add syntax in ``name``.

        Returns:
            Created Task.
        """
        return self._call(
            methods.TASKS_ADD,
            timeline=timeline,
            name=name,
            list_id=list_id,
            parse="1" if parse else None,
        ).get_task()

    def tasks_add_tags(self, timeline: str, task: TaskRef, tags: Iterable[str]) -> list[Task]:
        return self._task_call(methods.TASKS_ADD_TAGS, timeline, task, tags=",".join(tags))

    def tasks_remove_tags(self, timeline: str, task: TaskRef, tags: Iterable[str]) -> list[Task]:
        return self._task_call(methods.TASKS_REMOVE_TAGS, timeline, task, tags=",".join(tags))

    def tasks_set_tags(self, timeline: str, task: TaskRef, tags: Iterable[str] = ()) -> list[Task]:
        """Replace the tags of a task. No tags clears them."""
        return self._task_call(methods.TASKS_SET_TAGS, timeline, task, tags=",".join(tags) or None)

    def tasks_delete(self, timeline: str, task: TaskRef) -> list[Task]:
        return self._task_call(methods.TASKS_DELETE, timeline, task)

    def tasks_complete(self, timeline: str, task: TaskRef) -> list[Task]:
        return self._task_call(methods.TASKS_COMPLETE, timeline, task)

    def tasks_uncomplete(self, timeline: str, task: TaskRef) -> list[Task]:
        return self._task_call(methods.TASKS_UNCOMPLETE, timeline, task)

    def tasks_move_priority(self, timeline: str, task: TaskRef, up: bool = True) -> list[Task]:
        return self._task_call(
            methods.TASKS_MOVE_PRIORITY, timeline, task, direction="up" if up else "down"
        )

    def tasks_move_to(self, timeline: str, task: TaskRef, to_list_id: str) -> list[Task]:
        return self._call(
            methods.TASKS_MOVE_TO,
            timeline=timeline,
            from_list_id=task.list_id,
            to_list_id=to_list_id,
            taskseries_id=task.taskseries_id,
            task_id=task.id,
        ).get_modified_tasks()

    def tasks_postpone(self, timeline: str, task: TaskRef) -> list[Task]:
        return self._task_call(methods.TASKS_POSTPONE, timeline, task)

    def tasks_set_due_date(
        self,
        timeline: str,
        task: TaskRef,
        due: datetime | date | str | None = None,
        has_due_time: bool = False,
        parse: bool = False,
    ) -> list[Task]:
        """Set or clear (``due=None``) the due date of a task.

        Args:
            timeline: Timeline string.
            task: Task to modify.
            due: Due date, or free text when ``parse`` is True.
            has_due_time: Whether the time of day is meaningful.
            parse: Let the server parse ``due`` as free text.
        """
        if due is None:
            return self._task_call(methods.TASKS_SET_DUE_DATE, timeline, task)

        return self._task_call(
            methods.TASKS_SET_DUE_DATE,
            timeline,
            task,
            due=due if isinstance(due, str) else to_wire(due),
            has_due_time="1" if has_due_time else None,
            parse="1" if parse else None,
        )

    def tasks_set_estimate(
        self, timeline: str, task: TaskRef, estimate: str | None = None
    ) -> list[Task]:
        """Set or clear an estimate (e.g., "2 hours")."""
        return self._task_call(methods.TASKS_SET_ESTIMATE, timeline, task, estimate=estimate)

    def tasks_set_location(
        self, timeline: str, task: TaskRef, location_id: str | None = None
    ) -> list[Task]:
        return self._task_call(methods.TASKS_SET_LOCATION, timeline, task, location_id=location_id)

    def tasks_set_name(self, timeline: str, task: TaskRef, name: str) -> list[Task]:
        return self._task_call(methods.TASKS_SET_NAME, timeline, task, name=name)

    def tasks_set_priority(
        self, timeline: str, task: TaskRef, priority: Priority | None = None
    ) -> list[Task]:
        """Set the priority of a task. None clears it."""
        value = Priority(priority).value if priority is not None else Priority.NONE.value
        return self._task_call(methods.TASKS_SET_PRIORITY, timeline, task, priority=value)

    def tasks_set_recurrence(
        self, timeline: str, task: TaskRef, repeat: str | None = None
    ) -> list[Task]:
        """Set or clear a recurrence (e.g., "every week")."""
        return self._task_call(methods.TASKS_SET_RECURRENCE, timeline, task, repeat=repeat)

    def tasks_set_url(self, timeline: str, task: TaskRef, url: str | None = None) -> list[Task]:
        return self._task_call(methods.TASKS_SET_URL, timeline, task, url=url)

    # =========================================================================
    # Notes
    # =========================================================================

    def tasks_notes_add(self, timeline: str, task: TaskRef, title: str, text: str) -> Note:
        return self._call(
            methods.TASKS_NOTES_ADD,
            timeline=timeline,
            list_id=task.list_id,
            taskseries_id=task.taskseries_id,
            task_id=task.id,
            note_title=title,
            note_text=text,
        ).get_note()

    def tasks_notes_delete(self, timeline: str, note_id: str) -> bool:
        return self._call(
            methods.TASKS_NOTES_DELETE, timeline=timeline, note_id=note_id
        ).get_status()

    def tasks_notes_edit(self, timeline: str, note_id: str, title: str, text: str) -> Note:
        return self._call(
            methods.TASKS_NOTES_EDIT,
            timeline=timeline,
            note_id=note_id,
            note_title=title,
            note_text=text,
        ).get_note()

    def close(self):
        """Close the HTTP client."""
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
