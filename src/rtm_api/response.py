"""Response decoding.

Both response formats are reduced to the tree RTM's JSON format uses:
attributes become keys, element text becomes "$t", text-only elements
become plain strings and repeated elements become lists. A single child
may appear either as a value or as a one-item list, so extractors always
go through ``_as_list``.

Example:
    >>> response = decode(b'<rsp stat="ok"><timeline>12741021</timeline></rsp>')
    >>> response.get_string("timeline")
    '12741021'
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any

from rtm_api.dates import parse_datetime, require_datetime
from rtm_api.exceptions import RtmApiError, RtmServerError, ServerFailure
from rtm_api.models import (
    Contact,
    Group,
    Location,
    MethodArgument,
    MethodError,
    MethodInfo,
    Note,
    Permission,
    Priority,
    Settings,
    SynchedTasks,
    Task,
    TaskList,
    Timezone,
    Token,
    User,
)

logger = logging.getLogger(__name__)

STAT_OK = "ok"
STAT_FAIL = "fail"
TEXT_KEY = "$t"
UTF8_BOM = b"\xef\xbb\xbf"


# =========================================================================
# Tree helpers
# =========================================================================


def _element_to_node(element: ET.Element) -> Any:
    children = list(element)
    text = element.text or ""
    if not element.attrib and not children:
        return text if text.strip() else ""

    node: dict[str, Any] = dict(element.attrib)
    repeated: set[str] = set()
    for child in children:
        value = _element_to_node(child)
        if child.tag not in node:
            node[child.tag] = value
        elif child.tag in repeated:
            node[child.tag].append(value)
        else:
            node[child.tag] = [node[child.tag], value]
            repeated.add(child.tag)
    if text.strip():
        node[TEXT_KEY] = text
    return node


def _as_list(node: Any) -> list[Any]:
    if node is None or node == "" or node == []:
        return []
    if isinstance(node, list):
        return node
    return [node]


def _children(parent: Any, container: str, item: str) -> list[Any]:
    """Return the ``item`` entries under ``parent[container]``."""
    if not isinstance(parent, dict):
        return []
    holder = parent.get(container)
    if not isinstance(holder, dict):
        return []
    return _as_list(holder.get(item))


def _text(node: Any) -> str:
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, dict):
        value = node.get(TEXT_KEY, "")
        return value if isinstance(value, str) else str(value)
    return str(node)


def _require(node: Any, key: str, what: str) -> Any:
    if not isinstance(node, dict) or key not in node:
        raise RtmApiError(f"Missing '{key}' in {what}")
    return node[key]


def _flag(value: Any) -> bool:
    return _text(value) == "1"


def _int(value: Any, default: int = 0) -> int:
    text = _text(value)
    if not text:
        return default
    try:
        return int(text)
    except ValueError as e:
        raise RtmApiError(f"Expected an integer, got {text!r}") from e


def _float(value: Any) -> float:
    text = _text(value)
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError as e:
        raise RtmApiError(f"Expected a number, got {text!r}") from e


# =========================================================================
# Entity parsing
# =========================================================================


def _parse_note(node: Any) -> Note:
    return Note(
        id=_text(_require(node, "id", "note")),
        title=_text(node.get("title")),
        text=_text(node),
        created=parse_datetime(node.get("created")),
        modified=parse_datetime(node.get("modified")),
    )


def _parse_series(series: Any, list_id: str) -> list[Task]:
    """Parse the tasks of one task series."""
    if not isinstance(series, dict):
        raise RtmApiError(f"Malformed taskseries in list {list_id}")
    series_id = _text(_require(series, "id", "taskseries"))

    rrule = series.get("rrule")
    tags = [_text(tag) for tag in _children(series, "tags", "tag")]
    notes = [_parse_note(note) for note in _children(series, "notes", "note")]

    tasks = []
    for item in _as_list(series.get("task")):
        priority = _text(item.get("priority")) or Priority.NONE.value
        try:
            priority = Priority(priority)
        except ValueError as e:
            raise RtmApiError(f"Unknown priority: {priority!r}") from e

        tasks.append(
            Task(
                id=_text(_require(item, "id", f"task of series {series_id}")),
                taskseries_id=series_id,
                list_id=list_id,
                name=_text(series.get("name")),
                created=parse_datetime(series.get("created")),
                modified=parse_datetime(series.get("modified")),
                source=_text(series.get("source")),
                url=_text(series.get("url")),
                location_id=_text(series.get("location_id")),
                recurrence=_text(rrule),
                tags=tags,
                notes=notes,
                due=parse_datetime(item.get("due")),
                has_due_time=_flag(item.get("has_due_time")),
                added=parse_datetime(item.get("added")),
                completed=parse_datetime(item.get("completed")),
                deleted=parse_datetime(item.get("deleted")),
                priority=priority,
                postponed=_int(item.get("postponed")),
                estimate=_text(item.get("estimate")),
            )
        )
    return tasks


def _parse_list_tasks(list_node: Any) -> tuple[list[Task], list[Task]]:
    """Parse one <list> of a tasks payload into (tasks, deleted tasks)."""
    list_id = _text(_require(list_node, "id", "list"))

    tasks = []
    for series in _as_list(list_node.get("taskseries")):
        tasks.extend(_parse_series(series, list_id))

    deleted = []
    holder = list_node.get("deleted")
    if isinstance(holder, dict):
        for series in _as_list(holder.get("taskseries")):
            deleted.extend(_parse_series(series, list_id))
    return tasks, deleted


def _parse_task_list(node: Any) -> TaskList:
    filter_node = node.get("filter")
    return TaskList(
        id=_text(_require(node, "id", "list")),
        name=_text(node.get("name")),
        deleted=_flag(node.get("deleted")),
        locked=_flag(node.get("locked")),
        archived=_flag(node.get("archived")),
        position=_int(node.get("position")),
        smart=_flag(node.get("smart")),
        sort_order=_int(node.get("sort_order")),
        filter=_text(filter_node) if filter_node is not None else None,
    )


def _parse_contact(node: Any) -> Contact:
    return Contact(
        id=_text(_require(node, "id", "contact")),
        fullname=_text(node.get("fullname")),
        username=_text(node.get("username")),
    )


def _parse_group(node: Any) -> Group:
    return Group(
        id=_text(_require(node, "id", "group")),
        name=_text(node.get("name")),
        contact_ids=[
            _text(_require(contact, "id", "group contact"))
            for contact in _children(node, "contacts", "contact")
        ],
    )


def _parse_user(node: Any) -> User:
    return User(
        id=_text(_require(node, "id", "user")),
        username=_text(node.get("username")),
        fullname=_text(node.get("fullname")),
    )


# =========================================================================
# Response
# =========================================================================


class RtmResponse:
    """A decoded response: either a success payload or a ServerFailure.

    Decoding never raises for ``stat="fail"``; callers may inspect
    ``failure`` directly. Every ``get_*`` extractor raises RtmServerError
    on a failed response and RtmApiError when the payload lacks what it
    needs.
    """

    def __init__(
        self,
        stat: str,
        payload: dict[str, Any] | None = None,
        failure: ServerFailure | None = None,
    ):
        self.stat = stat
        self.payload = payload or {}
        self.failure = failure

    @property
    def ok(self) -> bool:
        return self.stat == STAT_OK

    def raise_for_failure(self) -> RtmResponse:
        """Raise RtmServerError if the server reported a failure."""
        if self.failure is not None:
            logger.debug(f"Server failure {self.failure.code}: {self.failure.message}")
            raise RtmServerError(self.failure)
        return self

    def _get(self, key: str) -> Any:
        self.raise_for_failure()
        return _require(self.payload, key, "response")

    @property
    def transaction_id(self) -> str | None:
        """Id of the undoable transaction, if the call created one."""
        transaction = self.payload.get("transaction")
        if isinstance(transaction, dict):
            return transaction.get("id")
        return None

    def get_status(self) -> bool:
        """Return True when the server acknowledged the call."""
        self.raise_for_failure()
        return self.ok

    def get_string(self, key: str) -> str:
        """Return the text of a top-level element (e.g., "timeline")."""
        value = _text(self._get(key))
        if not value:
            raise RtmApiError(f"Empty '{key}' in response")
        return value

    def get_echo(self) -> dict[str, str]:
        self.raise_for_failure()
        return {key: _text(value) for key, value in self.payload.items()}

    def get_frob(self) -> str:
        return self.get_string("frob")

    def get_login(self) -> User:
        return _parse_user(self._get("user"))

    def get_token(self) -> Token:
        auth = self._get("auth")
        token = _text(_require(auth, "token", "auth"))
        if not token:
            raise RtmApiError("Empty token in auth response")

        perms = _text(auth.get("perms"))
        try:
            permission = Permission(perms) if perms else None
        except ValueError as e:
            raise RtmApiError(f"Unknown permission: {perms!r}") from e

        user = auth.get("user")
        return Token(
            token=token,
            perms=permission,
            user=_parse_user(user) if user is not None else None,
        )

    def get_tasks(self) -> list[Task]:
        """Return every task of a tasks payload."""
        self._get("tasks")
        tasks = []
        for list_node in _children(self.payload, "tasks", "list"):
            list_tasks, _ = _parse_list_tasks(list_node)
            tasks.extend(list_tasks)
        return tasks

    def get_synched_tasks(self, last_sync: datetime) -> SynchedTasks:
        """Split a tasks payload requested with ``last_sync`` into partitions.

        Raises:
            RtmApiError: If a task id falls in more than one partition.
        """
        if last_sync.tzinfo is None:
            last_sync = last_sync.replace(tzinfo=timezone.utc)

        result = SynchedTasks()
        self._get("tasks")
        for list_node in _children(self.payload, "tasks", "list"):
            current = parse_datetime(list_node.get("current"))
            if current is not None and (result.synched_at is None or current > result.synched_at):
                result.synched_at = current

            tasks, deleted = _parse_list_tasks(list_node)
            result.deleted.extend(deleted)
            for task in tasks:
                if task.is_deleted:
                    result.deleted.append(task)
                elif task.created is not None and task.created > last_sync:
                    result.created.append(task)
                else:
                    result.modified.append(task)

        seen: dict[str, str] = {}
        for partition in ("created", "modified", "deleted"):
            unique = []
            for task in getattr(result, partition):
                previous = seen.setdefault(task.id, partition)
                if previous != partition:
                    logger.error(f"Task {task.id} reported as both {previous} and {partition}")
                    raise RtmApiError(f"Task {task.id} is both {previous} and {partition}")
                if task.id not in {kept.id for kept in unique}:
                    unique.append(task)
            setattr(result, partition, unique)
        return result

    def get_modified_tasks(self) -> list[Task]:
        """Return the tasks of the list echoed back by a modifying call."""
        tasks, _ = _parse_list_tasks(self._get("list"))
        return tasks

    def get_task(self) -> Task:
        tasks = self.get_modified_tasks()
        if not tasks:
            raise RtmApiError("Response contains no task")
        return tasks[0]

    def get_list(self) -> TaskList:
        return _parse_task_list(self._get("list"))

    def get_lists(self) -> list[TaskList]:
        self._get("lists")
        return [_parse_task_list(node) for node in _children(self.payload, "lists", "list")]

    def get_contact(self) -> Contact:
        return _parse_contact(self._get("contact"))

    def get_contacts(self) -> list[Contact]:
        self._get("contacts")
        return [_parse_contact(node) for node in _children(self.payload, "contacts", "contact")]

    def get_group(self) -> Group:
        return _parse_group(self._get("group"))

    def get_groups(self) -> list[Group]:
        self._get("groups")
        return [_parse_group(node) for node in _children(self.payload, "groups", "group")]

    def get_locations(self) -> list[Location]:
        self._get("locations")
        return [
            Location(
                id=_text(_require(node, "id", "location")),
                name=_text(node.get("name")),
                longitude=_float(node.get("longitude")),
                latitude=_float(node.get("latitude")),
                zoom=_int(node.get("zoom")),
                address=_text(node.get("address")),
                viewable=_flag(node.get("viewable")),
            )
            for node in _children(self.payload, "locations", "location")
        ]

    def get_timezones(self) -> list[Timezone]:
        self._get("timezones")
        return [
            Timezone(
                id=_text(_require(node, "id", "timezone")),
                name=_text(node.get("name")),
                dst=_flag(node.get("dst")),
                offset=_int(node.get("offset")),
                current_offset=_int(node.get("current_offset")),
            )
            for node in _children(self.payload, "timezones", "timezone")
        ]

    def get_settings(self) -> Settings:
        node = self._get("settings")
        if not isinstance(node, dict):
            raise RtmApiError("Malformed settings in response")
        return Settings(
            timezone=_text(node.get("timezone")),
            date_format=_int(node.get("dateformat")),
            time_format=_int(node.get("timeformat")),
            default_list=_text(node.get("defaultlist")),
            language=_text(node.get("language")),
        )

    def get_date(self, key: str = "time") -> datetime:
        return require_datetime(_text(self._get(key)))

    def get_methods(self) -> list[str]:
        self._get("methods")
        return [_text(node) for node in _children(self.payload, "methods", "method")]

    def get_method_info(self) -> MethodInfo:
        node = self._get("method")
        return MethodInfo(
            name=_text(_require(node, "name", "method")),
            needs_login=_flag(node.get("needslogin")),
            needs_signing=_flag(node.get("needssigning")),
            required_perms=_int(node.get("requiredperms")),
            description=_text(node.get("description")),
            response=_text(node.get("response")),
            arguments=[
                MethodArgument(
                    name=_text(_require(arg, "name", "argument")),
                    optional=_flag(arg.get("optional")),
                    description=_text(arg),
                )
                for arg in _children(node, "arguments", "argument")
            ],
            errors=[
                MethodError(
                    code=_int(_require(err, "code", "error")),
                    message=_text(err.get("message")),
                    description=_text(err),
                )
                for err in _children(node, "errors", "error")
            ],
        )

    def get_note(self) -> Note:
        return _parse_note(self._get("note"))

    def __repr__(self) -> str:
        if self.failure is not None:
            return f"RtmResponse(stat={self.stat!r}, failure={self.failure!r})"
        return f"RtmResponse(stat={self.stat!r}, keys={sorted(self.payload)})"


# =========================================================================
# Decoding
# =========================================================================


def _parse_xml(raw: bytes) -> dict[str, Any]:
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise RtmApiError(f"Malformed XML response: {e}") from e
    if root.tag != "rsp":
        raise RtmApiError(f"Unexpected root element <{root.tag}>")
    node = _element_to_node(root)
    return node if isinstance(node, dict) else {}


def _parse_json(raw: bytes) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RtmApiError(f"Malformed JSON response: {e}") from e
    rsp = data.get("rsp") if isinstance(data, dict) else None
    if not isinstance(rsp, dict):
        raise RtmApiError("JSON response has no 'rsp' object")
    return rsp


def decode(raw: bytes | str) -> RtmResponse:
    """Decode a raw response body.

    Args:
        raw: Response body, XML or JSON.

    Returns:
        RtmResponse, successful or carrying a ServerFailure.

    Raises:
        RtmApiError: If the body is not a well-formed RTM response.
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    raw = raw.removeprefix(UTF8_BOM)

    head = raw.lstrip()[:1]
    if head == b"<":
        rsp = _parse_xml(raw)
    elif head == b"{":
        rsp = _parse_json(raw)
    else:
        logger.error(f"Unrecognised response body: {raw[:80]!r}")
        raise RtmApiError("Response is neither XML nor JSON")

    payload = dict(rsp)
    stat = payload.pop("stat", None)

    if stat == STAT_OK:
        return RtmResponse(STAT_OK, payload=payload)

    if stat == STAT_FAIL:
        err = _require(payload, "err", "failed response")
        code = _text(_require(err, "code", "err"))
        if not code:
            raise RtmApiError("Failed response has an empty error code")
        failure = ServerFailure(
            code=_int(code),
            message=_text(err.get("msg")),
        )
        logger.debug(f"Decoded server failure {failure.code}: {failure.message}")
        return RtmResponse(STAT_FAIL, failure=failure)

    logger.error(f"Response has unknown status {stat!r}")
    raise RtmApiError(f"Unknown response status: {stat!r}")
