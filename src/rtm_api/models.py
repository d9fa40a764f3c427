"""Domain objects returned by the Remember The Milk API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Priority(str, Enum):
    """Task priority as sent on the wire."""

    HIGH = "1"
    MEDIUM = "2"
    LOW = "3"
    NONE = "N"


class Permission(str, Enum):
    """Permission level granted to an auth token."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"


@dataclass(frozen=True)
class TaskRef:
    """The three ids that address a task in modifying calls."""

    id: str
    taskseries_id: str
    list_id: str


@dataclass
class Note:
    """A note attached to a task series."""

    id: str
    title: str = ""
    text: str = ""
    created: datetime | None = None
    modified: datetime | None = None


@dataclass
class Task:
    """A single task occurrence inside a task series."""

    id: str
    taskseries_id: str
    list_id: str
    name: str
    created: datetime | None = None
    modified: datetime | None = None
    source: str = ""
    url: str = ""
    location_id: str = ""
    recurrence: str = ""
    tags: list[str] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    due: datetime | None = None
    has_due_time: bool = False
    added: datetime | None = None
    completed: datetime | None = None
    deleted: datetime | None = None
    priority: Priority = Priority.NONE
    postponed: int = 0
    estimate: str = ""

    @property
    def ref(self) -> TaskRef:
        return TaskRef(self.id, self.taskseries_id, self.list_id)

    @property
    def is_completed(self) -> bool:
        """Check if task is completed."""
        return self.completed is not None

    @property
    def is_deleted(self) -> bool:
        return self.deleted is not None


@dataclass
class TaskList:
    """A list, plain or smart."""

    id: str
    name: str
    deleted: bool = False
    locked: bool = False
    archived: bool = False
    position: int = 0
    smart: bool = False
    sort_order: int = 0
    filter: str | None = None


@dataclass
class Contact:
    id: str
    fullname: str = ""
    username: str = ""


@dataclass
class Group:
    id: str
    name: str
    contact_ids: list[str] = field(default_factory=list)


@dataclass
class Location:
    id: str
    name: str
    longitude: float = 0.0
    latitude: float = 0.0
    zoom: int = 0
    address: str = ""
    viewable: bool = False


@dataclass
class Timezone:
    id: str
    name: str
    dst: bool = False
    offset: int = 0
    current_offset: int = 0


@dataclass
class Settings:
    """User settings."""

    timezone: str = ""
    date_format: int = 0  # 0: European (14/02/06), 1: American (02/14/06)
    time_format: int = 0  # 0: 12 hour, 1: 24 hour
    default_list: str = ""
    language: str = ""


@dataclass
class MethodArgument:
    name: str
    optional: bool = False
    description: str = ""


@dataclass
class MethodError:
    code: int
    message: str
    description: str = ""


@dataclass
class MethodInfo:
    """Description of an API method, from rtm.reflection.getMethodInfo."""

    name: str
    needs_login: bool = False
    needs_signing: bool = False
    required_perms: int = 0
    description: str = ""
    response: str = ""
    arguments: list[MethodArgument] = field(default_factory=list)
    errors: list[MethodError] = field(default_factory=list)


@dataclass
class User:
    id: str
    username: str = ""
    fullname: str = ""


@dataclass
class Token:
    """Auth token plus what the server reported about it.

    Only ``token`` is sent back to the server; it is never inspected.
    """

    token: str
    perms: Permission | None = None
    user: User | None = None

    def __str__(self) -> str:
        return self.token


@dataclass
class SynchedTasks:
    """Tasks touched since a synchronization timestamp."""

    created: list[Task] = field(default_factory=list)
    modified: list[Task] = field(default_factory=list)
    deleted: list[Task] = field(default_factory=list)
    synched_at: datetime | None = None

    def __len__(self) -> int:
        return len(self.created) + len(self.modified) + len(self.deleted)
