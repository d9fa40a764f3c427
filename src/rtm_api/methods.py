"""RTM method names and the request kind each one needs.

The table is not used to validate parameters; unknown or malformed
parameters are reported by the server.
"""

from __future__ import annotations

from rtm_api.request import RequestKind

AUTH_CHECK_TOKEN = "rtm.auth.checkToken"
AUTH_GET_FROB = "rtm.auth.getFrob"
AUTH_GET_TOKEN = "rtm.auth.getToken"

CONTACTS_ADD = "rtm.contacts.add"
CONTACTS_DELETE = "rtm.contacts.delete"
CONTACTS_GET_LIST = "rtm.contacts.getList"

GROUPS_ADD = "rtm.groups.add"
GROUPS_ADD_CONTACT = "rtm.groups.addContact"
GROUPS_DELETE = "rtm.groups.delete"
GROUPS_GET_LIST = "rtm.groups.getList"
GROUPS_REMOVE_CONTACT = "rtm.groups.removeContact"

LISTS_ADD = "rtm.lists.add"
LISTS_ARCHIVE = "rtm.lists.archive"
LISTS_DELETE = "rtm.lists.delete"
LISTS_GET_LIST = "rtm.lists.getList"
LISTS_SET_DEFAULT = "rtm.lists.setDefaultList"
LISTS_SET_NAME = "rtm.lists.setName"
LISTS_UNARCHIVE = "rtm.lists.unarchive"

LOCATIONS_GET_LIST = "rtm.locations.getList"

REFLECTION_GET_METHODS = "rtm.reflection.getMethods"
REFLECTION_GET_METHOD_INFO = "rtm.reflection.getMethodInfo"

SETTINGS_GET_LIST = "rtm.settings.getList"

TASKS_ADD = "rtm.tasks.add"
TASKS_ADD_TAGS = "rtm.tasks.addTags"
TASKS_COMPLETE = "rtm.tasks.complete"
TASKS_DELETE = "rtm.tasks.delete"
TASKS_GET_LIST = "rtm.tasks.getList"
TASKS_MOVE_PRIORITY = "rtm.tasks.movePriority"
TASKS_MOVE_TO = "rtm.tasks.moveTo"
TASKS_POSTPONE = "rtm.tasks.postpone"
TASKS_REMOVE_TAGS = "rtm.tasks.removeTags"
TASKS_SET_DUE_DATE = "rtm.tasks.setDueDate"
TASKS_SET_ESTIMATE = "rtm.tasks.setEstimate"
TASKS_SET_LOCATION = "rtm.tasks.setLocation"
TASKS_SET_NAME = "rtm.tasks.setName"
TASKS_SET_PRIORITY = "rtm.tasks.setPriority"
TASKS_SET_RECURRENCE = "rtm.tasks.setRecurrence"
TASKS_SET_TAGS = "rtm.tasks.setTags"
TASKS_SET_URL = "rtm.tasks.setURL"
TASKS_UNCOMPLETE = "rtm.tasks.uncomplete"

TASKS_NOTES_ADD = "rtm.tasks.notes.add"
TASKS_NOTES_DELETE = "rtm.tasks.notes.delete"
TASKS_NOTES_EDIT = "rtm.tasks.notes.edit"

TEST_ECHO = "rtm.test.echo"
TEST_LOGIN = "rtm.test.login"

TIME_CONVERT = "rtm.time.convert"
TIME_PARSE = "rtm.time.parse"

TIMELINES_CREATE = "rtm.timelines.create"

TIMEZONES_GET_LIST = "rtm.timezones.getList"

# Methods that carry no user token. rtm.auth.checkToken sends the token
# it checks, so it is built as an authenticated request.
_UNAUTHENTICATED = {
    TEST_ECHO: RequestKind.PLAIN,
    AUTH_GET_FROB: RequestKind.SIGNED,
    AUTH_GET_TOKEN: RequestKind.SIGNED,
    REFLECTION_GET_METHODS: RequestKind.SIGNED,
    REFLECTION_GET_METHOD_INFO: RequestKind.SIGNED,
    TIME_CONVERT: RequestKind.SIGNED,
    TIME_PARSE: RequestKind.SIGNED,
    TIMEZONES_GET_LIST: RequestKind.SIGNED,
}


def request_kind(method: str) -> RequestKind:
    """Return the request kind ``method`` needs.

    Methods outside the table are assumed to need an authenticated request.
    """
    return _UNAUTHENTICATED.get(method, RequestKind.AUTHENTICATED)
