"""Remember The Milk API client.

Usage:
    from rtm_api import AuthFlow, RtmClient, RtmConfig

    # One-time authorization
    flow = AuthFlow(RtmConfig.from_env())
    flow.request_frob()
    print(f"Visit: {flow.authorization_url('delete')}")
    token = flow.exchange_token()

    # Later calls
    client = RtmClient(token=token)
    tasks = client.tasks_get_list(filter="status:incomplete")
"""

from rtm_api.auth import AuthFlow, AuthState
from rtm_api.client import RtmClient
from rtm_api.config import RtmConfig
from rtm_api.exceptions import (
    AuthFlowStateError,
    ConfigurationError,
    RtmApiError,
    RtmError,
    RtmServerError,
    ServerFailure,
    TransportError,
)
from rtm_api.models import (
    Contact,
    Group,
    Location,
    MethodInfo,
    Note,
    Permission,
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
from rtm_api.params import ParameterSet
from rtm_api.request import Request, RequestKind, build_auth_url, build_request
from rtm_api.response import RtmResponse, decode
from rtm_api.signing import sign
from rtm_api.transport import Transport

__all__ = [
    "RtmClient",
    "RtmConfig",
    "AuthFlow",
    "AuthState",
    "ParameterSet",
    "Request",
    "RequestKind",
    "build_request",
    "build_auth_url",
    "sign",
    "Transport",
    "RtmResponse",
    "decode",
    "RtmError",
    "RtmServerError",
    "RtmApiError",
    "ConfigurationError",
    "AuthFlowStateError",
    "TransportError",
    "ServerFailure",
    "Task",
    "TaskRef",
    "TaskList",
    "Contact",
    "Group",
    "Location",
    "Timezone",
    "Note",
    "Settings",
    "MethodInfo",
    "SynchedTasks",
    "Token",
    "User",
    "Priority",
    "Permission",
]
