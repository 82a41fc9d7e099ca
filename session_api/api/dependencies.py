# session_api/api/dependencies.py

from flask import current_app, request

from session_api.entities.refresh_token import DeviceInfo
from session_api.services.container import ServiceContainer

EXTENSION_KEY = "session_api"


def get_services() -> ServiceContainer:
    return current_app.extensions[EXTENSION_KEY]


def device_info_from_request() -> DeviceInfo:
    # descriptive only, never used for authorization
    forwarded = request.headers.get("X-Forwarded-For", "")
    ip = forwarded.split(",")[0].strip() if forwarded else request.remote_addr
    return DeviceInfo(user_agent=request.headers.get("User-Agent") or None, ip=ip or None)
