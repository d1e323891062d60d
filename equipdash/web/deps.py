from importlib.resources import files
from typing import Optional

from fastapi import Header, Request
from fastapi.templating import Jinja2Templates

from equipdash.config import Settings
from equipdash.core.conflicts import ConflictFinder
from equipdash.core.enforcer import UniquenessEnforcer
from equipdash.core.resolution import ConflictResolver, Role
from equipdash.records.service import RecordService
from equipdash.store.base import RecordStore

templates = Jinja2Templates(
    directory=str(files("equipdash.web").joinpath("templates"))
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_finder(request: Request) -> ConflictFinder:
    return ConflictFinder(get_store(request))


def get_enforcer(request: Request) -> UniquenessEnforcer:
    return UniquenessEnforcer(get_store(request))


def get_resolver(request: Request) -> ConflictResolver:
    return ConflictResolver(get_store(request))


def get_records(request: Request) -> RecordService:
    return RecordService(get_store(request))


def get_role(request: Request, x_user_email: Optional[str] = Header(default=None)) -> Role:
    """Admin when the signed-in user's email is listed in EQUIPDASH_ADMIN_EMAILS."""
    return Role.ADMIN if get_settings(request).is_admin(x_user_email) else Role.USER
