from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from devcamper.core.config import Settings
from devcamper.core.errors import Forbidden, Unauthorized
from devcamper.core.security import InvalidToken, read_access_token
from devcamper.db.session import get_db
from devcamper.models.user import User
from devcamper.schemas.query import ListQuery
from devcamper.services.file_storage import FileStorage
from devcamper.services.geocoder import Geocoder
from devcamper.services.query_translator import translate

bearer = HTTPBearer(auto_error=False)

NOT_AUTHORIZED = "Not authorized to access this route"

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder

def get_file_storage(request: Request) -> FileStorage:
    return request.app.state.file_storage

def get_list_query(request: Request) -> ListQuery:
    return translate(request.query_params.multi_items())

def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> User:
    token = creds.credentials if creds else request.cookies.get(settings.JWT_COOKIE_NAME)
    if not token:
        raise Unauthorized(NOT_AUTHORIZED)
    try:
        user_id = read_access_token(token, settings.JWT_SECRET)
    except InvalidToken:
        raise Unauthorized(NOT_AUTHORIZED)
    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized(NOT_AUTHORIZED)
    return user

def require_role(*roles: str):
    def _inner(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise Forbidden(f"User role {user.role} is not authorized to access this route")
        return user
    return _inner
