from typing import Optional, Type, TypeVar

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..services.admin_auth import AdminAuthorizer
from ..services.auth_provider import AuthUser
from .errors import BadRequest, format_validation_errors

bearer = HTTPBearer(auto_error=False)

BodyModel = TypeVar("BodyModel", bound=BaseModel)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_bearer_token(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[str]:
    """Token from `Authorization: Bearer <token>`, or None"""
    if not creds:
        return None
    return creds.credentials


def get_admin_authorizer(request: Request) -> AdminAuthorizer:
    settings = request.app.state.settings
    return AdminAuthorizer(request.app.state.auth_provider, settings.admin_auth_policy)


def get_current_identity(
    token: Optional[str] = Depends(get_bearer_token),
    authorizer: AdminAuthorizer = Depends(get_admin_authorizer),
) -> AuthUser:
    """Any authenticated caller"""
    return authorizer.authenticate(token)


def require_admin(
    token: Optional[str] = Depends(get_bearer_token),
    authorizer: AdminAuthorizer = Depends(get_admin_authorizer),
    db: Session = Depends(get_db),
) -> AuthUser:
    return authorizer.authorize_admin(db, token)


def admin_json_body(model: Type[BodyModel]):
    """
    Dependency that parses the JSON body into `model` once the caller has
    passed the admin check.

    The body is not read until authorization has succeeded, so an anonymous
    request with a broken body is still a 401. An empty body yields
    `model()`; missing fields are reported by the handler itself.
    """
    async def parse_body(
        request: Request,
        admin: AuthUser = Depends(require_admin),
    ) -> BodyModel:
        if not await request.body():
            return model()

        try:
            payload = await request.json()
        except ValueError as e:
            raise BadRequest("Invalid JSON body") from e

        if not isinstance(payload, dict):
            raise BadRequest("JSON body must be an object")

        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise BadRequest(format_validation_errors(e.errors())) from e

    return parse_body


def json_body_openapi(model: Type[BaseModel]) -> dict:
    """`openapi_extra` documenting a body parsed by `admin_json_body`"""
    return {
        "requestBody": {
            "required": False,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }
