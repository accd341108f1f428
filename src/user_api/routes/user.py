"""User API routes."""

import logging
import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer
from user_api.middleware import get_trace_id
from user_api.services import get_user_store
from user_store.models.user import CreateUserRequest, UpdateUserRequest, User, UserFields, UserPage
from user_store.results import Err, Ok, StoreErrorKind
from user_store.services.user_store import UserStore
from user_store.validation import format_errors, validate_user_fields

logger = logging.getLogger(__name__)

# Declares the bearer scheme in the OpenAPI document; the auth middleware enforces it
bearer_scheme = HTTPBearer(auto_error=False, description="API token sent as `Authorization: Bearer <token>`")

router = APIRouter(
    prefix="/users",
    tags=["users"],
    redirect_slashes=False,
    dependencies=[Depends(bearer_scheme)],
)

MAX_PAGE_SIZE = 200
DEFAULT_PAGE_SIZE = 50

STORE_UNAVAILABLE = "User store unavailable."
USER_NOT_FOUND = "User not found."
EMAIL_EXISTS = "Email already exists."

_STORE_IO_ERRORS = (StoreErrorKind.STORE_UNAVAILABLE, StoreErrorKind.STORE_WRITE_FAILED)


def _parse_user_id(user_id: str) -> uuid.UUID:
    """Parse a path id; anything that is not a UUID cannot name a user."""
    try:
        return uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND) from None


def _validate(fields: UserFields) -> None:
    errors = validate_user_fields(fields.first_name, fields.last_name, fields.email)
    if errors:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=format_errors(errors))


def _unexpected_error(request: Request, exc: Exception, operation: str, user_id: str | None = None) -> JSONResponse:
    trace_id = get_trace_id(request)
    if user_id is not None:
        logger.error("Unhandled exception in %s for %s trace=%s", operation, user_id, trace_id, exc_info=exc)
    else:
        logger.error("Unhandled exception in %s trace=%s", operation, trace_id, exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error.", "traceId": trace_id},
    )


@router.get("", response_model=UserPage)
@router.get("/", response_model=UserPage)
async def list_users(
    request: Request,
    page: int = Query(1, description="1-based page number"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", description=f"Items per page (max {MAX_PAGE_SIZE})"),
    store: UserStore = Depends(get_user_store),
):
    """Get users with optional pagination."""
    if page < 1 or page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"page must be >= 1 and pageSize must be between 1 and {MAX_PAGE_SIZE}.",
        )

    try:
        match await store.list_all():
            case Ok(users):
                offset = (page - 1) * page_size
                return UserPage(
                    page=page,
                    page_size=page_size,
                    total=len(users),
                    total_pages=math.ceil(len(users) / page_size),
                    items=users[offset : offset + page_size],
                )
            case Err():
                raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE)
    except HTTPException:
        raise
    except Exception as e:
        return _unexpected_error(request, e, "list_users")


@router.get("/{user_id}", response_model=User)
async def get_user(request: Request, user_id: str, store: UserStore = Depends(get_user_store)):
    """Get a single user by id."""
    try:
        match await store.get_by_id(_parse_user_id(user_id)):
            case Ok(None):
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
            case Ok(user):
                return user
            case Err():
                raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE)
    except HTTPException:
        raise
    except Exception as e:
        return _unexpected_error(request, e, "get_user", user_id)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    response: Response,
    payload: CreateUserRequest,
    store: UserStore = Depends(get_user_store),
):
    """Create a new user."""
    _validate(payload)

    try:
        match await store.create(payload):
            case Ok(user):
                response.headers["Location"] = str(request.url_for("get_user", user_id=str(user.id)))
                return user
            case Err(kind=StoreErrorKind.VALIDATION_FAILED, message=message):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
            case Err(kind=kind) if kind in _STORE_IO_ERRORS:
                raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE)
            case Err(message=message):
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message or "Unable to create user.")
    except HTTPException:
        raise
    except Exception as e:
        return _unexpected_error(request, e, "create_user")


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(
    request: Request,
    user_id: str,
    payload: UpdateUserRequest,
    store: UserStore = Depends(get_user_store),
):
    """Update an existing user."""
    _validate(payload)

    try:
        match await store.update(_parse_user_id(user_id), payload):
            case Ok():
                return None
            case Err(kind=StoreErrorKind.VALIDATION_FAILED, message=message):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
            case Err(kind=kind) if kind in _STORE_IO_ERRORS:
                raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE)
            case Err(kind=StoreErrorKind.NOT_FOUND):
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
            case Err(kind=StoreErrorKind.DUPLICATE_EMAIL):
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=EMAIL_EXISTS)
            case _:
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to update user.")
    except HTTPException:
        raise
    except Exception as e:
        return _unexpected_error(request, e, "update_user", user_id)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(request: Request, user_id: str, store: UserStore = Depends(get_user_store)):
    """Delete a user by id."""
    try:
        match await store.delete(_parse_user_id(user_id)):
            case Ok(True):
                return None
            case Ok(False):
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
            case Err():
                raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE)
    except HTTPException:
        raise
    except Exception as e:
        return _unexpected_error(request, e, "delete_user", user_id)
