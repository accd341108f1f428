"""User entity and request/response models for the User API."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """User entity model."""

    id: UUID = Field(..., description="Unique identifier for the user")
    first_name: str = Field(..., alias="firstName", description="Given name")
    last_name: str = Field(..., alias="lastName", description="Family name")
    email: str = Field(..., description="Email address (unique per user)")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
                "firstName": "Jane",
                "lastName": "Doe",
                "email": "jane.doe@example.com",
            }
        },
    )


class UserFields(BaseModel):
    """Writable user fields shared by the create and update payloads.

    Length and email-syntax rules are not declared here; they are checked by
    ``user_store.validation`` so that every violation is reported in one message.
    """

    first_name: str = Field(..., alias="firstName", description="Given name")
    last_name: str = Field(..., alias="lastName", description="Family name")
    email: str = Field(..., description="Email address (must be unique and valid format)")

    model_config = ConfigDict(populate_by_name=True)


class CreateUserRequest(UserFields):
    """Payload for creating a user."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "firstName": "Jane",
                "lastName": "Doe",
                "email": "jane.doe@example.com",
            }
        },
    )


class UpdateUserRequest(UserFields):
    """Payload for replacing a user's fields."""


class UserPage(BaseModel):
    """One page of the user listing."""

    page: int
    page_size: int = Field(..., alias="pageSize")
    total: int
    total_pages: int = Field(..., alias="totalPages")
    items: list[User]

    model_config = ConfigDict(populate_by_name=True)
