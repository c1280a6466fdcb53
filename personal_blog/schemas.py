"""Pydantic schemas for request and response validation."""

from datetime import datetime
from typing import Optional, List
from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 50000
CATEGORY_MAX_LENGTH = 50


def _require_text(value: Optional[str], field_name: str, max_length: int) -> str:
    """Strip surrounding whitespace and enforce non-empty, bounded text."""
    if value is None or not value.strip():
        raise ValueError(f'{field_name} cannot be empty')
    value = value.strip()
    if len(value) > max_length:
        raise ValueError(f'{field_name} must be at most {max_length} characters')
    return value


def _optional_category(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    value = value.strip()
    if len(value) > CATEGORY_MAX_LENGTH:
        raise ValueError(f'Category must be at most {CATEGORY_MAX_LENGTH} characters')
    return value


# Auth Schemas
class UserRegister(BaseModel):
    """Schema for user registration request."""

    username: str
    email: str
    password: str

    @field_validator('username', 'email')
    @classmethod
    def not_empty(cls, v: str) -> str:
        """Validate that username and email are not empty."""
        if not v or not v.strip():
            raise ValueError('Username, email and password fields are required')
        return v.strip()

    @field_validator('password')
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        """Validate that password is not empty."""
        if not v or not v.strip():
            raise ValueError('Username, email and password fields are required')
        return v


class UserLogin(BaseModel):
    """Schema for user login request."""

    email: str
    password: str

    @field_validator('email')
    @classmethod
    def email_not_empty(cls, v: str) -> str:
        """Validate that email is not empty; stripped as on registration."""
        if not v or not v.strip():
            raise ValueError('All fields are required')
        return v.strip()

    @field_validator('password')
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        """Validate that password is not empty."""
        if not v or not v.strip():
            raise ValueError('All fields are required')
        return v


class LoginResponse(BaseModel):
    """Schema for a successful login."""

    token: str
    username: str


class MessageResponse(BaseModel):
    message: str


# Blog Schemas
class BlogCreate(BaseModel):
    """Schema for blog creation request."""

    title: str
    content: str
    category: Optional[str] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_text(v, 'Title', TITLE_MAX_LENGTH)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _require_text(v, 'Content', CONTENT_MAX_LENGTH)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return _optional_category(v)


class BlogUpdate(BaseModel):
    """
    Schema for blog update request.

    Every field is optional; only the fields present in the request body are
    applied, and each is validated with the same rules as on creation.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        return _require_text(v, 'Title', TITLE_MAX_LENGTH)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: Optional[str]) -> str:
        return _require_text(v, 'Content', CONTENT_MAX_LENGTH)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return _optional_category(v)


class BlogResponse(BaseModel):
    """
    Schema for a blog post returned to clients.

    Serialized in camelCase; `author` is the author's user id and
    `authorName` their username.
    """

    id: int
    title: str
    content: str
    category: Optional[str] = None
    author: int = Field(validation_alias=AliasChoices('author_id', 'author'), serialization_alias='author')
    author_name: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class BlogPage(BaseModel):
    """Schema for a page of blog posts."""

    total_blogs: int
    current_page: int
    total_pages: int
    blogs: List[BlogResponse]

    class Config:
        populate_by_name = True
        alias_generator = to_camel


# Activity Schemas
class ActivityResponse(BaseModel):
    """Schema for an activity log record."""

    id: int
    user_id: int
    action: str
    resource: str
    resource_id: int
    timestamp: datetime

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class ActivityPage(BaseModel):
    total_activities: int
    current_page: int
    total_pages: int
    activities: List[ActivityResponse]

    class Config:
        populate_by_name = True
        alias_generator = to_camel
