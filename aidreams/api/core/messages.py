"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"

    # Authentication & Authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Community API key management
    API_KEY_CREATED = "API_KEY_CREATED"
    API_KEY_DELETED = "API_KEY_DELETED"
    API_KEY_NOT_FOUND = "API_KEY_NOT_FOUND"
    API_KEY_ALREADY_REGISTERED = "API_KEY_ALREADY_REGISTERED"

    # Rate limiting
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Generation
    STORY_GENERATED = "STORY_GENERATED"
    IMAGE_GENERATED = "IMAGE_GENERATED"
    DREAM_GENERATED = "DREAM_GENERATED"
    STORY_GENERATION_FAILED = "STORY_GENERATION_FAILED"
    IMAGE_GENERATION_FAILED = "IMAGE_GENERATION_FAILED"

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"


DEFAULT_MESSAGES = {
    # Success messages
    MessageCode.SUCCESS: "Operation completed successfully",
    # Authentication & Authorization
    MessageCode.AUTH_REQUIRED: "Authentication required",
    MessageCode.INVALID_TOKEN: "Invalid authentication token",
    # Community API key management
    MessageCode.API_KEY_CREATED: "API key added successfully",
    MessageCode.API_KEY_DELETED: "API key deleted successfully",
    MessageCode.API_KEY_NOT_FOUND: "API key not found",
    MessageCode.API_KEY_ALREADY_REGISTERED: "This API key is already registered",
    # Rate limiting
    MessageCode.RATE_LIMIT_EXCEEDED: "Too many requests, please try again later.",
    # Generation
    MessageCode.STORY_GENERATED: "Story generated successfully",
    MessageCode.IMAGE_GENERATED: "Image generated successfully",
    MessageCode.DREAM_GENERATED: "Dream generated successfully",
    MessageCode.STORY_GENERATION_FAILED: "Failed to generate AI story. Please try again.",
    MessageCode.IMAGE_GENERATION_FAILED: "Failed to generate AI image. Please try again.",
    # Validation errors
    MessageCode.INVALID_INPUT: "Invalid input provided",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.NOT_FOUND: "Resource not found",
}

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Base API response model with consistent structure and proper typing."""

    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Success"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
