"""flagconv error hierarchy and structured error models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from flagconv.exit_codes import ExitCode


def _default_exit_code(category: ErrorCategory) -> ExitCode:
    mapping = {
        ErrorCategory.INPUT: ExitCode.INVALID_INPUT,
        ErrorCategory.STATE: ExitCode.STATE_ERROR,
        ErrorCategory.INTERNAL: ExitCode.INTERNAL_ERROR,
    }
    return mapping[category]


class ErrorCategory(str, Enum):
    INPUT = "input"
    STATE = "state"
    INTERNAL = "internal"


class Suggestion(BaseModel):
    action: str
    fix: str
    example: str | None = None


class ConversionError(Exception):
    """Base error for every failure raised by flagconv."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        suggestion: Suggestion | None = None,
        details: dict[str, Any] | None = None,
        exit_code: ExitCode | int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.suggestion = suggestion
        self.details = details or {}
        resolved_exit_code = exit_code if exit_code is not None else _default_exit_code(category)
        self.exit_code = int(resolved_exit_code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "category": self.category.value,
            "suggestion": self.suggestion.model_dump() if self.suggestion else None,
            "details": self.details,
        }


class MarshalError(ConversionError):
    """E1xxx: a value could not be converted to or from text.

    Codes:
        E1001 invalid literal, E1002 out of range, E1003 invalid base tag,
        E1004 unsupported kind, E1005 custom codec failure,
        E1006 sequence or mapping element failure.
    """

    def __init__(
        self,
        message: str,
        code: str = "E1000",
        suggestion: Suggestion | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            category=ErrorCategory.INPUT,
            suggestion=suggestion,
            details=details,
            exit_code=ExitCode.INVALID_INPUT,
        )


class LoadError(ConversionError):
    """E3xxx: the launcher could not load the requested options class."""

    def __init__(
        self,
        message: str,
        code: str = "E3000",
        suggestion: Suggestion | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            category=ErrorCategory.STATE,
            suggestion=suggestion,
            details=details,
            exit_code=ExitCode.STATE_ERROR,
        )


def element_error(exc: MarshalError, *, position: str) -> MarshalError:
    """Wrap a failed sequence/mapping element so the whole conversion fails."""
    return MarshalError(
        f"{position}: {exc.message}",
        code="E1006",
        details={"position": position, "cause": exc.to_dict()},
    )


def unsupported_type(type_name: str) -> MarshalError:
    return MarshalError(
        f"unsupported type {type_name}",
        code="E1004",
        suggestion=Suggestion(
            action="register a codec",
            fix=f"Give {type_name} marshal_text/unmarshal_text methods or register a codec for it.",
            example=f"default_registry.register({type_name}, MyCodec())",
        ),
        details={"type": type_name},
    )
