from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

FieldPath = tuple[str | int, ...]


@dataclass(frozen=True, slots=True)
class FieldError:
    path: FieldPath
    message: str

    @property
    def key(self) -> str:
        return format_field_path(self.path)

    def as_dict(self, step: int | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"path": self.key, "message": self.message}
        if step is not None:
            payload["step"] = step
        return payload


def format_field_path(path: Iterable[str | int]) -> str:
    return ".".join(str(segment) for segment in path)


def parse_field_path(raw: str) -> FieldPath:
    segments: list[str | int] = []
    for segment in raw.split("."):
        if not segment:
            continue
        segments.append(int(segment) if segment.isdigit() else segment)
    return tuple(segments)


class TalentGateError(Exception):
    pass


class ValidationFailed(TalentGateError):
    def __init__(self, errors: list[FieldError], message: str = "Please correct the highlighted fields"):
        super().__init__(message)
        self.errors = list(errors)
        self.message = message

    @property
    def first_step(self) -> int | None:
        from talentgate.core.form_schema import first_error_step

        return first_error_step(error.path for error in self.errors)


class ConflictError(TalentGateError):
    pass


class NotFoundError(TalentGateError, LookupError):
    pass


class TokenMintingError(TalentGateError):
    pass


class UploadRejected(TalentGateError, ValueError):
    pass
