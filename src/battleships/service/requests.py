"""Request models accepted by the game manager."""

from __future__ import annotations

import re
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from battleships.engine.errors import ValidationError

_BEARER = re.compile(r"bearer", re.IGNORECASE)

RequestT = TypeVar("RequestT", bound="_Request")


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    token: str
    is_simulation: bool = False

    @classmethod
    def parse(cls: type[RequestT], data: dict[str, Any]) -> RequestT:
        """Validate raw request data, reporting problems as ``ValidationError``."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(f"Malformed {cls.__name__}: {exc.error_count()} error(s).") from exc


class FireRequest(_Request):
    row: int | None = None
    column: int | None = None
    ability: str | None = None

    @property
    def has_target(self) -> bool:
        return self.row is not None and self.column is not None


class ResetRequest(_Request):
    pass


class StatusRequest(_Request):
    pass


def normalize_token(token: str | None) -> str:
    """Strip the ``bearer`` scheme from an authorization value."""
    cleaned = _BEARER.sub("", token or "").strip()
    if not cleaned:
        raise ValidationError("Unauthorized: missing session token.")
    return cleaned


def derive_session_key(token: str | None, is_simulation: bool) -> str:
    """Key under which a caller's session is stored; test and live games are separate."""
    return f"{normalize_token(token)}-{is_simulation}"
