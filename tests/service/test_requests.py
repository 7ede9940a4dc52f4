"""Tests for request parsing and session keys."""

import pytest

from battleships.engine.errors import ValidationError
from battleships.service.requests import (
    FireRequest,
    ResetRequest,
    derive_session_key,
    normalize_token,
)


@pytest.mark.parametrize("raw", ["abc", "Bearer abc", "bearer   abc", "BEARER abc "])
def test_normalize_token_strips_scheme(raw: str) -> None:
    assert normalize_token(raw) == "abc"


@pytest.mark.parametrize("raw", [None, "", "   ", "Bearer "])
def test_missing_token_is_rejected(raw) -> None:
    with pytest.raises(ValidationError):
        normalize_token(raw)


def test_session_key_separates_simulations() -> None:
    assert derive_session_key("Bearer abc", False) == "abc-False"
    assert derive_session_key("abc", True) == "abc-True"


def test_parse_accepts_wire_names() -> None:
    request = FireRequest.parse(
        {"token": "t", "isSimulation": True, "row": 3, "column": 4, "ability": "thor"}
    )
    assert request.is_simulation is True
    assert request.has_target
    assert request.ability == "thor"

    bare = FireRequest.parse({"token": "t"})
    assert not bare.has_target


def test_parse_reports_malformed_requests() -> None:
    with pytest.raises(ValidationError):
        FireRequest.parse({"token": "t", "row": "north"})
    with pytest.raises(ValidationError):
        ResetRequest.parse({})
