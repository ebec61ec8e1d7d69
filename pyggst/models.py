# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Pydantic models for the pyggst SDK.

Provides validated configuration for the client and for replay queries.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import InvalidParametersError
from .protocol import MAX_PAGE_INDEX, MAX_REPLAYS_PER_PAGE
from .types import Character, Floor

DEFAULT_BASE_URL = "https://ggst-api-proxy.herokuapp.com"
DEFAULT_UTILS_BASE_URL = "https://ggst-utils-default-rtdb.europe-west1.firebasedatabase.app"


def _invalid(error: ValidationError) -> InvalidParametersError:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return InvalidParametersError(
        f"Invalid {field or 'parameters'}: {first['msg']}",
        field,
        first.get("input"),
    )


# ============================================================================
# Configuration Models
# ============================================================================


class ClientConfig(BaseModel):
    """
    Configuration for the GGST client.

    This is the "context" every request is issued with: the session token
    plus the service endpoints.
    """

    model_config = ConfigDict(validate_assignment=True)

    token: str = Field(description="Hex-encoded session token sent in every request envelope")
    base_url: str = DEFAULT_BASE_URL
    utils_base_url: str = DEFAULT_UTILS_BASE_URL
    request_timeout_ms: int = Field(default=30000, ge=100, le=300000)
    max_workers: int = Field(default=1, ge=1, le=16, description="Pages fetched in parallel")

    # TLS settings
    tls_ca_file: str | None = None
    tls_insecure_skip_verify: bool = False

    user_agent: str = "pyggst"

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        if not v or len(v) % 2:
            raise ValueError("Token must be a non-empty, even-length hex string")
        try:
            bytes.fromhex(v)
        except ValueError:
            raise ValueError("Token must be valid hexadecimal")
        return v.lower()

    @field_validator("base_url", "utils_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def token_bytes(self) -> bytes:
        return bytes.fromhex(self.token)

    def with_base_url(self, base_url: str) -> ClientConfig:
        """Return a copy pointed at another API host."""
        return self._rebuild(base_url=base_url)

    def with_utils_base_url(self, utils_base_url: str) -> ClientConfig:
        """Return a copy pointed at another user id lookup host."""
        return self._rebuild(utils_base_url=utils_base_url)

    def _rebuild(self, **changes: Any) -> ClientConfig:
        try:
            return ClientConfig.model_validate({**self.model_dump(), **changes})
        except ValidationError as e:
            raise _invalid(e) from e


class QueryParameters(BaseModel):
    """
    Filters for one replay catalog page.

    Immutable. Use the ``with_*`` methods to derive variations:

        >>> query = QueryParameters().with_floor_range(Floor.F10, Floor.CELESTIAL)
        >>> query = query.with_character(Character.SOL)

    Defaults cover the whole floor range with no character filter.
    """

    model_config = ConfigDict(frozen=True)

    page_index: int = Field(default=0, ge=0, le=MAX_PAGE_INDEX)
    replays_per_page: int = Field(default=MAX_REPLAYS_PER_PAGE, ge=1, le=MAX_REPLAYS_PER_PAGE)
    min_floor: Floor = Floor.F1
    max_floor: Floor = Floor.CELESTIAL
    character: Character | None = None

    @model_validator(mode="after")
    def check_floor_range(self) -> QueryParameters:
        if self.min_floor > self.max_floor:
            raise ValueError(f"min_floor {self.min_floor} is above max_floor {self.max_floor}")
        return self

    @classmethod
    def create(cls, **values: Any) -> QueryParameters:
        """Validate values, raising InvalidParametersError instead of ValidationError."""
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise _invalid(e) from e

    def with_page(self, page_index: int) -> QueryParameters:
        return self._rebuild(page_index=page_index)

    def with_replays_per_page(self, replays_per_page: int) -> QueryParameters:
        return self._rebuild(replays_per_page=replays_per_page)

    def with_floor_range(self, min_floor: Floor, max_floor: Floor) -> QueryParameters:
        return self._rebuild(min_floor=min_floor, max_floor=max_floor)

    def with_character(self, character: Character | None) -> QueryParameters:
        return self._rebuild(character=character)

    def _rebuild(self, **changes: Any) -> QueryParameters:
        return QueryParameters.create(**{**self.model_dump(), **changes})
