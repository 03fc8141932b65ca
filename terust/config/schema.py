# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for terust.

Every config section gets its own frozen pydantic model. Frozen means once you
create it, you cannot mutate it. The whole config is built once at startup
and handed to the feed adapter, the build runner and the loop; nothing reads
module-level constants for account names, directories or ignore lists.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and observability."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        default="1.0.0",
        description="Schema version for compatibility tracking, e.g. '1.0.0'",
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(sorted(_VALID_LOG_LEVELS))}, got '{value}'"
            )
        return upper


class FeedConfig(BaseModel):
    """
    Where snippets come from.

    The feed is the public timeline of one account. Only posts authored by
    `screen_name` count as test items; in single-item mode a post by anyone
    else is rejected before it gets built.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    base_url: str = Field(
        default="https://api.twitter.com/1.1",
        description="REST API root the timeline endpoints hang off",
    )
    screen_name: str = Field(
        default="everyrust",
        min_length=1,
        description="Account whose timeline is the test corpus",
    )
    page_size: int = Field(
        default=200,
        ge=1,
        le=200,
        description="Items requested per timeline page (the API caps this at 200)",
    )
    include_reshares: bool = Field(
        default=False,
        description="Whether reshared posts count as test items",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Per-request HTTP timeout",
    )


class BuildConfig(BaseModel):
    """How each snippet gets compiled and where the artifacts live."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    compiler: str = Field(
        default="rustc",
        min_length=1,
        description="Compiler executable, looked up on PATH",
    )
    edition: str = Field(
        default="2021",
        description="Rust edition passed to the compiler",
    )
    suppressed_lints: list[str] = Field(
        default_factory=lambda: ["dead_code", "non_camel_case_types", "unused"],
        description="Lints passed as -A <lint>; snippets are fragments, not programs",
    )
    scratch_directory: str = Field(
        default=".terust-scratch",
        min_length=1,
        description="Per-run scratch area, recreated at start and removed at end",
    )
    build_timeout_seconds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Optional per-build timeout; unset means a build may run forever",
    )


class TerustConfig(BaseModel):
    """
    Top-level config container.

    Only `global` is usually present in a hand-written file; every other
    section falls back to its defaults, which describe the stock @everyrust
    setup.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global", default_factory=GlobalConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    ignored_ids: list[int] = Field(
        default_factory=list,
        description="Item ids known not to be code; counted as ignored, never built",
    )

    @field_validator("ignored_ids")
    @classmethod
    def _check_ids(cls, value: list[int]) -> list[int]:
        for item_id in value:
            if item_id < 0 or item_id >= 2**64:
                raise ValueError(f"ignored id {item_id} is not a 64-bit unsigned integer")
        return value
