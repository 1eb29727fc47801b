"""Captcha Schemas — Pydantic models for the messages exchanged with the cache module.

Invariants:
    - CaptchaConfig: duration > 0, at least one level, difficulty factors > 0
    - AddSite and AddVisitor share CaptchaId, which rejects empty and whitespace-only ids
    - serialize_captcha_config() is the only producer of the ADD_CAPTCHA payload
    - AddVisitorResult mirrors the module's JSON reply field-for-field

Design Decisions:
    - Difficulty computation belongs to the caller; models only check shape, not tuning
    - extra="ignore" on AddVisitorResult: newer module versions may add reply fields
"""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


class Level(BaseModel):
    """One difficulty step: at `visitor_threshold` visitors, use `difficulty_factor`."""
    visitor_threshold: int = Field(ge=0)
    difficulty_factor: int = Field(gt=0)


class CaptchaConfig(BaseModel):
    """Payload of ADD_CAPTCHA — levels plus the visitor-count window in seconds."""
    model_config = ConfigDict(frozen=True)

    levels: list[Level] = Field(min_length=1)
    duration: int = Field(gt=0)


def _reject_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("captcha id cannot be blank")
    return v


CaptchaId = Annotated[str, Field(min_length=1), AfterValidator(_reject_blank)]


class AddSite(BaseModel):
    """Register a captcha configuration under `id`."""
    id: CaptchaId
    config: CaptchaConfig


class AddVisitor(BaseModel):
    """Record one visitor against captcha `id`."""
    id: CaptchaId


class AddVisitorResult(BaseModel):
    """Counter state the module reports after a visitor is added."""
    model_config = ConfigDict(extra="ignore")

    duration: int
    difficulty_factor: int


def serialize_captcha_config(config: CaptchaConfig) -> str:
    """Exact JSON string sent as the second ADD_CAPTCHA argument."""
    return config.model_dump_json()
