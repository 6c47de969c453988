"""Pydantic models describing the OneSignal notifications API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OneSignalBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class NotificationRequest(OneSignalBaseModel):
    app_id: str
    headings: dict[str, str]
    contents: dict[str, str]
    url: str = "/"
    # OneSignal ignores a repeated request carrying the same key.
    external_id: str | None = None
    include_external_user_ids: list[str] | None = None
    included_segments: list[str] | None = None

    @model_validator(mode="after")
    def _require_audience(self) -> NotificationRequest:
        if not self.include_external_user_ids and not self.included_segments:
            raise ValueError("A notification needs recipients or a segment")
        return self


class NotificationResponse(OneSignalBaseModel):
    id: str | None = None
    recipients: int | None = None
    errors: list[str] | dict[str, object] | None = None


class ErrorResponse(OneSignalBaseModel):
    errors: list[str] | dict[str, object] = Field(default_factory=list[str])
