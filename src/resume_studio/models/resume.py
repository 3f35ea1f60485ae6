"""Pydantic models for the résumé aggregate and its version snapshots."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from resume_studio.models.content import ResumeContent, ResumeTheme, TemplateId, new_id


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ResumeSnapshot(BaseModel):
    title: str
    template_id: TemplateId = Field(alias="templateId")
    content: ResumeContent
    theme: ResumeTheme

    model_config = {"populate_by_name": True}


class Resume(BaseModel):
    id: str = Field(default_factory=new_id)
    owner_id: str = Field(alias="ownerId")
    title: str
    template_id: TemplateId = Field("minimal", alias="templateId")
    content: ResumeContent
    theme: ResumeTheme = Field(default_factory=ResumeTheme)
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    model_config = {"populate_by_name": True}

    def snapshot(self) -> ResumeSnapshot:
        return ResumeSnapshot(
            title=self.title,
            template_id=self.template_id,
            content=self.content.model_copy(deep=True),
            theme=self.theme.model_copy(deep=True),
        )


class ResumeVersion(BaseModel):
    id: str = Field(default_factory=new_id)
    resume_id: str = Field(alias="resumeId")
    name: str
    snapshot: ResumeSnapshot
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")

    model_config = {"populate_by_name": True, "frozen": True}
