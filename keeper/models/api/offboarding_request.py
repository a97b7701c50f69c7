# keeper/models/api/offboarding_request.py
"""
Cognitive offboarding API request models.
Used by routes for input validation.
"""

from datetime import date

from pydantic import BaseModel, Field


class TriggerOffboardingRequest(BaseModel):
    """Request for starting a cognitive offboarding session."""

    employee_id: str = Field(..., min_length=1, description="Atlassian account id of the departing employee")
    triggered_by: str = Field(default="system", description="Who or what started the workflow")
    department: str | None = Field(default=None, max_length=200, description="Employee department")
    role: str | None = Field(default=None, max_length=200, description="Employee role")
    offboarding_date: date | None = Field(default=None, description="Planned last day")


class InterviewResponseItem(BaseModel):
    """One answered interview question."""

    question: str = Field(..., description="Question as it was asked")
    answer: str = Field(default="", description="Employee's answer")
    artifact_id: str | None = Field(default=None, description="Artifact the question was anchored to")


class ArchiveRequest(BaseModel):
    """Request for the archive phase. Empty responses are allowed."""

    responses: list[InterviewResponseItem] = Field(default_factory=list)


class CompleteWorkflowRequest(TriggerOffboardingRequest):
    """Trigger plus every phase in one call."""

    responses: list[InterviewResponseItem] = Field(default_factory=list)
