"""
Job application models for JobTrack
Defines data structures for application management
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.status import ApplicationStatus, normalize_legacy_status


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class JobApplicationBase(BaseModel):
    """Base application model with common fields"""
    company_name: str = Field(..., min_length=1, description="Company name")
    position: str = Field(..., min_length=1, description="Position applied for")
    status: ApplicationStatus = Field(ApplicationStatus.APPLIED, description="Current application status")
    application_date: date = Field(..., description="Date the application was submitted")
    application_platform: Optional[str] = Field(None, description="Where the application was sent (LinkedIn, company site...)")
    job_type: Optional[str] = Field(None, description="Full-time, contract, internship...")
    location: Optional[str] = Field(None, description="Job location")
    salary: Optional[float] = Field(None, ge=0, description="Expected or offered salary")
    contact_person: Optional[str] = Field(None, description="Recruiter or hiring manager")
    contact_email: Optional[EmailStr] = Field(None, description="Contact email address")
    notes: Optional[str] = Field(None, description="Free-form notes")

    @field_validator("company_name", "position")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        if value is None:
            return ApplicationStatus.APPLIED
        return normalize_legacy_status(value)


class JobApplicationCreate(JobApplicationBase):
    """Model for creating a new application"""


class JobApplicationUpdate(BaseModel):
    """Model for updating an application; only set fields are applied"""
    company_name: Optional[str] = Field(None, min_length=1)
    position: Optional[str] = Field(None, min_length=1)
    status: Optional[ApplicationStatus] = None
    application_date: Optional[date] = None
    application_platform: Optional[str] = None
    job_type: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    notes: Optional[str] = None

    # Required fields may be left out of an update but never cleared.
    # Validators only run for keys present in the payload.
    @field_validator("company_name", "position", "application_date", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("cannot be cleared")
        return value

    @field_validator("company_name", "position")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        if value is None:
            raise ValueError("cannot be cleared")
        return normalize_legacy_status(value)


class JobApplication(JobApplicationBase):
    """Complete application model as held by the store"""
    id: str = Field(..., description="Unique application identifier")
    user_id: str = Field(..., description="User who owns this application")
    created_at: datetime = Field(..., description="When the application was recorded")
    updated_at: datetime = Field(..., description="Last mutation, including automatic rejections")

    class Config:
        from_attributes = True
