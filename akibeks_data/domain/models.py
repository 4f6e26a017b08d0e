"""
Record shapes for every table the data-access layer knows about.

Fields are snake_case in Python and camelCase on the wire (records handed to
and returned from `DataAccessLayer` use camelCase keys). Every field is
optional so partial payloads validate; extra keys are kept as-is. Validation
exists to reject wrong-typed values before they reach a backend.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PROJECT_STATUSES = ("planning", "in_progress", "completed", "on_hold")


class RecordModel(BaseModel):
    """
    Common identity and timestamp fields shared by all tables.
    """

    id: Optional[str] = Field(None, description="Primary key (UUID).")
    created_at: Optional[datetime] = Field(None, description="Row creation timestamp.")
    updated_at: Optional[datetime] = Field(None, description="Row update timestamp.")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )


class UserRecord(RecordModel):
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = Field(None, description="admin | user | client")
    is_active: Optional[bool] = None
    is_email_verified: Optional[bool] = None
    phone_number: Optional[str] = None
    county: Optional[str] = None
    last_login_at: Optional[datetime] = None


class ProjectRecord(RecordModel):
    title: Optional[str] = None
    description: Optional[str] = None
    client_id: Optional[str] = None
    manager_id: Optional[str] = None
    project_type: Optional[str] = None
    status: Optional[str] = Field(None, description="planning | in_progress | completed | on_hold")
    priority: Optional[str] = None
    budget_kes: Optional[Decimal] = None
    actual_cost_kes: Optional[Decimal] = None
    location: Optional[str] = None
    county: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    completion_percentage: Optional[int] = None
    featured: Optional[bool] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class ProjectMilestoneRecord(RecordModel):
    project_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: Optional[str] = None
    progress: Optional[int] = None
    budget_kes: Optional[Decimal] = None


class ProjectTaskRecord(RecordModel):
    project_id: Optional[str] = None
    milestone_id: Optional[str] = None
    assignee_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    estimated_hours: Optional[int] = None
    actual_hours: Optional[int] = None
    due_date: Optional[datetime] = None
    position: Optional[int] = None


class ServiceRecord(RecordModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    features: Optional[List[str]] = None
    price_range_min: Optional[Decimal] = None
    price_range_max: Optional[Decimal] = None
    duration_estimate: Optional[str] = None
    active: Optional[bool] = None
    featured: Optional[bool] = None
    position: Optional[int] = None


class ServiceInquiryRecord(RecordModel):
    service_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    county: Optional[str] = None
    project_description: Optional[str] = None
    budget_range: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None


class ContactSubmissionRecord(RecordModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    company: Optional[str] = None
    service_interest: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None
    status: Optional[str] = None


class TestimonialRecord(RecordModel):
    __test__ = False  # keep pytest from collecting this as a test class

    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    message: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    project_type: Optional[str] = None
    location: Optional[str] = None
    approved: Optional[bool] = None
    featured: Optional[bool] = None
    display_order: Optional[int] = None


class SeoConfigurationRecord(RecordModel):
    page_type: Optional[str] = None
    page_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[List[str]] = None
    canonical_url: Optional[str] = None
    og_title: Optional[str] = None
    og_image: Optional[str] = None
    structured_data: Optional[Dict[str, Any]] = None
    meta_robots: Optional[str] = None
    is_active: Optional[bool] = None
    priority: Optional[Decimal] = None
    change_frequency: Optional[str] = None


class ActivityLogRecord(RecordModel):
    user_id: Optional[str] = None
    action: Optional[str] = None
    resource: Optional[str] = None
    resource_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class SessionRecord(RecordModel):
    user_id: Optional[str] = None
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None


class ErrorLogRecord(RecordModel):
    level: Optional[str] = None
    message: Optional[str] = None
    error_code: Optional[str] = None
    stack: Optional[str] = None
    user_id: Optional[str] = None
    url: Optional[str] = None
    context: Optional[Dict[str, Any]] = None
    count: Optional[int] = None
    resolved: Optional[bool] = None


__all__ = [
    "ActivityLogRecord",
    "ContactSubmissionRecord",
    "ErrorLogRecord",
    "PROJECT_STATUSES",
    "ProjectMilestoneRecord",
    "ProjectRecord",
    "ProjectTaskRecord",
    "RecordModel",
    "ServiceInquiryRecord",
    "ServiceRecord",
    "SeoConfigurationRecord",
    "SessionRecord",
    "TestimonialRecord",
    "UserRecord",
]
