"""
Closed registry of tables served by the data-access layer.

`Table` values are the public camelCase names callers use; `sql_name` is the
PostgreSQL table behind each one. `TABLE_MODELS` binds every table to its
record shape.
"""
from __future__ import annotations

import enum
from typing import Any, Dict, Mapping, Type, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_camel, to_snake

from akibeks_data.domain.models import (
    ActivityLogRecord,
    ContactSubmissionRecord,
    ErrorLogRecord,
    ProjectMilestoneRecord,
    ProjectRecord,
    ProjectTaskRecord,
    RecordModel,
    ServiceInquiryRecord,
    ServiceRecord,
    SeoConfigurationRecord,
    SessionRecord,
    TestimonialRecord,
    UserRecord,
)
from akibeks_data.errors import InvalidRecordError, UnknownTableError


class Table(str, enum.Enum):
    USERS = "users"
    PROJECTS = "projects"
    PROJECT_MILESTONES = "projectMilestones"
    PROJECT_TASKS = "projectTasks"
    SERVICES = "services"
    SERVICE_INQUIRIES = "serviceInquiries"
    CONTACT_SUBMISSIONS = "contactSubmissions"
    TESTIMONIALS = "testimonials"
    SEO_CONFIGURATIONS = "seoConfigurations"
    ACTIVITY_LOGS = "activityLogs"
    SESSIONS = "sessions"
    ERROR_LOGS = "errorLogs"

    def __str__(self) -> str:
        return self.value

    @property
    def sql_name(self) -> str:
        return to_snake(self.value)

    @property
    def model(self) -> Type[RecordModel]:
        return TABLE_MODELS[self]


TableName = Union[Table, str]

TABLE_MODELS: Dict[Table, Type[RecordModel]] = {
    Table.USERS: UserRecord,
    Table.PROJECTS: ProjectRecord,
    Table.PROJECT_MILESTONES: ProjectMilestoneRecord,
    Table.PROJECT_TASKS: ProjectTaskRecord,
    Table.SERVICES: ServiceRecord,
    Table.SERVICE_INQUIRIES: ServiceInquiryRecord,
    Table.CONTACT_SUBMISSIONS: ContactSubmissionRecord,
    Table.TESTIMONIALS: TestimonialRecord,
    Table.SEO_CONFIGURATIONS: SeoConfigurationRecord,
    Table.ACTIVITY_LOGS: ActivityLogRecord,
    Table.SESSIONS: SessionRecord,
    Table.ERROR_LOGS: ErrorLogRecord,
}

# Fields owned by the layer; callers cannot set them.
SYSTEM_FIELDS = frozenset({"id", "createdAt", "updatedAt"})


def resolve_table(name: TableName) -> Table:
    """Map a caller-supplied name onto the registry, or raise UnknownTableError."""
    if isinstance(name, Table):
        return name
    try:
        return Table(name)
    except ValueError:
        raise UnknownTableError(name) from None


def available_tables() -> list[str]:
    """List public table names in registry order."""
    return [table.value for table in Table]


def field_name(key: str) -> str:
    """Normalize a payload key to its camelCase record field."""
    return to_camel(key) if "_" in key else key


def column_name(field: str) -> str:
    """Map a camelCase record field to its snake_case SQL column."""
    return to_snake(field)


def normalize_payload(table: Table, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate a caller payload against the table's record shape.

    Keys are normalized to camelCase and system fields are dropped. Known
    fields come back in their validated form (e.g. "5" -> 5 for integers);
    unknown keys pass through untouched.
    """
    if not isinstance(payload, Mapping):
        raise InvalidRecordError(f"Record for {table} must be a mapping, got {type(payload).__name__}")

    data = {field_name(str(key)): value for key, value in payload.items()}
    data = {key: value for key, value in data.items() if key not in SYSTEM_FIELDS}

    try:
        validated = table.model.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise InvalidRecordError(f"Invalid record for {table}: {fields}") from exc

    declared = validated.model_dump(by_alias=True, exclude_unset=True)
    return {key: declared.get(key, value) for key, value in data.items()}


__all__ = [
    "SYSTEM_FIELDS",
    "TABLE_MODELS",
    "Table",
    "TableName",
    "available_tables",
    "column_name",
    "field_name",
    "normalize_payload",
    "resolve_table",
]
