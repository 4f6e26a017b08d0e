"""
Query and result contracts shared by the engine, the backends and the facade.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Literal, Mapping, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from akibeks_data.errors import InvalidFilterError

T = TypeVar("T")

Record = Dict[str, Any]

OPERATORS = frozenset({"eq", "ne", "gt", "gte", "lt", "lte", "like", "ilike", "in"})


class FilterOption(BaseModel):
    """
    One column/operator/value predicate. Filters are always ANDed.

    `operator` is deliberately a plain string: unsupported operators survive
    parsing so the engine can ignore them (lenient) or reject them (strict).
    """

    column: str = Field(..., min_length=1)
    operator: str = "eq"
    value: Any = None

    model_config = ConfigDict(frozen=True)

    @field_validator("operator")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def supported(self) -> bool:
        return self.operator in OPERATORS


class QueryOptions(BaseModel):
    filters: List[FilterOption] = Field(default_factory=list)
    order_by: Optional[str] = None
    order_direction: Literal["asc", "desc"] = "asc"
    limit: Optional[int] = None
    offset: Optional[int] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    @field_validator("order_direction", mode="before")
    @classmethod
    def _direction(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


FilterInput = Union[FilterOption, Mapping[str, Any]]
OptionsInput = Union[QueryOptions, Mapping[str, Any], None]


def coerce_filters(filters: Optional[Sequence[FilterInput]]) -> List[FilterOption]:
    """Accept FilterOption objects or plain mappings; reject anything malformed."""
    if filters is None:
        return []
    if isinstance(filters, (str, bytes, Mapping)):
        raise InvalidFilterError("filters must be a list of filter options")
    try:
        return [f if isinstance(f, FilterOption) else FilterOption.model_validate(f) for f in filters]
    except ValidationError as exc:
        raise InvalidFilterError(f"Malformed filter: {exc.errors()[0]['msg']}") from exc


def coerce_options(options: OptionsInput) -> QueryOptions:
    if options is None:
        return QueryOptions()
    if isinstance(options, QueryOptions):
        return options
    if not isinstance(options, Mapping):
        raise InvalidFilterError(f"Query options must be a mapping, got {type(options).__name__}")
    data = dict(options)
    data["filters"] = coerce_filters(data.get("filters"))
    try:
        return QueryOptions.model_validate(data)
    except ValidationError as exc:
        raise InvalidFilterError(f"Malformed query options: {exc.errors()[0]['msg']}") from exc


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Uniform `{data, error}` envelope returned by every facade method.
    """

    data: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    data: List[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 1
    total_pages: int = 0
    has_next: bool = False
    has_prev: bool = False
    error: Optional[str] = None

    @classmethod
    def build(cls, data: List[T], total: int, page: int, page_size: int) -> "PaginatedResult[T]":
        total_pages = math.ceil(total / page_size)
        return cls(
            data=data,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = [
    "FilterInput",
    "FilterOption",
    "OPERATORS",
    "OptionsInput",
    "PaginatedResult",
    "QueryOptions",
    "Record",
    "Result",
    "coerce_filters",
    "coerce_options",
]
