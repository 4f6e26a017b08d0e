"""
Seed records for the in-memory store.

Mirrors the content the marketing site shows when no database is reachable.
Timestamps are fixed so mock-mode reads are reproducible.
"""
from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List

from akibeks_data.domain.query import Record
from akibeks_data.domain.tables import Table


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


_SEED: Dict[Table, List[Record]] = {
    Table.USERS: [
        {
            "id": "1",
            "email": "admin@akibeks.co.ke",
            "firstName": "Admin",
            "lastName": "User",
            "role": "admin",
            "isActive": True,
            "county": "Nairobi",
            "createdAt": _ts("2024-01-01T08:00:00"),
            "updatedAt": _ts("2024-01-01T08:00:00"),
        },
    ],
    Table.PROJECTS: [
        {
            "id": "1",
            "title": "Westlands Office Complex",
            "description": "Modern office complex with sustainable design",
            "projectType": "commercial",
            "status": "in_progress",
            "priority": "high",
            "budgetKes": Decimal("25000000"),
            "location": "Westlands, Nairobi",
            "county": "Nairobi",
            "completionPercentage": 75,
            "clientId": "1",
            "featured": True,
            "createdAt": _ts("2024-01-15T10:00:00"),
            "updatedAt": _ts("2024-01-20T14:30:00"),
        },
        {
            "id": "2",
            "title": "Karen Residential Estate",
            "description": "Luxury residential development with modern amenities",
            "projectType": "residential",
            "status": "planning",
            "priority": "medium",
            "budgetKes": Decimal("18000000"),
            "location": "Karen, Nairobi",
            "county": "Nairobi",
            "completionPercentage": 30,
            "clientId": "2",
            "featured": False,
            "createdAt": _ts("2024-02-01T09:00:00"),
            "updatedAt": _ts("2024-02-05T16:00:00"),
        },
        {
            "id": "3",
            "title": "Industrial Park Phase 2",
            "description": "Expansion of existing industrial facilities",
            "projectType": "industrial",
            "status": "in_progress",
            "priority": "high",
            "budgetKes": Decimal("35000000"),
            "location": "Thika, Kenya",
            "county": "Kiambu",
            "completionPercentage": 60,
            "clientId": "3",
            "featured": False,
            "createdAt": _ts("2024-01-10T08:00:00"),
            "updatedAt": _ts("2024-02-10T12:00:00"),
        },
    ],
    Table.SERVICES: [
        {
            "id": "1",
            "title": "Architectural Design",
            "description": "Complete architectural design services",
            "category": "design",
            "features": ["3D Modeling", "Technical Drawings"],
            "priceRangeMin": Decimal("250000"),
            "durationEstimate": "4-8 weeks",
            "active": True,
            "position": 1,
            "createdAt": _ts("2024-01-01T00:00:00"),
            "updatedAt": _ts("2024-01-01T00:00:00"),
        },
        {
            "id": "2",
            "title": "Residential Construction",
            "description": "Complete residential building services",
            "category": "construction",
            "features": ["Design", "Construction", "Project Management"],
            "priceRangeMin": Decimal("15000"),
            "active": True,
            "position": 2,
            "createdAt": _ts("2024-01-01T00:00:00"),
            "updatedAt": _ts("2024-01-01T00:00:00"),
        },
        {
            "id": "3",
            "title": "Commercial Buildings",
            "description": "Office buildings and commercial spaces",
            "category": "construction",
            "features": ["Design", "Construction", "MEP Systems"],
            "priceRangeMin": Decimal("25000"),
            "active": True,
            "position": 3,
            "createdAt": _ts("2024-01-01T00:00:00"),
            "updatedAt": _ts("2024-01-01T00:00:00"),
        },
    ],
    Table.TESTIMONIALS: [
        {
            "id": "1",
            "name": "John Kamau",
            "company": "Kamau Enterprises",
            "rating": 5,
            "message": "AKIBEKS Engineering delivered exceptional quality!",
            "approved": True,
            "featured": True,
            "createdAt": _ts("2024-03-01T12:00:00"),
            "updatedAt": _ts("2024-03-01T12:00:00"),
        },
    ],
}


def seed_records() -> Dict[Table, List[Record]]:
    """Fresh copy of the seed data; callers may mutate it freely."""
    return {table: deepcopy(_SEED.get(table, [])) for table in Table}


__all__ = ["seed_records"]
