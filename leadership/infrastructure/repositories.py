"""
Repository exports for the persistence layer.

    from leadership.infrastructure.repositories import AssessmentRepo, UserRepo
"""

from __future__ import annotations

from .repositories_assessment import AssessmentRepo
from .repositories_user import UserRepo

__all__ = [
    "AssessmentRepo",
    "UserRepo",
]
