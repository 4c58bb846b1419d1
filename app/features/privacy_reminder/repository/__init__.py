"""
Repository subpackage for the privacy reminder feature.
"""

from .mentee_repository import MenteeRepository, MenteeRepositoryError

__all__ = ["MenteeRepository", "MenteeRepositoryError"]
