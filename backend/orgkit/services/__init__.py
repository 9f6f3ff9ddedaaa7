"""
Business logic services package.

Services sit between callers and DAOs: callers hand them a session, they
enforce the organization rules and delegate queries to DAOs.
"""

from orgkit.services.organization_service import OrganizationService
from orgkit.services.user_service import UserService

__all__ = ["OrganizationService", "UserService"]
