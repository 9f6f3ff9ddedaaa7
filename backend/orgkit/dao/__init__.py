"""
Data Access Object (DAO) package.
"""

from orgkit.dao.base import BaseDAO
from orgkit.dao.organization import OrganizationDAO
from orgkit.dao.organization_user import OrganizationUserDAO
from orgkit.dao.user import UserDAO

__all__ = [
    "BaseDAO",
    "OrganizationDAO",
    "OrganizationUserDAO",
    "UserDAO",
]
