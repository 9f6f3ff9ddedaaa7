"""Organization repository kit: organizations, users and memberships over SQLAlchemy."""

__version__ = "0.1.0"
