"""Database package"""

from orgkit.db.session import Database
from orgkit.db.unit_of_work import SubUnitResult, run_sub_unit, transaction
from orgkit.models.base import Base

__all__ = ["Base", "Database", "SubUnitResult", "run_sub_unit", "transaction"]
