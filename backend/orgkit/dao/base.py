"""
Base Data Access Object (DAO) class.

DAOs are the only code that builds queries. They are bound to the session
of the current unit of work and never commit: committing belongs to whoever
opened the session.
"""

from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import delete, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from orgkit.models.base import Base

# Type variable for model class
ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType]):
    """
    Base Data Access Object providing CRUD operations for all models.

    Type Parameters:
        ModelType: The SQLAlchemy model class this DAO manages
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize DAO with model class and database session.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    def _filtered(self, query, filters: Dict[str, Any]):
        for field, value in filters.items():
            if not hasattr(self.model, field):
                raise AttributeError(f"{self.model.__name__} has no field '{field}'")
            query = query.where(getattr(self.model, field) == value)
        return query

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Args:
            **kwargs: Field values for the new record

        Returns:
            The created model instance with database-generated fields populated

        Raises:
            IntegrityError: If unique or foreign key constraints are violated
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()  # Flush to get generated fields
        await self.session.refresh(instance)
        return instance

    async def create_many(self, rows: Iterable[Dict[str, Any]]) -> List[ModelType]:
        """
        Create several records in one flush.

        Args:
            rows: Field values for each record

        Returns:
            The created instances, in input order
        """
        instances = [self.model(**row) for row in rows]
        self.session.add_all(instances)
        await self.session.flush()
        return instances

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """
        Retrieve a single record by primary key.

        Args:
            id: Primary key value

        Returns:
            The model instance if found, None otherwise
        """
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: Optional[str] = None,
        **filters: Any,
    ) -> List[ModelType]:
        """
        Retrieve multiple records with optional pagination, ordering and filtering.

        Args:
            skip: Number of records to skip (for pagination)
            limit: Maximum number of records to return
            order_by: Field name to order by; prefix with "-" for descending
            **filters: Field name to value filters (e.g., personal=True)

        Returns:
            List of model instances matching the filters

        Raises:
            AttributeError: If a filter or order field doesn't exist on the model
        """
        query = self._filtered(select(self.model), filters)

        if order_by:
            descending = order_by.startswith("-")
            field_name = order_by.lstrip("-")
            if not hasattr(self.model, field_name):
                raise AttributeError(f"{self.model.__name__} has no field '{field_name}'")
            column = getattr(self.model, field_name)
            query = query.order_by(column.desc() if descending else column.asc())

        query = query.offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_field(self, field_name: str, value: Any) -> Optional[ModelType]:
        """
        Retrieve a single record by any field.

        Raises:
            AttributeError: If field_name doesn't exist on the model
        """
        if not hasattr(self.model, field_name):
            raise AttributeError(f"{self.model.__name__} has no field '{field_name}'")

        result = await self.session.execute(
            select(self.model).where(getattr(self.model, field_name) == value)
        )
        return result.scalar_one_or_none()

    async def update(self, id: Any, **kwargs: Any) -> Optional[ModelType]:
        """
        Update an existing record.

        Loads the instance and assigns attributes so ORM-side onupdate
        defaults (updated_at) fire.

        Args:
            id: Primary key of the record to update
            **kwargs: Fields to update

        Returns:
            Updated model instance if found, None otherwise
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return None
        return await self.save(instance, **kwargs)

    async def save(self, instance: ModelType, **kwargs: Any) -> ModelType:
        """Assign fields on a loaded instance and flush."""
        for field, value in kwargs.items():
            setattr(instance, field, value)
        await self.session.flush()
        return instance

    async def delete(self, id: Any) -> bool:
        """
        Delete a record by primary key with a bulk DELETE statement.

        Children are removed only by database-level ON DELETE cascades.

        Returns:
            True if a record was deleted, False if not found
        """
        result = await self.session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0

    async def delete_instance(self, instance: ModelType) -> None:
        """Delete a loaded instance through the ORM, applying relationship cascades."""
        await self.session.delete(instance)
        await self.session.flush()

    async def count(self, **filters: Any) -> int:
        """
        Count records matching filters.

        Args:
            **filters: Field name to value filters

        Returns:
            Number of records matching the filters
        """
        query = self._filtered(select(func.count()).select_from(self.model), filters)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def exists(self, **filters: Any) -> bool:
        """
        Check if any records matching filters exist.

        Returns:
            True if at least one matching record exists
        """
        query = self._filtered(select(self.model), filters).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def fetch_raw(self, sql: str, **params: Any) -> List[Dict[str, Any]]:
        """
        Run a raw SQL read and return rows as dictionaries.

        Escape hatch for aggregate and statistical reads that the ORM query
        API expresses poorly. Always pass values as bound params.

        Args:
            sql: SQL text with :named placeholders
            **params: Bound parameter values

        Returns:
            One dictionary per row, keyed by column label
        """
        result = await self.session.execute(text(sql), params)
        return [dict(row) for row in result.mappings().all()]
