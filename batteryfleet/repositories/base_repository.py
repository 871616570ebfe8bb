# File: batteryfleet/repositories/base_repository.py

import math
from typing import Generic, TypeVar, Dict, Any, Optional, List, Type, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, func, or_
from sqlalchemy.sql import Select

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository class providing common CRUD operations for all entities using
    modern SQLAlchemy select() syntax.

    Repositories only flush; committing or rolling back is left to the
    service that owns the transaction.

    Attributes:
        session (Session): The SQLAlchemy session for database operations
        model (Type[T]): The SQLAlchemy model class this repository manages
    """

    def __init__(self, session: Session, model: Optional[Type[T]] = None):
        self.session = session
        self.model = model

    def _get_model(self) -> Type[T]:
        """Ensures the model is set before use."""
        if self.model is None:
            raise TypeError(f"Repository model is not set for {self.__class__.__name__}")
        return self.model

    def get_by_id(self, id: int) -> Optional[T]:
        """
        Retrieve an entity by its primary key ID.

        Args:
            id (int): The primary key ID of the entity

        Returns:
            Optional[T]: The entity if found, None otherwise
        """
        model_class = self._get_model()
        stmt = select(model_class).where(getattr(model_class, "id") == id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_ids(self, ids: List[int]) -> List[T]:
        """Retrieve the entities with the given IDs, ordered by ID."""
        if not ids:
            return []
        model_class = self._get_model()
        id_column = getattr(model_class, "id")
        stmt = select(model_class).where(id_column.in_(ids)).order_by(id_column)
        return list(self.session.execute(stmt).scalars().all())

    def create(self, data: Dict[str, Any]) -> T:
        """
        Create a new entity and flush it so it receives its primary key.

        Args:
            data (Dict[str, Any]): Dictionary containing entity field values

        Returns:
            T: The created entity
        """
        model_class = self._get_model()
        model_columns = {c.name for c in model_class.__table__.columns}
        filtered_data = {k: v for k, v in data.items() if k in model_columns}

        entity = model_class(**filtered_data)
        self.session.add(entity)
        self.session.flush()
        return entity

    def update(self, entity: T, data: Dict[str, Any]) -> T:
        """
        Apply column values from `data` to an already loaded entity.

        Keys that are not columns of the model are ignored.
        """
        columns = entity.__table__.columns.keys()
        for key, value in data.items():
            if key in columns:
                setattr(entity, key, value)
        self.session.flush()
        return entity

    def delete(self, entity: T) -> None:
        self.session.delete(entity)
        self.session.flush()

    def _keyword_clause(self, keyword: Optional[str], fields: List[str]):
        """Case-insensitive substring match over `fields`, or None without a keyword."""
        if not keyword:
            return None
        model_class = self._get_model()
        search_term = f"%{keyword}%"
        criteria = [
            getattr(model_class, field).ilike(search_term)
            for field in fields
            if hasattr(model_class, field)
        ]
        return or_(*criteria) if criteria else None

    def _paginate(self, stmt: Select, page: int, page_size: int) -> Tuple[List[T], int, int]:
        """
        Execute `stmt` for one page.

        Returns:
            Tuple of (items, total matching rows, number of pages)
        """
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = self.session.execute(count_stmt).scalar_one()
        pages = math.ceil(total / page_size) if total else 0

        page = max(1, page)
        items = self.session.execute(
            stmt.offset((page - 1) * page_size).limit(page_size)
        ).scalars().all()
        return list(items), total, pages
