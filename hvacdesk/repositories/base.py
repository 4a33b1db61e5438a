"""Base repository class with common CRUD operations."""

import logging
from abc import ABC
from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Tuple
from sqlalchemy.orm import Session, Query
from sqlalchemy.exc import SQLAlchemyError

from hvacdesk.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


class BaseRepository(Generic[ModelType], ABC):
    """Base repository class providing common CRUD operations.

    Provides:
    - Standard CRUD operations (Create, Read, Update, Delete)
    - Query filtering and pagination
    - Structured logging for data operations

    Repositories only flush; committing is the calling service's job.
    """

    def __init__(self, db: Session, model: Type[ModelType], correlation_id: Optional[str] = None):
        """Initialize repository with database session and model type.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
            correlation_id: Optional request correlation ID for logging
        """
        self.db = db
        self.model = model
        self.correlation_id = correlation_id
        self.logger = logging.getLogger(self.__class__.__name__)

    def create(self, obj_in: CreateSchemaType, **kwargs: Any) -> ModelType:
        """Create a new record in the database.

        Args:
            obj_in: Pydantic model or dict with creation data
            **kwargs: Additional fields to set on the model

        Returns:
            Created model instance, flushed so its primary key is assigned

        Raises:
            SQLAlchemyError: On database operation failure
        """
        try:
            if hasattr(obj_in, 'model_dump'):
                obj_data = obj_in.model_dump(exclude_unset=True)
            else:
                obj_data = dict(obj_in)

            obj_data.update(kwargs)
            db_obj = self.model(**obj_data)

            self.db.add(db_obj)
            self.db.flush()
            self.db.refresh(db_obj)

            self._log_operation("create", model=self.model.__name__, id=getattr(db_obj, 'id', None))
            return db_obj

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to create {self.model.__name__}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def get_by_id(self, id: int) -> Optional[ModelType]:
        """Get a record by ID.

        Args:
            id: Record ID

        Returns:
            Model instance or None if not found
        """
        result = self.db.get(self.model, id)
        self._log_operation("get_by_id", model=self.model.__name__, id=id, found=result is not None)
        return result

    def update(self, id: int, obj_in: UpdateSchemaType, **kwargs: Any) -> Optional[ModelType]:
        """Update a record by ID.

        Args:
            id: Record ID
            obj_in: Pydantic model or dict with update data
            **kwargs: Additional fields to update

        Returns:
            Updated model instance or None if not found

        Raises:
            SQLAlchemyError: On database operation failure
        """
        try:
            db_obj = self.get_by_id(id)
            if not db_obj:
                return None

            if hasattr(obj_in, 'model_dump'):
                update_data = obj_in.model_dump(exclude_unset=True)
            else:
                update_data = dict(obj_in)

            update_data.update(kwargs)

            for field, value in update_data.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            self.db.flush()
            self.db.refresh(db_obj)

            self._log_operation("update", model=self.model.__name__, id=id, fields=list(update_data.keys()))
            return db_obj

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to update {self.model.__name__} with id {id}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def delete(self, id: int) -> bool:
        """Physically delete a record by ID.

        Args:
            id: Record ID

        Returns:
            True if deleted, False if not found

        Raises:
            SQLAlchemyError: On database operation failure
        """
        try:
            db_obj = self.get_by_id(id)
            if not db_obj:
                return False

            self.db.delete(db_obj)
            self.db.flush()

            self._log_operation("delete", model=self.model.__name__, id=id)
            return True

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to delete {self.model.__name__} with id {id}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def exists(self, id: int) -> bool:
        """Check if a record exists by ID."""
        result = self.db.query(self.model.id).filter(self.model.id == id).first() is not None
        self._log_operation("exists", model=self.model.__name__, id=id, exists=result)
        return result

    def paginate(self, query: Query, page: int, limit: int) -> Tuple[List[ModelType], int]:
        """Run a prepared query for one page.

        Args:
            query: Filtered and ordered query
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (items on the page, total matching rows)
        """
        total = query.order_by(None).count()
        items = query.offset((page - 1) * limit).limit(limit).all()
        self._log_operation("paginate", model=self.model.__name__, page=page, limit=limit, total=total, count=len(items))
        return items, total

    def _apply_filters(self, query: Query, filters: Optional[Dict[str, Any]]) -> Query:
        if filters:
            for field, value in filters.items():
                if value is None:
                    continue
                if hasattr(self.model, field):
                    query = query.filter(getattr(self.model, field) == value)
                else:
                    self._log_operation("filter_field_not_found", model=self.model.__name__, field=field)
        return query

    def _log_operation(self, operation: str, **kwargs: Any) -> None:
        """Log repository operation with structured fields.

        Args:
            operation: Name of the operation being performed
            **kwargs: Additional fields to include in log
        """
        log_data = {
            "correlation_id": self.correlation_id,
            "repository": self.__class__.__name__,
            "operation": operation,
            **kwargs
        }
        self.logger.info(f"Repository operation: {operation}", extra=log_data)
