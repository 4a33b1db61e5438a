"""Shared plumbing for the registries: transactions, role gates and logging."""

import logging
from typing import Optional, Callable, TypeVar, Any, Dict
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from hvacdesk.schemas.actor import ActorContext, Role
from hvacdesk.services.exceptions import ForbiddenError, StorageError

T = TypeVar("T")


class BaseService:
    """Base class of every service.

    Subclasses receive their repositories through ``_set_repositories`` and
    perform writes through ``run_in_transaction``, which is the only place a
    session is committed or rolled back. Each log record carries the request
    correlation ID and the service name.
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id
        self.logger = logging.getLogger(self.__class__.__name__)

    def _set_repositories(self, **repositories):
        """Expose each named repository as an attribute, e.g. ``self.job_repo``."""
        for name, repo in repositories.items():
            setattr(self, name, repo)

    def _log_extra(self, **fields: Any) -> Dict[str, Any]:
        return {"correlation_id": self.correlation_id, "service": self.__class__.__name__, **fields}

    def run_in_transaction(self, db: Session, operation: Callable[[], T]) -> T:
        """Run ``operation`` and commit, or roll back if it raises.

        Args:
            db: Session the operation writes through
            operation: Callable doing the repository calls; its result is returned

        Raises:
            StorageError: The database rejected the write
            ServiceError: Any business error raised by the operation, unchanged
        """
        try:
            result = operation()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            self.logger.error("Write rejected by database, rolled back", extra=self._log_extra(error=str(e)))
            raise StorageError("database write", type(e).__name__, correlation_id=self.correlation_id) from e
        except Exception as e:
            db.rollback()
            self.logger.warning("Operation aborted, rolled back", extra=self._log_extra(error=str(e)))
            raise

        self.logger.debug("Transaction committed", extra=self._log_extra())
        return result

    def require_role(self, actor: ActorContext, action: str, resource_type: str, *roles: Role) -> None:
        """Raise ForbiddenError unless the actor holds one of ``roles``."""
        if actor.role in roles:
            return
        self.log_operation("forbidden", action=action, resource_type=resource_type, actor_id=actor.id, role=actor.role.value)
        raise ForbiddenError(
            action,
            resource_type,
            actor_id=actor.id,
            role=actor.role.value,
            correlation_id=self.correlation_id
        )

    def log_operation(self, operation: str, **kwargs: Any) -> None:
        self.logger.info(f"Service operation: {operation}", extra=self._log_extra(operation=operation, **kwargs))
