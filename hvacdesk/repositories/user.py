"""User repository for user-related database operations."""

from typing import Optional
from sqlalchemy.orm import Session

from hvacdesk.repositories.base import BaseRepository
from hvacdesk.db.models.user import User
from hvacdesk.schemas.user import UserCreate


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, User, correlation_id)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address.

        Args:
            email: User's email address

        Returns:
            User instance or None if not found
        """
        result = self.db.query(self.model).filter(self.model.email == email).first()

        self._log_operation("get_by_email", email=email, found=result is not None)
        return result

    def get_role(self, user_id: int) -> Optional[str]:
        """Return the stored role of a user, or None when the user is unknown."""
        row = self.db.query(self.model.role).filter(self.model.id == user_id).first()
        self._log_operation("get_role", user_id=user_id, found=row is not None)
        return row[0] if row else None

    def create_user(self, user_in: UserCreate, hashed_password: str) -> User:
        user_data = user_in.model_dump(exclude={"password"})
        user_data["role"] = user_in.role.value
        user_data["hashed_password"] = hashed_password
        return self.create(user_data)
