from hvacdesk.core.security import verify_password
from hvacdesk.repositories.user import UserRepository
from scripts.create_admin import create_or_promote_admin


def test_creates_admin(db):
    user, created = create_or_promote_admin(db, "boss@example.com", "Boss", "long-enough")

    assert created
    assert user.role == "ADMIN"
    assert verify_password("long-enough", user.hashed_password)


def test_promotes_existing_user(db, users):
    user, created = create_or_promote_admin(db, "client@example.com", "Client", "new-password")

    assert not created
    assert user.id == users.client
    assert UserRepository(db).get_role(users.client) == "ADMIN"
