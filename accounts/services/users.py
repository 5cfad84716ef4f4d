"""User service for registration, listing and self-service account management."""

import logging
import math

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from accounts.errors import EmailDeliveryFailure, NotFound, ValidationError
from accounts.models.user import User
from accounts.security import hash_password
from accounts.services.account_tokens import issue_activation_token, issue_password_reset_token
from accounts.services.email import get_email_service
from accounts.services.token_store import get_token_store

logger = logging.getLogger("accounts.users")


class UserService:
    """Handles user persistence and the e-mail flows attached to it."""

    def register(self, db: Session, username: str, email: str, password: str) -> User:
        """Create an inactive user and send its activation e-mail.

        The insert is only committed once the e-mail went out; a delivery
        failure rolls the user back and raises EmailDeliveryFailure. An e-mail
        taken by a concurrent registration raises ValidationError.
        """
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            inactive=True,
            activation_token=issue_activation_token(),
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError as e:
            db.rollback()
            logger.info("Registration for %s lost a race on the unique e-mail", email)
            raise ValidationError({"email": "E-mail already in use."}) from e

        try:
            get_email_service().send_account_activation(email, user.activation_token)
        except EmailDeliveryFailure:
            db.rollback()
            logger.warning("Registration for %s rolled back after e-mail failure", email)
            raise

        db.commit()
        db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def get_users(self, db: Session, page: int, size: int, exclude_id: int | None = None) -> dict:
        """Page through active users, leaving out `exclude_id`."""
        query = db.query(User).filter(User.inactive.is_(False))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)

        total = query.count()
        offset = page * size
        users = [] if offset >= total else query.order_by(User.id).offset(offset).limit(size).all()

        return {
            "content": users,
            "page": page,
            "size": size,
            "totalPages": math.ceil(total / size),
        }

    def get_user(self, db: Session, user_id: int) -> User:
        """Get an active user by id. Inactive and unknown ids both raise NotFound."""
        user = db.query(User).filter(User.id == user_id, User.inactive.is_(False)).first()
        if user is None:
            raise NotFound("User not found.")
        return user

    def update_user(self, db: Session, user_id: int, username: str) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFound("User not found.")
        user.username = username
        db.commit()
        db.refresh(user)
        return user

    def delete_user(self, db: Session, user_id: int) -> None:
        """Delete the user together with all of its session tokens."""
        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            return
        get_token_store().revoke_all_for_user(db, user_id, commit=False)
        db.delete(user)
        db.commit()
        logger.info("Deleted user %s", user_id)

    def find_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == email).first()

    def request_password_reset(self, db: Session, email: str) -> None:
        """Store a fresh reset token on the user and e-mail it."""
        user = self.find_by_email(db, email)
        if user is None:
            raise NotFound("E-mail not found.")

        user.password_reset_token = issue_password_reset_token()
        db.commit()

        get_email_service().send_password_reset(email, user.password_reset_token)

    def seed_users(self, db: Session, count: int, password: str = "P4ssword") -> list[User]:
        """Create `count` active users for local development."""
        password_hash = hash_password(password)
        users = [
            User(username=f"user{i}", email=f"user{i}@mail.com", password_hash=password_hash, inactive=False)
            for i in range(1, count + 1)
            if self.find_by_email(db, f"user{i}@mail.com") is None
        ]
        db.add_all(users)
        db.commit()
        return users


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
