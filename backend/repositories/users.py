"""Record store for user accounts.

Every call is a single transaction on the request's SQLAlchemy session and
filters are plain field-equality mappings, e.g. ``{"email": "a@b.c"}``.
Database faults are translated into the API error taxonomy here so the
service layer never sees SQLAlchemy exceptions.
"""
import logging
from contextlib import contextmanager
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from models.users import User
from utils.errors import DuplicateEmailError, StoreTimeoutError, UnexpectedError

logger = logging.getLogger(__name__)

# Columns a caller may filter or write by name
FIELDS = ("user_id", "email", "password_hash", "fname", "lname", "role", "is_admin")


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except IntegrityError:
            self.db.rollback()
            # email is the only unique column a caller can write
            raise DuplicateEmailError()
        except (PoolTimeoutError, OperationalError):
            self.db.rollback()
            logger.exception("User store unavailable during %s", action)
            raise StoreTimeoutError()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("User store failure during %s", action)
            raise UnexpectedError()

    @staticmethod
    def _check_fields(names: Iterable[str]):
        unknown = set(names) - set(FIELDS)
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")

    def _query(self, filters: Optional[dict]):
        filters = filters or {}
        self._check_fields(filters)
        return self.db.query(User).filter_by(**filters)

    def find_one(self, filters: dict) -> Optional[User]:
        with self._guard("find_one"):
            return self._query(filters).first()

    def find(self, filters: Optional[dict] = None) -> List[User]:
        with self._guard("find"):
            return self._query(filters).order_by(User.id).all()

    def insert(self, fields: dict) -> User:
        self._check_fields(fields)
        with self._guard("insert"):
            user = User(**fields)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user

    def update_one(self, filters: dict, changes: dict) -> Optional[User]:
        """Apply ``changes`` to the first matching record; ``None`` when nothing matches."""
        self._check_fields(changes)
        with self._guard("update_one"):
            user = self._query(filters).first()
            if user is None:
                return None
            for name, value in changes.items():
                setattr(user, name, value)
            self.db.commit()
            self.db.refresh(user)
            return user

    def delete_one(self, filters: dict) -> bool:
        with self._guard("delete_one"):
            user = self._query(filters).first()
            if user is None:
                return False
            self.db.delete(user)
            self.db.commit()
            return True
