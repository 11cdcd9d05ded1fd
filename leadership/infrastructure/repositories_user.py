# leadership/infrastructure/repositories_user.py
from __future__ import annotations

import builtins
import time
from typing import Any

from sqlalchemy.orm import Session

from .exceptions import UserNotFoundError
from .logging import log_database_operation as log_op
from .models import UserORM
from .repositories_base import BaseRepository as GenericBaseRepository

ANONYMOUS_NAME = "Anonymous"


class UserRepo(GenericBaseRepository[UserORM]):
    model = UserORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_op("user.get")
    def get(self, id_: Any) -> UserORM | None:
        return super().get(id_)

    @log_op("user.get_required")
    def get_by_id_required(self, id_: int) -> UserORM:
        user = super().get(id_)
        if user is None:
            raise UserNotFoundError(id_)
        return user

    @log_op("user.create")
    def create(self, **fields: Any) -> UserORM:
        return super().create(**fields)

    @log_op("user.create_anonymous")
    def create_anonymous(self) -> UserORM:
        """Users without an identity get a unique throwaway e-mail."""
        stamp = int(time.time() * 1000)
        email = f"anonymous_{stamp}@example.com"
        while self.s.query(UserORM.id).filter(UserORM.email == email).first() is not None:
            stamp += 1
            email = f"anonymous_{stamp}@example.com"
        return super().create(name=ANONYMOUS_NAME, email=email)

    @log_op("user.list_all")
    def list_all(self) -> builtins.list[UserORM]:
        return super().list(order_by=[UserORM.id])
