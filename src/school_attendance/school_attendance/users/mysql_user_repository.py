from __future__ import annotations

from typing import Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AdminContact
from .repository import UserDirectory


class MySQLUserDirectory(UserDirectory):
    def __init__(self, conn_factory: DatabaseConnection, *, admin_role: Role = Role.SCHOOL_ADMIN):
        self._conn_factory = conn_factory
        self._admin_role = admin_role

    def find_admins(self) -> Sequence[AdminContact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, username, role, phone_number
                FROM users
                WHERE role=%s
                ORDER BY user_id ASC
                """,
                (self._admin_role.value,),
            )
            return [
                AdminContact(
                    user_id=int(r["user_id"]),
                    username=r["username"],
                    role=Role(r["role"]),
                    phone_number=r.get("phone_number"),
                )
                for r in fetchall(cur)
            ]
