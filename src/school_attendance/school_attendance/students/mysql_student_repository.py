from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import StudentContact, full_name
from .repository import StudentDirectory


class MySQLStudentDirectory(StudentDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_contact(self, student_id: int) -> Optional[StudentContact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, student_code, first_name_en, middle_name_en, last_name_en,
                       father_phone, mother_phone
                FROM students
                WHERE student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return StudentContact(
                student_id=int(r["student_id"]),
                display_name=full_name(r["first_name_en"], r.get("middle_name_en"), r["last_name_en"]),
                student_code=str(r["student_code"]),
                father_phone=r.get("father_phone"),
                mother_phone=r.get("mother_phone"),
            )
