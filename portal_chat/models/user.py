# portal_chat/models/user.py
"""Directory tables owned by the portal's account service.

The chat service only reads them: ids are unique across all three tables and
the table a row lives in is the user's kind.
"""
from sqlalchemy import Column, String
from .base import Base


class DirectoryPerson:
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=True, index=True)


class Student(DirectoryPerson, Base):
    __tablename__ = "students"
    role = "student"


class Teacher(DirectoryPerson, Base):
    __tablename__ = "teachers"
    role = "teacher"


class Admin(DirectoryPerson, Base):
    __tablename__ = "admins"
    role = "admin"


DIRECTORY_MODELS = (Student, Teacher, Admin)
