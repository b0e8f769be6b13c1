"""
Declarative base shared by every ORM model.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    # models use plain ``Column`` attributes with loose type annotations
    __allow_unmapped__ = True
