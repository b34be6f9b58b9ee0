from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Lofts and reservations share this metadata so Alembic can diff the whole
    schema in one pass.
    """

    pass
