import sqlalchemy
from sqlalchemy import Column, String
from sqlalchemy.orm import declarative_base
from uuid_extension import uuid7

Base = declarative_base()


class BaseModel(Base):
    """
    Common columns for store records.

    `updated_by` is stamped by whoever last wrote the row ("system" for automated
    audit runs and remediation replies).
    """
    __abstract__ = True
    __mapper_args__ = {"eager_defaults": True}
    id = Column(String, primary_key=True, default=lambda: str(uuid7()), index=True)
    updated_by = Column(String(128), nullable=True)
    created_at = Column(
        sqlalchemy.DateTime(timezone=True), server_default=sqlalchemy.func.now(), nullable=False
    )
    updated_at = Column(
        sqlalchemy.DateTime(timezone=True),
        server_default=sqlalchemy.func.now(),
        onupdate=sqlalchemy.func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"

# Note: Models will import this Base. Do not import models here to avoid circular imports.
# Import models in alembic/env.py instead for migrations.
