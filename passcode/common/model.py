from datetime import datetime
from importlib import import_module
from typing import Any, Optional

from loguru import logger
from sqlalchemy import DateTime, String, func
from sqlalchemy.ext.declarative import declared_attr
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from passcode import settings
from passcode.common.nanoid import NanoId, NanoIdType
from passcode.network.database.repository.mixin import (
    CreateDomainType,
    ReadDomainType,
    RepositoryMixin,
)


class BaseModel(DeclarativeBase, RepositoryMixin[ReadDomainType, CreateDomainType]):
    __pk_abbrev__: str = NotImplemented

    @declared_attr
    def id(cls) -> Mapped[str]:
        # Ensure an abbreviation is implemented
        if cls.__pk_abbrev__ == NotImplemented:
            raise NotImplementedError(f'__pk_abbrev__ must be implemented for {cls.__name__}')

        # Generated client side so sqlite and postgres behave the same
        return mapped_column(String(length=50), primary_key=True, default=cls.generate_id)

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime, default=func.now(), nullable=False)

    @declared_attr
    def modified_at(cls) -> Mapped[Optional[datetime]]:
        return mapped_column(DateTime, onupdate=func.now(), nullable=True)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(id={self.id!r})'

    @classmethod
    def generate_id(cls) -> NanoIdType:
        return NanoId.gen(abbrev=cls.__pk_abbrev__)


def import_model_modules() -> list[Any]:
    """
    Used by things like Alembic and the test harness to bring in the relevant models
    Looks for `models.py` in directories registered.
    """
    model_modules = []
    for app in settings.BOUNDARIES:
        import_path = f'{settings.BASE_MODULE}.{app}.models'
        logger.debug(f'importing: {import_path}')
        module = import_module(import_path)
        model_modules.append(module)

    return model_modules
