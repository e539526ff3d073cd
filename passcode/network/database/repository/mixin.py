from typing import TYPE_CHECKING, Any, Generic, List, Optional, Type, TypeVar, Union

from loguru import logger
from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Query, Session
from sqlalchemy.sql.elements import BinaryExpression, ColumnElement, UnaryExpression

from passcode.common.domain import BaseDomain
from passcode.network.database.repository.exceptions import (
    PreventingModelTruncation,
    RepositoryObjectNotFound,
)
from passcode.network.database.session import db

if TYPE_CHECKING:
    from passcode.common.model import BaseModel


class BaseQueryManager:
    def __init__(self, model: Type['BaseModel']) -> None:  # type: ignore[type-arg]
        self.model = model

    def get_query(self, *clauses: Any) -> 'Query[BaseModel]':  # type: ignore[type-arg]
        query = self.model._get_session().query(self.model)
        for clause in clauses:
            query = query.where(clause)
        return query


ReadDomainType = TypeVar('ReadDomainType', bound=BaseDomain)
CreateDomainType = TypeVar('CreateDomainType', bound=BaseDomain)


class RepositoryMixin(Generic[ReadDomainType, CreateDomainType]):
    """
    Database access layer. All interaction with the database should be routed
    through this layer. all public interfaces accept domains subclasses from the
    pydantic base class with from_attributes for simple domain -> orm mapping
    """

    __create_domain__: Type[CreateDomainType] = NotImplemented
    __read_domain__: Type[ReadDomainType] = NotImplemented
    query_manager: Type[BaseQueryManager] = BaseQueryManager

    @classmethod
    def _get_session(cls) -> Session:
        return db.session

    @classmethod
    def get_query(cls, *clauses: Any) -> 'Query[BaseModel]':  # type: ignore[type-arg]
        return cls.query_manager(cls).get_query(*clauses)  # type: ignore[arg-type]

    @classmethod
    def latest(
        cls,
        *clauses: Any,
        by: 'InstrumentedAttribute[Any]' | List['InstrumentedAttribute[Any]'],
    ) -> ReadDomainType:
        if not isinstance(by, list):
            by = [by]

        query = cls.get_query(*clauses)

        # Sort the results in descending order based on each specified field
        for attribute in by:
            query = query.order_by(desc(attribute))

        latest_record = query.first()
        if latest_record is None:
            raise RepositoryObjectNotFound(f'No latest {cls.__name__} found')

        return cls._to_domain(latest_record)

    @classmethod
    def list(
        cls,
        *clauses: Any,
        ordering: Optional[List[Union[str, UnaryExpression]]] = None,  # type: ignore[type-arg]
    ) -> List[ReadDomainType]:
        query = cls.get_query(*clauses)
        if ordering:
            orders = cls._parse_ordering(ordering)
            query = query.order_by(*orders)
        return [cls._to_domain(obj) for obj in query]

    @classmethod
    def count(cls, *clauses: Any) -> int:
        query = cls.get_query(*clauses)
        return int(query.count())

    @classmethod
    def create(cls, domain_obj: CreateDomainType) -> ReadDomainType:
        model_instance = cls._create(**domain_obj.to_dict())
        return cls._to_domain(model_instance)

    @classmethod
    def delete(cls, *clauses: Union[BinaryExpression[Any], ColumnElement[bool]]) -> int:
        if not clauses:
            raise PreventingModelTruncation(f'Must pass clauses to avoid truncating {cls.__name__}')

        try:
            deleted = cls.get_query(*clauses).delete(synchronize_session=False)
        except IntegrityError:
            cls._get_session().rollback()
            raise

        logger.debug(f'deleted {deleted} {cls.__name__} rows')
        return deleted

    @classmethod
    def bulk_update(cls, updates: dict[str, Any], clauses: List[Any]) -> int:
        """
        Conditional update, returns the number of rows the clauses matched
        """
        if not clauses:
            raise PreventingModelTruncation(f'Must pass clauses to avoid updating all of {cls.__name__}')

        return int(cls.get_query(*clauses).update(updates, synchronize_session=False))  # type: ignore[arg-type]

    @classmethod
    def _create(cls, **attributes: Any) -> 'BaseModel[Any, Any]':
        model_instance = cls(**attributes)
        cls._get_session().add(model_instance)
        try:
            cls._get_session().flush([model_instance])
        except IntegrityError:
            cls._get_session().rollback()
            raise

        return model_instance  # type: ignore[return-value]

    @classmethod
    def _parse_ordering(
        cls, ordering: List[Union[str, 'UnaryExpression[Any]']] | None = None
    ) -> List['UnaryExpression[Any]']:
        """
        Parses str references for a field like:
        ['-created_at', 'id']
        """
        order_expressions = []
        if ordering:
            for order in ordering:
                if isinstance(order, str):
                    if order[0] == '-':
                        ordering_attr = getattr(cls, order[1:])
                        order_expressions.append(ordering_attr.desc())
                    else:
                        ordering_attr = getattr(cls, order)
                        order_expressions.append(ordering_attr.asc())
                else:
                    # Assume already an expression
                    order_expressions.append(order)

        return order_expressions

    @classmethod
    def _to_domain(cls, model_instance: 'BaseModel[Any, Any]') -> ReadDomainType:
        return cls.__read_domain__.model_validate(model_instance)  # type: ignore[no-any-return]
