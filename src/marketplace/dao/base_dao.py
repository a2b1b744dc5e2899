from typing import Type, TypeVar, Generic, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import inspect, or_, func, select
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.selectable import Select
from marketplace.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Make LIKE wildcards in user input match literally (pair with escape=LIKE_ESCAPE)."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class BaseDao(Generic[ModelType]):
    def __init__(self, model_class: Type[ModelType], db_session: AsyncSession):
        self.model: Type[ModelType] = model_class
        self.db_session: AsyncSession = db_session
        primary_keys = inspect(model_class).primary_key
        if not primary_keys:
            raise ValueError(f"Model {model_class.__name__} does not have a primary key.")
        self.pk: str = primary_keys[0].name

    # ==============================================================================
    # 1. Object Methods
    #    - inputs and outputs are ORM instances
    # ==============================================================================

    async def get_list(
        self,
        where: Optional[dict] = None,
        where_or: Optional[list] = None,
        withs: Optional[list] = None,
        order: Optional[list] = None,
    ) -> list[ModelType]:
        stmt = self._quick_query(where=where, where_or=where_or, withs=withs, order=order)
        executed = await self.db_session.execute(stmt)
        return list(executed.scalars().all())

    async def get_one(
        self,
        where: Optional[dict] = None,
        withs: Optional[list] = None,
    ) -> Optional[ModelType]:
        stmt = self._quick_query(where=where, withs=withs)
        executed = await self.db_session.execute(stmt)
        return executed.scalars().first()

    async def get_by_pk(self, pk_value: Any, withs: Optional[list] = None) -> Optional[ModelType]:
        return await self.get_one(where={self.pk: pk_value}, withs=withs)

    async def count(self, where: Optional[dict] = None, where_or: Optional[list] = None) -> int:
        subquery_stmt = self._quick_query(where=where, where_or=where_or).subquery()
        count_stmt = select(func.count()).select_from(subquery_stmt)
        executed = await self.db_session.execute(count_stmt)
        return executed.scalar() or 0

    async def add(self, instance: ModelType, auto_flush: bool = True) -> ModelType:
        self.db_session.add(instance)
        if auto_flush:
            await self.db_session.flush()
            await self.db_session.refresh(instance)
        return instance

    async def update(self, instance: ModelType, values: dict, auto_flush: bool = True) -> ModelType:
        """Merge `values` into the instance. Unknown keys are an error, missing keys keep their value."""
        for key, value in values.items():
            if not hasattr(self.model, key):
                raise AttributeError(f"{self.model.__name__} has no attribute '{key}'")
            setattr(instance, key, value)
        if auto_flush:
            await self.db_session.flush()
            # server-side onupdate columns are expired by the flush
            await self.db_session.refresh(instance)
        return instance

    async def delete(self, instance: ModelType, auto_flush: bool = True) -> None:
        await self.db_session.delete(instance)
        if auto_flush:
            await self.db_session.flush()

    # ==============================================================================
    # 2. Query Building Helpers
    # ==============================================================================

    def _quick_query(
        self,
        where: Optional[dict] = None,
        where_or: Optional[list] = None,
        withs: Optional[list] = None,
        order: Optional[list] = None,
    ) -> Select:
        stmt = select(self.model)

        if where:
            stmt = stmt.filter_by(**where)

        if where_or:
            stmt = stmt.filter(or_(*self._where_format(where_or)))

        if withs:
            stmt = stmt.options(*(self._build_loader_option(config) for config in withs))

        if order is not None:
            stmt = stmt.order_by(*order)

        return stmt

    def _build_loader_option(self, config: str | dict) -> Any:
        """
        Eager-loads one relationship. `config` is a relationship name, or
        {"name": ..., "fields": [...]} to load only some columns of the related model.
        """
        if isinstance(config, str):
            return selectinload(getattr(self.model, config))

        if isinstance(config, dict):
            name = config.get("name")
            if not name:
                raise ValueError("Relation 'name' is required in withs configuration.")
            relationship_attr = getattr(self.model, name)
            loader_option = selectinload(relationship_attr)
            if "fields" in config:
                target = relationship_attr.property.mapper.class_
                loader_option = loader_option.load_only(*(getattr(target, f) for f in config["fields"]))
            return loader_option

        raise TypeError("Unsupported 'withs' configuration type. Must be str or dict.")

    def _where_format(self, conditions: list) -> list:
        """(field, "ilike", pattern) triples; patterns are expected to be built with escape_like."""
        processed_conditions = []
        for field, op, value in conditions:
            column = getattr(self.model, field)
            if op == "ilike":
                processed_conditions.append(column.ilike(value, escape=LIKE_ESCAPE))
            else:
                raise ValueError(f"Unsupported operator: {op}")
        return processed_conditions
