from __future__ import annotations

from typing import Any, Dict, Generic, List, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from quotedesk.core.logging_config import logger
from quotedesk.models import Cost, Customer, Product, QuotationCost, User

from .errors import CostInUseError, NotFoundError

M = TypeVar("M")


class CatalogRepository(Generic[M]):
    """get / list / create / update / delete for one catalogue table."""

    def __init__(self, model: Type[M], order_by: str = "name"):
        self.model = model
        self.order_by = order_by

    def get(self, db: Session, entity_id: str) -> M:
        obj = db.get(self.model, entity_id)
        if obj is None:
            raise NotFoundError(f"{self.model.__tablename__}:{entity_id}")
        return obj

    def list(self, db: Session, **filters: Any) -> List[M]:
        stmt = select(self.model).filter_by(**filters).order_by(
            getattr(self.model, self.order_by)
        )
        return list(db.scalars(stmt))

    def create(self, db: Session, data: Dict[str, Any]) -> M:
        obj = self.model(**data)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        logger.info("catalog_created", table=self.model.__tablename__, id=obj.id)
        return obj

    def update(self, db: Session, entity_id: str, data: Dict[str, Any]) -> M:
        obj = self.get(db, entity_id)
        for k, v in data.items():
            setattr(obj, k, v)
        db.commit()
        db.refresh(obj)
        return obj

    def delete(self, db: Session, entity_id: str) -> None:
        obj = self.get(db, entity_id)
        db.delete(obj)
        db.commit()
        logger.info("catalog_deleted", table=self.model.__tablename__, id=entity_id)


class CostRepository(CatalogRepository[Cost]):
    def __init__(self):
        super().__init__(Cost)

    def delete(self, db: Session, entity_id: str) -> None:
        used = db.scalar(
            select(QuotationCost.id).where(QuotationCost.cost_id == entity_id).limit(1)
        )
        if used is not None:
            raise CostInUseError(
                f"cost {entity_id} is used by existing quotations and cannot be deleted"
            )
        super().delete(db, entity_id)


customers = CatalogRepository(Customer)
products = CatalogRepository(Product)
costs = CostRepository()
users = CatalogRepository(User)
