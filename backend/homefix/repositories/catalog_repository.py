# backend/homefix/repositories/catalog_repository.py
"""Read-only access to the catalog collaborator's tables."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.catalog import Category, Service
from .base_repository import BaseRepository


class CatalogRepository(BaseRepository[Category]):
    def __init__(self, db: Session):
        super().__init__(db, Category)

    def get_category(self, category_id: str) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def get_service(self, service_id: str) -> Optional[Service]:
        return self.db.get(Service, service_id)
