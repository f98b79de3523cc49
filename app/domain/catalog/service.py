"""Service catalog service - Business rules for categories and clinic services"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Service, ServiceCategory
from ...shared.errors import ConflictError, NotFoundError, ValidationError
from ...shared.validators import clean_optional_text, parse_chf_price
from .repository import CategoryRepository, ServiceRepository
from .schemas import CategoryCreate, CategoryUpdate, ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)

CATEGORY_IN_USE_MESSAGE = (
    "Cannot delete category with existing services. "
    "Delete or reassign those services first."
)


def _price(value) -> Optional[float]:
    try:
        return parse_chf_price(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


class CatalogService:
    """Service layer for the clinic's service catalog"""

    def __init__(self, db: Session):
        self.db = db
        self.categories = CategoryRepository()
        self.services = ServiceRepository()

    # Categories

    def list_categories(self) -> list[ServiceCategory]:
        return self.categories.list_categories(self.db)

    def get_category(self, category_id: str) -> ServiceCategory:
        category = self.categories.get_category(self.db, category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def create_category(self, data: CategoryCreate) -> ServiceCategory:
        name = clean_optional_text(data.name)
        if not name:
            raise ValidationError("Please enter a category name.")

        category = self.categories.create_category(
            self.db,
            name=name,
            description=clean_optional_text(data.description),
            sort_order=self.categories.next_sort_order(self.db),
        )
        logger.info(f"✅ Service category created: {category.name} (order {category.sort_order})")
        return category

    def update_category(self, category_id: str, data: CategoryUpdate) -> ServiceCategory:
        category = self.get_category(category_id)
        updates = data.model_dump(exclude_unset=True)

        if "name" in updates:
            name = clean_optional_text(updates["name"])
            if not name:
                raise ValidationError("Please enter a category name.")
            updates["name"] = name
        if "description" in updates:
            updates["description"] = clean_optional_text(updates["description"])

        return self.categories.update_category(self.db, category, **updates)

    def delete_category(self, category_id: str) -> None:
        category = self.get_category(category_id)
        if self.services.count_for_category(self.db, category.id) > 0:
            raise ConflictError(CATEGORY_IN_USE_MESSAGE)
        self.categories.delete_category(self.db, category)
        logger.info(f"🗑️ Service category deleted: {category_id}")

    # Services

    def list_services(self, category_id: Optional[str] = None) -> list[Service]:
        return self.services.list_services(self.db, category_id)

    def get_service(self, service_id: str) -> Service:
        service = self.services.get_service(self.db, service_id)
        if not service:
            raise NotFoundError("Service not found")
        return service

    def _check_category(self, category_id: Optional[str]) -> str:
        if not category_id:
            raise ValidationError("Please select a category.")
        if not self.categories.get_category(self.db, category_id):
            raise ValidationError("Please select a category.")
        return category_id

    def create_service(self, data: ServiceCreate) -> Service:
        category_id = self._check_category(data.category_id)
        name = clean_optional_text(data.name)
        if not name:
            raise ValidationError("Please enter a service name.")

        return self.services.create_service(
            self.db,
            category_id=category_id,
            name=name,
            description=clean_optional_text(data.description),
            is_active=data.is_active,
            base_price=_price(data.base_price),
        )

    def update_service(self, service_id: str, data: ServiceUpdate) -> Service:
        service = self.get_service(service_id)
        updates = data.model_dump(exclude_unset=True)

        if "category_id" in updates:
            updates["category_id"] = self._check_category(updates["category_id"])
        if "name" in updates:
            name = clean_optional_text(updates["name"])
            if not name:
                raise ValidationError("Please enter a service name.")
            updates["name"] = name
        if "description" in updates:
            updates["description"] = clean_optional_text(updates["description"])
        if "base_price" in updates:
            updates["base_price"] = _price(updates["base_price"])
        if updates.get("is_active", True) is None:
            updates.pop("is_active")

        return self.services.update_service(self.db, service, **updates)

    def delete_service(self, service_id: str) -> None:
        service = self.get_service(service_id)
        self.services.delete_service(self.db, service)
