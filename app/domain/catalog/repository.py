"""Service catalog repository - Database operations for categories and services"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Service, ServiceCategory


class CategoryRepository:
    """Repository for service category database operations"""

    @staticmethod
    def list_categories(db: Session) -> list[ServiceCategory]:
        return (
            db.query(ServiceCategory)
            .order_by(ServiceCategory.sort_order.asc(), ServiceCategory.name.asc())
            .all()
        )

    @staticmethod
    def get_category(db: Session, category_id: str) -> Optional[ServiceCategory]:
        return db.query(ServiceCategory).filter(ServiceCategory.id == category_id).first()

    @staticmethod
    def next_sort_order(db: Session) -> int:
        current = db.query(func.max(ServiceCategory.sort_order)).scalar()
        return (current or 0) + 1

    @staticmethod
    def create_category(db: Session, **data) -> ServiceCategory:
        category = ServiceCategory(**data)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def update_category(db: Session, category: ServiceCategory, **updates) -> ServiceCategory:
        for field, value in updates.items():
            setattr(category, field, value)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def delete_category(db: Session, category: ServiceCategory) -> None:
        db.delete(category)
        db.commit()


class ServiceRepository:
    """Repository for clinic service database operations"""

    @staticmethod
    def list_services(db: Session, category_id: Optional[str] = None) -> list[Service]:
        query = db.query(Service)
        if category_id:
            query = query.filter(Service.category_id == category_id)
        return query.order_by(Service.created_at.asc(), Service.id.asc()).all()

    @staticmethod
    def count_for_category(db: Session, category_id: str) -> int:
        return db.query(Service).filter(Service.category_id == category_id).count()

    @staticmethod
    def get_service(db: Session, service_id: str) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def create_service(db: Session, **data) -> Service:
        service = Service(**data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for field, value in updates.items():
            setattr(service, field, value)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.commit()
