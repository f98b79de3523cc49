"""Service catalog router - FastAPI endpoints for categories and services"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import StaffUser
from .schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from .service import CatalogService

router = APIRouter(prefix="/catalog", tags=["Service Catalog"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    current_user: StaffUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.list_categories()


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    current_user: StaffUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.create_category(data)


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    current_user: StaffUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.update_category(category_id, data)


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    """Delete an empty category"""
    service.delete_category(category_id)
    return {"message": "Category deleted"}


@router.get("/services", response_model=list[ServiceResponse])
async def list_services(
    current_user: StaffUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
    category_id: Optional[str] = Query(None),
):
    return service.list_services(category_id)


@router.post("/services", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    current_user: StaffUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.create_service(data)


@router.patch("/services/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    data: ServiceUpdate,
    current_user: StaffUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.update_service(service_id, data)


@router.delete("/services/{service_id}")
async def delete_service(
    service_id: str,
    current_user: StaffUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    service.delete_service(service_id)
    return {"message": "Service deleted"}
