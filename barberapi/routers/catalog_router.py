from typing import List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Path, Response, status

from barberapi.containers import Container
from barberapi.core.auth_middleware import get_current_operator, require_admin
from barberapi.schemas.operator import Operator
from barberapi.schemas.service_item import (
    ServiceItemCreate,
    ServiceItemSchema,
    ServiceItemUpdate,
)
from barberapi.services.catalog_service import CatalogService

router = APIRouter(prefix="/services", tags=["catalog"])


@router.get("", response_model=List[ServiceItemSchema])
@inject
def list_services(
    operator: Operator = Depends(get_current_operator),
    catalog_service: CatalogService = Depends(Provide[Container.services.catalog_service]),
) -> List[ServiceItemSchema]:
    """활성 서비스 항목 (정렬 순서대로)"""
    return catalog_service.list_active()


@router.post("", response_model=ServiceItemSchema, status_code=status.HTTP_201_CREATED)
@inject
def create_service(
    request: ServiceItemCreate,
    admin: Operator = Depends(require_admin),
    catalog_service: CatalogService = Depends(Provide[Container.services.catalog_service]),
) -> ServiceItemSchema:
    return catalog_service.create(request)


@router.put("/{item_id}", response_model=ServiceItemSchema)
@inject
def update_service(
    request: ServiceItemUpdate,
    item_id: int = Path(..., gt=0),
    admin: Operator = Depends(require_admin),
    catalog_service: CatalogService = Depends(Provide[Container.services.catalog_service]),
) -> ServiceItemSchema:
    return catalog_service.update(item_id, request)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
@inject
def delete_service(
    item_id: int = Path(..., gt=0),
    admin: Operator = Depends(require_admin),
    catalog_service: CatalogService = Depends(Provide[Container.services.catalog_service]),
) -> Response:
    """비활성화 처리 (소비 내역의 항목 스냅샷은 유지)"""
    catalog_service.soft_delete(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
