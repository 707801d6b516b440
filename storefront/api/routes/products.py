from uuid import UUID

from fastapi import Depends, status

from storefront.api.auth_utils import CurrentUser
from storefront.api.deps import get_product_service, require_admin
from storefront.api.routes.content import build_content_router
from storefront.api.schemas import ProductWriteRequest
from storefront.components.content import ContentService, ProductFields
from storefront.domain.entities import Product

router = build_content_router(
    "product",
    get_product_service,
    fields_model=ProductFields,
    write_model=ProductWriteRequest,
)


@router.post("/{item_id}/submit-for-review", response_model=Product)
def submit_for_review(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    service: ContentService = Depends(get_product_service),
) -> Product:
    return service.submit_for_review(item_id)  # type: ignore[return-value]


@router.post("/{item_id}/private", response_model=Product)
def set_private(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    service: ContentService = Depends(get_product_service),
) -> Product:
    return service.set_private(item_id)  # type: ignore[return-value]


@router.post("/{item_id}/duplicate", response_model=Product, status_code=status.HTTP_201_CREATED)
def duplicate_product(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    service: ContentService = Depends(get_product_service),
) -> Product:
    """Copy into a new draft titled "<title> (Copy)"."""
    return service.duplicate(item_id, editor_id=current_user.id)  # type: ignore[return-value]
