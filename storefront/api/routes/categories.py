import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from storefront.adapters.sqlite.repos import SQLiteCategoryRepo
from storefront.api.auth_utils import CurrentUser
from storefront.api.deps import get_category_repo, require_admin
from storefront.api.schemas import CategoryCreateRequest, CategoryListResponse
from storefront.domain.entities import Category, CategoryKind
from storefront.domain.errors import BadRequestError, ConflictError, NotFoundError
from storefront.domain.slugs import generate_slug, normalize_slug

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{kind}", response_model=CategoryListResponse)
def list_categories(
    kind: CategoryKind,
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> CategoryListResponse:
    return CategoryListResponse(items=repo.list_all())


@router.post("/{kind}", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    kind: CategoryKind,
    req: CategoryCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> Category:
    slug = normalize_slug(req.slug) if req.slug else generate_slug(req.name)
    if not slug:
        raise BadRequestError("Category slug cannot be empty")
    if repo.slug_exists(slug):
        raise ConflictError(f'Category slug "{slug}" already exists')
    if req.parent_id and repo.find_category_by_id(req.parent_id) is None:
        raise BadRequestError(f'Parent category "{req.parent_id}" not found')

    category = repo.create(
        Category(
            kind=kind,
            name=req.name.strip(),
            slug=slug,
            description=req.description,
            parent_id=req.parent_id,
        )
    )
    logger.info("Category created: %s (%s/%s)", category.id, kind, slug)
    return category


@router.get("/{kind}/{category_id}", response_model=Category)
def get_category(
    kind: CategoryKind,
    category_id: UUID,
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> Category:
    category = repo.find_category_by_id(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


@router.delete("/{kind}/{category_id}")
def delete_category(
    kind: CategoryKind,
    category_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> dict[str, Any]:
    if repo.delete_by_id(category_id) is None:
        raise NotFoundError("Category not found")
    logger.info("Category deleted: %s", category_id)
    return {"success": True}
