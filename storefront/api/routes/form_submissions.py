from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status

from storefront.api.auth_utils import CurrentUser
from storefront.api.deps import get_client_ip, get_form_submission_service, require_admin
from storefront.api.schemas import (
    BulkStatusRequest,
    BulkStatusResponse,
    StatusUpdateRequest,
    SubmissionCreatedResponse,
    SubmissionListResponse,
    SubmissionStatsResponse,
)
from storefront.components.forms import FormSubmissionService, SubmissionFilters
from storefront.domain.entities import (
    FormSubmission,
    FormType,
    SubmissionMetadata,
    SubmissionStatus,
)

router = APIRouter()


def _filters(
    type: FormType | None = None,
    status: SubmissionStatus | None = None,
    search: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    product_id: str | None = None,
    sort: str = "-created_at",
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> SubmissionFilters:
    return SubmissionFilters(
        type=type,
        status=status,
        search=search,
        date_from=date_from,
        date_to=date_to,
        product_id=product_id,
        sort=sort,  # type: ignore[arg-type]
        limit=limit,
        offset=(page - 1) * limit,
    )


# --- Admin ---


@router.get("", response_model=SubmissionListResponse)
def list_submissions(
    filters: SubmissionFilters = Depends(_filters),
    current_user: CurrentUser = Depends(require_admin),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> SubmissionListResponse:
    result = service.list(filters)
    return SubmissionListResponse(
        items=result.items,
        total=result.total,
        limit=result.limit,
        offset=result.offset,
        total_pages=result.total_pages,
    )


@router.get("/stats", response_model=SubmissionStatsResponse)
def submission_stats(
    current_user: CurrentUser = Depends(require_admin),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> Any:
    return service.stats().to_dict()


@router.get("/export")
def export_submissions(
    filters: SubmissionFilters = Depends(_filters),
    current_user: CurrentUser = Depends(require_admin),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> Response:
    body = service.export_csv(filters)
    stamp = datetime.now(UTC).strftime("%Y-%m-%d")
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="submissions-{stamp}.csv"'},
    )


@router.patch("/bulk-status", response_model=BulkStatusResponse)
def bulk_update_status(
    req: BulkStatusRequest,
    current_user: CurrentUser = Depends(require_admin),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> BulkStatusResponse:
    count = service.bulk_update_status(req.ids, req.status, current_user.id)
    return BulkStatusResponse(updated=count)


@router.get("/{submission_id}", response_model=FormSubmission)
def get_submission(
    submission_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> FormSubmission:
    return service.get(submission_id)


@router.patch("/{submission_id}/status", response_model=FormSubmission)
def update_status(
    submission_id: UUID,
    req: StatusUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> FormSubmission:
    return service.update_status(submission_id, req.status, current_user.id)


@router.delete("/{submission_id}")
def delete_submission(
    submission_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> dict[str, Any]:
    service.delete(submission_id)
    return {"success": True}


# --- Public ---


@router.post(
    "/{form_type}",
    response_model=SubmissionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_form(
    form_type: str,
    request: Request,
    payload: dict[str, Any] = Body(...),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> SubmissionCreatedResponse:
    """Anonymous visitor submission. Rate limited per client IP."""
    metadata = SubmissionMetadata(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
        page_url=str(payload.pop("page_url", "") or ""),
        referrer=request.headers.get("referer", ""),
    )
    submission = service.submit(form_type, payload, metadata)
    return SubmissionCreatedResponse(id=submission.id)
