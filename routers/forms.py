"""
Forms router: tenant CRUD, entries listing and embedding checks
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_session
from models.validators import validate_embedding, validate_form
from services.forms_service import AsyncFormsService, serialize_form
from services.presets import list_presets
from services.submissions_service import SubmissionsService
from utils.limiter import limiter
from utils.origin import check_embedding_origin, resolve_embed_origin
from utils.settings import get_settings

router = APIRouter(prefix="/api/forms", tags=["forms"])
logger = logging.getLogger("forms.api")

DASHBOARD_LIMIT = get_settings().DASHBOARD_RATE_LIMIT


def require_organization(x_organization_id: Optional[str] = Header(default=None)) -> str:
    """Tenant id of the dashboard caller"""
    org = (x_organization_id or "").strip()
    if not org:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing organization id")
    return org


def optional_organization(x_organization_id: Optional[str] = Header(default=None)) -> Optional[str]:
    return (x_organization_id or "").strip() or None


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")


def _parse_form(payload: Any):
    ok, result = validate_form(payload)
    if not ok:
        logger.info("form payload rejected: %s", result)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid form data")
    return result


@router.get("/presets")
@limiter.limit(DASHBOARD_LIMIT)
async def get_presets(request: Request):
    """Starter forms for the "new form" screen"""
    return {"presets": list_presets()}


@router.get("")
@limiter.limit(DASHBOARD_LIMIT)
async def get_forms(
    request: Request,
    organization_id: str = Depends(require_organization),
    session: AsyncSession = Depends(get_session),
):
    forms = await AsyncFormsService.get_forms_by_organization(session, organization_id)
    return {"forms": forms}


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(DASHBOARD_LIMIT)
async def create_form(
    request: Request,
    organization_id: str = Depends(require_organization),
    session: AsyncSession = Depends(get_session),
):
    """
    Create a form owned by the caller's organization

    The FormModel Pydantic model handles:
    - required title, fields XOR steps
    - HTML stripping of title and description
    """
    payload = _parse_form(await _json_body(request))
    form = await AsyncFormsService.create_form(session, organization_id, payload)
    return serialize_form(form, 0)


@router.get("/{form_id}")
@limiter.limit(DASHBOARD_LIMIT)
async def get_form(
    request: Request,
    form_id: str,
    organization_id: Optional[str] = Depends(optional_organization),
    session: AsyncSession = Depends(get_session),
):
    """Tenants see any of their forms; everyone else only active ones."""
    form = await AsyncFormsService.get_form_by_id(session, form_id, organization_id)
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    count = await AsyncFormsService.count_entries(session, form_id)
    return serialize_form(form, count)


@router.put("/{form_id}")
@limiter.limit(DASHBOARD_LIMIT)
async def update_form(
    request: Request,
    form_id: str,
    organization_id: str = Depends(require_organization),
    session: AsyncSession = Depends(get_session),
):
    payload = _parse_form(await _json_body(request))
    form = await AsyncFormsService.update_form(session, form_id, organization_id, payload)
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return serialize_form(form)


@router.patch("/{form_id}")
@limiter.limit(DASHBOARD_LIMIT)
async def update_embedding(
    request: Request,
    form_id: str,
    organization_id: str = Depends(require_organization),
    session: AsyncSession = Depends(get_session),
):
    """Replace the embedding (iframe allow-list) settings of a form"""
    ok, result = validate_embedding(await _json_body(request))
    if not ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid embedding settings")
    form = await AsyncFormsService.update_embedding_settings(session, form_id, organization_id, result.embedding)
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return serialize_form(form)


@router.delete("/{form_id}")
@limiter.limit(DASHBOARD_LIMIT)
async def delete_form(
    request: Request,
    form_id: str,
    organization_id: str = Depends(require_organization),
    session: AsyncSession = Depends(get_session),
):
    deleted = await AsyncFormsService.delete_form(session, form_id, organization_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return {"success": True}


@router.get("/{form_id}/entries")
@limiter.limit(DASHBOARD_LIMIT)
async def get_entries(
    request: Request,
    form_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str = "",
    date_filter: str = Query(default="all", alias="dateFilter"),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    organization_id: str = Depends(require_organization),
    session: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    """Paginated entries of one of the caller's forms"""
    form = await AsyncFormsService.get_form_by_id(session, form_id, organization_id)
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return await SubmissionsService.get_form_entries(
        session,
        form_id,
        page=page,
        limit=limit,
        search=search,
        date_filter=date_filter,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/{form_id}/embed-check")
@limiter.limit(DASHBOARD_LIMIT)
async def embed_check(
    request: Request,
    form_id: str,
    origin: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    """Whether an active form may render inside the calling page's iframe"""
    form = await AsyncFormsService.get_active_form(session, form_id)
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    resolved = resolve_embed_origin(origin, request.headers.get("referer"))
    allowed, reason = check_embedding_origin(form.embedding, resolved)
    if not allowed:
        logger.info("embed denied form=%s origin=%s", form_id, resolved)
    return {"allowed": allowed, "origin": resolved, "reason": reason}
