"""
Async forms service: tenant CRUD over the forms table
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import Form, FormEntry
from models.base import FormModel
from models.schema import FormSchema, parse_schema, parse_settings
from models.validators import sanitize_for_db

logger = logging.getLogger("forms.service")


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def serialize_form(form: Form, entry_count: Optional[int] = None) -> Dict[str, Any]:
    """camelCase view of a form row, as the builder and renderer expect it"""
    data = {
        "id": form.id,
        "organizationId": form.organization_id,
        "title": form.title,
        "description": form.description,
        "isActive": bool(form.is_active),
        "isMultistep": bool(form.is_multistep),
        "fields": form.fields if not form.is_multistep else None,
        "steps": form.steps if form.is_multistep else None,
        "settings": form.settings or {},
        "styling": form.styling or {},
        "embedding": form.embedding,
        "thankYouPage": form.thank_you_page or {},
        "errorPage": form.error_page,
        "createdAt": _iso(form.created_at),
        "updatedAt": _iso(form.updated_at),
    }
    if entry_count is not None:
        data["_count"] = {"entries": entry_count}
    return data


def form_schema(form: Form) -> Optional[FormSchema]:
    """Typed schema of a stored form, or None when its fields/steps blob is missing."""
    raw = form.steps if form.is_multistep else form.fields
    return parse_schema(raw, bool(form.is_multistep))


def allows_multiple_submissions(form: Form) -> bool:
    return parse_settings(form.settings).allow_multiple_submissions


class AsyncFormsService:
    """Async service for handling form operations"""

    @staticmethod
    async def get_active_form(session: AsyncSession, form_id: str) -> Optional[Form]:
        """Public lookup: only published (active) forms are visible"""
        result = await session.execute(
            select(Form).where(Form.id == form_id, Form.is_active.is_(True))
        )
        return result.scalars().first()

    @staticmethod
    async def get_form_by_id(session: AsyncSession, form_id: str, organization_id: Optional[str] = None) -> Optional[Form]:
        """Tenants see any of their own forms; anonymous callers only active ones"""
        query = select(Form).where(Form.id == form_id)
        if organization_id:
            query = query.where(Form.organization_id == organization_id)
        else:
            query = query.where(Form.is_active.is_(True))
        result = await session.execute(query)
        return result.scalars().first()

    @staticmethod
    async def count_entries(session: AsyncSession, form_id: str) -> int:
        result = await session.execute(
            select(func.count(FormEntry.id)).where(FormEntry.form_id == form_id)
        )
        return int(result.scalar() or 0)

    @staticmethod
    async def get_forms_by_organization(session: AsyncSession, organization_id: str) -> List[Dict[str, Any]]:
        """Forms of a tenant, newest first, each with its entry count"""
        counts = (
            select(FormEntry.form_id, func.count(FormEntry.id).label("entries"))
            .group_by(FormEntry.form_id)
            .subquery()
        )
        query = (
            select(Form, func.coalesce(counts.c.entries, 0))
            .outerjoin(counts, counts.c.form_id == Form.id)
            .where(Form.organization_id == organization_id)
            .order_by(Form.created_at.desc())
        )
        result = await session.execute(query)
        return [serialize_form(form, int(count)) for form, count in result.all()]

    @staticmethod
    async def create_form(session: AsyncSession, organization_id: str, payload: FormModel) -> Form:
        """Insert a validated form payload owned by organization_id"""
        data = sanitize_for_db(payload)
        form = Form(organization_id=organization_id, **data)
        session.add(form)
        await session.flush()
        await session.refresh(form)
        logger.info("form created id=%s org=%s multistep=%s", form.id, organization_id, form.is_multistep)
        return form

    @staticmethod
    async def update_form(session: AsyncSession, form_id: str, organization_id: str, payload: FormModel) -> Optional[Form]:
        """Replace the editable parts of a form; None when not owned by the tenant"""
        form = await AsyncFormsService.get_form_by_id(session, form_id, organization_id)
        if not form:
            return None

        data = sanitize_for_db(payload)
        # Embedding has its own endpoint; a form save without it keeps the current value
        if data.get("embedding") is None:
            data.pop("embedding", None)
        for key, value in data.items():
            setattr(form, key, value)
        await session.flush()
        await session.refresh(form)
        logger.info("form updated id=%s org=%s", form_id, organization_id)
        return form

    @staticmethod
    async def update_embedding_settings(session: AsyncSession, form_id: str, organization_id: str, embedding: Dict[str, Any]) -> Optional[Form]:
        form = await AsyncFormsService.get_form_by_id(session, form_id, organization_id)
        if not form:
            return None
        form.embedding = embedding
        await session.flush()
        await session.refresh(form)
        return form

    @staticmethod
    async def delete_form(session: AsyncSession, form_id: str, organization_id: str) -> bool:
        """Delete a form and, by cascade, all of its entries. Returns True if deleted."""
        form = await AsyncFormsService.get_form_by_id(session, form_id, organization_id)
        if not form:
            return False
        await session.delete(form)
        await session.flush()
        logger.info("form deleted id=%s org=%s", form_id, organization_id)
        return True
