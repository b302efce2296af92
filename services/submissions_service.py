"""
Submissions service: persistence and lookup of form entries
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import FormEntry
from services.forms_service import AsyncFormsService

logger = logging.getLogger("forms.submissions")

METADATA_KEY = "_metadata"
IP_FIELD = "ipAddress"
CLIENT_KEY_FIELD = "clientKey"
ENTRY_COLUMNS = {
    "id": FormEntry.id,
    "formId": FormEntry.form_id,
    "form_id": FormEntry.form_id,
    "createdAt": FormEntry.created_at,
    "created_at": FormEntry.created_at,
    "updatedAt": FormEntry.updated_at,
    "updated_at": FormEntry.updated_at,
}


class SubmissionError(Exception):
    """Raised by the programmatic submission path with a caller-facing message"""


def build_answers(
    data: Dict[str, Any],
    metadata: Optional[Dict[str, Any]],
    user_agent: Optional[str],
    ip_address: str,
    client_key: Optional[str] = None,
) -> Dict[str, Any]:
    """Answers document stored on an entry: sanitized data plus the reserved _metadata object"""
    meta = {
        "submittedAt": datetime.now(timezone.utc).isoformat(),
        "userAgent": user_agent or "unknown",
        "ipAddress": ip_address,
    }
    if client_key and client_key != ip_address:
        meta[CLIENT_KEY_FIELD] = client_key
    meta.update(metadata or {})
    answers = dict(data)
    answers[METADATA_KEY] = meta
    return answers


def serialize_entry(entry: FormEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "formId": entry.form_id,
        "answers": entry.answers or {},
        "createdAt": entry.created_at.isoformat() if entry.created_at else None,
        "updatedAt": entry.updated_at.isoformat() if entry.updated_at else None,
    }


def _date_threshold(date_filter: str) -> Optional[datetime]:
    now = datetime.now(timezone.utc)
    if date_filter == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_filter == "week":
        return now - timedelta(days=7)
    if date_filter == "month":
        return now - timedelta(days=30)
    if date_filter == "all":
        return None
    return datetime.fromtimestamp(0, tz=timezone.utc)


def _answer_matches(entry: FormEntry, needle: str) -> bool:
    answers = entry.answers or {}
    return any(needle in str(value).lower() for key, value in answers.items() if key != METADATA_KEY)


def _answer_sort_key(entry: FormEntry, key: str):
    value = (entry.answers or {}).get(key)
    return str(value).lower() if value not in (None, "", False, 0) else None


class SubmissionsService:
    """Service for handling form submissions"""

    @staticmethod
    async def has_existing_submission(session: AsyncSession, form_id: str, client_key: str, key_field: str = IP_FIELD) -> bool:
        """True when an entry of the form was stored with the same client key"""
        stored_key = FormEntry.answers[(METADATA_KEY, key_field)].as_string()
        result = await session.execute(
            select(FormEntry.id)
            .where(FormEntry.form_id == form_id, stored_key == client_key)
            .limit(1)
        )
        return result.first() is not None

    @staticmethod
    async def create_entry(session: AsyncSession, form_id: str, answers: Dict[str, Any]) -> FormEntry:
        entry = FormEntry(form_id=form_id, answers=answers)
        session.add(entry)
        await session.flush()
        logger.info("entry created form=%s entry=%s", form_id, entry.id)
        return entry

    @staticmethod
    async def submit_form_entry(session: AsyncSession, form_id: str, answers: Any) -> Dict[str, Any]:
        """Programmatic submission used by the rendering pages.

        Stores the answers as given; callers are trusted first-party code.
        """
        if not isinstance(answers, dict):
            raise SubmissionError("Invalid form submission")
        form = await AsyncFormsService.get_active_form(session, form_id)
        if not form:
            raise SubmissionError("Form not found")
        entry = await SubmissionsService.create_entry(session, form_id, answers)
        return {"success": True, "entryId": entry.id}

    @staticmethod
    async def get_form_entries(
        session: AsyncSession,
        form_id: str,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        date_filter: str = "all",
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> Dict[str, Any]:
        """Paginated, filterable entries of one form for the dashboard"""
        page = max(1, int(page))
        limit = max(1, min(100, int(limit)))
        descending = (sort_order or "desc").lower() != "asc"

        conditions = [FormEntry.form_id == form_id]
        threshold = _date_threshold(date_filter or "all")
        if threshold is not None:
            conditions.append(FormEntry.created_at >= threshold)

        column = ENTRY_COLUMNS.get(sort_by)
        needle = (search or "").strip().lower()

        if column is not None and not needle:
            total = (await session.execute(select(func.count(FormEntry.id)).where(*conditions))).scalar() or 0
            order = column.desc() if descending else column.asc()
            result = await session.execute(
                select(FormEntry).where(*conditions).order_by(order).offset((page - 1) * limit).limit(limit)
            )
            entries = list(result.scalars().all())
        else:
            # Search and answer-key sorting need the decoded answers documents
            result = await session.execute(
                select(FormEntry).where(*conditions).order_by(FormEntry.created_at.desc())
            )
            entries = list(result.scalars().all())
            if needle:
                entries = [e for e in entries if _answer_matches(e, needle)]
            if column is None:
                present = [e for e in entries if _answer_sort_key(e, sort_by) is not None]
                missing = [e for e in entries if _answer_sort_key(e, sort_by) is None]
                present.sort(key=lambda e: _answer_sort_key(e, sort_by), reverse=descending)
                entries = present + missing
            else:
                entries.sort(key=lambda e: getattr(e, column.key), reverse=descending)
            total = len(entries)
            entries = entries[(page - 1) * limit: page * limit]

        total_pages = (total + limit - 1) // limit
        return {
            "entries": [serialize_entry(e) for e in entries],
            "pagination": {
                "page": page,
                "limit": limit,
                "totalCount": total,
                "totalPages": total_pages,
                "hasNext": page < total_pages,
                "hasPrev": page > 1,
            },
        }
