"""
SQLAlchemy-backed opportunity store.

Every call opens its own session so concurrent saves in a fan-out never share one.
"""
import asyncio
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, update

from app.features.accessibility.models.opportunity import Opportunity
from app.features.accessibility.models.suggestion import Suggestion
from app.platform.config import settings
from app.platform.db.session import SessionLocal
from app.platform.logger import get_logger

logger = get_logger(__name__)

OPPORTUNITY_FIELDS = (
    "site_id", "audit_id", "runbook", "type", "origin", "title",
    "description", "tags", "status", "data", "updated_by",
)


class SqlOpportunityRepository:

    async def create(self, fields: Dict[str, Any]) -> Opportunity:
        opportunity = Opportunity(**{key: fields[key] for key in OPPORTUNITY_FIELDS if key in fields})
        async with SessionLocal() as session:
            session.add(opportunity)
            await session.commit()
        return opportunity

    async def find_by_id(self, opportunity_id: str) -> Optional[Opportunity]:
        async with SessionLocal() as session:
            result = await session.execute(select(Opportunity).where(Opportunity.id == opportunity_id))
            return result.scalar_one_or_none()

    async def all_by_site_id(self, site_id: str) -> List[Opportunity]:
        async with SessionLocal() as session:
            result = await session.execute(
                select(Opportunity)
                .where(Opportunity.site_id == site_id)
                .order_by(Opportunity.created_at, Opportunity.id)
            )
            return list(result.scalars().all())


class SqlSuggestionRepository:

    async def bulk_update_status(self, suggestions: Sequence[Suggestion], status) -> None:
        ids = [suggestion.id for suggestion in suggestions]
        if not ids:
            return

        async with SessionLocal() as session:
            await session.execute(
                update(Suggestion)
                .where(Suggestion.id.in_(ids))
                .values(status=status, updated_by="system")
            )
            await session.commit()

        for suggestion in suggestions:
            suggestion.status = status


async def save_with_retry(
    entity,
    max_retries: Optional[int] = None,
    delay_seconds: Optional[float] = None,
):
    """Save a store record, retrying with exponential backoff before giving up."""
    max_retries = max_retries or settings.STORE_SAVE_MAX_RETRIES
    delay_seconds = settings.STORE_SAVE_RETRY_DELAY_SECONDS if delay_seconds is None else delay_seconds

    for attempt in range(max_retries):
        if attempt > 0:
            await asyncio.sleep(delay_seconds * (1.5 ** attempt))

        try:
            return await entity.save()
        except Exception as e:
            if attempt == max_retries - 1:
                logger.error(f"Save failed for {type(entity).__name__} {getattr(entity, 'id', None)} after {max_retries} attempts: {e}")
                raise
            logger.warning(f"Save failed for {type(entity).__name__} {getattr(entity, 'id', None)}, retry {attempt + 1}/{max_retries}: {e}")
