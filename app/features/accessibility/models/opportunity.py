from typing import Any, Dict, List, Sequence

from sqlalchemy import JSON, Column, Enum, Index, String, Text, select

from app.features.accessibility.constants import OpportunityStatus, SuggestionStatus
from app.features.accessibility.ports import AddSuggestionsResult
from app.platform.db.base import BaseModel
from app.platform.db.session import SessionLocal


class Opportunity(BaseModel):
    """
    One category of accessibility problem for one site.

    At most one opportunity per (site_id, type) is active (NEW or IN_PROGRESS);
    RESOLVED and IGNORED rows are history and never reused.
    """
    __tablename__ = "opportunities"

    site_id = Column(String, nullable=False, index=True)
    audit_id = Column(String, nullable=True)  # Rebound on every reconciliation pass

    runbook = Column(Text, nullable=True)
    type = Column(String(64), nullable=False, index=True)
    origin = Column(String(32), nullable=False, default="AUTOMATION")
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    status = Column(Enum(OpportunityStatus), default=OpportunityStatus.NEW, nullable=False, index=True)
    data = Column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_opportunities_site_type", "site_id", "type"),
    )

    async def save(self) -> "Opportunity":
        async with SessionLocal() as session:
            await session.merge(self)
            await session.commit()
        return self

    async def get_suggestions(self) -> List["Suggestion"]:
        from app.features.accessibility.models.suggestion import Suggestion

        async with SessionLocal() as session:
            result = await session.execute(
                select(Suggestion)
                .where(Suggestion.opportunity_id == self.id)
                .order_by(Suggestion.created_at, Suggestion.id)
            )
            return list(result.scalars().all())

    async def add_suggestions(self, items: Sequence[Dict[str, Any]]) -> AddSuggestionsResult:
        """
        Insert new suggestions in one transaction.

        Items without a data dict are reported in error_items and skipped; a failed
        commit raises, since nothing was written.
        """
        from app.features.accessibility.models.suggestion import Suggestion

        outcome = AddSuggestionsResult()
        rows = []
        for item in items:
            if not isinstance(item.get("data"), dict):
                outcome.error_items.append({"item": item, "error": "Suggestion data must be an object"})
                continue
            rows.append(Suggestion(
                opportunity_id=self.id,
                type=item.get("type", "CODE_CHANGE"),
                rank=item.get("rank", 0),
                status=item.get("status", SuggestionStatus.NEW),
                data=item["data"],
                updated_by=item.get("updatedBy", "system"),
            ))

        if rows:
            async with SessionLocal() as session:
                session.add_all(rows)
                await session.commit()
            outcome.created_items.extend(rows)

        return outcome
