from sqlalchemy import JSON, Column, Enum, ForeignKey, Integer, String

from app.features.accessibility.constants import SuggestionStatus
from app.platform.db.base import BaseModel
from app.platform.db.session import SessionLocal


class Suggestion(BaseModel):
    """
    One unit of remediation work on an opportunity.

    `data` holds the candidate group ({url, source?, issues, jiraLink, ...});
    remediation guidance is merged into data["issues"][*]["htmlWithIssues"][*].
    """
    __tablename__ = "suggestions"

    opportunity_id = Column(
        String, ForeignKey("opportunities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(32), nullable=False, default="CODE_CHANGE")
    rank = Column(Integer, nullable=False, default=0)
    status = Column(Enum(SuggestionStatus), default=SuggestionStatus.NEW, nullable=False, index=True)
    data = Column(JSON, nullable=False, default=dict)

    async def save(self) -> "Suggestion":
        async with SessionLocal() as session:
            await session.merge(self)
            await session.commit()
        return self
