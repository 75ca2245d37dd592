"""
SQLAlchemy model for user-scoped spending categories.
"""
from sqlalchemy import Column, DateTime, String, UniqueConstraint

from finance_tracker.database import Base
from finance_tracker.models.receipt import _utcnow


class CategoryModel(Base):
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_categories_user_name"),)

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String)
    icon = Column(String)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
