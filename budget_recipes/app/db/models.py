from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from budget_recipes.app.db.base import Base


class WebSearchCache(Base):
    __tablename__ = "web_search_cache"

    query = Column(String, primary_key=True, index=True)
    results_json = Column(Text, nullable=False, default="[]")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
