from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from ..database import Base
from .watch_history import USER_ID_MAX_LENGTH

QUERY_MAX_LENGTH = 255


class SearchHistory(Base):
    __tablename__ = "search_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(USER_ID_MAX_LENGTH), nullable=False, index=True)
    query = Column(String(QUERY_MAX_LENGTH), nullable=False)
    searched_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
