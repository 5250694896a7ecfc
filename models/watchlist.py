from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String

from db import Base
from utils.time_utils import utcnow


class WatchlistItem(Base):
    __tablename__ = "watchlist"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Upper-case ticker as listed in the SEC directory.
    ticker = Column(String, nullable=False, unique=True, index=True)

    # 10-digit zero-padded CIK resolved when the ticker was added.
    cik = Column(String(10), nullable=False)

    added_at = Column(DateTime, nullable=False, default=utcnow)
