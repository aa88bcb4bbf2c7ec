"""Global daily counter of free generations"""
from sqlalchemy import Column, Integer, Date
from stylesnap.db.base import Base


class DailyQuota(Base):
    __tablename__ = "daily_quota"

    day = Column(Date, primary_key=True)
    free_used = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<DailyQuota(day={self.day}, free_used={self.free_used})>"
