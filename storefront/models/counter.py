from sqlalchemy import Column, Integer, String
from storefront.database import Base


class IdCounter(Base):
    """High-water mark for integer ids handed out per collection"""
    __tablename__ = "id_counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, default=0, nullable=False)
