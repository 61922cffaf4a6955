from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from datetime import datetime
from storefront.database import Base


class Product(Base):
    __tablename__ = "products"

    # Assigned from the id_counters high-water mark, never reused
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)
    image = Column(String(500), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    new_price = Column(Float, nullable=False)
    old_price = Column(Float, nullable=False)
    date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    available = Column(Boolean, default=True, nullable=False)
