import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.exceptions import ProductNotFound
from storefront.models.counter import IdCounter
from storefront.models.product import Product
from storefront.schemas.product import ProductCreate

logger = logging.getLogger(__name__)

PRODUCT_COUNTER = "products"
NEWEST_LIMIT = 8
POPULAR_LIMIT = 4


def _claim_next_id(db: Session, counter_name: str, model) -> int:
    """Bump the counter in the current transaction and return the claimed id.

    The first claim seeds the counter from the highest id already stored.
    """
    updated = db.query(IdCounter).filter(IdCounter.name == counter_name).update(
        {IdCounter.value: IdCounter.value + 1}, synchronize_session=False
    )
    if not updated:
        current_max = db.query(func.max(model.id)).scalar() or 0
        db.add(IdCounter(name=counter_name, value=current_max + 1))
        db.flush()
    return db.query(IdCounter.value).filter(IdCounter.name == counter_name).scalar()


def add_product(db: Session, product_data: ProductCreate) -> Product:
    """Create a product with the next catalog id"""
    for attempt in range(3):
        try:
            product = Product(
                id=_claim_next_id(db, PRODUCT_COUNTER, Product),
                name=product_data.name,
                image=product_data.image,
                category=product_data.category,
                new_price=product_data.new_price,
                old_price=product_data.old_price,
            )
            db.add(product)
            db.commit()
        except IntegrityError:
            # Another writer seeded the counter first
            db.rollback()
            logger.warning("Product id conflict on attempt %d, retrying", attempt + 1)
            continue
        db.refresh(product)
        logger.info("Product %s created with id %d", product.name, product.id)
        return product
    raise RuntimeError("Could not assign a product id")


def remove_product(db: Session, product_id: int) -> Optional[str]:
    """Delete a product; returns the removed product's name or None when nothing matched"""
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        logger.info("Remove of product %d matched nothing", product_id)
        return None
    name = product.name
    db.delete(product)
    db.commit()
    logger.info("Product %d removed", product_id)
    return name


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        raise ProductNotFound()
    return product


def list_all(db: Session) -> List[Product]:
    return db.query(Product).order_by(Product.id.asc()).all()


def list_newest(db: Session, limit: int = NEWEST_LIMIT) -> List[Product]:
    """Most recently created products first"""
    return (
        db.query(Product)
        .order_by(Product.date.desc(), Product.id.desc())
        .limit(limit)
        .all()
    )


def list_popular_in_category(db: Session, category: str, limit: int = POPULAR_LIMIT) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.category == category)
        .order_by(Product.id.asc())
        .limit(limit)
        .all()
    )
