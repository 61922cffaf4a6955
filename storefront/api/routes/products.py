from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.schemas.common import MAX_INT_ID
from storefront.schemas.product import ProductCreate, ProductRemove, ProductResponse, ProductActionResponse
from storefront.services import product_service

router = APIRouter()


@router.post("/addproduct", response_model=ProductActionResponse)
def add_product(product_data: ProductCreate, db: Session = Depends(get_db)):
    """Add a product to the catalog"""
    product = product_service.add_product(db, product_data)
    return ProductActionResponse(success=True, name=product.name)


@router.post("/removeproduct", response_model=ProductActionResponse)
def remove_product(payload: ProductRemove, db: Session = Depends(get_db)):
    """Remove a product; succeeds even if no product matched"""
    removed_name = product_service.remove_product(db, payload.id)
    return ProductActionResponse(success=True, name=removed_name or payload.name)


@router.get("/allproducts", response_model=List[ProductResponse])
def all_products(db: Session = Depends(get_db)):
    return product_service.list_all(db)


@router.get("/newcollections", response_model=List[ProductResponse])
def new_collections(db: Session = Depends(get_db)):
    """Newest products first"""
    return product_service.list_newest(db)


@router.get("/popularinwomen", response_model=List[ProductResponse])
def popular_in_women(db: Session = Depends(get_db)):
    return product_service.list_popular_in_category(db, "women")


@router.get("/popularin/{category}", response_model=List[ProductResponse])
def popular_in_category(category: str, db: Session = Depends(get_db)):
    return product_service.list_popular_in_category(db, category)


@router.get("/product/{product_id}", response_model=ProductResponse)
def get_product(product_id: int = Path(..., ge=1, le=MAX_INT_ID), db: Session = Depends(get_db)):
    return product_service.get_product(db, product_id)
