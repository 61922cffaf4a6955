from fastapi import APIRouter, Depends, File, UploadFile

from storefront.api.deps import get_context
from storefront.context import AppContext
from storefront.schemas.upload import UploadResponse

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
def upload_image(product: UploadFile = File(...), context: AppContext = Depends(get_context)):
    """Relay a product image to the image host and return its URL"""
    content = product.file.read()
    image_url = context.image_store.upload(product.filename, content, product.content_type)
    return UploadResponse(success=1, image_url=image_url)
