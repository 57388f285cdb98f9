"""Admin image upload routes.

Files are validated by declared MIME type and size, then written to the
configured storage backend. The returned URL is what product and banner
records store.
"""

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel

from storefront.api.models import MessageResponse
from storefront.api.shared.auth import SessionUser, require_admin
from storefront.api.shared.services.storage import (
    Storage,
    generate_filename,
    get_storage,
    validate_image,
)
from storefront.config import get_config
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/upload", tags=["admin"])


class UploadResponse(BaseModel):
    message: str = "Image uploaded successfully"
    url: str


async def store_upload(
    storage: Storage,
    file: UploadFile,
    folder: str,
    prefix: str,
    max_size_mb: int,
) -> str:
    content = await file.read()
    image = validate_image(content, file.content_type, max_size_mb)
    filename = generate_filename(prefix, image.extension)
    return storage.save(image.content, folder, filename, image.content_type)


@router.post("/product-image", response_model=UploadResponse)
async def upload_product_image(
    file: UploadFile = File(...),
    admin: SessionUser = Depends(require_admin),
    storage: Storage = Depends(get_storage),
) -> UploadResponse:
    url = await store_upload(
        storage,
        file,
        folder="products",
        prefix="product",
        max_size_mb=get_config().storage.max_product_image_mb,
    )
    logger.info("Product image uploaded", extra={"url": url, "admin_id": str(admin.user_id)})
    return UploadResponse(url=url)


@router.post("/banner", response_model=UploadResponse)
async def upload_banner_image(
    file: UploadFile = File(...),
    admin: SessionUser = Depends(require_admin),
    storage: Storage = Depends(get_storage),
) -> UploadResponse:
    url = await store_upload(
        storage,
        file,
        folder="banners",
        prefix="banner",
        max_size_mb=get_config().storage.max_banner_image_mb,
    )
    logger.info("Banner image uploaded", extra={"url": url, "admin_id": str(admin.user_id)})
    return UploadResponse(url=url)


@router.delete("", response_model=MessageResponse)
async def delete_upload(
    url: str = Query(..., min_length=1, description="URL returned by an upload route"),
    admin: SessionUser = Depends(require_admin),
    storage: Storage = Depends(get_storage),
) -> MessageResponse:
    """Delete a stored upload.

    Raises:
        HTTPException: 400 if the URL is outside the upload root,
            404 if no file exists there
    """
    if not storage.delete(url):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    logger.info("Upload deleted", extra={"url": url, "admin_id": str(admin.user_id)})
    return MessageResponse(message="File deleted")
