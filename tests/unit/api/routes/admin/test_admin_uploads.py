"""Unit tests for admin image upload routes."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException, UploadFile

from storefront.api.v1.routes.admin.uploads import (
    delete_upload,
    store_upload,
    upload_banner_image,
    upload_product_image,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def upload(content: bytes = PNG_BYTES, content_type: str = "image/png"):
    file = MagicMock(spec=UploadFile)
    file.content_type = content_type
    file.read = AsyncMock(return_value=content)
    return file


def storage_saving_to(url: str) -> MagicMock:
    storage = MagicMock()
    storage.save.return_value = url
    return storage


class TestStoreUpload:
    @pytest.mark.asyncio
    async def test_names_file_by_prefix_and_type(self):
        storage = storage_saving_to("/uploads/products/product-1-ab.png")

        url = await store_upload(storage, upload(), "products", "product", max_size_mb=1)

        assert url == "/uploads/products/product-1-ab.png"
        content, folder, filename, content_type = storage.save.call_args.args
        assert content == PNG_BYTES
        assert folder == "products"
        assert filename.startswith("product-")
        assert filename.endswith(".png")
        assert content_type == "image/png"

    @pytest.mark.asyncio
    async def test_rejects_gif(self):
        storage = MagicMock()

        with pytest.raises(HTTPException) as exc_info:
            await store_upload(storage, upload(content_type="image/gif"), "products", "product", 1)

        assert exc_info.value.status_code == 400
        storage.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_oversized(self):
        big = b"x" * (1024 * 1024 + 1)

        with pytest.raises(HTTPException) as exc_info:
            await store_upload(MagicMock(), upload(big, "image/jpeg"), "banners", "banner", 1)

        assert "1MB" in exc_info.value.detail


class TestUploadRoutes:
    @pytest.mark.asyncio
    async def test_product_image(self, admin):
        storage = storage_saving_to("/uploads/products/p.png")

        result = await upload_product_image(file=upload(), admin=admin, storage=storage)

        assert result.url == "/uploads/products/p.png"
        assert storage.save.call_args.args[1] == "products"

    @pytest.mark.asyncio
    async def test_banner_image(self, admin):
        storage = storage_saving_to("/uploads/banners/b.webp")

        result = await upload_banner_image(
            file=upload(content_type="image/webp"), admin=admin, storage=storage
        )

        assert result.message == "Image uploaded successfully"
        assert storage.save.call_args.args[2].startswith("banner-")

    @pytest.mark.asyncio
    async def test_delete(self, admin):
        storage = MagicMock()
        storage.delete.return_value = True

        result = await delete_upload(url="/uploads/banners/b.png", admin=admin, storage=storage)

        assert result.message == "File deleted"

    @pytest.mark.asyncio
    async def test_delete_missing_file(self, admin):
        storage = MagicMock()
        storage.delete.return_value = False

        with pytest.raises(HTTPException) as exc_info:
            await delete_upload(url="/uploads/banners/gone.png", admin=admin, storage=storage)

        assert exc_info.value.status_code == 404
