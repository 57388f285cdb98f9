"""Unit tests for upload validation and storage backends."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from storefront.api.shared.services.storage import (
    AVATAR_IMAGE_TYPES,
    MB,
    LocalStorage,
    S3Storage,
    discard_upload,
    generate_filename,
    validate_image,
)
from storefront.config import StorageConfig


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path, "/uploads")


class TestValidateImage:
    def test_accepts_png(self):
        image = validate_image(b"\x89PNG", "image/png", max_size_mb=5)

        assert image.extension == "png"
        assert image.content_type == "image/png"

    def test_content_type_is_case_insensitive(self):
        assert validate_image(b"x", "IMAGE/JPEG", 5).extension == "jpg"

    def test_rejects_other_types(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_image(b"GIF89a", "image/gif", 5)

        assert exc_info.value.status_code == 400
        assert "Invalid file type" in exc_info.value.detail

    def test_avatars_accept_gif(self):
        image = validate_image(b"GIF89a", "image/gif", 5, allowed_types=AVATAR_IMAGE_TYPES)
        assert image.extension == "gif"

    def test_rejects_missing_type(self):
        with pytest.raises(HTTPException):
            validate_image(b"x", None, 5)

    def test_rejects_empty_file(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_image(b"", "image/png", 5)
        assert exc_info.value.detail == "File is empty"

    def test_size_limit(self):
        validate_image(b"x" * MB, "image/png", 1)

        with pytest.raises(HTTPException) as exc_info:
            validate_image(b"x" * (MB + 1), "image/png", 1)
        assert exc_info.value.detail == "File too large. Maximum size is 1MB"


def test_generate_filename():
    name = generate_filename("banner", "png")

    prefix, timestamp, rest = name.split("-")
    assert prefix == "banner"
    assert timestamp.isdigit()
    assert rest.endswith(".png")
    assert generate_filename("banner", "png") != name


class TestLocalStorage:
    """Tests for LocalStorage."""

    def test_save_and_delete(self, storage, tmp_path):
        url = storage.save(b"data", "banners", "banner-1.png", "image/png")

        assert url == "/uploads/banners/banner-1.png"
        assert (tmp_path / "banners" / "banner-1.png").read_bytes() == b"data"

        assert storage.delete(url) is True
        assert not (tmp_path / "banners" / "banner-1.png").exists()

    def test_delete_missing_file(self, storage):
        assert storage.delete("/uploads/banners/missing.png") is False

    def test_rejects_foreign_urls(self, storage):
        with pytest.raises(HTTPException) as exc_info:
            storage.delete("https://elsewhere.example.com/a.png")
        assert exc_info.value.status_code == 400

    def test_rejects_path_traversal(self, storage):
        with pytest.raises(HTTPException) as exc_info:
            storage.delete("/uploads/../secrets.txt")
        assert exc_info.value.status_code == 400

    def test_list_urls(self, storage):
        storage.save(b"1", "banners", "b.png", "image/png")
        storage.save(b"2", "banners", "a.png", "image/png")

        assert storage.list_urls("banners") == [
            "/uploads/banners/a.png",
            "/uploads/banners/b.png",
        ]
        assert storage.list_urls("products") == []


class TestS3Storage:
    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def s3(self, client):
        config = StorageConfig(
            backend="s3",
            s3_bucket="shop-assets",
            s3_public_url="https://cdn.example.com/",
        )
        return S3Storage(config, client=client)

    def test_requires_bucket(self):
        with pytest.raises(ValueError):
            S3Storage(StorageConfig(backend="s3"), client=MagicMock())

    def test_save(self, s3, client):
        url = s3.save(b"data", "products", "p.jpg", "image/jpeg")

        assert url == "https://cdn.example.com/products/p.jpg"
        client.put_object.assert_called_once_with(
            Bucket="shop-assets",
            Key="products/p.jpg",
            Body=b"data",
            ContentType="image/jpeg",
        )

    def test_delete(self, s3, client):
        assert s3.delete("https://cdn.example.com/products/p.jpg") is True
        client.delete_object.assert_called_once_with(Bucket="shop-assets", Key="products/p.jpg")

    def test_delete_rejects_traversal(self, s3):
        with pytest.raises(HTTPException):
            s3.delete("https://cdn.example.com/products/../p.jpg")

    def test_list_urls(self, s3, client):
        client.get_paginator.return_value.paginate.return_value = [
            {"Contents": [{"Key": "banners/b.png"}, {"Key": "banners/a.png"}]},
            {},
        ]

        assert s3.list_urls("banners") == [
            "https://cdn.example.com/banners/a.png",
            "https://cdn.example.com/banners/b.png",
        ]


class TestDiscardUpload:
    def test_deletes_owned_file(self, storage):
        url = storage.save(b"1", "banners", "x.png", "image/png")
        assert discard_upload(storage, url) is True

    def test_ignores_external_urls(self, storage):
        assert discard_upload(storage, "https://images.example.com/x.png") is False
        assert discard_upload(storage, None) is False

    def test_failed_delete_is_not_raised(self):
        broken = MagicMock()
        broken.owns.return_value = True
        broken.delete.side_effect = OSError("disk gone")

        assert discard_upload(broken, "/uploads/banners/x.png") is False
