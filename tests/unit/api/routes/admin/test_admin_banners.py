"""Unit tests for banner slider routes, public and admin."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from storefront.api.models import ReorderItem
from storefront.api.v1.routes.admin.banners import (
    BannerCreate,
    BannerSettingsUpdate,
    BannerUpdate,
    ReorderBannersRequest,
    create_banner,
    delete_banner,
    reorder_banners,
    update_banner,
    update_banner_settings,
)
from storefront.api.v1.routes.banners import get_banners
from tests.factories import BannerFactory, BannerSettingsFactory, scalar_result, scalars_result

ADMIN_BANNER_ROUTES = "storefront.api.v1.routes.admin.banners"


class TestBannerValidation:
    def test_strips_text_and_blank_becomes_none(self):
        banner = BannerCreate(image_url="  /uploads/banners/a.png ", title="  Sale  ", subtitle="   ")

        assert banner.image_url == "/uploads/banners/a.png"
        assert banner.title == "Sale"
        assert banner.subtitle is None

    @pytest.mark.parametrize("image_url", ["", "   ", "ftp://example.com/a.png", "banner.png"])
    def test_rejects_bad_image_url(self, image_url):
        with pytest.raises(ValidationError):
            BannerCreate(image_url=image_url)

    def test_accepts_absolute_url(self):
        assert BannerCreate(image_url="https://cdn.example.com/a.png").display_mode == "cover"

    def test_rejects_unknown_display_mode(self):
        with pytest.raises(ValidationError, match="Display mode"):
            BannerCreate(image_url="/uploads/a.png", display_mode="stretch")

    def test_rejects_unknown_alignment_on_update(self):
        with pytest.raises(ValidationError, match="Alignment"):
            BannerUpdate(alignment="middle")

    def test_settings_ranges(self):
        with pytest.raises(ValidationError):
            BannerSettingsUpdate(animation_speed=50, slide_delay=3000, animation_type="fade")
        with pytest.raises(ValidationError):
            BannerSettingsUpdate(animation_speed=500, slide_delay=20000, animation_type="fade")
        with pytest.raises(ValidationError, match="Animation type"):
            BannerSettingsUpdate(animation_speed=500, slide_delay=3000, animation_type="spin")


class TestPublicBanners:
    @pytest.mark.asyncio
    async def test_default_settings_when_none_saved(self, mock_db):
        banners = [BannerFactory.build(order=0), BannerFactory.build(order=1)]
        mock_db.execute = AsyncMock(side_effect=[scalars_result(banners), scalar_result(None)])

        result = await get_banners(db=mock_db)

        assert [b.id for b in result.banners] == [b.id for b in banners]
        assert result.settings.slide_delay == 3000
        assert result.settings.arrow_display == "hover"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_saved_settings(self, mock_db):
        settings = BannerSettingsFactory.build(animation_type="fade", loop=False)
        mock_db.execute = AsyncMock(side_effect=[scalars_result([]), scalar_result(settings)])

        result = await get_banners(db=mock_db)

        assert result.banners == []
        assert result.settings.animation_type == "fade"
        assert result.settings.loop is False


class TestAdminBanners:
    @pytest.mark.asyncio
    async def test_create(self, mock_db, admin):
        async def refresh(banner):
            stored = BannerFactory.build()
            banner.id = stored.id
            banner.created_at = stored.created_at
            banner.updated_at = stored.updated_at

        mock_db.refresh.side_effect = refresh

        result = await create_banner(
            request=BannerCreate(image_url="/uploads/banners/new.png", title="Summer"),
            admin=admin,
            db=mock_db,
        )

        added = mock_db.add.call_args.args[0]
        assert added.image_url == "/uploads/banners/new.png"
        assert result.title == "Summer"
        assert result.active is True

    @pytest.mark.asyncio
    async def test_update_clears_title_but_keeps_unset_fields(self, mock_db, admin):
        banner = BannerFactory.build(title="Old", display_mode="contain")
        mock_db.get.return_value = banner

        result = await update_banner(
            banner_id=banner.id,
            request=BannerUpdate(title=None, active=False),
            admin=admin,
            db=mock_db,
        )

        assert banner.title is None
        assert banner.active is False
        assert banner.display_mode == "contain"
        assert result.active is False

    @pytest.mark.asyncio
    async def test_update_missing(self, mock_db, admin):
        mock_db.get.return_value = None

        with pytest.raises(HTTPException) as exc_info:
            await update_banner(
                banner_id=uuid4(), request=BannerUpdate(active=True), admin=admin, db=mock_db
            )

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_reorder(self, mock_db, admin):
        first, second = BannerFactory.build(order=0), BannerFactory.build(order=1)
        mock_db.execute.return_value = scalars_result([first, second])
        request = ReorderBannersRequest(
            items=[ReorderItem(id=first.id, order=1), ReorderItem(id=second.id, order=0)]
        )

        result = await reorder_banners(request=request, admin=admin, db=mock_db)

        assert [b.id for b in result] == [second.id, first.id]
        assert (first.order, second.order) == (1, 0)

    @pytest.mark.asyncio
    async def test_reorder_unknown_banner(self, mock_db, admin):
        mock_db.execute.return_value = scalars_result([])
        request = ReorderBannersRequest(items=[ReorderItem(id=uuid4(), order=0)])

        with pytest.raises(HTTPException) as exc_info:
            await reorder_banners(request=request, admin=admin, db=mock_db)

        assert exc_info.value.status_code == 404
        mock_db.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_settings(self, mock_db, admin):
        settings = BannerSettingsFactory.build()
        request = BannerSettingsUpdate(
            animation_speed=800, slide_delay=5000, animation_type="fade", arrow_display="show"
        )

        with patch(
            f"{ADMIN_BANNER_ROUTES}.get_or_create_banner_settings",
            AsyncMock(return_value=settings),
        ):
            result = await update_banner_settings(request=request, admin=admin, db=mock_db)

        assert settings.animation_speed == 800
        assert result.arrow_display == "show"

    @pytest.mark.asyncio
    async def test_delete_discards_image(self, mock_db, admin):
        banner = BannerFactory.build(image_url="/uploads/banners/old.png")
        mock_db.get.return_value = banner
        storage = MagicMock()

        with patch(f"{ADMIN_BANNER_ROUTES}.discard_upload") as discard:
            result = await delete_banner(
                banner_id=banner.id, admin=admin, db=mock_db, storage=storage
            )

        assert result.message == "Banner deleted"
        mock_db.delete.assert_awaited_once_with(banner)
        discard.assert_called_once_with(storage, "/uploads/banners/old.png")
