"""Factories for banners and carousels."""

import factory

from storefront.db.models import Banner, BannerSettings, Carousel, CarouselItem, CarouselType

from .base import TimestampedFactory
from .catalog import ProductFactory


class BannerFactory(TimestampedFactory):
    class Meta:
        model = Banner

    image_url = factory.Sequence(lambda n: f"/uploads/banners/banner-{n}.png")
    title = factory.Faker("sentence", nb_words=3)
    subtitle = None
    order = factory.Sequence(lambda n: n)
    active = True
    display_mode = "cover"
    alignment = "center"


class BannerSettingsFactory(TimestampedFactory):
    class Meta:
        model = BannerSettings

    animation_speed = 500
    slide_delay = 3000
    animation_type = "slide"
    loop = True
    arrow_display = "hover"


class CarouselFactory(TimestampedFactory):
    class Meta:
        model = Carousel

    type = CarouselType.BEST_SELLER.value
    items = factory.LazyFunction(list)


class CarouselItemFactory(TimestampedFactory):
    class Meta:
        model = CarouselItem

    carousel_id = None
    product = factory.SubFactory(ProductFactory)
    product_id = factory.LazyAttribute(lambda o: o.product.id)
    order = factory.Sequence(lambda n: n)
