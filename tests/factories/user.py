"""Factories for User and Address models."""

import factory

from storefront.db.models import Address, User, UserRole

from .base import TimestampedFactory, generate_uuid


class UserFactory(TimestampedFactory):
    """Factory for creating User instances.

    Example:
        # Basic usage
        user = UserFactory.build()

        # An administrator
        admin = UserFactory.build(admin=True)
    """

    class Meta:
        model = User

    email = factory.LazyFunction(lambda: f"user_{generate_uuid()}@example.com")
    password_hash = None
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    phone = None
    avatar = None
    role = UserRole.USER

    class Params:
        """Traits for common user states."""

        admin = factory.Trait(role=UserRole.ADMIN)


class AddressFactory(TimestampedFactory):
    class Meta:
        model = Address

    user_id = factory.LazyFunction(lambda: UserFactory.build().id)
    title = "Home"
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    phone = "+1 555 0100"
    city = "Springfield"
    district = "Downtown"
    neighborhood = "Old Town"
    full_address = "742 Evergreen Terrace"
