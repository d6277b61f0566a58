"""
Factory Boy factories for account models.

Usage:
    from accounts.tests.factories import UserFactory, OperatorFactory

    user = UserFactory()
    operator = OperatorFactory()
"""

import factory

from accounts.models import User, UserRole


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Creates active users with the default ``user`` role.
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    full_name = factory.Faker("name")
    role = UserRole.USER
    is_active = True
    is_staff = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )


class OperatorFactory(UserFactory):
    """User with the operator role."""

    email = factory.Sequence(lambda n: f"operator{n}@example.com")
    role = UserRole.OPERATOR
