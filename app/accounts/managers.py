"""
User manager: email login and role-aware creation helpers.
"""

from django.contrib.auth.models import BaseUserManager
from django.db.models import Q


class UserManager(BaseUserManager):
    """
    Manager for the email-keyed User model.

    Usage:
        customer = User.objects.create_user(email="buyer@example.com", password="...")
        operator = User.objects.create_operator(email="ops@example.com", password="...")
        User.objects.operators()
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create a customer account. Without a password the account cannot log in.

        Raises:
            ValueError: If email is empty
        """
        if not email:
            raise ValueError("An email address is required")

        extra_fields.setdefault("role", "user")
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        user = self.model(email=self.normalize_email(email), **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_operator(self, email, password=None, **extra_fields):
        """Create an account allowed to decide returns and adjust points."""
        extra_fields["role"] = "operator"
        return self.create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create a Django admin account. Superusers are always operators.

        Raises:
            ValueError: If is_staff or is_superuser is explicitly disabled
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        if not (extra_fields["is_staff"] and extra_fields["is_superuser"]):
            raise ValueError("Superusers need is_staff and is_superuser set")

        return self.create_operator(email, password, **extra_fields)

    def operators(self):
        """Accounts that pass the IsOperator permission."""
        return self.filter(Q(role="operator") | Q(is_staff=True), is_active=True)
