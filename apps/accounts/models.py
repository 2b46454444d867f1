from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    def create_user(self, phone, password=None, **extra_fields):
        if not phone:
            raise ValueError("phone is required")
        phone = self.normalize_email(phone) if "@" in str(phone) else str(phone).strip()
        user = self.model(phone=phone, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, phone, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("role", User.ROLE_SUPER_ADMIN)
        if not password:
            raise ValueError("superuser password required")
        return self.create_user(phone, password=password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Platform identity for customers, vendor staff and operators.
    - login by phone
    - ``role`` drives the admin checks in ``accounts.permissions``
    """

    ROLE_CUSTOMER = "CUSTOMER"
    ROLE_VENDOR = "VENDOR"
    ROLE_ADMIN = "ADMIN"
    ROLE_SUPER_ADMIN = "SUPER_ADMIN"
    ROLE_CITY_MANAGER = "CITY_MANAGER"
    ROLE_OPERATIONS = "OPERATIONS"

    ROLE_CHOICES = [
        (ROLE_CUSTOMER, "Customer"),
        (ROLE_VENDOR, "Vendor"),
        (ROLE_ADMIN, "Admin"),
        (ROLE_SUPER_ADMIN, "Super admin"),
        (ROLE_CITY_MANAGER, "City manager"),
        (ROLE_OPERATIONS, "Operations"),
    ]

    phone = models.CharField(max_length=20, unique=True, db_index=True)
    full_name = models.CharField(max_length=120, blank=True, default="")
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER, db_index=True)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now)
    last_login_at = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = "phone"
    REQUIRED_FIELDS = []

    def __str__(self):
        return f"{self.phone}"
