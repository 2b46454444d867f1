from django.contrib.auth.models import AnonymousUser
from django.test import TestCase, override_settings

from accounts.models import User
from accounts.permissions import is_admin_role


class AdminRolePredicateTests(TestCase):
    def test_configured_roles_qualify(self):
        for role in (User.ROLE_ADMIN, User.ROLE_SUPER_ADMIN, User.ROLE_CITY_MANAGER, User.ROLE_OPERATIONS):
            user = User.objects.create_user(phone=f"91{role}", role=role)
            self.assertTrue(is_admin_role(user), role)

    def test_customers_and_vendors_do_not(self):
        self.assertFalse(is_admin_role(User.objects.create_user(phone="9000000020")))
        self.assertFalse(is_admin_role(User.objects.create_user(phone="9000000021", role=User.ROLE_VENDOR)))
        self.assertFalse(is_admin_role(AnonymousUser()))
        self.assertFalse(is_admin_role(None))

    def test_superuser_always_qualifies(self):
        user = User.objects.create_superuser(phone="9000000022", password="pw-123456")

        with override_settings(COVERAGE_ADMIN_ROLES=[]):
            self.assertTrue(is_admin_role(user))

    @override_settings(COVERAGE_ADMIN_ROLES=["OPERATIONS"])
    def test_roles_come_from_settings(self):
        self.assertFalse(is_admin_role(User.objects.create_user(phone="9000000023", role=User.ROLE_ADMIN)))
        self.assertTrue(is_admin_role(User.objects.create_user(phone="9000000024", role=User.ROLE_OPERATIONS)))

    def test_explicit_roles_argument(self):
        user = User.objects.create_user(phone="9000000025", role=User.ROLE_CITY_MANAGER)

        self.assertTrue(is_admin_role(user, roles=[User.ROLE_CITY_MANAGER]))
        self.assertFalse(is_admin_role(user, roles=[User.ROLE_SUPER_ADMIN]))
