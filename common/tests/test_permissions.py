from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from orders.api.permissions import IsAdminStaff, IsOrderOwner
from profiles.api.permissions import IsProfileOwner
from reviews.api.permissions import IsReviewOwnerOrStaff

User = get_user_model()


class StorePermissionTests(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.owner = User.objects.create_user("owner", "owner@mail.de", "Pass123!")
        self.other = User.objects.create_user("other", "other@mail.de", "Pass123!")
        self.staff = User.objects.create_user("staff", "staff@mail.de", "Pass123!", is_staff=True)
        self.obj = SimpleNamespace(user_id=self.owner.id)

    def request(self, user, method="get"):
        req = getattr(self.factory, method)("/")
        req.user = user
        return req

    def test_owner_check(self):
        perm = IsOrderOwner()
        self.assertTrue(perm.has_object_permission(self.request(self.owner), None, self.obj))
        self.assertFalse(perm.has_object_permission(self.request(self.other), None, self.obj))
        self.assertFalse(perm.has_object_permission(self.request(self.staff), None, self.obj))

    def test_profile_reads_are_open_writes_are_not(self):
        perm = IsProfileOwner()
        self.assertTrue(perm.has_object_permission(self.request(self.other), None, self.obj))
        self.assertFalse(perm.has_object_permission(self.request(self.other, "patch"), None, self.obj))
        self.assertTrue(perm.has_object_permission(self.request(self.owner, "patch"), None, self.obj))

    def test_staff_may_delete_foreign_reviews(self):
        perm = IsReviewOwnerOrStaff()
        self.assertTrue(perm.has_object_permission(self.request(self.staff, "delete"), None, self.obj))
        self.assertFalse(perm.has_object_permission(self.request(self.other, "delete"), None, self.obj))

    def test_staff_only(self):
        perm = IsAdminStaff()
        self.assertTrue(perm.has_permission(self.request(self.staff), None))
        self.assertFalse(perm.has_permission(self.request(self.owner), None))
