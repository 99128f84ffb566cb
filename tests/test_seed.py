"""Tests for the database seeding command."""

from storefront_lab.models import AdminUser, Student
from storefront_lab.routers.auth import verify_password
from storefront_lab.seed import SAMPLE_STUDENTS, seed


class TestSeed:
    def test_creates_admin_and_students(self, db):
        created = seed(db, "admin", "admin123")
        assert created == len(SAMPLE_STUDENTS)
        admin = db.query(AdminUser).filter(AdminUser.username == "admin").one()
        assert verify_password("admin123", admin.password_hash)
        assert db.query(Student).count() == len(SAMPLE_STUDENTS)

    def test_idempotent(self, db):
        seed(db, "admin", "admin123")
        assert seed(db, "admin", "other") == 0
        assert db.query(AdminUser).count() == 1
        # An existing admin keeps its original password
        admin = db.query(AdminUser).one()
        assert verify_password("admin123", admin.password_hash)
