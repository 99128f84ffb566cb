"""CLI entrypoint: create the admin user and a handful of sample students.

Usage:
    python -m storefront_lab.seed
    python -m storefront_lab.seed --admin-username instructor --admin-password s3cret
"""

import argparse

from sqlalchemy.orm import Session

from .db import Base, SessionLocal, engine, ensure_schema
from .models import Student
from .routers.auth import ensure_admin_user

SAMPLE_STUDENTS = (
	("student001", "Alice Johnson"),
	("student002", "Bob Smith"),
	("student003", "Charlie Brown"),
	("cs101-001", None),
	("cs101-002", None),
	("cs101-003", None),
)


def seed(db: Session, admin_username: str, admin_password: str) -> int:
	"""Idempotent; returns the number of students created."""
	ensure_admin_user(db, admin_username, admin_password)
	created = 0
	for student_id, name in SAMPLE_STUDENTS:
		if db.query(Student).filter(Student.student_id == student_id).first() is None:
			db.add(Student(student_id=student_id, name=name))
			created += 1
	db.commit()
	return created


def main(args: list[str] | None = None) -> None:
	parser = argparse.ArgumentParser(description="Seed the storefront lab database")
	parser.add_argument("--admin-username", default="admin", help="Admin username")
	parser.add_argument("--admin-password", default="admin123", help="Admin password")
	opts = parser.parse_args(args)

	print("Seeding database...")
	Base.metadata.create_all(bind=engine)
	ensure_schema()
	db = SessionLocal()
	try:
		created = seed(db, opts.admin_username, opts.admin_password)
	finally:
		db.close()
	print(f"Admin user: {opts.admin_username}")
	print(f"Created {created} sample students")
	print("Done.")


if __name__ == "__main__":
	main()
