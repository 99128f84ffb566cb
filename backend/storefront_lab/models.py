from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Float, Text, ForeignKey
from sqlalchemy.orm import relationship
from .db import Base


class AdminUser(Base):
	__tablename__ = "admin_users"
	id = Column(Integer, primary_key=True, autoincrement=True)
	username = Column(String(128), unique=True, index=True, nullable=False)
	password_hash = Column(String(256), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AdminSession(Base):
	__tablename__ = "admin_sessions"
	# jti of the issued token
	session_id = Column(String(64), primary_key=True)
	username = Column(String(128), index=True, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Student(Base):
	__tablename__ = "students"
	id = Column(Integer, primary_key=True, autoincrement=True)
	# Login identifier handed out by the instructor
	student_id = Column(String(128), unique=True, index=True, nullable=False)
	name = Column(String(256), nullable=True)
	draft_design_choices = Column(Text, nullable=True)  # JSON string snapshot
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	submissions = relationship(
		"Submission",
		back_populates="student",
		cascade="all, delete-orphan",
		order_by="Submission.created_at.desc()",
	)


class Submission(Base):
	__tablename__ = "submissions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	student_id = Column(String(128), ForeignKey("students.student_id"), index=True, nullable=False)
	design_choices = Column(Text, nullable=False)  # JSON string
	conversion_rate = Column(Float, nullable=False)
	bounce_rate = Column(Float, nullable=False)
	click_through_rate = Column(Float, nullable=False)
	avg_time_on_page = Column(Float, nullable=False)
	cart_abandonment_rate = Column(Float, nullable=False)
	ai_report = Column(Text, nullable=True)
	screenshot_path = Column(String(512), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	student = relationship("Student", back_populates="submissions")
