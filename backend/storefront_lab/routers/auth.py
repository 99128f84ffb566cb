from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from ..settings import settings
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import AdminUser, AdminSession, Student
from ..schemas import serialize_student

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)

logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/admin/login")


class Admin(BaseModel):
	id: int
	username: str


class AdminLoginRequest(BaseModel):
	username: Optional[str] = None
	password: Optional[str] = None


class AdminToken(BaseModel):
	access_token: str
	token_type: str = "bearer"
	admin: Admin


class StudentLoginRequest(BaseModel):
	student_id: Optional[str] = None


def hash_password(password: str) -> str:
	# bcrypt only looks at the first 72 bytes
	password_bytes = password.encode('utf-8')[:72]
	return pwd_context.hash(password_bytes.decode('utf-8', errors='ignore'))


def verify_password(plain_password: str, hashed_password: str) -> bool:
	password_bytes = plain_password.encode('utf-8')[:72]
	return pwd_context.verify(password_bytes.decode('utf-8', errors='ignore'), hashed_password)


def ensure_admin_user(db: Session, username: str, password: str) -> AdminUser:
	"""Create the admin if missing; an existing admin keeps its password."""
	row = db.query(AdminUser).filter(AdminUser.username == username).first()
	if row is None:
		row = AdminUser(username=username, password_hash=hash_password(password))
		db.add(row)
		db.commit()
		db.refresh(row)
	return row


def authenticate_admin(db: Session, username: str, password: str) -> Optional[AdminUser]:
	row = db.query(AdminUser).filter(AdminUser.username == username).first()
	if row is None:
		logger.info("Failed admin login - unknown username: %s", username)
		return None
	if not verify_password(password, row.password_hash):
		logger.info("Failed admin login - bad password for username: %s", username)
		return None
	return row


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=1)
	return datetime.now(timezone.utc) + delta


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@router.post("/admin/login", response_model=AdminToken)
async def admin_login(req: AdminLoginRequest, db: Session = Depends(get_db)):
	username = (req.username or "").strip()
	password = req.password or ""
	if not username or not password:
		raise HTTPException(status_code=400, detail="username and password are required")
	admin = authenticate_admin(db, username, password)
	if admin is None:
		raise HTTPException(status_code=401, detail="Invalid credentials")
	session_id = uuid.uuid4().hex
	access_token = create_access_token({"sub": admin.username, "jti": session_id})
	db.add(AdminSession(session_id=session_id, username=admin.username))
	db.commit()
	logger.info("Admin logged in: %s", admin.username)
	return AdminToken(access_token=access_token, admin=Admin(id=admin.id, username=admin.username))


def get_current_admin(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Admin:
	credentials_exception = HTTPException(status_code=401, detail="Could not validate credentials")
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
		username: str | None = payload.get("sub")
		jti: str | None = payload.get("jti")
		if username is None or jti is None:
			raise credentials_exception
	except JWTError:
		raise credentials_exception
	# The session row must still exist so a token can be revoked server-side
	session_row = db.get(AdminSession, jti)
	if session_row is None or session_row.username != username:
		raise credentials_exception
	admin = db.query(AdminUser).filter(AdminUser.username == username).first()
	if admin is None:
		raise credentials_exception
	session_row.last_activity_at = datetime.utcnow()
	db.add(session_row)
	db.commit()
	return Admin(id=admin.id, username=admin.username)


@router.post("/admin/logout")
async def admin_logout(token: str = Depends(oauth2_scheme), admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
	payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	db.query(AdminSession).filter(AdminSession.session_id == payload.get("jti")).delete()
	db.commit()
	return {"success": True}


@router.get("/admin/me", response_model=Admin)
async def me(admin: Admin = Depends(get_current_admin)):
	return admin


@router.post("/auth/login")
async def student_login(req: StudentLoginRequest, db: Session = Depends(get_db)):
	student_id = (req.student_id or "").strip()
	if not student_id:
		raise HTTPException(status_code=400, detail="Student ID is required")
	student = db.query(Student).filter(Student.student_id == student_id).first()
	if student is None:
		raise HTTPException(status_code=401, detail="Student ID not found. Please contact your instructor.")
	return {"success": True, "student": serialize_student(student)}
