import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_events.auth import jwt_handler
from campus_events.auth.dependencies import ADMIN_ROLE, STUDENT_ROLE, Principal, get_current_principal
from campus_events.auth.passwords import hash_password, verify_password
from campus_events.database import get_db
from campus_events.models.admin import Admin
from campus_events.models.student import Student
from campus_events.routes.errors import database_unavailable
from campus_events.schemas import AdminProfile, StudentProfile

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not normalized or '@' not in normalized:
        raise ValueError('A valid email address is required.')
    return normalized


def require_text(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Field is required.')
    return normalized


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class AdminRegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    college: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        return value

    @field_validator('name', 'college')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        return require_text(value)


class StudentRegisterRequest(AdminRegisterRequest):
    student_id: str = Field(alias='studentId')
    phone: str | None = None

    class Config:
        populate_by_name = True

    @field_validator('student_id')
    @classmethod
    def validate_student_id(cls, value: str) -> str:
        return require_text(value)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


def admin_auth_response(admin: Admin, message: str) -> dict:
    token = jwt_handler.create_access_token(subject=str(admin.id), role=ADMIN_ROLE)
    return {
        'message': message,
        'token': token,
        'admin': AdminProfile.model_validate(admin),
    }


def student_auth_response(student: Student, message: str) -> dict:
    token = jwt_handler.create_access_token(subject=str(student.id), role=STUDENT_ROLE)
    return {
        'message': message,
        'token': token,
        'student': StudentProfile.model_validate(student),
    }


@router.post('/register-admin', status_code=status.HTTP_201_CREATED)
def register_admin(data: AdminRegisterRequest, db: Session = Depends(get_db)):
    try:
        if db.query(Admin).filter(Admin.email == data.email).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Admin already exists')

        admin = Admin(
            email=data.email,
            hashed_password=hash_password(data.password),
            name=data.name,
            college=data.college,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Admin already exists') from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    logger.info('Registered admin %s', admin.id)
    return admin_auth_response(admin, 'Admin registered successfully')


@router.post('/login-admin')
def login_admin(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        admin = db.query(Admin).filter(Admin.email == data.email).first()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if admin is None or not verify_password(data.password, admin.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    return admin_auth_response(admin, 'Login successful')


@router.post('/register-student', status_code=status.HTTP_201_CREATED)
def register_student(data: StudentRegisterRequest, db: Session = Depends(get_db)):
    try:
        if db.query(Student).filter(Student.email == data.email).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Student already exists')

        if db.query(Student).filter(Student.student_number == data.student_id).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Student ID already registered')

        student = Student(
            email=data.email,
            hashed_password=hash_password(data.password),
            name=data.name,
            student_number=data.student_id,
            college=data.college,
            phone=data.phone,
        )
        db.add(student)
        db.commit()
        db.refresh(student)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Email or student ID already registered',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    logger.info('Registered student %s', student.id)
    return student_auth_response(student, 'Student registered successfully')


@router.post('/login-student')
def login_student(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        student = db.query(Student).filter(Student.email == data.email).first()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if student is None or not verify_password(data.password, student.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    return student_auth_response(student, 'Login successful')


@router.get('/me')
def me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    try:
        if principal.is_admin:
            account = db.query(Admin).filter(Admin.id == principal.id).first()
            profile = AdminProfile.model_validate(account) if account else None
        else:
            account = db.query(Student).filter(Student.id == principal.id).first()
            profile = StudentProfile.model_validate(account) if account else None
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='User not found')

    return {'role': principal.role, principal.role: profile}
