from datetime import datetime, timedelta, timezone
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session
from sqlalchemy import select
from jose import JWTError, jwt
from passlib.context import CryptContext
from typing import Optional

from carestaff.core.database import get_db
from carestaff.core.config import settings
from carestaff.models.user import User
from carestaff.services.permissions import Actor, authorize, load_actor

router = APIRouter()
security = HTTPBearer()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT settings
SECRET_KEY = settings.jwt_secret_key
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 7  # 7 days


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from JWT token."""
    token = credentials.credentials
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
            )
        user_uuid = UUID(user_id)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )

    user = db.get(User, user_uuid)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    return user


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    """The caller with roles, grants and organization context resolved."""
    organization = user.organization
    if organization is None or not organization.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Organization not found or inactive",
        )
    return load_actor(user, organization, settings.default_user_timezone)


def require_permission(action: str, subject: str):
    """Route dependency: 403 unless the actor may perform ``action`` on ``subject``.

    Routes with an ``organization_id`` path parameter are checked against
    that organization; all others against the actor's own.
    """

    def dependency(request: Request, actor: Actor = Depends(get_current_actor)) -> Actor:
        resource = None
        organization_id = request.path_params.get("organization_id")
        if organization_id:
            try:
                resource = {"organization_id": UUID(str(organization_id))}
            except ValueError:
                raise HTTPException(status_code=422, detail="Invalid organization id")
        if not authorize(actor, action, subject, resource):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not allowed to {action} {subject}",
            )
        return actor

    return dependency


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    name: str
    email: str
    organization_id: str
    role: Optional[str] = None


class SetPasswordRequest(BaseModel):
    user_id: UUID
    password: str = Field(min_length=8)


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    """Login endpoint for users."""
    stmt = select(User).where(User.email == req.email.lower())
    user = db.execute(stmt).scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    # Check if user has a password set
    if not user.password_hash:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Password not set. Please contact your administrator.",
        )

    if not verify_password(req.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    access_token = create_access_token(data={"sub": str(user.user_id)})
    actor = load_actor(user, user.organization, settings.default_user_timezone)

    return LoginResponse(
        access_token=access_token,
        user_id=str(user.user_id),
        name=user.full_name,
        email=user.email,
        organization_id=str(user.organization_id),
        role=actor.role,
    )


@router.get("/me")
def get_current_user_info(
    user: User = Depends(get_current_user),
    actor: Actor = Depends(get_current_actor),
):
    """Get current authenticated user info."""
    return {
        "user_id": str(user.user_id),
        "name": user.full_name,
        "email": user.email,
        "organization_id": str(user.organization_id),
        "organization_category": actor.organization_category,
        "timezone": actor.timezone,
        "role": actor.role,
        "roles": list(actor.roles),
        "permissions": sorted(actor.permissions),
    }


@router.post("/set-password")
def set_user_password(
    req: SetPasswordRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("update", "User")),
):
    """Set password for a user (admin function)."""
    user = db.get(User, req.user_id)
    if not user or (user.organization_id != actor.organization_id and not actor.is_super_admin):
        raise HTTPException(status_code=404, detail="User not found")

    user.password_hash = get_password_hash(req.password)
    db.commit()
    return {"message": "Password set successfully"}
