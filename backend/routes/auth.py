from fastapi import APIRouter, HTTPException, Request, status
from database import database
from middleware import require_auth
from models import LoginRequest, RegisterRequest, TokenResponse, User, UserStatus, AuditAction
from auth import verify_password, hash_password, create_access_token, validate_password_strength
from utils.audit import create_audit_log
from pymongo.errors import DuplicateKeyError
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


def _public_user(user: dict) -> dict:
    return {
        "user_id": user["user_id"],
        "email": user["email"],
        "full_name": user.get("full_name"),
        "status": user.get("status"),
    }


def _issue_token(user: dict) -> TokenResponse:
    access_token = create_access_token({"user_id": user["user_id"], "email": user["email"]})
    return TokenResponse(access_token=access_token, user=_public_user(user))


@router.post("/register", response_model=TokenResponse)
async def register(request: Request, data: RegisterRequest):
    """Create an agency owner account and sign it in."""
    db = database.get_db()

    try:
        is_valid, message = validate_password_strength(data.password)
        if not is_valid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=message
            )

        email = data.email.lower()
        existing = await db.users.find_one({"email": email}, {"_id": 0, "user_id": 1})
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An account with this email already exists"
            )

        user = User(
            email=email,
            full_name=data.full_name,
            password_hash=hash_password(data.password)
        )
        user_doc = user.model_dump(mode="json")

        try:
            await db.users.insert_one(user_doc)
        except DuplicateKeyError:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An account with this email already exists"
            )
        user_doc.pop("_id", None)

        await create_audit_log(
            action=AuditAction.USER_REGISTERED,
            actor_id=user.user_id,
            owner_id=user.user_id,
            resource_type="user",
            resource_id=user.user_id,
            metadata={"email": email}
        )
        logger.info(f"User registered: {user.user_id}")

        return _issue_token(user_doc)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Registration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )


@router.post("/login", response_model=TokenResponse)
async def login(request: Request, credentials: LoginRequest):
    """Owner login endpoint."""
    db = database.get_db()

    try:
        email = credentials.email.lower()
        user = await db.users.find_one({"email": email}, {"_id": 0})

        if not user:
            await create_audit_log(
                action=AuditAction.USER_LOGIN_FAILED,
                metadata={"email": email, "reason": "user_not_found"}
            )
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        if not user.get("password_hash") or not verify_password(
            credentials.password,
            user["password_hash"]
        ):
            await create_audit_log(
                action=AuditAction.USER_LOGIN_FAILED,
                actor_id=user["user_id"],
                metadata={"email": email, "reason": "invalid_password"}
            )
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        if user.get("status") != UserStatus.ACTIVE.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is not active"
            )

        await db.users.update_one(
            {"user_id": user["user_id"]},
            {"$set": {"last_login": datetime.now(timezone.utc).isoformat()}}
        )

        await create_audit_log(
            action=AuditAction.USER_LOGIN_SUCCESS,
            actor_id=user["user_id"],
            owner_id=user["user_id"]
        )

        return _issue_token(user)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )


@router.get("/me")
async def get_me(request: Request):
    user = await require_auth(request)
    db = database.get_db()

    try:
        record = await db.users.find_one(
            {"user_id": user["user_id"]},
            {"_id": 0, "password_hash": 0}
        )
        if not record:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return record

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get user error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load user"
        )
