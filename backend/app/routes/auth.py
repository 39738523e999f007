import logging
from fastapi import APIRouter, HTTPException, Depends
from app.core.database import db
from app.core.security import verify_password, create_token, get_current_user
from app.models.user import UserLogin, UserResponse, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_response(user_doc) -> UserResponse:
    return UserResponse(
        id=user_doc["id"],
        email=user_doc["email"],
        name=user_doc["name"],
        role=user_doc["role"],
        client_id=user_doc.get("client_id"),
        allowed_roots=user_doc.get("allowed_roots"),
        permissions=user_doc.get("permissions") or {},
        created_at=user_doc["created_at"],
    )


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin):
    user = await db.users.find_one({"email": data.email}, {"_id": 0})
    if not user or not verify_password(data.password, user["password"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info(f"User {user['id']} logged in ({user['role']})")
    token = create_token(user["id"], user["role"])
    return TokenResponse(
        access_token=token,
        user=_user_response(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user=Depends(get_current_user)):
    return _user_response(user)
