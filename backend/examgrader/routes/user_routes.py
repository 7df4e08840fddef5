"""
User routes.

Endpoints:
- POST /api/users
- GET /api/users/{user_id}
"""

from fastapi import APIRouter, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..models import User, UserCreate
from ..services.records import find_user
from ..utils import new_id


def create_user_routes(db: AsyncIOMotorDatabase) -> APIRouter:
    """Create user routes with database connection."""

    router = APIRouter(prefix="/api/users", tags=["users"])

    @router.post("", response_model=User, status_code=201)
    async def create_user(payload: UserCreate):
        """Register a student or teacher."""
        if await db.users.find_one({"email": payload.email}, {"_id": 0, "user_id": 1}):
            raise HTTPException(status_code=400, detail="User with this email already exists")

        user = User(user_id=new_id("user"), **payload.model_dump())
        try:
            await db.users.insert_one(user.model_dump())
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail="User with this email already exists")
        return user

    @router.get("/{user_id}", response_model=User)
    async def get_user(user_id: str):
        user = await find_user(db, user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    return router
