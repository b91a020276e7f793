"""
Mealwise User Service
Local user records mirrored from the identity provider
"""

import logging
from typing import Optional, Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models.users import User
from models.recipe_models import Recipe, SavedRecipe
from models.meal_planning_models import MealPlan, GroceryList
from services.auth_service import AuthClaims
from middleware.logging import log_user_activity
from utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class UserService:
    """Lookup, sync and stats for users"""

    async def get_user_by_auth_id(self, auth_provider_id: str, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.auth_provider_id == auth_provider_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str, db: AsyncSession) -> Optional[User]:
        if not email:
            return None
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def sync_user_from_auth(self, claims: AuthClaims, db: AsyncSession) -> User:
        """
        Create or update the local user for a provider identity

        Matches by provider id first, then by email (attaching the provider
        id to an existing account), otherwise creates a new user.
        """
        email = (claims.email or "").lower() or None

        user = await self.get_user_by_auth_id(claims.auth_provider_id, db)
        if not user and email:
            user = await self.get_user_by_email(email, db)
            if user:
                logger.info(f"Linking existing user {user.id} to provider identity")
                user.auth_provider_id = claims.auth_provider_id

        if user:
            if email and email != user.email:
                owner = await self.get_user_by_email(email, db)
                if owner and owner.id != user.id:
                    raise ValueError("Email is already used by another account")
                user.email = email
            if claims.first_name is not None:
                user.first_name = claims.first_name
            if claims.last_name is not None:
                user.last_name = claims.last_name
            if claims.image_url is not None:
                user.image_url = claims.image_url
            user.updated_at = utcnow()
            await db.flush()
            return user

        if not email:
            raise ValueError("Email is required to create a user")

        user = User(
            auth_provider_id=claims.auth_provider_id,
            email=email,
            first_name=claims.first_name,
            last_name=claims.last_name,
            image_url=claims.image_url,
        )
        db.add(user)
        await db.flush()

        logger.info(f"Created user {user.id} from provider identity")
        log_user_activity("user_created", {"user_id": user.id})
        return user

    async def get_user_stats(self, user: User, db: AsyncSession) -> Dict[str, int]:
        """Counts of the user's recipes, plans, lists and saved recipes"""
        async def count(model, *criteria) -> int:
            result = await db.execute(
                select(func.count()).select_from(model).where(model.user_id == user.id, *criteria)
            )
            return result.scalar() or 0

        return {
            "recipes": await count(Recipe),
            "meal_plans": await count(MealPlan, MealPlan.is_active.is_(True)),
            "grocery_lists": await count(GroceryList),
            "saved_recipes": await count(SavedRecipe),
        }


# Global service instance
user_service = UserService()
