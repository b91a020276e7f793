"""
Mealwise Recipe Service
Recipe CRUD, search, saved recipes and personal recipe views
"""

import re
import logging
from typing import Dict, List, Optional, Any
from urllib.parse import urlparse

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.users import User
from models.recipe_models import Recipe, Ingredient, RecipeIngredient, SavedRecipe, ImportSource
from services.spoonacular_service import spoonacular_service, EXTERNAL_PREFIX
from middleware.logging import log_business_event
from utils.date_utils import utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title", "description", "prep_time", "cook_time", "servings", "difficulty",
    "cuisine", "tags", "instructions", "image_url", "source_url", "is_public",
)


class RecipeService:
    """Service for user recipes and saved recipe bookmarks"""

    async def get_or_create_ingredient(self, name: str, unit: str, db: AsyncSession) -> Ingredient:
        """Find an ingredient by lowercase name, creating it on first use"""
        normalized = name.strip().lower()
        result = await db.execute(select(Ingredient).where(Ingredient.name == normalized))
        ingredient = result.scalar_one_or_none()
        if ingredient:
            return ingredient

        ingredient = Ingredient(name=normalized, category="unknown", common_units=[unit])
        db.add(ingredient)
        await db.flush()
        return ingredient

    async def _build_ingredients(self, items: List[Dict[str, Any]], db: AsyncSession) -> List[RecipeIngredient]:
        rows = []
        for index, item in enumerate(items):
            name = (item.get("name") or "").strip()
            if not name:
                raise ValueError("Ingredient name is required")
            unit = item.get("unit") or "piece"

            ingredient = await self.get_or_create_ingredient(name, unit, db)
            rows.append(RecipeIngredient(
                ingredient=ingredient,
                quantity=float(item.get("quantity") if item.get("quantity") is not None else 1),
                unit=unit,
                notes=item.get("notes") or None,
                is_optional=bool(item.get("is_optional", False)),
                order=index,
            ))
        return rows

    async def create_recipe(self, user: User, data: Dict[str, Any], db: AsyncSession) -> Recipe:
        """
        Create a recipe with its ingredients

        Args:
            user: Owner of the recipe
            data: Recipe fields plus an optional `ingredients` list of
                {name, quantity, unit, notes, is_optional}
            db: Database session; the caller's transaction covers every row
        """
        title = (data.get("title") or "").strip()
        if not title:
            raise ValueError("Recipe title is required")

        import_source = data.get("import_source") or ImportSource.MANUAL.value
        if import_source not in {source.value for source in ImportSource}:
            raise ValueError(f"Unknown import source: {import_source}")

        recipe = Recipe(
            user_id=user.id,
            title=title,
            description=data.get("description"),
            prep_time=data.get("prep_time"),
            cook_time=data.get("cook_time"),
            servings=data.get("servings") or 1,
            difficulty=data.get("difficulty"),
            cuisine=data.get("cuisine"),
            tags=list(data.get("tags") or []),
            instructions=list(data.get("instructions") or []),
            image_url=data.get("image_url"),
            source_url=data.get("source_url"),
            is_public=bool(data.get("is_public", False)),
            external_id=data.get("external_id"),
            import_source=import_source,
        )
        recipe.ingredients = await self._build_ingredients(data.get("ingredients") or [], db)

        db.add(recipe)
        await db.flush()

        logger.info(f"Created recipe {recipe.id} for user {user.id}")
        log_business_event("recipe_created", {
            "recipe_id": recipe.id,
            "import_source": import_source,
            "ingredient_count": len(recipe.ingredients),
        })
        return recipe

    async def get_recipe_by_id(self, recipe_id: int, db: AsyncSession, user: Optional[User] = None) -> Optional[Recipe]:
        """Recipe visible to the owner, or to anyone when public"""
        result = await db.execute(select(Recipe).where(Recipe.id == recipe_id))
        recipe = result.scalar_one_or_none()
        if not recipe:
            return None
        if recipe.is_public or (user is not None and recipe.user_id == user.id):
            return recipe
        return None

    async def get_user_recipes(self, user: User, db: AsyncSession) -> List[Recipe]:
        result = await db.execute(
            select(Recipe)
            .where(Recipe.user_id == user.id)
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
        )
        return list(result.scalars().all())

    async def get_public_recipes(self, db: AsyncSession, limit: int = 20, offset: int = 0) -> List[Recipe]:
        result = await db.execute(
            select(Recipe)
            .where(Recipe.is_public.is_(True))
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update_recipe(self, user: User, recipe_id: int, data: Dict[str, Any], db: AsyncSession) -> Optional[Recipe]:
        """Patch an owned recipe; a given `ingredients` list replaces the old one"""
        result = await db.execute(
            select(Recipe).where(Recipe.id == recipe_id, Recipe.user_id == user.id)
        )
        recipe = result.scalar_one_or_none()
        if not recipe:
            return None

        for field_name in UPDATABLE_FIELDS:
            if field_name in data and data[field_name] is not None:
                value = data[field_name]
                if field_name == "title":
                    value = value.strip()
                    if not value:
                        raise ValueError("Recipe title is required")
                setattr(recipe, field_name, value)

        if data.get("ingredients") is not None:
            recipe.ingredients = await self._build_ingredients(data["ingredients"], db)

        recipe.updated_at = utcnow()
        await db.flush()

        logger.info(f"Updated recipe {recipe.id}")
        return recipe

    async def delete_recipe(self, user: User, recipe_id: int, db: AsyncSession) -> bool:
        result = await db.execute(
            select(Recipe).where(Recipe.id == recipe_id, Recipe.user_id == user.id)
        )
        recipe = result.scalar_one_or_none()
        if not recipe:
            return False

        await db.delete(recipe)
        await db.flush()

        log_business_event("recipe_deleted", {"recipe_id": recipe_id})
        return True

    async def search_recipes(self, user: User, query: str, db: AsyncSession) -> List[Recipe]:
        """Substring match on title or description, or exact tag match; case-insensitive"""
        needle = (query or "").strip().lower()
        recipes = await self.get_user_recipes(user, db)
        if not needle:
            return recipes

        return [
            recipe for recipe in recipes
            if needle in recipe.title.lower()
            or needle in (recipe.description or "").lower()
            or needle in [str(tag).lower() for tag in (recipe.tags or [])]
        ]

    async def update_external_ids(self, user: User, db: AsyncSession) -> Dict[str, Any]:
        """Backfill external_id from source_url for recipes that lack one"""
        result = await db.execute(
            select(Recipe).where(
                Recipe.user_id == user.id,
                Recipe.external_id.is_(None),
                Recipe.source_url.isnot(None),
            )
        )

        updated_ids = []
        for recipe in result.scalars().all():
            external_id = self.external_id_from_url(recipe.source_url)
            if external_id:
                recipe.external_id = external_id
                recipe.updated_at = utcnow()
                updated_ids.append(recipe.id)

        await db.flush()
        logger.info(f"Backfilled external ids for {len(updated_ids)} recipes")
        return {"updated_count": len(updated_ids), "recipe_ids": updated_ids}

    @staticmethod
    def external_id_from_url(source_url: str) -> Optional[str]:
        if not source_url:
            return None

        if "spoonacular.com" in source_url:
            match = re.search(r"recipes/(\d+)", source_url)
            return f"spoonacular-{match.group(1)}" if match else None

        if "blogspot.com" in source_url or "wordpress.com" in source_url:
            last_segment = urlparse(source_url).path.rstrip("/").split("/")[-1]
            slug = last_segment.split(".")[0] or "unknown"
            return f"blog-{slug}"

        return None

    def to_personal_view(self, recipe: Recipe) -> Dict[str, Any]:
        """Recipe in the shape shared with catalogue recipes"""
        ingredients = []
        for ri in recipe.ingredients:
            original = f"{ri.quantity:g} {ri.unit} {ri.name}"
            if ri.notes:
                original += f" ({ri.notes})"
            ingredients.append({
                "id": ri.id,
                "name": ri.name,
                "amount": ri.quantity,
                "unit": ri.unit,
                "original": original,
            })

        return {
            "id": str(recipe.id),
            "title": recipe.title,
            "description": recipe.description,
            "image_url": recipe.image_url,
            "cooking_time": recipe.total_time,
            "servings": recipe.servings,
            "difficulty": recipe.difficulty or "Medium",
            "tags": recipe.tags or [],
            "source": "personal",
            "rating": 0,
            "ingredients": ingredients,
            "instructions": recipe.instructions or [],
            "created_at": recipe.created_at.isoformat() if recipe.created_at else None,
        }

    async def save_recipe(
        self,
        user: User,
        recipe_id: str,
        db: AsyncSession,
        title: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> SavedRecipe:
        """Bookmark a local or catalogue recipe; saving twice is a no-op"""
        recipe_id = str(recipe_id).strip()
        existing = await self._get_saved(user, recipe_id, db)
        if existing:
            return existing

        if title is None:
            resolved = await self._resolve_recipe(user, recipe_id, db)
            if not resolved:
                raise ValueError("Recipe not found")
            title = resolved["title"]
            image_url = image_url or resolved.get("image_url")

        saved = SavedRecipe(user_id=user.id, recipe_id=recipe_id, title=title, image_url=image_url)
        db.add(saved)
        await db.flush()

        log_business_event("recipe_saved", {"recipe_id": recipe_id})
        return saved

    async def unsave_recipe(self, user: User, recipe_id: str, db: AsyncSession) -> bool:
        saved = await self._get_saved(user, str(recipe_id).strip(), db)
        if not saved:
            return False
        await db.delete(saved)
        await db.flush()
        return True

    async def get_saved_recipes(self, user: User, db: AsyncSession) -> List[Dict[str, Any]]:
        """Saved bookmarks resolved to full recipes where still available"""
        result = await db.execute(
            select(SavedRecipe)
            .where(SavedRecipe.user_id == user.id)
            .order_by(SavedRecipe.created_at.desc(), SavedRecipe.id.desc())
        )

        saved_recipes = []
        for saved in result.scalars().all():
            entry = saved.to_dict()
            entry["recipe"] = await self._resolve_recipe(user, saved.recipe_id, db)
            saved_recipes.append(entry)
        return saved_recipes

    async def _get_saved(self, user: User, recipe_id: str, db: AsyncSession) -> Optional[SavedRecipe]:
        result = await db.execute(
            select(SavedRecipe).where(SavedRecipe.user_id == user.id, SavedRecipe.recipe_id == recipe_id)
        )
        return result.scalar_one_or_none()

    async def _resolve_recipe(self, user: User, recipe_id: str, db: AsyncSession) -> Optional[Dict[str, Any]]:
        if recipe_id.startswith(EXTERNAL_PREFIX):
            return await spoonacular_service.get_recipe_information(recipe_id)

        if not recipe_id.isdigit():
            return None

        recipe = await self.get_recipe_by_id(int(recipe_id), db, user=user)
        return self.to_personal_view(recipe) if recipe else None


# Global service instance
recipe_service = RecipeService()
