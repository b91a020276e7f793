"""
Mealwise Recipe Endpoints
Personal recipes, saved recipes, the external catalogue and recipe import
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query, Form, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from core.database import get_db
from core.dependencies import CurrentUser, PaginationParams
from services.recipe_service import recipe_service
from services.spoonacular_service import spoonacular_service, EXTERNAL_PREFIX
from services.url_import_service import url_import_service
from services.ocr_service import ocr_service
from services.recipe_validation import validate_recipe
from schemas.recipe_schemas import RecipeCreate, RecipeUpdate, SavedRecipeRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
async def get_recipes(
    current_user: CurrentUser,
    q: Optional[str] = Query(None, description="Search title, description or tags"),
    db: AsyncSession = Depends(get_db)
):
    """Get the current user's recipes, newest first"""
    try:
        if q:
            recipes = await recipe_service.search_recipes(current_user, q, db)
        else:
            recipes = await recipe_service.get_user_recipes(current_user, db)

        return {
            "recipes": [recipe.to_dict() for recipe in recipes],
            "total": len(recipes)
        }

    except Exception as e:
        logger.error(f"Failed to get recipes for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get recipes"
        )


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_recipe(
    recipe_data: RecipeCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Create a recipe with its ingredients"""
    try:
        recipe = await recipe_service.create_recipe(current_user, recipe_data.model_dump(mode="json"), db)
        return recipe.to_dict()

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Failed to create recipe for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create recipe"
        )


@router.get("/public")
async def get_public_recipes(
    pagination: PaginationParams,
    db: AsyncSession = Depends(get_db)
):
    """Recipes shared publicly by any user"""
    try:
        recipes = await recipe_service.get_public_recipes(db, **pagination)
        return {
            "recipes": [recipe.to_dict() for recipe in recipes],
            "limit": pagination["limit"],
            "offset": pagination["offset"]
        }

    except Exception as e:
        logger.error(f"Failed to get public recipes: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get public recipes"
        )


@router.get("/personal")
async def get_personal_recipes(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """The user's recipes in the same shape as catalogue recipes"""
    try:
        recipes = await recipe_service.get_user_recipes(current_user, db)
        return {
            "recipes": [recipe_service.to_personal_view(recipe) for recipe in recipes],
            "total": len(recipes)
        }

    except Exception as e:
        logger.error(f"Failed to get personal recipes for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get personal recipes"
        )


@router.get("/saved")
async def get_saved_recipes(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    try:
        saved = await recipe_service.get_saved_recipes(current_user, db)
        return {"saved_recipes": saved, "total": len(saved)}

    except Exception as e:
        logger.error(f"Failed to get saved recipes for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get saved recipes"
        )


@router.post("/saved")
async def update_saved_recipe(
    request: SavedRecipeRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Save or unsave a recipe"""
    if not request.recipe_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Recipe ID is required"
        )
    if request.action not in ("save", "unsave"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid action"
        )

    try:
        if request.action == "save":
            saved = await recipe_service.save_recipe(
                current_user, request.recipe_id, db,
                title=request.title, image_url=request.image_url
            )
            return {"success": True, "action": "save", "saved_recipe": saved.to_dict()}

        removed = await recipe_service.unsave_recipe(current_user, request.recipe_id, db)
        return {"success": True, "action": "unsave", "removed": removed}

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Failed to {request.action} recipe {request.recipe_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update saved recipes"
        )


@router.get("/shared")
async def get_shared_recipes(current_user: CurrentUser):
    """Recipes shared with the user; sharing is not available yet"""
    return []


@router.get("/search")
async def search_catalogue(
    query: Optional[str] = None,
    cuisine: Optional[str] = None,
    diet: Optional[str] = None,
    max_ready_time: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    number: int = Query(20, ge=1, le=100)
):
    """Search the external recipe catalogue"""
    try:
        return await spoonacular_service.search_recipes(
            query=query,
            cuisine=cuisine,
            diet=diet,
            max_ready_time=max_ready_time,
            offset=offset,
            number=number
        )

    except Exception as e:
        logger.error(f"Catalogue search failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to search recipes"
        )


@router.get("/random")
async def random_catalogue_recipes(
    number: int = Query(10, ge=1, le=100),
    tags: Optional[str] = None
):
    try:
        return await spoonacular_service.get_random_recipes(number=number, tags=tags)

    except Exception as e:
        logger.error(f"Random catalogue recipes failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get random recipes"
        )


@router.get("/by-ingredients")
async def catalogue_recipes_by_ingredients(
    ingredients: str = Query(..., description="Comma-separated ingredient names"),
    number: int = Query(20, ge=1, le=100)
):
    """Catalogue recipes that use the given ingredients"""
    try:
        names = [name.strip() for name in ingredients.split(",") if name.strip()]
        return await spoonacular_service.find_by_ingredients(names, number=number)

    except Exception as e:
        logger.error(f"Catalogue ingredient search failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to find recipes by ingredients"
        )


@router.post("/import")
async def import_recipe(
    current_user: CurrentUser,
    import_type: str = Form(...),
    url: Optional[str] = Form(None),
    image_file: Optional[UploadFile] = File(None)
):
    """
    Import a recipe from a web page or a photo

    The imported recipe is returned for review and is not saved; the client
    creates it with POST /recipes once the user confirms.
    """
    try:
        if import_type == "url" and url:
            recipe = await url_import_service.import_from_url(url)
            validation = validate_recipe(recipe)
            return {"success": True, "recipe": recipe, "validation": validation.to_dict()}

        if import_type == "image" and image_file:
            content = await image_file.read()
            extracted = await ocr_service.extract_recipe_from_image(
                image_file.filename, image_file.content_type, len(content)
            )
            return {
                "success": True,
                "recipe": ocr_service.to_imported_recipe(extracted),
                "validation": {"is_valid": True, "issues": [], "suggestions": []}
            }

        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid import type or missing data"
        )

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Recipe import ({import_type}) failed for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to import recipe"
        )


@router.post("/update-external-ids")
async def update_external_ids(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Backfill external ids from source URLs"""
    try:
        result = await recipe_service.update_external_ids(current_user, db)
        return {"success": True, **result}

    except Exception as e:
        logger.error(f"External id backfill failed for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update external ids"
        )


@router.post("/{recipe_id}/like")
async def like_recipe(recipe_id: str, current_user: CurrentUser):
    # Likes are not persisted yet
    return {"success": True, "recipe_id": recipe_id, "liked": True}


@router.get("/{recipe_id}")
async def get_recipe(
    recipe_id: str,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Get a local recipe by id, or a catalogue recipe by external-{n} id"""
    try:
        if recipe_id.startswith(EXTERNAL_PREFIX):
            recipe = await spoonacular_service.get_recipe_information(recipe_id)
            if not recipe:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Recipe not found"
                )
            return recipe

        recipe = None
        if recipe_id.isdigit():
            recipe = await recipe_service.get_recipe_by_id(int(recipe_id), db, user=current_user)
        if not recipe:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Recipe not found"
            )
        return recipe.to_dict()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get recipe {recipe_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get recipe"
        )


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: int,
    recipe_data: RecipeUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    try:
        recipe = await recipe_service.update_recipe(
            current_user, recipe_id, recipe_data.model_dump(mode="json", exclude_unset=True), db
        )
        if not recipe:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Recipe not found"
            )
        return recipe.to_dict()

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Failed to update recipe {recipe_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update recipe"
        )


@router.delete("/{recipe_id}")
async def delete_recipe(
    recipe_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    try:
        deleted = await recipe_service.delete_recipe(current_user, recipe_id, db)
        if not deleted:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Recipe not found"
            )
        return {"success": True, "recipe_id": recipe_id}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete recipe {recipe_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete recipe"
        )
