from sqlalchemy import select

from models import Recipe, Macros, db
from schemas.dto import GeneratedRecipe, MacrosDTO, RecipeRequest
from services.images import remove_image

def _details_value(details):
    if isinstance(details, str):
        return details
    return details.model_dump(by_alias=True)

def _set_macros(recipe: Recipe, macros: MacrosDTO):
    if recipe.macros is None:
        recipe.macros = Macros()
    recipe.macros.calories = macros.calories
    recipe.macros.protein = macros.protein
    recipe.macros.carbs = macros.carbs
    recipe.macros.fat = macros.fat

def _apply_macros(recipe: Recipe, macros: MacrosDTO | None):
    if macros is not None and macros.has_values():
        _set_macros(recipe, macros)

def list_recipes():
    stmt = select(Recipe).order_by(Recipe.created_at.desc())
    return db.session.scalars(stmt).all()

def get_recipe(recipe_id: str):
    return db.session.get(Recipe, recipe_id)

def create_recipe(payload: RecipeRequest, image_url: str | None = None) -> Recipe:
    recipe = Recipe(
        meal_name=payload.meal_name,
        ingredients_used=list(payload.ingredients_used),
        recipe_details=_details_value(payload.recipe_details),
        prep_time_minutes=payload.prep_time_minutes,
        image_url=image_url,
    )
    _apply_macros(recipe, payload.macros)
    db.session.add(recipe)
    db.session.commit()
    return recipe

def update_recipe(recipe_id: str, payload: RecipeRequest, image_url: str | None = None):
    """
    Overwrite a recipe with the request. Returns None when it does not exist.
    Without a new image the stored one is kept; omitted macros stay unchanged.
    """
    recipe = db.session.get(Recipe, recipe_id)
    if not recipe:
        return None

    recipe.meal_name = payload.meal_name
    recipe.ingredients_used = list(payload.ingredients_used)
    recipe.recipe_details = _details_value(payload.recipe_details)
    recipe.prep_time_minutes = payload.prep_time_minutes
    if image_url:
        recipe.image_url = image_url
    _apply_macros(recipe, payload.macros)
    db.session.commit()
    return recipe

def delete_recipe(recipe_id: str, upload_folder: str) -> bool:
    recipe = db.session.get(Recipe, recipe_id)
    if not recipe:
        return False
    image_url = recipe.image_url
    db.session.delete(recipe)
    db.session.commit()
    remove_image(image_url, upload_folder)
    return True

def get_macros(recipe_id: str):
    recipe = db.session.get(Recipe, recipe_id)
    if not recipe:
        return None
    return recipe.macros.to_dict() if recipe.macros else MacrosDTO().model_dump()

def upsert_macros(recipe_id: str, macros: MacrosDTO):
    recipe = db.session.get(Recipe, recipe_id)
    if not recipe:
        return None
    _set_macros(recipe, macros)
    db.session.commit()
    return recipe.macros.to_dict()

def save_generated(generated: GeneratedRecipe) -> Recipe:
    """Persist an AI generated recipe with its structured details."""
    details = generated.recipe_details
    nutrition = details.nutritional_information
    recipe = Recipe(
        meal_name=generated.meal_name or "Generated recipe",
        ingredients_used=list(generated.ingredients_used),
        recipe_details=details.model_dump(by_alias=True),
        image_url=generated.image_url or None,
    )
    _apply_macros(recipe, MacrosDTO(
        calories=nutrition.calories,
        protein=nutrition.protein,
        carbs=nutrition.carbohydrates,
        fat=nutrition.fat,
    ))
    db.session.add(recipe)
    db.session.commit()
    return recipe
