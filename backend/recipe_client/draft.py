from dataclasses import dataclass, field
from typing import List, Optional

from schemas.dto import MacrosDTO, RecipeDetails

NAME_REQUIRED = "Recipe name is required"
INSTRUCTIONS_REQUIRED = "Instructions are required"
INGREDIENT_REQUIRED = "At least one ingredient is required"
PREP_TIME_POSITIVE = "Preparation time must be positive"


@dataclass
class RecipeDraft:
    name: str = ""
    ingredients: List[str] = field(default_factory=list)
    instructions: str = ""
    prep_time_minutes: Optional[int] = None
    macros: Optional[MacrosDTO] = None
    image: Optional[bytes] = None
    image_name: Optional[str] = None
    # URL of the already stored image when editing
    image_url: Optional[str] = None


def validate(draft: RecipeDraft) -> dict:
    """Return the form error set for a draft; an empty dict means it can be submitted."""
    errors = {}
    if not draft.name.strip():
        errors["name"] = NAME_REQUIRED
    if not draft.instructions.strip():
        errors["instructions"] = INSTRUCTIONS_REQUIRED
    if not draft.ingredients:
        errors["ingredients"] = INGREDIENT_REQUIRED
    if draft.prep_time_minutes is not None and draft.prep_time_minutes <= 0:
        errors["prep_time_minutes"] = PREP_TIME_POSITIVE
    return errors


def details_to_text(details) -> str:
    """Collapse the string-or-object recipeDetails of a fetched recipe into editable text."""
    if details is None:
        return ""
    if isinstance(details, str):
        return details
    if isinstance(details, dict):
        details = RecipeDetails.model_validate(details)

    sections = []
    if details.instructions:
        sections.append("Instructions:\n" + "\n".join(details.instructions))
    if details.serving_suggestions:
        sections.append("Serving Suggestions:\n" + "\n".join(details.serving_suggestions))
    return "\n\n".join(sections)


def draft_from_recipe(data: dict) -> RecipeDraft:
    macros = data.get("macros")
    return RecipeDraft(
        name=data.get("mealName") or "",
        ingredients=list(data.get("ingredientsUsed") or []),
        instructions=details_to_text(data.get("recipeDetails")),
        prep_time_minutes=data.get("prepTimeMinutes") or None,
        macros=MacrosDTO.model_validate(macros) if macros else None,
        image_url=data.get("imageUrl") or None,
    )


def request_payload(draft: RecipeDraft) -> dict:
    """The JSON `request` part; optional fields only when they carry a value."""
    body = {
        "mealName": draft.name.strip(),
        "ingredientsUsed": list(draft.ingredients),
        "recipeDetails": draft.instructions,
    }
    if draft.prep_time_minutes is not None:
        body["prepTimeMinutes"] = draft.prep_time_minutes
    if draft.macros is not None and draft.macros.has_values():
        body["macros"] = draft.macros.to_json_dict()
    return body


def preview(draft: RecipeDraft) -> dict:
    macros = draft.macros
    nutrition = None
    if macros is not None:
        nutrition = {
            "calories": macros.calories or "0",
            "protein": macros.protein or "0",
            "carbohydrates": macros.carbs or "0",
            "fat": macros.fat or "0",
        }
    return {
        "mealName": draft.name,
        "imageUrl": draft.image_url,
        "ingredientsUsed": list(draft.ingredients),
        "recipeDetails": {
            "instructions": [line for line in draft.instructions.split("\n") if line],
            "ingredientsList": list(draft.ingredients),
            "nutritionalInformation": nutrition,
        },
        "prepTimeMinutes": draft.prep_time_minutes,
        "showPrepTime": draft.prep_time_minutes is not None,
        "macros": macros.model_dump() if macros is not None else None,
    }
