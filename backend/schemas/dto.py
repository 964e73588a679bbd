import re
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union

MIN_INGREDIENT_LENGTH = 3
_NUMERIC = re.compile(r"^\d+$")


def is_valid_ingredient(text: str) -> bool:
    """At least MIN_INGREDIENT_LENGTH characters after trim and not just a number."""
    trimmed = (text or "").strip()
    return len(trimmed) >= MIN_INGREDIENT_LENGTH and not _NUMERIC.match(trimmed)

def parse_ingredients(text: str) -> List[str]:
    """Split a comma separated input, trimming and dropping empty segments."""
    return [part.strip() for part in (text or "").split(",") if part.strip()]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def _as_text(v):
    if v is None:
        return ""
    return str(v)

def _as_list(v):
    if v is None:
        return []
    if isinstance(v, str):
        return [line.strip() for line in v.splitlines() if line.strip()]
    if not isinstance(v, (list, tuple)):
        return [_as_text(v)]
    return [_as_text(item) for item in v if item is not None]


class MacrosDTO(CamelModel):
    calories: Optional[str] = None
    protein: Optional[str] = None
    carbs: Optional[str] = None
    fat: Optional[str] = None

    @field_validator("calories", "protein", "carbs", "fat", mode="before")
    @classmethod
    def stringify(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def has_values(self) -> bool:
        return any(v is not None for v in (self.calories, self.protein, self.carbs, self.fat))


class NutritionalInformation(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    calories: str = ""
    protein: str = ""
    carbohydrates: str = ""
    fat: str = ""

    @field_validator("calories", "protein", "carbohydrates", "fat", mode="before")
    @classmethod
    def stringify(cls, v):
        return _as_text(v)


class RecipeDetails(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    ingredients_list: List[str] = Field(default_factory=list)
    equipment_needed: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    serving_suggestions: List[str] = Field(default_factory=list)
    nutritional_information: NutritionalInformation = Field(default_factory=NutritionalInformation)

    @field_validator("ingredients_list", "equipment_needed", "instructions", "serving_suggestions", mode="before")
    @classmethod
    def listify(cls, v):
        return _as_list(v)

    @field_validator("nutritional_information", mode="before")
    @classmethod
    def default_nutrition(cls, v):
        return {} if v is None else v


class GeneratedRecipe(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    meal_name: str = ""
    ingredients_used: List[str] = Field(default_factory=list)
    recipe_details: RecipeDetails = Field(default_factory=RecipeDetails)
    image_url: str = ""

    @field_validator("meal_name", "image_url", mode="before")
    @classmethod
    def text(cls, v):
        return _as_text(v)

    @field_validator("ingredients_used", mode="before")
    @classmethod
    def listify(cls, v):
        return _as_list(v)

    @field_validator("recipe_details", mode="before")
    @classmethod
    def default_details(cls, v):
        return {} if v is None else v

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class GenerateMealRequest(BaseModel):
    ingredients: List[str] = Field(min_length=1)

    @field_validator("ingredients")
    @classmethod
    def norm(cls, v):
        cleaned = [s.strip() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError("Please enter at least one ingredient.")
        if not all(is_valid_ingredient(s) for s in cleaned):
            raise ValueError(
                f"Please enter valid ingredients (at least {MIN_INGREDIENT_LENGTH} characters each)."
            )
        return cleaned


class RecipeRequest(CamelModel):
    meal_name: str
    ingredients_used: List[str] = Field(min_length=1)
    recipe_details: Union[str, RecipeDetails]
    prep_time_minutes: Optional[PositiveInt] = None
    macros: Optional[MacrosDTO] = None

    @field_validator("meal_name")
    @classmethod
    def name_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Recipe name is required")
        return v

    @field_validator("ingredients_used")
    @classmethod
    def ingredients_valid(cls, v):
        cleaned = [s.strip() for s in v]
        bad = [s for s in cleaned if not is_valid_ingredient(s)]
        if bad:
            raise ValueError(f"Invalid ingredient: {bad[0]!r}")
        return cleaned

    @field_validator("recipe_details")
    @classmethod
    def details_required(cls, v):
        if isinstance(v, str) and not v.strip():
            raise ValueError("Instructions are required")
        return v

