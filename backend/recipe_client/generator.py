import itertools
import logging
import threading

from pydantic import ValidationError

from schemas.dto import GeneratedRecipe, MIN_INGREDIENT_LENGTH, is_valid_ingredient, parse_ingredients
from recipe_client.api import ApiClient
from recipe_client.errors import (
    GENERATION_FALLBACK,
    FormValidationError,
    TransportError,
    UnknownError,
    map_generation_error,
)

log = logging.getLogger(__name__)


def format_recipe_details(recipe: GeneratedRecipe) -> str:
    """Plain text rendering used when copying a generated recipe."""
    details = recipe.recipe_details
    nutrition = details.nutritional_information
    return "\n".join([
        "Ingredients:", *details.ingredients_list, "",
        "Equipment Needed:", *details.equipment_needed, "",
        "Instructions:", *details.instructions, "",
        "Serving Suggestions:", *details.serving_suggestions, "",
        "Nutritional Information:",
        f"Calories: {nutrition.calories}",
        f"Protein: {nutrition.protein}",
        f"Carbohydrates: {nutrition.carbohydrates}",
        f"Fat: {nutrition.fat}",
    ])


class RecipeGenerator:
    """
    Client side of POST /v1/recipes/generate-meal.

    Each call is tagged with a token; only the response for the latest token
    is applied, so a reply arriving after cancel() cannot overwrite state.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.recipe: GeneratedRecipe | None = None
        self.error: str | None = None
        self.in_flight = False
        self._tokens = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    @staticmethod
    def prepare(ingredients) -> list[str]:
        """Validate the input before any network call; accepts a list or comma separated text."""
        items = parse_ingredients(ingredients) if isinstance(ingredients, str) else [
            s.strip() for s in ingredients if s and s.strip()
        ]
        if not items:
            raise FormValidationError("Please enter at least one ingredient.")
        if not all(is_valid_ingredient(s) for s in items):
            raise FormValidationError(
                f"Please enter valid ingredients (at least {MIN_INGREDIENT_LENGTH} characters each)."
            )
        return items

    def begin(self) -> int | None:
        """Start a request and return its token, or None while another one is running."""
        with self._lock:
            if self.in_flight:
                return None
            self._latest = next(self._tokens)
            self.in_flight = True
            self.recipe = None
            self.error = None
            return self._latest

    def apply(self, token: int, data: dict) -> bool:
        """Store a response if it belongs to the latest request."""
        recipe = GeneratedRecipe.model_validate(data)
        with self._lock:
            if token != self._latest:
                log.debug("Discarding stale generation response %d", token)
                return False
            self.recipe = recipe
            self.in_flight = False
            return True

    def fail(self, token: int, error) -> bool:
        with self._lock:
            if token != self._latest:
                return False
            self.error = error.message
            self.in_flight = False
            return True

    def cancel(self):
        with self._lock:
            self._latest = next(self._tokens)
            self.in_flight = False

    def generate(self, ingredients) -> GeneratedRecipe | None:
        """
        Request a recipe. Raises FormValidationError for bad input and the mapped
        RecipeClientError for transport failures. Returns None when a request is
        already running or when this one was cancelled before it finished.
        """
        try:
            items = self.prepare(ingredients)
        except FormValidationError as e:
            self.error = e.message
            raise

        token = self.begin()
        if token is None:
            return None
        try:
            data = self.api.post("/v1/recipes/generate-meal", json={"ingredients": items})
        except TransportError as e:
            log.error("Error generating recipe: %s", e)
            error = map_generation_error(e)
            if self.fail(token, error):
                raise error from e
            return None

        try:
            applied = self.apply(token, data or {})
        except ValidationError as e:
            log.error("Unreadable generation response: %s", e)
            error = UnknownError(GENERATION_FALLBACK)
            if self.fail(token, error):
                raise error from e
            return None
        if not applied:
            return None
        return self.recipe
