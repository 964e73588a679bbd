import logging

from schemas.dto import MacrosDTO, RecipeDetails
from recipe_client.api import ApiClient
from recipe_client.errors import DETAIL_LOAD_FAILED, TransportError, map_delete_error

log = logging.getLogger(__name__)


def resolve_details(details) -> RecipeDetails:
    """A stored recipe holds either free text or a structured object; text becomes one step per line."""
    if isinstance(details, str):
        return RecipeDetails(instructions=[line.strip() for line in details.splitlines() if line.strip()])
    if isinstance(details, dict):
        return RecipeDetails.model_validate(details)
    return RecipeDetails()


class RecipeDetail:
    """
    Read-only view of one stored recipe with a delete action.

    load() fetches GET /api/recipes/{id}; delete() sends DELETE /api/recipes/{id}
    and navigates home when it succeeds.
    """

    def __init__(self, api: ApiClient, recipe_id: str, navigate=None):
        self.api = api
        self.recipe_id = recipe_id
        self.navigate = navigate

        self.recipe: dict | None = None
        self.details: RecipeDetails | None = None
        self.macros: MacrosDTO | None = None
        self.error: str | None = None
        self.last_error = None
        self.in_flight = False

    @property
    def loaded(self) -> bool:
        return self.recipe is not None

    def load(self) -> dict | None:
        self.in_flight = True
        self.error = None
        try:
            data = self.api.get(f"/api/recipes/{self.recipe_id}")
        except TransportError as e:
            log.error("Error fetching recipe %s: %s", self.recipe_id, e)
            data = None
        finally:
            self.in_flight = False

        if not isinstance(data, dict):
            self.recipe = self.details = self.macros = None
            self.error = DETAIL_LOAD_FAILED
            return None
        self.recipe = data
        self.details = resolve_details(data.get("recipeDetails"))
        macros = data.get("macros")
        self.macros = MacrosDTO.model_validate(macros) if isinstance(macros, dict) else None
        return data

    def delete(self, confirm=None) -> bool:
        """
        Remove the recipe. confirm, when given, is asked first and a falsy answer
        cancels without a request. Returns True once the recipe is gone.
        """
        if self.in_flight:
            return False
        if confirm is not None and not confirm("Are you sure you want to delete this recipe?"):
            return False

        self.in_flight = True
        self.last_error = None
        try:
            self.api.delete(f"/api/recipes/{self.recipe_id}")
        except TransportError as e:
            log.error("Error deleting recipe %s: %s", self.recipe_id, e)
            self.last_error = map_delete_error(e)
            self.error = self.last_error.message
            return False
        finally:
            self.in_flight = False

        self.recipe = self.details = self.macros = None
        if self.navigate is not None:
            self.navigate("/")
        return True
