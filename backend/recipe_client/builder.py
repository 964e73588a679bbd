import json
import logging
import mimetypes
from enum import Enum

from schemas.dto import MacrosDTO, is_valid_ingredient
from recipe_client.api import ApiClient
from recipe_client.draft import (
    INGREDIENT_REQUIRED,
    RecipeDraft,
    draft_from_recipe,
    preview,
    request_payload,
    validate,
)
from recipe_client.errors import TransportError, map_submission_error
from recipe_client.scope import Notice, TimerScope

log = logging.getLogger(__name__)

PREVIEW_NOTICE_SECONDS = 1.5
NAVIGATE_DELAY_SECONDS = 1.5
LOAD_FAILED = "Failed to load recipe data. Please try again."


class Mode(str, Enum):
    EDITING = "editing"
    PREVIEWING = "previewing"
    SUBMITTING = "submitting"
    DETAIL = "detail"


class RecipeRequestBuilder:
    """
    Holds a RecipeDraft for the create/edit form, validates it and submits it
    as a multipart request. Use as a context manager so pending notice and
    navigation timers are cancelled when the form goes away.
    """

    def __init__(self, api: ApiClient, recipe_id: str | None = None, navigate=None,
                 scope: TimerScope | None = None):
        self.api = api
        self.recipe_id = recipe_id
        self.navigate = navigate
        self.scope = scope or TimerScope()
        self.notice = Notice(self.scope)

        self.draft = RecipeDraft()
        self.errors: dict = {}
        self.api_error: str | None = None
        self.last_error = None
        self.mode = Mode.EDITING
        self.in_flight = False
        # bumped whenever the form would scroll back to the top
        self.scroll_to_top_requests = 0

    @property
    def is_editing(self) -> bool:
        return self.recipe_id is not None

    # --- lifecycle ---

    def load(self):
        """Edit mode: populate the draft from the stored recipe."""
        if not self.is_editing:
            return self.draft
        self.in_flight = True
        try:
            data = self.api.get(f"/v1/recipes/{self.recipe_id}")
        except TransportError as e:
            log.error("Failed to fetch recipe %s: %s", self.recipe_id, e)
            self.api_error = LOAD_FAILED
        else:
            if isinstance(data, dict):
                self.draft = draft_from_recipe(data)
            else:
                log.error("Recipe %s came back without a body: %r", self.recipe_id, data)
                self.api_error = LOAD_FAILED
        finally:
            self.in_flight = False
        return self.draft

    def close(self):
        self.scope.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # --- field edits ---

    def _clear_error(self, field):
        self.errors.pop(field, None)

    def set_name(self, value: str):
        self.draft.name = value
        if value.strip():
            self._clear_error("name")

    def set_instructions(self, value: str):
        self.draft.instructions = value
        if value.strip():
            self._clear_error("instructions")

    def set_prep_time(self, minutes: int | None):
        self.draft.prep_time_minutes = minutes
        if minutes is None or minutes > 0:
            self._clear_error("prep_time_minutes")

    def set_macros(self, calories=None, protein=None, carbs=None, fat=None):
        macros = MacrosDTO(calories=calories, protein=protein, carbs=carbs, fat=fat)
        self.draft.macros = macros if macros.has_values() else None

    def set_image(self, data: bytes | None, filename: str | None = None):
        self.draft.image = data
        self.draft.image_name = filename if data is not None else None

    def add_ingredient(self, text: str) -> bool:
        """Append a trimmed ingredient; too short or numeric input leaves list and errors alone."""
        if not is_valid_ingredient(text):
            return False
        self.draft.ingredients.append(text.strip())
        self._clear_error("ingredients")
        return True

    def remove_ingredient(self, index: int):
        if not 0 <= index < len(self.draft.ingredients):
            return
        del self.draft.ingredients[index]
        if not self.draft.ingredients:
            self.errors["ingredients"] = INGREDIENT_REQUIRED

    # --- transitions ---

    def _check(self) -> bool:
        errors = validate(self.draft)
        if errors:
            self.errors = errors
            self.scroll_to_top_requests += 1
            return False
        return True

    def toggle_preview(self) -> bool:
        """Switch between editing and previewing; entering preview requires a valid draft."""
        if self.mode == Mode.PREVIEWING:
            self.mode = Mode.EDITING
            self.notice.clear()
            return True
        if self.mode != Mode.EDITING or not self._check():
            return False
        self.mode = Mode.PREVIEWING
        self.notice.show("Preview mode activated", PREVIEW_NOTICE_SECONDS)
        return True

    def preview_data(self) -> dict:
        return preview(self.draft)

    def _multipart(self):
        files = {"request": (None, json.dumps(request_payload(self.draft)), "application/json")}
        if self.draft.image is not None:
            name = self.draft.image_name or "image.jpg"
            content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
            files["image"] = (name, self.draft.image, content_type)
        return files

    def submit(self):
        """
        Validate and send the draft. Returns the saved recipe JSON, or None when
        validation failed, a submission is already running, or the request failed
        (api_error then holds the message to show).
        """
        if self.in_flight:
            return None
        if not self._check():
            return None

        self.in_flight = True
        self.api_error = None
        self.last_error = None
        self.mode = Mode.SUBMITTING
        try:
            if self.is_editing:
                saved = self.api.put(f"/v1/recipes/{self.recipe_id}", files=self._multipart())
            else:
                saved = self.api.post("/v1/recipes/create-meal", files=self._multipart())
        except TransportError as e:
            log.error("Error submitting recipe: %s", e)
            self.last_error = map_submission_error(e)
            self.api_error = self.last_error.message
            self.mode = Mode.EDITING
            self.scroll_to_top_requests += 1
            return None
        finally:
            self.in_flight = False

        recipe_id = (saved or {}).get("id") or self.recipe_id
        self.mode = Mode.DETAIL
        self.notice.show("Recipe updated successfully!" if self.is_editing else "Recipe created successfully!")
        if self.navigate is not None:
            self.scope.call_later(NAVIGATE_DELAY_SECONDS, self.navigate, f"/recipes/{recipe_id}")
        return saved
