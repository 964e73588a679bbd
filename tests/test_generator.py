"""Unit tests for the recipe generator client."""

import threading

import pytest
from unittest.mock import MagicMock

from recipe_client.errors import (
    AuthError,
    FormValidationError,
    GENERATION_MESSAGES,
    NetworkError,
    TransportError,
    GENERATION_FALLBACK,
    UnknownError,
)
from recipe_client.generator import RecipeGenerator, format_recipe_details
from schemas.dto import GeneratedRecipe

RESPONSE = {
    "mealName": "Chicken Fried Rice",
    "ingredientsUsed": ["chicken", "rice", "tomatoes"],
    "recipeDetails": {
        "ingredientsList": ["1 cup rice"],
        "equipmentNeeded": ["wok"],
        "instructions": ["Fry rice"],
        "servingSuggestions": ["Top with scallions"],
        "nutritionalInformation": {"calories": "480", "protein": "30g", "carbohydrates": "55g", "fat": "12g"},
    },
    "imageUrl": "http://images/rice.png",
}


class TestPrepare:

    def test_comma_text(self):
        assert RecipeGenerator.prepare("chicken, rice, , tomatoes") == ["chicken", "rice", "tomatoes"]

    def test_list_input(self):
        assert RecipeGenerator.prepare([" chicken", "", "rice "]) == ["chicken", "rice"]

    @pytest.mark.parametrize("value", ["", " , ", []])
    def test_empty(self, value):
        with pytest.raises(FormValidationError) as exc:
            RecipeGenerator.prepare(value)
        assert exc.value.message == "Please enter at least one ingredient."


class TestGenerate:

    def test_one_character_ingredient_rejected_before_network(self):
        api = MagicMock()
        generator = RecipeGenerator(api)
        with pytest.raises(FormValidationError):
            generator.generate("a")
        api.post.assert_not_called()
        assert generator.in_flight is False
        assert "at least 3 characters" in generator.error

    def test_success(self):
        api = MagicMock()
        api.post.return_value = RESPONSE
        generator = RecipeGenerator(api)

        recipe = generator.generate("chicken, rice, , tomatoes")
        api.post.assert_called_once_with(
            "/v1/recipes/generate-meal", json={"ingredients": ["chicken", "rice", "tomatoes"]}
        )
        assert isinstance(recipe, GeneratedRecipe)
        assert recipe.meal_name == "Chicken Fried Rice"
        assert generator.recipe is recipe
        assert generator.in_flight is False
        assert generator.error is None

    def test_unauthorized(self):
        api = MagicMock()
        api.post.side_effect = TransportError(401, "Unauthorized")
        generator = RecipeGenerator(api)
        with pytest.raises(AuthError) as exc:
            generator.generate(["chicken"])
        assert exc.value.message == GENERATION_MESSAGES[401]
        assert generator.error == GENERATION_MESSAGES[401]
        assert generator.in_flight is False

    def test_network_failure(self):
        api = MagicMock()
        api.post.side_effect = TransportError()
        with pytest.raises(NetworkError):
            RecipeGenerator(api).generate(["chicken"])

    def test_busy_generator_ignores_new_call(self):
        api = MagicMock()
        generator = RecipeGenerator(api)
        generator.in_flight = True
        assert generator.generate(["chicken"]) is None
        api.post.assert_not_called()

    def test_unreadable_response_releases_generator(self):
        api = MagicMock()
        api.post.return_value = ["not", "a", "recipe"]
        generator = RecipeGenerator(api)
        with pytest.raises(UnknownError) as exc:
            generator.generate(["chicken"])
        assert exc.value.message == GENERATION_FALLBACK
        assert generator.error == GENERATION_FALLBACK
        assert generator.in_flight is False

        api.post.return_value = RESPONSE
        assert generator.generate(["chicken"]).meal_name == "Chicken Fried Rice"
        assert api.post.call_count == 2

    def test_new_request_clears_previous_recipe(self):
        api = MagicMock()
        api.post.return_value = RESPONSE
        generator = RecipeGenerator(api)
        generator.generate(["chicken"])
        generator.begin()
        assert generator.recipe is None

    def test_begin_refused_while_in_flight(self):
        generator = RecipeGenerator(MagicMock())
        first = generator.begin()
        assert first is not None
        assert generator.begin() is None
        assert generator.in_flight is True
        assert generator.apply(first, RESPONSE) is True
        assert generator.begin() is not None

    def test_concurrent_begins_start_one_request(self):
        generator = RecipeGenerator(MagicMock())
        barrier = threading.Barrier(8)
        tokens = []

        def start():
            barrier.wait()
            tokens.append(generator.begin())

        threads = [threading.Thread(target=start) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len([t for t in tokens if t is not None]) == 1


class TestStaleResponses:

    def test_cancelled_response_is_discarded(self):
        generator = RecipeGenerator(MagicMock())
        token = generator.begin()
        generator.cancel()
        assert generator.apply(token, RESPONSE) is False
        assert generator.recipe is None
        assert generator.in_flight is False

    def test_only_latest_token_applies(self):
        generator = RecipeGenerator(MagicMock())
        first = generator.begin()
        generator.cancel()
        second = generator.begin()
        assert generator.apply(first, RESPONSE) is False
        assert generator.recipe is None
        assert generator.apply(second, RESPONSE) is True
        assert generator.recipe.meal_name == "Chicken Fried Rice"

    def test_stale_failure_is_ignored(self):
        generator = RecipeGenerator(MagicMock())
        first = generator.begin()
        generator.cancel()
        generator.begin()
        assert generator.fail(first, AuthError("nope")) is False
        assert generator.error is None

    def test_request_cancelled_mid_flight(self):
        api = MagicMock()
        generator = RecipeGenerator(api)

        def respond(*args, **kwargs):
            generator.cancel()
            return RESPONSE

        api.post.side_effect = respond
        assert generator.generate(["chicken"]) is None
        assert generator.recipe is None


class TestFormatting:

    def test_copy_text(self):
        text = format_recipe_details(GeneratedRecipe.model_validate(RESPONSE))
        assert text.startswith("Ingredients:\n1 cup rice\n\nEquipment Needed:\nwok")
        assert "Instructions:\nFry rice" in text
        assert text.endswith("Carbohydrates: 55g\nFat: 12g")
