"""Unit tests for the AI generation gateway (provider calls are mocked)."""

import json
import pytest
import requests
from unittest.mock import MagicMock, patch

from config import Config
from services.generation import (
    ProviderAuthError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderUnavailableError,
    build_prompt,
    generate_meal,
    parse_content,
    reshape,
    strip_step_marker,
)


def _settings(**overrides):
    settings = Config().as_dict()
    settings.update({"OPENAI_API_KEY": "test-key", "GENERATE_IMAGES": False})
    settings.update(overrides)
    return settings

def _response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    resp.json.return_value = body if body is not None else {}
    return resp

def _completion(recipe: dict, fenced=False):
    content = json.dumps(recipe)
    if fenced:
        content = f"```json\n{content}\n```"
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


RAW_RECIPE = {
    "mealName": "Tomato Chicken Rice",
    "ingredientsUsed": ["chicken", "rice", "tomatoes"],
    "recipeDetails": {
        "ingredientsList": ["200g chicken", "1 cup rice", "2 tomatoes"],
        "equipmentNeeded": ["pan"],
        "instructions": ["1. Preheat oven", "2) Mix", "Step 3: Bake"],
        "servingSuggestions": ["Serve hot"],
        "nutritionalInformation": {"calories": 540, "protein": "35g", "carbohydrates": 60},
    },
}


class TestStepMarkers:

    def test_scenario_lines(self):
        text = "1. Preheat oven\n2) Mix\nStep 3: Bake"
        assert [strip_step_marker(l) for l in text.split("\n")] == ["Preheat oven", "Mix", "Bake"]

    def test_case_insensitive(self):
        assert strip_step_marker("STEP 12: Rest the dough") == "Rest the dough"

    def test_leading_quantity_kept(self):
        assert strip_step_marker("2 eggs, beaten") == "2 eggs, beaten"

    def test_plain_line_unchanged(self):
        assert strip_step_marker("Season to taste") == "Season to taste"


class TestReshape:

    def test_full_payload(self):
        recipe = reshape(RAW_RECIPE)
        details = recipe.recipe_details
        assert recipe.meal_name == "Tomato Chicken Rice"
        assert details.instructions == ["Preheat oven", "Mix", "Bake"]
        assert details.equipment_needed == ["pan"]
        assert details.nutritional_information.calories == "540"
        assert details.nutritional_information.carbohydrates == "60"
        assert details.nutritional_information.fat == ""

    def test_missing_details(self):
        recipe = reshape({"mealName": "Mystery"})
        assert recipe.recipe_details.instructions == []
        assert recipe.recipe_details.serving_suggestions == []
        assert recipe.ingredients_used == []
        assert recipe.image_url == ""

    def test_image_url_fallback(self):
        assert reshape({"mealName": "Soup"}, "http://img/1.png").image_url == "http://img/1.png"
        assert reshape({"imageUrl": "http://own"}, "http://img").image_url == "http://own"

    def test_instruction_text_is_split(self):
        recipe = reshape({"recipeDetails": {"instructions": "1. Boil\n\n2. Drain"}})
        assert recipe.recipe_details.instructions == ["Boil", "Drain"]


class TestParseContent:

    def test_plain_json(self):
        assert parse_content(_completion(RAW_RECIPE)) == RAW_RECIPE

    def test_fenced_json(self):
        assert parse_content(_completion(RAW_RECIPE, fenced=True)) == RAW_RECIPE

    @pytest.mark.parametrize("completion", [
        {},
        {"choices": []},
        {"choices": [{"message": {"content": "not json"}}]},
        {"choices": [{"message": {"content": "[1, 2]"}}]},
    ])
    def test_unreadable(self, completion):
        with pytest.raises(ProviderError):
            parse_content(completion)


class TestGenerateMeal:

    def test_prompt_lists_ingredients(self):
        prompt = build_prompt(["chicken", "rice"])
        assert "chicken, rice" in prompt
        assert "nutritionalInformation" in prompt

    @patch("services.generation.requests.post")
    def test_success(self, mock_post):
        mock_post.return_value = _response(body=_completion(RAW_RECIPE))
        recipe = generate_meal(["chicken", "rice", "tomatoes"], _settings())

        assert recipe.recipe_details.instructions == ["Preheat oven", "Mix", "Bake"]
        url = mock_post.call_args.args[0]
        kwargs = mock_post.call_args.kwargs
        assert url == "https://api.openai.com/v1/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer test-key"
        assert kwargs["timeout"] == 20
        assert kwargs["json"]["model"] == "gpt-4"
        assert kwargs["json"]["messages"][0]["role"] == "system"

    @patch("services.generation.requests.post")
    def test_with_image(self, mock_post):
        mock_post.side_effect = [
            _response(body=_completion(RAW_RECIPE)),
            _response(body={"data": [{"url": "http://images/meal.png"}]}),
        ]
        recipe = generate_meal(["chicken"], _settings(GENERATE_IMAGES=True))
        assert recipe.image_url == "http://images/meal.png"
        assert mock_post.call_args_list[1].args[0] == "https://api.openai.com/v1/images/generations"

    @patch("services.generation.requests.post")
    def test_image_failure_keeps_recipe(self, mock_post):
        mock_post.side_effect = [
            _response(body=_completion(RAW_RECIPE)),
            _response(status=500, body={"error": {"message": "image backend down"}}),
        ]
        recipe = generate_meal(["chicken"], _settings(GENERATE_IMAGES=True))
        assert recipe.meal_name == "Tomato Chicken Rice"
        assert recipe.image_url == ""

    @patch("services.generation.requests.post")
    def test_network_failure(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ProviderUnavailableError) as exc:
            generate_meal(["chicken"], _settings())
        assert exc.value.status_code == 503

    @patch("services.generation.requests.post")
    def test_timeout(self, mock_post):
        mock_post.side_effect = requests.Timeout("slow")
        with pytest.raises(ProviderUnavailableError):
            generate_meal(["chicken"], _settings())

    @pytest.mark.parametrize("status", [401, 403])
    @patch("services.generation.requests.post")
    def test_provider_auth(self, mock_post, status):
        mock_post.return_value = _response(status=status)
        with pytest.raises(ProviderAuthError):
            generate_meal(["chicken"], _settings())

    @patch("services.generation.requests.post")
    def test_provider_error_message(self, mock_post):
        mock_post.return_value = _response(status=429, body={"error": {"message": "Rate limit reached"}})
        with pytest.raises(ProviderError) as exc:
            generate_meal(["chicken"], _settings())
        assert exc.value.message == "Rate limit reached"
        assert exc.value.code == "PROVIDER_ERROR"

    @patch("services.generation.requests.post")
    def test_missing_api_key(self, mock_post):
        with pytest.raises(ProviderNotConfiguredError):
            generate_meal(["chicken"], _settings(OPENAI_API_KEY=""))
        mock_post.assert_not_called()
