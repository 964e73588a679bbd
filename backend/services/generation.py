import re
import json
import logging
import requests

from schemas.dto import GeneratedRecipe

log = logging.getLogger(__name__)

# "1. ", "1) ", "Step 1: " at the start of an instruction line
STEP_MARKER = re.compile(r"^\s*(\d+\.|\d+\)|Step\s+\d+:)\s+", re.IGNORECASE)
_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

RESPONSE_SCHEMA = {
    "mealName": "string",
    "ingredientsUsed": ["string"],
    "recipeDetails": {
        "ingredientsList": ["string"],
        "equipmentNeeded": ["string"],
        "instructions": ["string"],
        "servingSuggestions": ["string"],
        "nutritionalInformation": {
            "calories": "string",
            "protein": "string",
            "carbohydrates": "string",
            "fat": "string",
        },
    },
}


class ProviderError(Exception):
    status_code = 502
    code = "PROVIDER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ProviderNotConfiguredError(ProviderError):
    status_code = 500
    code = "PROVIDER_NOT_CONFIGURED"

class ProviderUnavailableError(ProviderError):
    status_code = 503
    code = "PROVIDER_UNAVAILABLE"

class ProviderAuthError(ProviderError):
    code = "PROVIDER_AUTH"


def strip_step_marker(line: str) -> str:
    return STEP_MARKER.sub("", line, count=1).strip()

def build_prompt(ingredients: list[str]) -> str:
    return (
        f"Create a recipe using these ingredients: {', '.join(ingredients)}. "
        "Respond with JSON only, no commentary, matching exactly this structure: "
        f"{json.dumps(RESPONSE_SCHEMA)}"
    )

def _post(url: str, payload: dict, config) -> dict:
    headers = {"Authorization": f"Bearer {config['OPENAI_API_KEY']}"}
    try:
        resp = requests.post(url, json=payload, headers=headers, timeout=config["OPENAI_TIMEOUT"])
    except (requests.ConnectionError, requests.Timeout) as e:
        log.error("AI provider unreachable: %s", e)
        raise ProviderUnavailableError("The recipe service could not be reached") from e

    if resp.status_code in (401, 403):
        raise ProviderAuthError("The recipe service rejected our credentials")
    if not resp.ok:
        try:
            error = resp.json().get("error")
        except (ValueError, AttributeError):
            error = None
        detail = error.get("message") if isinstance(error, dict) else error
        log.error("AI provider returned %s: %s", resp.status_code, detail)
        raise ProviderError(detail or f"The recipe service failed with status {resp.status_code}")
    try:
        return resp.json()
    except ValueError as e:
        raise ProviderError("The recipe service returned an invalid response") from e

def parse_content(completion: dict) -> dict:
    """Pull the recipe JSON out of a chat completion, tolerating markdown fences."""
    try:
        content = completion["choices"][0]["message"]["content"]
        data = json.loads(_FENCE.sub("", content.strip()))
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ProviderError("The recipe service returned an unreadable recipe") from e
    if not isinstance(data, dict):
        raise ProviderError("The recipe service returned an unreadable recipe")
    return data

def reshape(raw: dict, image_url: str = "") -> GeneratedRecipe:
    """
    Map the provider's JSON onto GeneratedRecipe:
    - ordinal markers are removed from instructions
    - nutritional values become strings ("" when missing)
    - list fields are always present, possibly empty
    """
    details = raw.get("recipeDetails")
    details = dict(details) if isinstance(details, dict) else {}
    instructions = details.get("instructions") or []
    if isinstance(instructions, str):
        instructions = instructions.splitlines()
    details["instructions"] = [
        cleaned for cleaned in (strip_step_marker(str(i)) for i in instructions if i is not None) if cleaned
    ]
    return GeneratedRecipe.model_validate({
        "mealName": raw.get("mealName"),
        "ingredientsUsed": raw.get("ingredientsUsed"),
        "recipeDetails": details,
        "imageUrl": raw.get("imageUrl") or image_url,
    })

def generate_image(meal_name: str, config) -> str:
    """Best effort: an image failure leaves the recipe without a picture."""
    payload = {
        "prompt": f"A professional food photograph of {meal_name}",
        "n": 1,
        "size": config["OPENAI_IMAGE_SIZE"],
    }
    try:
        data = _post(config["OPENAI_IMAGE_URL"], payload, config)
        return data["data"][0]["url"]
    except (ProviderError, KeyError, IndexError, TypeError) as e:
        log.warning("Image generation failed for %r: %s", meal_name, e)
        return ""

def generate_meal(ingredients: list[str], config) -> GeneratedRecipe:
    """
    Ask the AI provider for a recipe built from the (already validated) ingredients.
    config is a mapping holding the OPENAI_* settings, normally app.config.
    """
    if not config.get("OPENAI_API_KEY"):
        raise ProviderNotConfiguredError("The recipe service is not configured")

    payload = {
        "model": config["OPENAI_MODEL"],
        "messages": [
            {"role": "system", "content": config["OPENAI_SYSTEM_MESSAGE"]},
            {"role": "user", "content": build_prompt(ingredients)},
        ],
        "temperature": config["OPENAI_TEMPERATURE"],
        "top_p": config["OPENAI_TOP_P"],
        "max_tokens": config["OPENAI_MAX_TOKENS"],
        "n": 1,
    }
    log.info("Generating recipe from %d ingredients", len(ingredients))
    raw = parse_content(_post(config["OPENAI_BASE_URL"], payload, config))

    image_url = ""
    if config.get("GENERATE_IMAGES") and not raw.get("imageUrl"):
        image_url = generate_image(raw.get("mealName") or ", ".join(ingredients), config)
    return reshape(raw, image_url)
