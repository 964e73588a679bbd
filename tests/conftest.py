"""Shared fixtures: a Flask app on in-memory SQLite with the AI provider configured but not called."""

import pytest

from app import create_app


@pytest.fixture
def app(tmp_path):
    application = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "OPENAI_API_KEY": "test-key",
        "GENERATE_IMAGES": False,
    })
    yield application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def recipe_body():
    return {
        "mealName": "Chicken Rice Bowl",
        "ingredientsUsed": ["chicken", "rice", "tomatoes"],
        "recipeDetails": "Cook rice.\nGrill chicken.\nServe.",
    }
