import logging
from flask import Flask, request, jsonify, send_from_directory
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import Config
from models import db
from services import recipes as recipe_service
from services.generation import ProviderError, generate_meal
from services.images import InvalidImageError, save_image
from schemas.dto import GenerateMealRequest, MacrosDTO, RecipeRequest


def ok(payload, status=200): return jsonify(payload), status
def err(code="BAD_REQUEST", message="bad request", status=400): return jsonify({"error": {"code": code, "message": message}}), status

def _first_error(e: ValidationError) -> str:
    msg = e.errors()[0]["msg"]
    return msg.removeprefix("Value error, ")

def _read_recipe_request() -> RecipeRequest:
    """The JSON payload arrives as the `request` multipart part, or as a plain JSON body."""
    if "request" in request.files:
        return RecipeRequest.model_validate_json(request.files["request"].read())
    if "request" in request.form:
        return RecipeRequest.model_validate_json(request.form["request"])
    return RecipeRequest.model_validate(request.get_json(silent=True) or {})

def _store_upload(app):
    image = request.files.get("image")
    if image is None or not image.filename:
        return None
    return save_image(image, app.config["UPLOAD_FOLDER"])


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__)
    app.config.update(Config().as_dict())
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(level=app.config["LOG_LEVEL"], format="%(asctime)s %(levelname)s %(message)s")

    CORS(app, resources={r"/v1/*": {"origins": app.config["CORS_ORIGIN"]},
                         r"/api/*": {"origins": app.config["CORS_ORIGIN"]}})
    db.init_app(app)
    with app.app_context():
        db.create_all()

    # --- Error handlers ---

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return err("VALIDATION_ERROR", _first_error(e), 400)

    @app.errorhandler(InvalidImageError)
    def handle_bad_image(e):
        return err("INVALID_IMAGE", str(e), 400)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(_e):
        return err("PAYLOAD_TOO_LARGE", f"Image exceeds the {app.config['MAX_UPLOAD_MB']}MB limit", 413)

    @app.errorhandler(ProviderError)
    def handle_provider(e):
        app.logger.warning("Generation failed (%s): %s", e.code, e.message)
        return err(e.code, e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http(e):
        return err(e.name.upper().replace(" ", "_"), e.description, e.code)

    # --- Routes ---

    @app.get("/health")
    def health(): return ok({"status": "ok", "db": "connected"})

    @app.get("/v1/recipes")
    def list_recipes():
        return ok([r.to_dict() for r in recipe_service.list_recipes()])

    @app.post("/v1/recipes/create-meal")
    def create_meal():
        payload = _read_recipe_request()
        image_url = _store_upload(app)
        recipe = recipe_service.create_recipe(payload, image_url)
        app.logger.info("Created recipe %s", recipe.id)
        return ok(recipe.to_dict(), 201)

    @app.put("/v1/recipes/<recipe_id>")
    def update_meal(recipe_id):
        if recipe_service.get_recipe(recipe_id) is None:
            return err("NOT_FOUND", "recipe not found", 404)
        payload = _read_recipe_request()
        image_url = _store_upload(app)
        recipe = recipe_service.update_recipe(recipe_id, payload, image_url)
        app.logger.info("Updated recipe %s", recipe_id)
        return ok(recipe.to_dict())

    @app.get("/v1/recipes/<recipe_id>")
    @app.get("/api/recipes/<recipe_id>")
    def get_meal(recipe_id):
        recipe = recipe_service.get_recipe(recipe_id)
        if recipe is None:
            return err("NOT_FOUND", "recipe not found", 404)
        return ok(recipe.to_dict())

    @app.delete("/api/recipes/<recipe_id>")
    @app.delete("/v1/recipes/<recipe_id>")
    def delete_meal(recipe_id):
        if not recipe_service.delete_recipe(recipe_id, app.config["UPLOAD_FOLDER"]):
            return err("NOT_FOUND", "recipe not found", 404)
        app.logger.info("Deleted recipe %s", recipe_id)
        return "", 204

    @app.post("/v1/recipes/generate-meal")
    def generate():
        payload = GenerateMealRequest.model_validate(request.get_json(silent=True) or {})
        generated = generate_meal(payload.ingredients, app.config)
        body = generated.to_json_dict()
        if request.args.get("save", "").lower() == "true":
            body["id"] = recipe_service.save_generated(generated).id
        return ok(body)

    @app.get("/v1/recipes/<recipe_id>/macros")
    def get_macros(recipe_id):
        macros = recipe_service.get_macros(recipe_id)
        if macros is None:
            return err("NOT_FOUND", "recipe not found", 404)
        return ok(macros)

    @app.put("/v1/recipes/<recipe_id>/macros")
    def put_macros(recipe_id):
        payload = MacrosDTO.model_validate(request.get_json(silent=True) or {})
        macros = recipe_service.upsert_macros(recipe_id, payload)
        if macros is None:
            return err("NOT_FOUND", "recipe not found", 404)
        return ok(macros)

    @app.get("/uploads/<path:filename>")
    def uploads(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=True)
