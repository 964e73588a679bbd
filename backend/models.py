import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    pass

db = SQLAlchemy(model_class=Base)


def _new_id():
    return str(uuid.uuid4())

def _now():
    return datetime.now(timezone.utc)


class Recipe(db.Model):
    __tablename__ = 'recipes'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    meal_name = db.Column(db.String(200), nullable=False)
    ingredients_used = db.Column(db.JSON, nullable=False, default=list)
    # either free text or a structured details object
    recipe_details = db.Column(db.JSON)
    image_url = db.Column(db.String(500))
    prep_time_minutes = db.Column(db.Integer)
    created_at = db.Column(db.DateTime(timezone=True), default=_now)
    updated_at = db.Column(db.DateTime(timezone=True), default=_now, onupdate=_now)

    macros = db.relationship(
        'Macros', back_populates='recipe', uselist=False, cascade='all, delete-orphan'
    )

    def to_dict(self):
        data = {
            "id": self.id,
            "mealName": self.meal_name,
            "ingredientsUsed": list(self.ingredients_used or []),
            "recipeDetails": self.recipe_details if self.recipe_details is not None else "",
            "imageUrl": self.image_url,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if self.prep_time_minutes is not None:
            data["prepTimeMinutes"] = self.prep_time_minutes
        if self.macros is not None:
            data["macros"] = self.macros.to_dict()
        return data


class Macros(db.Model):
    __tablename__ = 'macros'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    recipe_id = db.Column(db.String(36), db.ForeignKey('recipes.id'), nullable=False, unique=True)
    # free-form, e.g. "20g"
    calories = db.Column(db.String(50))
    protein = db.Column(db.String(50))
    carbs = db.Column(db.String(50))
    fat = db.Column(db.String(50))

    recipe = db.relationship('Recipe', back_populates='macros')

    def to_dict(self):
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
        }
