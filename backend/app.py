import os
import logging
from flask import Flask, request, jsonify
from flask_cors import CORS
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from dotenv import load_dotenv

from models import db, User, Category, Recipe, RecipeIngredient, RecipeImage
from services.recipes import (
    find_recipes_by_ingredients, recipe_match, missing_ingredients,
    example_search_request
)
from services.ingredients import search_ingredients, count_recipes_using
from services.matching import normalize_ingredient
from services.likes import toggle_recipe_like, like_count
from services.notifications import (
    user_notifications, notification_summary, mark_as_read, mark_all_as_read
)
from schemas.dto import (
    RecipeSearchRequest, IngredientNames, RecipeMatchSummary,
    MissingIngredientsResponse, LikeRequest, LikeResponse
)

load_dotenv()

app = Flask(__name__)
CORS(app, resources={r"/api/*": {"origins": "*"}})

app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///recipeshare.db")
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
app.config["NOTIFICATION_BATCH_WINDOW_MINUTES"] = int(os.getenv("NOTIFICATION_BATCH_WINDOW_MINUTES", 60))
app.config["DEFAULT_PAGE_SIZE"] = int(os.getenv("DEFAULT_PAGE_SIZE", 20))
app.config["MAX_PAGE_SIZE"] = int(os.getenv("MAX_PAGE_SIZE", 100))
app.config["MAX_PAGE"] = int(os.getenv("MAX_PAGE", 100000))

db.init_app(app)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

def ok(payload, status=200): return jsonify(payload), status
def err(code="BAD_REQUEST", message="bad request", status=400): return jsonify({"error": {"code": code, "message": message}}), status

def page_args():
    """Read page/size query params; raises ValueError when out of range."""
    page = int(request.args.get("page", 0))
    size = int(request.args.get("size", app.config["DEFAULT_PAGE_SIZE"]))
    if not 0 <= page <= app.config["MAX_PAGE"]:
        raise ValueError(f"page must be between 0 and {app.config['MAX_PAGE']}")
    if not 1 <= size <= app.config["MAX_PAGE_SIZE"]:
        raise ValueError(f"size must be between 1 and {app.config['MAX_PAGE_SIZE']}")
    return page, size

def ingredient_names():
    return IngredientNames.validate_python(request.get_json(force=True, silent=True))

# Seed Data
def init_data():
    """If no data is found in the database, write some initial recipes."""
    if Recipe.query.first():
        return

    app.logger.info("Initializing database with seed data...")
    chef = User(username="chef_anna", display_name="Anna", email="anna@example.com")
    home = User(username="homecook", display_name="Home Cook", email="home@example.com")
    mains = Category(name="Main Course")
    salads = Category(name="Salad")
    db.session.add_all([chef, home, mains, salads])

    seeds = [
        {
            "title": "Chicken Rice", "difficulty": "EASY", "prep": 10, "cook": 25, "cats": [mains],
            "image": "https://images.example.com/chicken-rice.jpg",
            "ings": [("Chicken", "500g"), ("Rice", "2 cups"), ("Onion", "1 medium")]
        },
        {
            "title": "Tomato Egg Stir-Fry", "difficulty": "EASY", "prep": 5, "cook": 10, "cats": [mains],
            "image": None,
            "ings": [("tomato", "2"), ("egg", "3"), ("salt", "to taste"), ("oil", "1 tbsp")]
        },
        {
            "title": "Caprese Salad", "difficulty": "EASY", "prep": 10, "cook": 0, "cats": [salads],
            "image": "https://images.example.com/caprese.jpg",
            "ings": [("tomato", "2"), ("mozzarella", "120g"), ("basil", "few leaves"), ("olive oil", "1 tbsp")]
        },
    ]

    for s in seeds:
        r = Recipe(title=s["title"], difficulty=s["difficulty"], prep_time=s["prep"],
                   cook_time=s["cook"], servings=2, is_published=True, user=chef)
        r.categories.extend(s["cats"])
        for pos, (ing_name, qty) in enumerate(s["ings"]):
            r.ingredients.append(RecipeIngredient(name=ing_name, qty=qty, display_order=pos))
        if s["image"]:
            r.images.append(RecipeImage(image_url=s["image"], is_primary=True))
        db.session.add(r)

    db.session.commit()
    app.logger.info("Database seeded!")

with app.app_context():
    db.create_all()
    if os.getenv("SEED_DATA", "1") == "1":
        init_data()

@app.errorhandler(SQLAlchemyError)
def database_error(e):
    db.session.rollback()
    app.logger.exception("database error")
    return err("DATABASE_ERROR", "database error", 500)

# --- Routes ---

@app.get("/health")
def health(): return ok({"status": "ok", "db": "connected"})

@app.get("/api/recipe-search/ingredients")
def ingredients():
    items = search_ingredients(request.args.get("query"))
    return ok([i.to_json() for i in items])

@app.get("/api/recipe-search/ingredients/<name>/count")
def ingredient_count(name):
    return ok({"name": normalize_ingredient(name), "recipeCount": count_recipes_using(name)})

@app.post("/api/recipe-search/recipes")
def search_recipes():
    try:
        payload = RecipeSearchRequest.model_validate(request.get_json(force=True, silent=True) or {})
        page, size = page_args()
    except ValidationError as e:
        return err(message=e.errors()[0]["msg"])
    except ValueError as e:
        return err(message=str(e))

    result = find_recipes_by_ingredients(payload, page=page, size=size)
    body = result.to_json()
    body["searchCriteria"] = payload.to_json()
    return ok(body)

@app.post("/api/recipe-search/recipes/<int:recipe_id>/match")
def match_recipe(recipe_id):
    try:
        names = ingredient_names()
    except ValidationError as e:
        return err(message=e.errors()[0]["msg"])

    m = recipe_match(recipe_id, names)
    summary = RecipeMatchSummary(
        recipe_id=recipe_id,
        match_percentage=m.match_percentage,
        missing_ingredients=m.missing_ingredients,
        available_ingredients=m.available_ingredients,
        total_missing_count=len(m.missing_ingredients),
        total_available_count=len(m.available_ingredients),
    )
    return ok(summary.to_json())

@app.post("/api/recipe-search/recipes/<int:recipe_id>/missing-ingredients")
def missing(recipe_id):
    try:
        names = ingredient_names()
    except ValidationError as e:
        return err(message=e.errors()[0]["msg"])

    items = missing_ingredients(recipe_id, names)
    return ok(MissingIngredientsResponse(
        recipe_id=recipe_id, missing_ingredients=items, missing_count=len(items)
    ).to_json())

@app.get("/api/recipe-search/example")
def example():
    return ok(example_search_request().to_json())

@app.post("/api/recipes/<int:recipe_id>/like")
def like(recipe_id):
    try:
        payload = LikeRequest.model_validate(request.get_json(force=True, silent=True) or {})
    except ValidationError as e:
        return err(message=e.errors()[0]["msg"])

    liked = toggle_recipe_like(payload.user_id, recipe_id)
    if liked is None:
        return err("NOT_FOUND", "user or recipe not found", 404)
    return ok(LikeResponse(recipe_id=recipe_id, liked=liked, like_count=like_count(recipe_id)).to_json())

@app.get("/api/users/<int:user_id>/notifications")
def notifications(user_id):
    try:
        page, size = page_args()
    except ValueError as e:
        return err(message=str(e))

    unread_only = request.args.get("unreadOnly", "false").lower() in ("1", "true", "yes")
    result = user_notifications(user_id, unread_only=unread_only, page=page, size=size)
    if result is None:
        return err("NOT_FOUND", "user not found", 404)
    return ok(result.to_json())

@app.get("/api/users/<int:user_id>/notifications/summary")
def notifications_summary(user_id):
    summary = notification_summary(user_id)
    if summary is None:
        return err("NOT_FOUND", "user not found", 404)
    return ok(summary.to_json())

@app.post("/api/users/<int:user_id>/notifications/<int:notification_id>/read")
def read_notification(user_id, notification_id):
    updated = mark_as_read(notification_id, user_id)
    if updated is None:
        return err("NOT_FOUND", "user not found", 404)
    if not updated:
        return err("NOT_FOUND", "notification not found", 404)
    return ok({"id": notification_id, "read": True})

@app.post("/api/users/<int:user_id>/notifications/read-all")
def read_all_notifications(user_id):
    count = mark_all_as_read(user_id)
    if count is None:
        return err("NOT_FOUND", "user not found", 404)
    return ok({"updated": count})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 5001)), debug=True)
