from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from models import Recipe, db
from schemas.dto import MatchPage, RecipeMatch, RecipeSearchRequest
from services.matching import compute_match, search

def published_recipes():
    """All published recipes with everything the matcher reads loaded up front."""
    stmt = (
        select(Recipe)
        .where(Recipe.is_published.is_(True))
        .options(
            selectinload(Recipe.ingredients),
            selectinload(Recipe.images),
            selectinload(Recipe.categories),
            selectinload(Recipe.user),
        )
        .order_by(Recipe.id)
    )
    return db.session.scalars(stmt).all()

def find_recipes_by_ingredients(criteria: RecipeSearchRequest, page=0, size=20) -> MatchPage:
    catalog = published_recipes()
    result = search(criteria, catalog, page=page, size=size)
    current_app.logger.info(
        "ingredient search: %d ingredients, %d/%d recipes matched",
        len(criteria.available_ingredients), result.total_items, len(catalog),
    )
    return result

def recipe_match(recipe_id: int, user_ingredients: list[str]) -> RecipeMatch:
    """
    Match a single recipe. An unknown id yields an empty 0% match
    instead of an error.
    """
    recipe = db.session.get(Recipe, recipe_id)
    if not recipe:
        current_app.logger.warning("match requested for unknown recipe %s", recipe_id)
        return RecipeMatch(id=recipe_id)
    return compute_match(recipe, user_ingredients)

def missing_ingredients(recipe_id: int, user_ingredients: list[str]) -> list[str]:
    return recipe_match(recipe_id, user_ingredients).missing_ingredients

def available_ingredients(recipe_id: int, user_ingredients: list[str]) -> list[str]:
    return recipe_match(recipe_id, user_ingredients).available_ingredients

def example_search_request() -> RecipeSearchRequest:
    return RecipeSearchRequest(
        available_ingredients=["chicken", "rice", "onion", "garlic"],
        min_match_percentage=50.0,
        exact_match_only=False,
        sort_by="matchPercentage",
        sort_direction="desc",
    )
