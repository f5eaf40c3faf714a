from sqlalchemy import distinct, func, select

from models import Recipe, RecipeIngredient, db
from schemas.dto import IngredientSearchItem
from services.matching import normalize_ingredient

def _token():
    return func.lower(func.trim(RecipeIngredient.name))

def distinct_ingredient_names(query: str | None = None) -> list[str]:
    """
    Distinct normalized ingredient names used by published recipes.
    With `query`, only names containing it (case-insensitive).
    """
    token = _token()
    stmt = (
        select(token)
        .join(Recipe, RecipeIngredient.recipe_id == Recipe.id)
        .where(Recipe.is_published.is_(True))
        .distinct()
        .order_by(token)
    )
    if query:
        stmt = stmt.where(RecipeIngredient.name.icontains(query, autoescape=True))
    return list(db.session.scalars(stmt).all())

def count_recipes_using(name: str) -> int:
    stmt = (
        select(func.count(distinct(Recipe.id)))
        .select_from(RecipeIngredient)
        .join(Recipe, RecipeIngredient.recipe_id == Recipe.id)
        .where(Recipe.is_published.is_(True))
        .where(_token() == normalize_ingredient(name))
    )
    return db.session.scalar(stmt) or 0

def search_ingredients(query: str | None = None) -> list[IngredientSearchItem]:
    query = (query or "").strip()
    names = distinct_ingredient_names(query or None)
    return [IngredientSearchItem(name=n, recipe_count=count_recipes_using(n)) for n in names]
