import math

from schemas.dto import MatchPage, RecipeMatch, RecipeSearchRequest

def normalize_ingredient(name: str) -> str:
    return (name or "").strip().lower()

def normalize_all(names) -> set[str]:
    return {normalize_ingredient(n) for n in names}

def primary_image_url(recipe):
    """Flagged primary image, else the first image, else None."""
    images = list(recipe.images or [])
    for img in images:
        if img.is_primary:
            return img.image_url
    return images[0].image_url if images else None

def compute_match(recipe, user_ingredients) -> RecipeMatch:
    """
    Score one recipe against the user's ingredients.

    Both sides are compared on their normalized form; tokens keep the
    recipe's ingredient order in the available/missing lists.
    """
    user_set = normalize_all(user_ingredients)

    required = [normalize_ingredient(i.name) for i in recipe.ingredients]
    available = [name for name in required if name in user_set]
    missing = [name for name in required if name not in user_set]

    pct = len(available) / len(required) * 100.0 if required else 0.0

    author = recipe.user
    return RecipeMatch(
        id=recipe.id,
        title=recipe.title,
        description=recipe.description,
        prep_time=recipe.prep_time,
        cook_time=recipe.cook_time,
        servings=recipe.servings,
        difficulty=recipe.difficulty,
        average_rating=recipe.average_rating,
        review_count=recipe.review_count or 0,
        view_count=recipe.view_count or 0,
        created_at=recipe.created_at,
        author_username=author.username if author else None,
        author_display_name=author.display_name if author else None,
        primary_image_url=primary_image_url(recipe),
        match_percentage=pct,
        total_ingredients=len(required),
        matched_ingredients=len(available),
        missing_ingredients=missing,
        available_ingredients=available,
        categories=[c.name for c in recipe.categories],
    )

def in_categories(recipe, category_ids) -> bool:
    wanted = set(category_ids)
    return any(c.id in wanted for c in recipe.categories)

def passes_filters(match: RecipeMatch, criteria: RecipeSearchRequest) -> bool:
    if criteria.exact_match_only:
        return match.match_percentage == 100.0
    return match.match_percentage >= criteria.min_match_percentage

_SORT_ATTRS = {
    "matchPercentage": "match_percentage",
    "rating": "average_rating",
    "viewCount": "view_count",
    "createdAt": "created_at",
}

def sort_matches(matches: list[RecipeMatch], sort_by: str = "matchPercentage",
                 direction: str = "desc") -> list[RecipeMatch]:
    """Stable sort; recipes without a value (unrated) always go last."""
    attr = _SORT_ATTRS.get(sort_by, "match_percentage")
    reverse = direction == "desc"

    present = [m for m in matches if getattr(m, attr) is not None]
    absent = [m for m in matches if getattr(m, attr) is None]
    present.sort(key=lambda m: getattr(m, attr), reverse=reverse)
    return present + absent

def paginate(items: list, page: int, size: int):
    start = page * size
    content = items[start:start + size]
    total_pages = math.ceil(len(items) / size) if size else 0
    return content, total_pages

def search(criteria: RecipeSearchRequest, candidate_recipes, page: int = 0,
           size: int = 20) -> MatchPage:
    user_set = normalize_all(criteria.available_ingredients)

    recipes = candidate_recipes
    if criteria.category_ids:
        recipes = [r for r in recipes if in_categories(r, criteria.category_ids)]

    matches = []
    for r in recipes:
        m = compute_match(r, user_set)
        if passes_filters(m, criteria):
            matches.append(m)

    matches = sort_matches(matches, criteria.sort_by, criteria.sort_direction)
    content, total_pages = paginate(matches, page, size)

    return MatchPage(
        content=content,
        current_page=page,
        total_items=len(matches),
        total_pages=total_pages,
    )
