import os
from datetime import datetime

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DATA"] = "0"

from app import app as flask_app  # noqa: E402
from models import (  # noqa: E402
    Category, Recipe, RecipeImage, RecipeIngredient, User, db
)


@pytest.fixture
def app():
    """App with a fresh in-memory schema per test."""
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(username, display_name=None):
        user = User(username=username, display_name=display_name or username.title())
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_recipe(app, make_user):
    """Persisted recipe factory; the author is created on first use."""
    state = {}

    def _make(title, ingredients, *, published=True, categories=(), images=(),
              rating=None, views=0, created_at=None, user=None):
        if user is None:
            user = state.get("author") or make_user("author", "Recipe Author")
            state["author"] = user
        recipe = Recipe(
            title=title,
            description=f"{title} description",
            is_published=published,
            average_rating=rating,
            view_count=views,
            created_at=created_at or datetime(2024, 1, 1, 12, 0),
            user=user,
        )
        for pos, name in enumerate(ingredients):
            recipe.ingredients.append(RecipeIngredient(name=name, display_order=pos))
        for pos, (url, primary) in enumerate(images):
            recipe.images.append(RecipeImage(image_url=url, is_primary=primary, display_order=pos))
        recipe.categories.extend(categories)
        db.session.add(recipe)
        db.session.commit()
        return recipe
    return _make


@pytest.fixture
def make_category(app):
    def _make(name):
        category = Category(name=name)
        db.session.add(category)
        db.session.commit()
        return category
    return _make
