from flask import current_app
from sqlalchemy import func, select

from models import Like, Recipe, User, db
from services.notifications import create_recipe_like_notification

def toggle_recipe_like(user_id: int, recipe_id: int):
    """
    Like or unlike a recipe. Returns True when liked, False when unliked,
    None when the user or recipe does not exist.
    """
    user = db.session.get(User, user_id)
    recipe = db.session.get(Recipe, recipe_id)
    if not user or not recipe:
        return None

    existing = db.session.scalars(
        select(Like).where(Like.user_id == user_id, Like.recipe_id == recipe_id)
    ).first()

    if existing:
        db.session.delete(existing)
        db.session.commit()
        current_app.logger.info("user %s unliked recipe %s", user_id, recipe_id)
        return False

    db.session.add(Like(user_id=user_id, recipe_id=recipe_id))
    db.session.commit()
    current_app.logger.info("user %s liked recipe %s", user_id, recipe_id)

    create_recipe_like_notification(recipe, user)
    return True

def like_count(recipe_id: int) -> int:
    return db.session.scalar(
        select(func.count(Like.id)).where(Like.recipe_id == recipe_id)
    ) or 0
