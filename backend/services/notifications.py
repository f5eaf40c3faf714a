import math
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import func, select, update

from models import Notification, User, db
from schemas.dto import NotificationItem, NotificationPage, NotificationSummary

RECIPE_LIKE = "RECIPE_LIKE"

def batch_key(notification_type: str, entity_id: int) -> str:
    return f"{notification_type}_{entity_id}"

def batched_like_message(actors: list[str], title: str) -> str:
    if len(actors) == 1:
        return f'{actors[0]} liked your recipe "{title}"'
    if len(actors) == 2:
        return f'{actors[0]} and {actors[1]} liked your recipe "{title}"'
    return f'{actors[0]} and {len(actors) - 1} others liked your recipe "{title}"'

def _batch_window() -> timedelta:
    return timedelta(minutes=current_app.config.get("NOTIFICATION_BATCH_WINDOW_MINUTES", 60))

def find_recent_batch(user_id: int, key: str, since: datetime):
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id,
               Notification.batch_key == key,
               Notification.created_at > since)
        .order_by(Notification.created_at.desc())
        .limit(1)
    )
    return db.session.scalars(stmt).first()

def create_recipe_like_notification(recipe, actor, now: datetime | None = None):
    """
    Notify the recipe owner about a like, folding likes that arrive within
    the batch window into one rolling notification.

    Returns the created/updated notification, or None for a self-like.
    """
    if recipe.user_id == actor.id:
        return None

    now = now or datetime.now()
    key = batch_key(RECIPE_LIKE, recipe.id)
    existing = find_recent_batch(recipe.user_id, key, now - _batch_window())

    if existing:
        actors = list(existing.batch_actors or [])
        if actor.username not in actors:
            actors.append(actor.username)
        existing.batch_actors = actors
        existing.batch_count = len(actors)
        existing.message = batched_like_message(actors, recipe.title)
        existing.last_batch_update = now
        current_app.logger.debug("batched like on %s (%d actors)", key, len(actors))
        notification = existing
    else:
        notification = Notification(
            user_id=recipe.user_id,
            message=batched_like_message([actor.username], recipe.title),
            notification_type=RECIPE_LIKE,
            entity_id=recipe.id,
            is_read=False,
            created_at=now,
            batch_key=key,
            batch_count=1,
            last_batch_update=now,
            batch_actors=[actor.username],
        )
        db.session.add(notification)

    db.session.commit()
    return notification

def user_notifications(user_id: int, unread_only=False, page=0, size=20):
    if not db.session.get(User, user_id):
        return None

    where = [Notification.user_id == user_id]
    if unread_only:
        where.append(Notification.is_read.is_(False))

    total = db.session.scalar(select(func.count(Notification.id)).where(*where))
    rows = db.session.scalars(
        select(Notification)
        .where(*where)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(page * size)
        .limit(size)
    ).all()

    return NotificationPage(
        content=[NotificationItem.model_validate(n) for n in rows],
        current_page=page,
        total_items=total,
        total_pages=math.ceil(total / size),
    )

def mark_as_read(notification_id: int, user_id: int):
    """True if a notification of this user was updated, None for an unknown user."""
    if not db.session.get(User, user_id):
        return None
    result = db.session.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(is_read=True, read_at=datetime.now())
    )
    db.session.commit()
    return result.rowcount > 0

def mark_all_as_read(user_id: int):
    if not db.session.get(User, user_id):
        return None
    result = db.session.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.now())
    )
    db.session.commit()
    return result.rowcount

def notification_summary(user_id: int):
    if not db.session.get(User, user_id):
        return None
    total = db.session.scalar(
        select(func.count(Notification.id)).where(Notification.user_id == user_id))
    unread = db.session.scalar(
        select(func.count(Notification.id))
        .where(Notification.user_id == user_id, Notification.is_read.is_(False)))
    return NotificationSummary(unread_count=unread, read_count=total - unread,
                               total_notifications=total)
