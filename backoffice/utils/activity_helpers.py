# backoffice/utils/activity_helpers.py
from sqlalchemy.ext.asyncio import AsyncSession
from backoffice.models.activity_models import UserActivity

async def log_user_activity(db: AsyncSession, user_id: int = None, username: str = None, message: str = "", commit: bool = False):
    """
    Adds a user activity log to the session. The caller is responsible for the commit.
    """
    activity = UserActivity(
        user_id=user_id,
        username=username or "system",
        message=message
    )
    db.add(activity)
    if commit:
        await db.commit()


async def log_actor_activity(db: AsyncSession, current_user, message: str):
    """Shortcut used by services: prefixes the message with the actor's role."""
    if not current_user:
        return
    await log_user_activity(
        db,
        user_id=current_user.id,
        username=current_user.username,
        message=f"{current_user.role.capitalize()} {message}",
    )
