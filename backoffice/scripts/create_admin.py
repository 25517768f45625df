# backoffice/scripts/create_admin.py
# usage: python -m backoffice.scripts.create_admin <username> <password> <pin>
import asyncio
import sys

from sqlalchemy.future import select

from backoffice.models.user_models import User
from backoffice.core.db import AsyncSessionLocal, init_models
from backoffice.core.security import hash_password, hash_pin


async def create_admin(username: str, password: str, pin: str):
    await init_models()
    async with AsyncSessionLocal() as session:
        existing = await session.execute(select(User).where(User.username == username))
        if existing.scalars().first():
            print(f"User '{username}' already exists")
            return

        admin = User(
            username=username,
            password_hash=hash_password(password),
            pin_hash=hash_pin(pin),
            role="admin",
            is_active=True
        )
        session.add(admin)
        await session.commit()
        print("Admin user created!")


if __name__ == "__main__":
    if len(sys.argv) != 4:
        sys.exit("usage: python -m backoffice.scripts.create_admin <username> <password> <pin>")
    asyncio.run(create_admin(*sys.argv[1:]))
