"""
Create an admin account (or promote an existing user) and print a bearer
token for manual testing.

    python -m scripts.create_admin admin@example.com --name "Site Admin" --password s3cret-pass
"""
import argparse
import asyncio
import uuid

from sqlalchemy import select

from scripts.config import require_database_url

require_database_url()

from app.core.database import AsyncSessionLocal, Base, engine
from app.core.security import create_access_token, hash_password
from app.models.user import User, UserRole
from app.models import plan, subscription, article, video, article_view, video_view  # noqa: F401


async def create_admin(email: str, name: str, password: str | None = None) -> tuple[User, str | None]:
    """
    Create the admin, or promote the user with that email.

    Returns:
        tuple: The admin user and the generated password (None when not generated
        or when an existing account was promoted)
    """
    generated = None

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email.lower()))
        admin = result.scalar_one_or_none()

        if admin:
            print(f"\n[ADMIN] Promoting existing user {admin.id} ({admin.email})")
            admin.role = UserRole.ADMIN
            admin.is_active = True
            if password:
                admin.password_hash = hash_password(password)
        else:
            if not password:
                password = generated = uuid.uuid4().hex
            admin = User(
                name=name,
                email=email.lower(),
                password_hash=hash_password(password),
                role=UserRole.ADMIN,
                is_active=True,
            )
            db.add(admin)
            print(f"\n[ADMIN] Creating admin {email}")

        await db.commit()
        await db.refresh(admin)

    return admin, generated


async def main():
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("email", help="Admin email address")
    parser.add_argument("--name", default="Administrator", help="Display name for new accounts")
    parser.add_argument("--password", default=None, help="Password (generated when omitted)")
    args = parser.parse_args()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    admin, generated = await create_admin(args.email, args.name, args.password)

    print("="*60)
    print(f"Admin ID:   {admin.id}")
    print(f"Email:      {admin.email}")
    if generated:
        print(f"Password:   {generated}")
    print(f"Token:      {create_access_token(admin)}")
    print("="*60 + "\n")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
