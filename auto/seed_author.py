#!/usr/bin/env python3
"""
Seed Author Script.

Creates (or updates) a user who can manage posts and prints a bearer token
for the dashboard endpoints. Accounts and logins belong to the identity
service; this is for local setup and manual testing.

Usage:
    uv run python auto/seed_author.py --username editor --email editor@example.com
    uv run python auto/seed_author.py --username root --email root@example.com \
        --permission "blog.posts.*" --role "Super Admin"

Environment Variables:
    DATABASE_URL: Target database (see blog.configs.settings)
    SECRET_KEY: Signing key for the printed token
"""

from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter
from asyncio import run as asyncio_run
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from sys import exit as sys_exit
from sys import path as sys_path

# Add project root to path for imports
sys_path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select  # noqa: E402

from blog.db.database import init_db, transaction  # noqa: E402
from blog.managers.token_manager import create_access_token  # noqa: E402
from blog.models import UserDB  # noqa: E402

DEFAULT_PERMISSIONS = ["blog.posts.view", "blog.posts.create"]


@dataclass(frozen=True)
class AuthorData:
    """
    Author seed data.

    Attributes
    ----------
    username : str
        Unique username.
    email : str
        Unique email address.
    permissions : list[str]
        Granted permission strings.
    roles : list[str]
        Role names.
    """

    username: str
    email: str
    permissions: list[str] = field(default_factory=lambda: list(DEFAULT_PERMISSIONS))
    roles: list[str] = field(default_factory=list)


def parse_args() -> Namespace:
    parser = ArgumentParser(
        description="Create a post author and print an access token.",
        formatter_class=RawDescriptionHelpFormatter,
    )
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument(
        "--permission",
        action="append",
        dest="permissions",
        help="Permission string, repeatable (default: view + create)",
    )
    parser.add_argument("--role", action="append", dest="roles", help="Role name, repeatable")
    parser.add_argument("--expires-minutes", type=int, default=60 * 24)
    return parser.parse_args()


async def upsert_author(data: AuthorData) -> UserDB:
    """Create the user, or overwrite permissions and roles of an existing one."""
    await init_db()
    async with transaction() as session:
        result = await session.execute(select(UserDB).where(UserDB.username == data.username))
        user = result.scalar_one_or_none()
        if user is None:
            user = UserDB(username=data.username, email=data.email)
        user.permissions = data.permissions
        user.roles = data.roles
        session.add(user)
    return user


def main() -> None:
    args = parse_args()
    data = AuthorData(
        username=args.username,
        email=args.email,
        permissions=args.permissions or list(DEFAULT_PERMISSIONS),
        roles=args.roles or [],
    )
    try:
        user = asyncio_run(upsert_author(data))
    except Exception as e:  # noqa: BLE001
        print(f"❌ Could not seed author: {e}")
        sys_exit(1)

    token = create_access_token(
        user_id=user.uuid,
        username=user.username,
        expires_delta=timedelta(minutes=args.expires_minutes),
    )
    print(f"✅ Author '{user.username}' ready ({user.uuid})")
    print(f"   permissions: {', '.join(user.permissions) or '-'}")
    print(f"   roles:       {', '.join(user.roles) or '-'}")
    print(f"\nAuthorization: Bearer {token}")


if __name__ == "__main__":
    main()
