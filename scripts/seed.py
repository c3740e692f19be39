"""Fill the database with fake users, posts, comments and likes."""

import argparse
import asyncio
import logging
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy import delete, select  # noqa: E402

from app.database import AsyncSessionLocal, create_tables  # noqa: E402
from app.logging_config import setup_logging  # noqa: E402
from app.security import hash_password  # noqa: E402
from app.services.bootstrap import ensure_admin, seed_roles  # noqa: E402
from models.auth import Auth, AuthRole  # noqa: E402
from models.post import Comment, Post, PostLike  # noqa: E402
from models.role import RoleEnum  # noqa: E402
from models.user import User  # noqa: E402

SKILLS = ["JavaScript", "Python", "Java", "React", "Node.js", "MongoDB"]

fake = Faker()
logger = logging.getLogger("devconnect.seed")


def recent(days: int) -> datetime:
    return datetime.utcnow() - timedelta(seconds=random.randint(0, days * 86400))


async def clear_non_admin(db):
    admin_ids = select(AuthRole.auth_id).where(AuthRole.role == RoleEnum.admin.value)
    await db.execute(delete(PostLike))
    await db.execute(delete(Comment))
    await db.execute(delete(Post))
    await db.execute(delete(User).where(User.id.not_in(admin_ids)))
    await db.execute(delete(AuthRole).where(AuthRole.auth_id.not_in(admin_ids)))
    await db.execute(delete(Auth).where(Auth.id.not_in(admin_ids)))
    await db.commit()


async def create_users(db, count: int) -> list[User]:
    users = []
    # one shared hash keeps seeding fast; every seeded account logs in with "password"
    password = hash_password("password")
    while len(users) < count:
        username = fake.unique.user_name()
        email = fake.unique.email()
        created_at = recent(30)
        auth = Auth(username=username, email=email, password=password, created_at=created_at, updated_at=created_at)
        db.add(auth)
        await db.flush()
        db.add(AuthRole(auth_id=auth.id, role=RoleEnum.user.value))
        user = User(
            id=auth.id,
            name=fake.name(),
            bio=fake.paragraph(),
            skills=", ".join(random.sample(SKILLS, 3)),
            github=fake.url(),
            linkedin=fake.url(),
            twitter=fake.url(),
            website=fake.url(),
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(user)
        users.append(user)
    await db.commit()
    logger.info("%s users created", count)
    return users


async def create_posts(db, users: list[User], count: int) -> list[Post]:
    posts = []
    for _ in range(count):
        created_at = recent(30)
        post = Post(
            user_id=random.choice(users).id,
            content="\n\n".join(fake.paragraphs(5)),
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(post)
        posts.append(post)
    await db.commit()
    logger.info("%s posts created", count)
    return posts


async def create_comments(db, users: list[User], posts: list[Post], count: int):
    for _ in range(count):
        created_at = recent(7)
        db.add(Comment(
            post_id=random.choice(posts).id,
            user_id=random.choice(users).id,
            content=fake.paragraph(),
            created_at=created_at,
            updated_at=created_at,
        ))
    await db.commit()
    logger.info("%s comments created", count)


async def add_likes(db, users: list[User], posts: list[Post]):
    for post in posts:
        for user in random.sample(users, random.randint(0, min(9, len(users)))):
            db.add(PostLike(post_id=post.id, user_id=user.id))
    await db.commit()
    logger.info("Likes added to posts")


async def seed(users: int, posts: int, comments: int):
    await create_tables()
    async with AsyncSessionLocal() as db:
        await seed_roles(db)
        await clear_non_admin(db)
        await ensure_admin(db)
        seeded_users = await create_users(db, users)
        seeded_posts = await create_posts(db, seeded_users, posts)
        await create_comments(db, seeded_users, seeded_posts, comments)
        await add_likes(db, seeded_users, seeded_posts)
    logger.info("Seed completed successfully")


def main():
    parser = argparse.ArgumentParser(description="Seed the DevConnect database with fake data")
    parser.add_argument("--users", type=int, default=20)
    parser.add_argument("--posts", type=int, default=50)
    parser.add_argument("--comments", type=int, default=100)
    args = parser.parse_args()
    setup_logging()
    asyncio.run(seed(args.users, args.posts, args.comments))


if __name__ == "__main__":
    main()
