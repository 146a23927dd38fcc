"""Database seeder for local development.

Every seeded user has the password ``password123``.
"""
import argparse
import asyncio
import random
import time
from datetime import datetime, timedelta, timezone

from blog_api.auth.password import hash_password
from blog_api.config import settings
from blog_api.database import Database
from blog_api.models import Comment, Post, User

TOPICS = ["python", "fastapi", "postgresql", "docker", "testing", "security",
          "async", "sqlalchemy", "jwt", "rest-api"]

SEED_PASSWORD = "password123"


async def seed(small: bool = False):
    num_users = 5 if small else 50
    num_posts = 50 if small else 2000
    max_comments_per_post = 2 if small else 5

    print(f"Seeding: {num_users} users, {num_posts} posts, up to {max_comments_per_post} comments each")
    start = time.perf_counter()

    db = Database(settings.DATABASE_URL)
    await db.drop_all()
    await db.create_all()

    # One hash shared by all seeded users; bcrypt is deliberately slow.
    password_hash = hash_password(SEED_PASSWORD, rounds=settings.BCRYPT_ROUNDS)

    async with db.session() as session:
        users = []
        for i in range(num_users):
            user = User(
                username=f"user_{i:04d}",
                email=f"user_{i:04d}@example.com",
                password_hash=password_hash,
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        posts = []
        for i in range(num_posts):
            created = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 365))
            topic = random.choice(TOPICS)
            post = Post(
                title=f"Post {i}: notes on {topic}",
                content=f"This is the full content of post {i} about {topic}. " * 10,
                user_id=random.choice(users).id,
                created_at=created,
                updated_at=created,
            )
            session.add(post)
            posts.append(post)
        await session.flush()
        print(f"  Created {len(posts)} posts")

        total_comments = 0
        for post in posts:
            for _ in range(random.randint(0, max_comments_per_post)):
                session.add(Comment(
                    content=f"Comment on post {post.id}.",
                    user_id=random.choice(users).id,
                    post_id=post.id,
                ))
                total_comments += 1
        await session.commit()

    await db.dispose()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users} (password: {SEED_PASSWORD})")
    print(f"  Posts: {num_posts}")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
