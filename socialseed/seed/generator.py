"""
Deterministic synthetic data for the social-network schema.

Given a SeedPlan the generator always produces the same users, posts, comments
and follow edges. Identifiers are derived from natural keys (username, or the
entity's kind and position), which is what makes re-running the seed converge
instead of duplicating rows.
"""

from __future__ import annotations

import hashlib
import random
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import List, Optional, Set, Tuple

from socialseed.domain.models import Comment, Follow, Post, User
from socialseed.seed.abstract import SeedPlan

SEED_PASSWORD = "123123"

USERNAMES = [
    "alice", "bob", "charlie", "dave", "eve", "frank", "grace", "heidi",
    "ivan", "judy", "karl", "laura", "mallory", "nina", "oscar", "peggy",
    "quinn", "rachel", "steve", "trent", "ursula", "victor", "wendy", "xander",
    "yvonne", "zack", "amber", "brian", "carol", "doug", "emma", "fiona",
    "george", "hannah", "ian", "jessica", "kevin", "lisa", "mike", "natalie",
    "oliver", "peter", "queen", "ron", "susan", "tim", "uma", "vicky",
]

TITLES = [
    "The Power of Habit", "Embracing Minimalism", "Healthy Eating Tips",
    "Travel on a Budget", "Mindfulness Meditation", "Boost Your Productivity",
    "Home Office Setup", "Digital Detox", "Gardening Basics",
    "DIY Home Projects", "Yoga for Beginners", "Sustainable Living",
    "Mastering Time Management", "Exploring Nature", "Simple Cooking Recipes",
    "Fitness at Home", "Personal Finance Tips", "Creative Writing",
    "Mental Health Awareness", "Learning New Skills",
]

CONTENTS = [
    "In this post, we'll explore how to develop good habits that stick and transform your life.",
    "Discover the benefits of a minimalist lifestyle and how to declutter your home and mind.",
    "Learn practical tips for eating healthy on a budget without sacrificing flavor.",
    "Traveling doesn't have to be expensive. Here are some tips for seeing the world on a budget.",
    "Mindfulness meditation can reduce stress and improve your mental well-being.",
    "Increase your productivity with these simple and effective strategies.",
    "Create the perfect home office setup to boost your work-from-home efficiency.",
    "A digital detox can help you reconnect with the real world and improve your mental health.",
    "Start your gardening journey with these basic tips for beginners.",
    "Transform your home with these fun and easy DIY projects.",
]

TAGS = [
    "Self Improvement", "Minimalism", "Health", "Travel", "Mental Health",
    "Productivity", "Home Office", "Digital Detox", "Gardening", "DIY",
    "Yoga", "Sustainability", "Time Management", "Nature", "Cooking",
    "Fitness", "Personal Finance", "Writing", "Learning",
]

COMMENTS = [
    "Great post! Thanks for sharing.",
    "I completely agree with your thoughts.",
    "Thanks for the tips, very helpful.",
    "Interesting perspective, I hadn't considered that.",
    "Thanks for sharing your experience.",
    "Well written, I enjoyed reading this.",
    "This is very insightful, thanks for posting.",
    "Great advice, I'll definitely try that.",
    "I love this, very inspirational.",
    "Thanks for the information, very useful.",
]


def _det_uuid(*parts: str) -> uuid.UUID:
    h = hashlib.sha256("||".join(parts).encode("utf-8")).hexdigest()
    return uuid.UUID(h[:32])


def _hash_password(password: str, salt: str) -> bytes:
    return hashlib.scrypt(password.encode("utf-8"), salt=salt.encode("utf-8"), n=2**12, r=8, p=1)


@dataclass(frozen=True)
class SeedData:
    users: List[User]
    posts: List[Post]
    comments: List[Comment]
    follows: List[Follow]


def generate_users(count: int, now: datetime) -> List[User]:
    users = []
    for i in range(count):
        username = f"{USERNAMES[i % len(USERNAMES)]}{i}"
        users.append(
            User(
                id=_det_uuid("user", username),
                username=username,
                email=f"{username}@example.com",
                password_hash=_hash_password(SEED_PASSWORD, username),
                created_at=now - timedelta(days=count - i),
            )
        )
    return users


def generate_posts(count: int, users: List[User], rng: random.Random, now: datetime) -> List[Post]:
    posts = []
    for i in range(count):
        author = rng.choice(users)
        posts.append(
            Post(
                id=_det_uuid("post", str(i)),
                user_id=author.id,
                title=rng.choice(TITLES),
                content=rng.choice(CONTENTS),
                tags=rng.sample(TAGS, k=rng.randint(1, 3)),
                created_at=now - timedelta(hours=count - i),
            )
        )
    return posts


def generate_comments(
    count: int,
    users: List[User],
    posts: List[Post],
    rng: random.Random,
    now: datetime,
) -> List[Comment]:
    comments = []
    for i in range(count):
        comments.append(
            Comment(
                id=_det_uuid("comment", str(i)),
                post_id=rng.choice(posts).id,
                user_id=rng.choice(users).id,
                content=rng.choice(COMMENTS),
                created_at=now - timedelta(minutes=count - i),
            )
        )
    return comments


def generate_follows(count: int, users: List[User], rng: random.Random, now: datetime) -> List[Follow]:
    """
    Pick ``count`` distinct (user, follower) pairs with no self-follows.

    Dense requests sample from the full edge set; sparse ones draw pairs until
    enough distinct edges are found.
    """
    n = len(users)
    max_edges = n * (n - 1)
    pairs: List[Tuple[int, int]]
    if count * 2 >= max_edges:
        every = [(a, b) for a in range(n) for b in range(n) if a != b]
        pairs = rng.sample(every, k=count)
    else:
        seen: Set[Tuple[int, int]] = set()
        pairs = []
        while len(pairs) < count:
            a, b = rng.randrange(n), rng.randrange(n)
            if a == b or (a, b) in seen:
                continue
            seen.add((a, b))
            pairs.append((a, b))

    return [
        Follow(user_id=users[a].id, follower_id=users[b].id, created_at=now)
        for a, b in pairs
    ]


def generate(plan: SeedPlan, now: Optional[datetime] = None) -> SeedData:
    """Generate every entity of a plan, referenced entities first."""
    rng = random.Random(plan.random_seed)
    now = now or datetime.now(tz=UTC)

    users = generate_users(plan.users, now)
    posts = generate_posts(plan.posts, users, rng, now)
    comments = generate_comments(plan.comments, users, posts, rng, now)
    follows = generate_follows(plan.follows, users, rng, now)
    return SeedData(users=users, posts=posts, comments=comments, follows=follows)


__all__ = [
    "SeedData",
    "generate",
    "generate_comments",
    "generate_follows",
    "generate_posts",
    "generate_users",
]
