"""Seed the database with an admin user, scoring factors and two projects.

Usage: python -m pmo.seed
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import select

from pmo.db.session import init_db, session_scope
from pmo.models.db import FactorDefinition, Project, User
from pmo.services.portfolio import sync_scores_and_ranks

FACTORS = [
    ("Strategic fit", 50.0, "Alignment with the company's strategic goals"),
    ("Return on investment", 30.0, "Expected financial return"),
    ("Urgency", 20.0, "Cost of delaying the project"),
]


async def seed_admin() -> User:
    async with session_scope() as session:
        result = await session.execute(select(User).where(User.username == "admin"))
        admin = result.scalar_one_or_none()
        if admin:
            print("  Admin user already exists, skipping.")
            return admin

        admin = User(
            username="admin",
            name="Administrator",
            email="admin@example.com",
            role="admin",
        )
        session.add(admin)
        print(f"  Created admin user: {admin.username}")
        return admin


async def seed_factors() -> list[FactorDefinition]:
    """Create the default scoring factors."""
    async with session_scope() as session:
        result = await session.execute(select(FactorDefinition))
        existing = result.scalars().all()
        if existing:
            print("  Scoring factors already seeded, skipping.")
            return list(existing)

        factors = [
            FactorDefinition(name=name, weight=weight, description=description)
            for name, weight, description in FACTORS
        ]
        session.add_all(factors)
        print(f"  Created {len(factors)} scoring factors.")
        return factors


async def seed_projects(admin: User, factors: list[FactorDefinition]) -> int:
    """Create two sample projects and rank them."""
    today = date.today()
    samples = [
        {
            "name": "Enterprise Migration",
            "description": "Migrating the order platform to an enterprise architecture.",
            "status": "active",
            "priority": "P0",
            "start_date": today,
            "end_date": today + timedelta(days=90),
            "budget": 500_000.0,
            "scores": (90, 70, 80),
        },
        {
            "name": "AI Enhanced Analytics",
            "description": "Implementing AI-driven decision support.",
            "status": "planning",
            "priority": "P1",
            "start_date": today,
            "end_date": today + timedelta(days=120),
            "budget": 300_000.0,
            "scores": (70, 85, 40),
        },
    ]

    async with session_scope() as session:
        count = 0
        for sample in samples:
            result = await session.execute(
                select(Project).where(Project.name == sample["name"])
            )
            if result.scalar_one_or_none():
                print(f"  Project {sample['name']} already exists, skipping.")
                continue

            scores = sample.pop("scores")
            project = Project(
                **sample,
                manager_id=admin.id,
                factors={str(f.id): s for f, s in zip(factors, scores)},
            )
            session.add(project)
            count += 1
            print(f"  Created project: {project.name}")

        await session.flush()
        await sync_scores_and_ranks(session)
        return count


async def main():
    """Run all seed operations."""
    print("Initializing database connection...")
    await init_db()

    print("Seeding admin user...")
    admin = await seed_admin()

    print("Seeding scoring factors...")
    factors = await seed_factors()

    print("Seeding sample projects...")
    count = await seed_projects(admin, factors)
    print(f"  Created {count} projects.")

    print("Done! Seed data loaded successfully.")


if __name__ == "__main__":
    asyncio.run(main())
