"""
Event Finance Manager - Demo Data Seeder

Creates one demo organization with:
- One user per role (Admin, EventManager, Finance, Viewer)
- Two events with budget line items across several categories
- Approved expenses backing each actual cost, plus one pending expense per event

Prints a bearer token per user so the API can be explored right away.
Run from the repository root: python scripts/seed_demo_data.py
"""

import asyncio
import uuid
from datetime import date, timedelta
from decimal import Decimal

from eventfinance.database import async_session_maker, init_db
from eventfinance.models import (
    BudgetItemCategory,
    BudgetItemStatus,
    BudgetLineItem,
    Event,
    EventStatus,
    Expense,
    ExpenseStatus,
    ExpenseWorkflowEntry,
    Organization,
    User,
    UserRole,
    WorkflowAction,
)
from eventfinance.models.base import utcnow
from eventfinance.utils.security import create_access_token


USERS = [
    ("admin@demo-events.test", "Amaka Admin", UserRole.ADMIN),
    ("manager@demo-events.test", "Tunde Manager", UserRole.EVENT_MANAGER),
    ("finance@demo-events.test", "Ngozi Finance", UserRole.FINANCE),
    ("viewer@demo-events.test", "Chidi Viewer", UserRole.VIEWER),
]

EVENTS = [
    {
        "name": "Annual Partner Summit",
        "venue": "Eko Convention Centre",
        "budget": Decimal("25000.00"),
        "status": EventStatus.ACTIVE,
        "starts_in_days": 30,
        "items": [
            (BudgetItemCategory.VENUE, "Main hall and breakout rooms", "9000.00", "9500.00"),
            (BudgetItemCategory.CATERING, "Lunch and coffee, two days", "6000.00", "4200.00"),
            (BudgetItemCategory.MARKETING, "Printed programmes and banners", "1500.00", None),
            (BudgetItemCategory.STAFF_TRAVEL, "Speaker flights", "4000.00", "1800.00"),
        ],
    },
    {
        "name": "Community Tech Meetup",
        "venue": "Yaba Innovation Hub",
        "budget": Decimal("3000.00"),
        "status": EventStatus.PLANNING,
        "starts_in_days": 75,
        "items": [
            (BudgetItemCategory.CATERING, "Pizza and drinks", "800.00", None),
            (BudgetItemCategory.ENTERTAINMENT, "DJ set", "500.00", None),
            (BudgetItemCategory.LOGISTICS, "Chair rental", "300.00", None),
        ],
    },
]


async def seed_demo_data():
    print("Seeding demo data...")
    await init_db()

    async with async_session_maker() as db:
        org = Organization(id=uuid.uuid4(), name="Demo Events Co")
        db.add(org)

        users = {}
        for email, full_name, role in USERS:
            user = User(
                id=uuid.uuid4(),
                email=email,
                full_name=full_name,
                role=role,
                organization_id=org.id,
                is_active=True,
            )
            db.add(user)
            users[role] = user

        manager = users[UserRole.EVENT_MANAGER]
        finance = users[UserRole.FINANCE]

        for config in EVENTS:
            start = date.today() + timedelta(days=config["starts_in_days"])
            event = Event(
                id=uuid.uuid4(),
                organization_id=org.id,
                name=config["name"],
                venue=config["venue"],
                budget=config["budget"],
                status=config["status"],
                start_date=start,
                end_date=start + timedelta(days=1),
                created_by_id=manager.id,
            )
            db.add(event)

            for category, description, estimated, actual in config["items"]:
                item = BudgetLineItem(
                    id=uuid.uuid4(),
                    event_id=event.id,
                    category=category,
                    description=description,
                    estimated_cost=Decimal(estimated),
                    actual_cost=Decimal(actual) if actual else None,
                    status=BudgetItemStatus.APPROVED if actual else BudgetItemStatus.PENDING,
                    last_edited_by_id=manager.id,
                    last_edited_at=utcnow(),
                )
                db.add(item)

                if actual:
                    expense = Expense(
                        id=uuid.uuid4(),
                        event_id=event.id,
                        organization_id=org.id,
                        budget_item_id=item.id,
                        category=category,
                        title=f"Invoice: {description}",
                        amount=Decimal(actual),
                        status=ExpenseStatus.APPROVED,
                        created_by_id=finance.id,
                    )
                    db.add(expense)
                    db.add(
                        ExpenseWorkflowEntry(
                            expense_id=expense.id,
                            approver_id=manager.id,
                            action=WorkflowAction.APPROVED,
                            comments="Seeded approval",
                            action_at=utcnow(),
                        )
                    )

            db.add(
                Expense(
                    id=uuid.uuid4(),
                    event_id=event.id,
                    organization_id=org.id,
                    category=BudgetItemCategory.MISCELLANEOUS,
                    title="Taxi receipts",
                    amount=Decimal("85.00"),
                    status=ExpenseStatus.PENDING,
                    created_by_id=finance.id,
                )
            )

        await db.commit()

        print(f"\nOrganization: {org.name} ({org.id})")
        print(f"Events: {len(EVENTS)}")
        print("\nBearer tokens:")
        for email, _, role in USERS:
            token = create_access_token({"sub": str(users[role].id)})
            print(f"  {role.value:<13} {email}\n    {token}")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
