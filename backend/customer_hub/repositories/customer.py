"""Customer, project association, and selection repositories."""
import re
from sqlalchemy import select, delete, and_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from ..errors import CustomerConflictError
from ..models import Customer, CustomerProject, CustomerSelection, Connection

_GENERATED_ID = re.compile(r"^cust-(\d+)$")


def _insert(db: AsyncSession, model):
    """INSERT that supports ON CONFLICT for the bound dialect (PostgreSQL or SQLite)."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)


class CustomerRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, customer_id: str) -> Customer | None:
        result = await self.db.execute(select(Customer).where(Customer.id == customer_id))
        return result.scalar_one_or_none()

    async def list_all(self, include_inactive: bool = False) -> list[Customer]:
        stmt = select(Customer).order_by(Customer.id)
        if not include_inactive:
            stmt = stmt.where(Customer.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def first_active(self) -> Customer | None:
        result = await self.db.execute(
            select(Customer).where(Customer.is_active.is_(True)).order_by(Customer.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Customer.id)))
        return int(result.scalar_one() or 0)

    async def next_id(self) -> str:
        """cust-NNN, one past the highest numeric suffix in use."""
        result = await self.db.execute(select(Customer.id).where(Customer.id.like("cust-%")))
        highest = 0
        for (cid,) in result.all():
            m = _GENERATED_ID.match(cid)
            if m:
                highest = max(highest, int(m.group(1)))
        return f"cust-{highest + 1:03d}"

    async def create(
        self,
        customer_id: str,
        name: str,
        description: str = None,
        is_active: bool = True,
        extra: dict = None,
    ) -> Customer:
        c = Customer(
            id=customer_id,
            name=name,
            description=description,
            is_active=is_active,
            extra=extra or {},
        )
        self.db.add(c)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Another transaction committed the same id after the caller's existence check
            await self.db.rollback()
            raise CustomerConflictError(customer_id) from e
        await self.db.refresh(c)
        return c

    async def update(self, customer: Customer, **fields) -> Customer:
        for key, value in fields.items():
            setattr(customer, key, value)
        await self.db.flush()
        await self.db.refresh(customer)
        return customer

    async def delete(self, customer: Customer) -> None:
        # Explicit child deletes; SQLite does not enforce ON DELETE CASCADE by default
        for model in (CustomerProject, Connection, CustomerSelection):
            await self.db.execute(delete(model).where(model.customer_id == customer.id))
        await self.db.delete(customer)
        await self.db.flush()


class CustomerProjectRepository:
    def __init__(self, db: AsyncSession, customer_id: str):
        self.db = db
        self.customer_id = customer_id

    async def list_project_ids(self) -> list[int]:
        result = await self.db.execute(
            select(CustomerProject.project_id)
            .where(CustomerProject.customer_id == self.customer_id)
            .order_by(CustomerProject.project_id)
        )
        return [row[0] for row in result.all()]

    async def add(self, project_ids: list[int]) -> list[int]:
        """Associate projects; returns only the ids that were not already assigned.

        Rows inserted concurrently by another transaction count as already assigned.
        """
        added = []
        for pid in project_ids:
            stmt = (
                _insert(self.db, CustomerProject)
                .values(customer_id=self.customer_id, project_id=pid)
                .on_conflict_do_nothing(index_elements=["customer_id", "project_id"])
            )
            result = await self.db.execute(stmt)
            if (result.rowcount or 0) > 0:
                added.append(pid)
        return sorted(added)

    async def remove(self, project_id: int) -> bool:
        result = await self.db.execute(
            delete(CustomerProject).where(
                and_(
                    CustomerProject.customer_id == self.customer_id,
                    CustomerProject.project_id == project_id,
                )
            )
        )
        await self.db.flush()
        return (result.rowcount or 0) > 0

    async def replace(self, project_ids: list[int]) -> list[int]:
        await self.db.execute(
            delete(CustomerProject).where(CustomerProject.customer_id == self.customer_id)
        )
        await self.db.flush()
        await self.add(project_ids)
        return await self.list_project_ids()


class SelectionRepository:
    def __init__(self, db: AsyncSession, user_id: str):
        self.db = db
        self.user_id = user_id

    async def get(self) -> CustomerSelection | None:
        result = await self.db.execute(
            select(CustomerSelection)
            .where(CustomerSelection.user_id == self.user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def set(self, customer_id: str) -> CustomerSelection:
        """Upsert the user's selection in one statement."""
        stmt = (
            _insert(self.db, CustomerSelection)
            .values(user_id=self.user_id, customer_id=customer_id)
            .on_conflict_do_update(
                index_elements=["user_id"],
                set_={"customer_id": customer_id, "updated_at": func.now()},
            )
        )
        await self.db.execute(stmt)
        return await self.get()
