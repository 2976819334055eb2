"""Customer management: CRUD, project assignment, demo seed."""
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import CustomerConflictError, CustomerNotFoundError, ProjectNotAssignedError
from ..logging_config import get_logger
from ..models import Customer
from ..repositories import CustomerRepository, CustomerProjectRepository
from ..schemas import CustomerCreate, CustomerUpdate, CustomerOut, CustomerProjects

logger = get_logger(__name__)

DEMO_CUSTOMERS = [
    {"id": "cust-001", "name": "Acme Corporation", "projects": [1, 2, 3]},
    {"id": "cust-002", "name": "Globex Industries", "projects": [4, 5]},
]


def customer_out(customer: Customer, project_ids: list[int]) -> CustomerOut:
    return CustomerOut(
        id=customer.id,
        name=customer.name,
        description=customer.description,
        is_active=bool(customer.is_active),
        projects=project_ids,
        extra=customer.extra or {},
        created_at=customer.created_at,
        updated_at=customer.updated_at,
    )


class CustomerService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.customers = CustomerRepository(db)

    def _projects(self, customer_id: str) -> CustomerProjectRepository:
        return CustomerProjectRepository(self.db, customer_id)

    async def _require(self, customer_id: str) -> Customer:
        customer = await self.customers.get(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer

    async def list_customers(self, include_inactive: bool = False) -> list[CustomerOut]:
        rows = await self.customers.list_all(include_inactive=include_inactive)
        return [customer_out(c, await self._projects(c.id).list_project_ids()) for c in rows]

    async def get_customer(self, customer_id: str) -> CustomerOut:
        customer = await self._require(customer_id)
        return customer_out(customer, await self._projects(customer.id).list_project_ids())

    async def create_customer(self, data: CustomerCreate) -> CustomerOut:
        customer_id = data.id or await self.customers.next_id()
        if await self.customers.get(customer_id) is not None:
            raise CustomerConflictError(customer_id)
        customer = await self.customers.create(
            customer_id=customer_id,
            name=data.name,
            description=data.description,
            is_active=data.is_active,
            extra=data.extra,
        )
        projects = self._projects(customer.id)
        if data.projects:
            await projects.add(data.projects)
        logger.info("customer created", customer_id=customer.id, name=customer.name)
        return customer_out(customer, await projects.list_project_ids())

    async def update_customer(self, customer_id: str, data: CustomerUpdate) -> CustomerOut:
        customer = await self._require(customer_id)
        fields = data.model_dump(exclude_unset=True)
        # name and is_active are not nullable
        for key in ("name", "is_active"):
            if key in fields and fields[key] is None:
                del fields[key]
        if fields:
            customer = await self.customers.update(customer, **fields)
            logger.info("customer updated", customer_id=customer.id, fields=sorted(fields))
        return customer_out(customer, await self._projects(customer.id).list_project_ids())

    async def delete_customer(self, customer_id: str) -> None:
        customer = await self._require(customer_id)
        await self.customers.delete(customer)
        logger.info("customer deleted", customer_id=customer_id)

    async def list_projects(self, customer_id: str) -> CustomerProjects:
        await self._require(customer_id)
        return CustomerProjects(
            customer_id=customer_id,
            project_ids=await self._projects(customer_id).list_project_ids(),
        )

    async def assign_projects(self, customer_id: str, project_ids: list[int]) -> CustomerProjects:
        await self._require(customer_id)
        projects = self._projects(customer_id)
        added = await projects.add(project_ids)
        if added:
            logger.info("projects assigned", customer_id=customer_id, project_ids=added)
        return CustomerProjects(
            customer_id=customer_id,
            project_ids=await projects.list_project_ids(),
            added=added,
        )

    async def set_projects(self, customer_id: str, project_ids: list[int]) -> CustomerProjects:
        await self._require(customer_id)
        current = await self._projects(customer_id).replace(project_ids)
        logger.info("projects replaced", customer_id=customer_id, project_ids=current)
        return CustomerProjects(customer_id=customer_id, project_ids=current)

    async def unassign_project(self, customer_id: str, project_id: int) -> None:
        await self._require(customer_id)
        removed = await self._projects(customer_id).remove(project_id)
        if not removed:
            raise ProjectNotAssignedError(customer_id, project_id)
        logger.info("project unassigned", customer_id=customer_id, project_id=project_id)

    async def seed_demo_customers(self) -> int:
        """Insert the demo customers when none exist. Returns how many were inserted."""
        if await self.customers.count() > 0:
            return 0
        for demo in DEMO_CUSTOMERS:
            await self.create_customer(CustomerCreate(**demo))
        logger.info("demo customers seeded", count=len(DEMO_CUSTOMERS))
        return len(DEMO_CUSTOMERS)
