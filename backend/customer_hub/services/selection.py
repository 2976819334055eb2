"""Remembered customer selection per user; falls back to the first active customer."""
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import CustomerNotFoundError, CustomerInactiveError
from ..logging_config import get_logger
from ..repositories import CustomerRepository, CustomerProjectRepository, SelectionRepository
from ..schemas import SelectionOut
from .customers import customer_out

logger = get_logger(__name__)


class SelectionService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.customers = CustomerRepository(db)

    async def _out(self, user_id: str, customer, remembered: bool) -> SelectionOut:
        project_ids = await CustomerProjectRepository(self.db, customer.id).list_project_ids()
        return SelectionOut(user_id=user_id, customer=customer_out(customer, project_ids), remembered=remembered)

    async def get_current(self, user_id: str) -> SelectionOut:
        saved = await SelectionRepository(self.db, user_id).get()
        if saved:
            customer = await self.customers.get(saved.customer_id)
            if customer is not None and customer.is_active:
                return await self._out(user_id, customer, remembered=True)
        default = await self.customers.first_active()
        if default is None:
            return SelectionOut(user_id=user_id, customer=None, remembered=False)
        return await self._out(user_id, default, remembered=False)

    async def select(self, user_id: str, customer_id: str) -> SelectionOut:
        customer = await self.customers.get(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        if not customer.is_active:
            raise CustomerInactiveError(customer_id)
        await SelectionRepository(self.db, user_id).set(customer.id)
        logger.info("switched customer", user_id=user_id, customer_id=customer.id, name=customer.name)
        return await self._out(user_id, customer, remembered=True)
