"""Connection repository with customer isolation."""
from uuid import UUID
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Connection


class ConnectionRepository:
    def __init__(self, db: AsyncSession, customer_id: str):
        self.db = db
        self.customer_id = customer_id

    async def create(self, name: str, plugin: str, endpoint: str = None, config: dict = None) -> Connection:
        c = Connection(
            customer_id=self.customer_id,
            name=name,
            plugin=plugin,
            endpoint=endpoint,
            config=config or {},
        )
        self.db.add(c)
        await self.db.flush()
        await self.db.refresh(c)
        return c

    async def list_all(self) -> list[Connection]:
        result = await self.db.execute(
            select(Connection)
            .where(Connection.customer_id == self.customer_id)
            .order_by(Connection.created_at.desc(), Connection.name)
        )
        return list(result.scalars().all())

    async def get(self, connection_id: UUID) -> Connection | None:
        result = await self.db.execute(
            select(Connection).where(
                and_(
                    Connection.id == connection_id,
                    Connection.customer_id == self.customer_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def delete(self, connection_id: UUID) -> bool:
        c = await self.get(connection_id)
        if not c:
            return False
        await self.db.delete(c)
        await self.db.flush()
        return True
