"""FastAPI dependency injection."""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from loanflow.config import settings
from loanflow.services.payments import PaymentService
from loanflow.services.portfolio import PortfolioService
from loanflow.services.refinance import RefinanceService
from loanflow.services.schedule import ScheduleService
from loanflow.store.sql import SQLLoanStore

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncSession:
    async with async_session() as session:
        yield session


def get_store(session: AsyncSession = Depends(get_db)) -> SQLLoanStore:
    return SQLLoanStore(session)


async def get_current_user_id(x_user_id: str | None = Header(None)) -> str:
    """Caller identity is established upstream; this only reads the forwarded id."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


def get_schedule_service(store: SQLLoanStore = Depends(get_store)) -> ScheduleService:
    return ScheduleService(store, store)


def get_refinance_service(store: SQLLoanStore = Depends(get_store)) -> RefinanceService:
    return RefinanceService(store, store)


def get_payment_service(store: SQLLoanStore = Depends(get_store)) -> PaymentService:
    return PaymentService(store, store)


def get_portfolio_service(store: SQLLoanStore = Depends(get_store)) -> PortfolioService:
    return PortfolioService(store, store)
