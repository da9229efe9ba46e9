from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from sqlalchemy import event, Engine, text, Result, CursorResult
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import Session

import config
from models.base import Base
"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.product import Product
from models.combo import Combo, ComboCategoryRequirement

# SQL echo stays off; statements would drown the pricing logs
sql_echo = False

data_folder = Path("data")

url = f"sqlite+aiosqlite:///{data_folder}/{config.DB_NAME}"
engine = create_async_engine(url, echo=sql_echo)
session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def get_db_session() -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def session_execute(stmt, session: AsyncSession | Session) -> Result[Any] | CursorResult[Any]:
    if isinstance(session, AsyncSession):
        query_result = await session.execute(stmt)
        return query_result
    else:
        query_result = session.execute(stmt)
        return query_result


async def session_flush(session: AsyncSession | Session) -> None:
    if isinstance(session, AsyncSession):
        await session.flush()
    else:
        session.flush()


async def session_commit(session: AsyncSession | Session) -> None:
    if isinstance(session, AsyncSession):
        await session.commit()
    else:
        session.commit()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def check_all_tables_exist(session: AsyncSession | Session):
    for table in Base.metadata.tables.values():
        sql_query = f"SELECT name FROM sqlite_master WHERE type='table' AND name='{table.name}';"
        result = await session_execute(text(sql_query), session)
        if result.scalar() is None:
            return False
    return True


async def create_db_and_tables():
    if data_folder.exists() is False:
        data_folder.mkdir()
    async with get_db_session() as session:
        if await check_all_tables_exist(session):
            return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
