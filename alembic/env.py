# alembic/env.py
"""Migration environment for the chat tables.

The URL comes from DATABASE_URL when set, else from alembic.ini. Online runs
go through an async engine, the same driver the service itself uses.
"""
from logging.config import fileConfig
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context
import asyncio
import os

# Importing the package registers every table on Base.metadata
from portal_chat.models import Base

config = context.config

if os.getenv('DATABASE_URL'):
    config.set_main_option('sqlalchemy.url', os.environ['DATABASE_URL'])

if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# students/teachers/admins are owned by the portal's account service
DIRECTORY_TABLES = {"students", "teachers", "admins"}


def include_object(object, name, type_, reflected, compare_to):
    return not (type_ == "table" and name in DIRECTORY_TABLES)


def configure(**kwargs):
    context.configure(target_metadata=target_metadata, include_object=include_object, **kwargs)


def run_migrations_offline():
    configure(
        url=config.get_main_option('sqlalchemy.url'),
        literal_binds=True,
        dialect_opts={'paramstyle': 'named'},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_sync_migrations(connection):
    configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations():
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix='sqlalchemy.',
        poolclass=pool.NullPool,
    )
    async with engine.connect() as connection:
        await connection.run_sync(run_sync_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
