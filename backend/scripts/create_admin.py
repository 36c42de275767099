"""
创建管理员账号（管理员不可自助注册）

用法：python scripts/create_admin.py --username admin --email admin@example.com --password xxx
"""
import argparse
import asyncio

from fitpass.core.database import AsyncSessionLocal, Base, engine
from fitpass.core.logging import setup_logging
from fitpass.schemas.auth import UserCreate
from fitpass.services.auth_service import AuthService
import fitpass.models  # noqa: F401


async def main(args) -> None:
    setup_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as db:
        user = await AuthService(db).register_user(
            UserCreate(
                username=args.username,
                email=args.email,
                password=args.password,
                full_name=args.full_name,
                role="admin",
            ),
            allow_admin=True,
        )
        print(f"管理员已创建: id={user.id} username={user.username}")
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="创建管理员账号")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--full-name", dest="full_name", default=None)
    asyncio.run(main(parser.parse_args()))
