import argparse
import asyncio
import secrets

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from src.authentication.basic_authentication_crud import (
    CreateAuthentication,
    ReadAuthentication,
    hash_password,
)
from src.db import Session, create_tables
from src.domain.errors import Unauthenticated
from src.models.basic_authentication_models import UserModel

security = HTTPBasic(auto_error=False)
create_auth = CreateAuthentication()
read_auth = ReadAuthentication()


class BasicAuthentication:
    def __init__(self):
        pass

    async def check_user_data(
        self, credentials: HTTPBasicCredentials | None = Depends(security)
    ) -> UserModel:
        """Resolve the caller from HTTP Basic credentials. Every trade endpoint depends on it.

        Args:
            credentials (HTTPBasicCredentials, optional): Defaults to Depends(security).

        Raises:
            Unauthenticated: No credentials, unknown username or wrong password

        Returns:
            UserModel: The authenticated user
        """
        if credentials is None:
            raise Unauthenticated("Unauthorized.")

        async with Session() as session:
            user_data = await read_auth.read_user_data(credentials.username, session)
        if user_data is None:
            raise Unauthenticated("Invalid username")

        hashed_password = hash_password(credentials.password, user_data.salt)
        if not secrets.compare_digest(hashed_password, user_data.hash_password):
            raise Unauthenticated("Invalid password")
        return user_data

    async def store_user_data(self, user_name: str, password: str) -> UserModel | None:
        async with Session() as session:
            return await create_auth.create_user_data(user_name, password, session)

    async def read_user_data(self, user_name: str) -> UserModel | None:
        async with Session() as session:
            return await read_auth.read_user_data(user_name, session)


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Register a marketplace user")
    parser.add_argument("--username", type=str, help="Username", required=True)
    parser.add_argument("--password", type=str, help="Password", required=True)
    return parser


async def main(user_name: str, password: str):
    await create_tables()
    basic_auth = BasicAuthentication()
    await basic_auth.store_user_data(user_name, password)
    user_data = await basic_auth.read_user_data(user_name)
    print(user_data.user_id, user_data.username)


if __name__ == "__main__":
    parser = get_parser()
    args = parser.parse_args()
    asyncio.run(main(args.username, args.password))
