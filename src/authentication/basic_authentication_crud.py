import hashlib
import logging
import secrets

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.load_secrets import pepper_data
from src.models.basic_authentication_models import UserModel
from src.models.basic_authentication_schemas import UserTable


def hash_password(password: str, salt: str) -> str:
    return hashlib.sha256((password + salt + pepper_data).encode()).hexdigest()


class CreateAuthentication:

    @staticmethod
    async def create_user_data(username: str, password: str, session: AsyncSession) -> UserModel | None:
        """Create user data to authenticate the user

        Args:
            username (str): Unique login name
            password (str): Plain password, stored salted and peppered

        Returns:
            UserModel | None: The stored user, None if the username is taken
        """
        salt = secrets.token_hex(8)
        new_user = UserTable(
            username=username,
            hash_password=hash_password(password, salt),
            salt=salt,
        )
        try:
            session.add(new_user)
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            logging.warning(f"User already exists: {username} ({e.orig})")
            return None
        except SQLAlchemyError as e:
            await session.rollback()
            logging.error(f"Error creating user data: {e}")
            raise
        return UserModel.model_validate(new_user)


class ReadAuthentication:
    @staticmethod
    async def read_user_data(username: str, session: AsyncSession) -> UserModel | None:
        """Read user data to get salt and password hash

        Args:
            username (str): username of the user

        Returns:
            UserModel: user id, username, password hash and salt
        """
        stmt = select(UserTable).where(UserTable.username == username)
        result = await session.execute(stmt)
        result = result.scalars().first()
        if result is None:
            logging.info(f"User not found: {username}")
            return None
        return UserModel.model_validate(result)
