"""
Users
-----
"""
from typing import List, Optional

from tortoise.exceptions import IntegrityError

from busroster import logger
from busroster.models import User
from busroster.service.credentials import hash_password


class UserExistsError(Exception):
    def __init__(self, errors):
        super().__init__()
        self.errors = errors


async def get_users() -> List[User]:
    return await User.all().order_by("username")


async def get_user(*, user_id=None, username=None) -> Optional[User]:
    """
    :param user_id: The id of the user to get.
    :param username: The username of the user to get.
    :return: The matching user, or None.
    """

    kwargs = {}
    if user_id is not None:
        kwargs["id"] = user_id

    if username is not None:
        kwargs["username"] = username

    return await User.filter(**kwargs).first()


async def create_user(username: str, password: str) -> User:
    """
    Creates a new admin user.

    :raises UserExistsError: When a user with the given username already exists.
    """
    try:
        return await User.create(username=username, password_hash=hash_password(password))
    except IntegrityError as error:
        if "unique" not in str(error).lower():
            raise error

        raise UserExistsError({"username": "User with that username already exists!"})


async def set_password(user: User, password: str) -> User:
    user.password_hash = hash_password(password)
    await user.save(update_fields=["password_hash"])
    return user


async def create_default_admin(password: str) -> Optional[User]:
    """Creates the ``admin`` account, but only when there are no users at all."""
    if await User.all().exists():
        return None

    logger.info("Creating default admin user")
    return await create_user("admin", password)
