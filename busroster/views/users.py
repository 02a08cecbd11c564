"""
User Related Views
------------------

Handles logging in and managing the admin accounts.

- Admin logs in with a username and password and gets a session token
- Admin can see who they are logged in as
- Admin can create other admins and change their own password
"""
from http import HTTPStatus

from aiohttp_apispec import docs
from marshmallow.fields import String

from busroster.models import User
from busroster.permissions import requires, ValidToken
from busroster.serializer import JSendSchema, JSendStatus, expects, returns, Many
from busroster.serializer.models import UserSchema, LoginSchema, PasswordSchema
from busroster.service.access.users import get_user, get_users, create_user, set_password, UserExistsError
from busroster.service.credentials import AuthenticationError
from busroster.views.base import BaseView
from busroster.views.decorators import match_getter, GetFrom


class LoginView(BaseView):
    """
    Exchanges a username and password for a session token.
    """
    url = "/login"
    name = "login"

    @docs(summary="Log In")
    @expects(LoginSchema())
    @returns(
        failed=(JSendSchema(), HTTPStatus.UNAUTHORIZED),
        success=JSendSchema.of(token=String(), user=UserSchema())
    )
    async def post(self):
        try:
            user = await self.credential_checker.verify(
                self.request["data"]["username"], self.request["data"]["password"]
            )
        except AuthenticationError:
            return "failed", {
                "status": JSendStatus.FAIL,
                "data": {"message": "Incorrect username or password."}
            }

        return "success", {
            "status": JSendStatus.SUCCESS,
            "data": {
                "token": self.token_verifier.issue_token(user),
                "user": user.serialize(),
            }
        }


class MeView(BaseView):
    """
    Gets the logged in admin.
    """
    url = "/me"
    name = "me"
    with_user = match_getter(get_user, "user", user_id=GetFrom.SESSION)

    @docs(summary="Get Me")
    @requires(ValidToken())
    @with_user
    @returns(JSendSchema.of(user=UserSchema()))
    async def get(self, user: User):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"user": user.serialize()}
        }


class UsersView(BaseView):
    """
    Gets or adds to the list of admins.
    """
    url = "/users"
    name = "users"

    @docs(summary="Get All Users")
    @requires(ValidToken())
    @returns(JSendSchema.of(users=Many(UserSchema())))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"users": [user.serialize() for user in await get_users()]}
        }

    @docs(summary="Create A User")
    @requires(ValidToken())
    @expects(UserSchema())
    @returns(
        exists=(JSendSchema(), HTTPStatus.CONFLICT),
        created=(JSendSchema.of(user=UserSchema()), HTTPStatus.CREATED)
    )
    async def post(self):
        try:
            user = await create_user(self.request["data"]["username"], self.request["data"]["password"])
        except UserExistsError as error:
            return "exists", {
                "status": JSendStatus.FAIL,
                "data": {"message": "User already exists.", "errors": error.errors}
            }

        return "created", {
            "status": JSendStatus.SUCCESS,
            "data": {"user": user.serialize()}
        }


class MyPasswordView(BaseView):
    """
    Changes the password of the logged in admin.
    """
    url = "/users/me/password"
    name = "my_password"
    with_user = match_getter(get_user, "user", user_id=GetFrom.SESSION)

    @docs(summary="Change My Password")
    @requires(ValidToken())
    @with_user
    @expects(PasswordSchema())
    @returns(JSendSchema.of(user=UserSchema()))
    async def put(self, user: User):
        await set_password(user, self.request["data"]["password"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"user": user.serialize()}
        }
