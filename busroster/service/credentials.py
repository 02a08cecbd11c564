"""
Credentials
-----------

Admin login. Passwords are stored as argon2id hashes, and a
successful login is exchanged for a signed session token that
the client sends back as ``Authorization: Bearer $TOKEN``.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from aiohttp.web_request import Request
from jose import jwt, ExpiredSignatureError, JWTError
from nacl import pwhash
from nacl.exceptions import InvalidkeyError

from busroster.models import User


class AuthenticationError(Exception):
    pass


class TokenVerificationError(Exception):
    pass


def hash_password(password: str) -> str:
    return pwhash.str(password.encode()).decode()


def check_password(password_hash: str, password: str) -> bool:
    try:
        return pwhash.verify(password_hash.encode(), password.encode())
    except InvalidkeyError:
        return False


class CredentialChecker:
    """Checks a username and password against the stored admin accounts."""

    async def verify(self, username: str, password: str) -> User:
        """
        :returns: The user the credentials belong to.
        :raises AuthenticationError: When the username or password is incorrect.
        """
        user = await User.filter(username=username).first()
        if user is None:
            raise AuthenticationError("Incorrect username.")
        if not check_password(user.password_hash, password):
            raise AuthenticationError("Incorrect password.")
        return user


class TokenVerifier(ABC):

    @abstractmethod
    def issue_token(self, user: User) -> str:
        """Creates a session token for the given user."""

    @abstractmethod
    def verify_token(self, token) -> int:
        """
        Given a token, verifies it, returning the id of the user it belongs to.

        :raises TokenVerificationError: When the provided token is invalid.
        """


class SessionTokenVerifier(TokenVerifier):
    """
    Issues and verifies HS256 signed session tokens.
    """

    algorithm = "HS256"

    def __init__(self, secret: str, lifetime: timedelta):
        self._secret = secret
        self.lifetime = lifetime

    def issue_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify_token(self, token) -> int:
        if not isinstance(token, str):
            raise TypeError(f"Token must be of type string, not {type(token)}")

        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenVerificationError("Token is expired.") from e
        except JWTError as e:
            raise TokenVerificationError("Token is invalid.") from e

        try:
            return int(claims["sub"])
        except (KeyError, ValueError) as e:
            raise TokenVerificationError("Token is invalid.") from e


def verify_token(request: Request) -> int:
    """
    Checks a request for the existence of a valid Authorization header.

    :param request: The request to check.
    :return: The id of the logged in user.
    :raises TokenVerificationError: When the Authorization header is invalid.
    """
    if "Authorization" not in request.headers:
        raise TokenVerificationError("You must log in first.")

    if not request.headers["Authorization"].startswith("Bearer "):
        raise TokenVerificationError("The Authorization header must be of the format \"Bearer $TOKEN\".")

    return request.app["token_verifier"].verify_token(request.headers["Authorization"][7:])
