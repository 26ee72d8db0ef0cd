"""User directory — every registered admin and customer, keyed by username."""

from protean.exceptions import ValidationError

from bookstore.exceptions import NotFoundError
from bookstore.identity.user import Admin, Customer
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class UserDirectory:
    def __init__(self):
        self._users = {}

    def __contains__(self, username):
        return username in self._users

    def __len__(self):
        return len(self._users)

    def register(self, user):
        if user.username in self._users:
            raise ValidationError({"username": [f"User {user.username} already exists"]})
        self._users[user.username] = user
        logger.info("user.registered", username=user.username, user_type=user.user_type.value)

    def user(self, username):
        try:
            return self._users[username]
        except KeyError:
            raise NotFoundError({"_entity": f"User {username} not found"}) from None

    def customer(self, username):
        user = self.user(username)
        if not isinstance(user, Customer):
            raise NotFoundError({"_entity": f"Customer {username} not found"})
        return user

    def authenticate(self, username, password):
        """The user with these credentials, or None."""
        user = self._users.get(username)
        if user is None or not user.check_password(password):
            return None
        return user

    def users(self):
        return list(self._users.values())

    def customers(self):
        return [user for user in self._users.values() if isinstance(user, Customer)]

    def admins(self):
        return [user for user in self._users.values() if isinstance(user, Admin)]
