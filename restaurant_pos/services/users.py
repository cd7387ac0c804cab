from passlib.hash import pbkdf2_sha256
from sqlalchemy.exc import IntegrityError

from restaurant_pos import db
from restaurant_pos.errors import DuplicateEmail, DuplicatePhone
from restaurant_pos.models import User, ROLE_USER
from restaurant_pos.services.storage import transaction


class CredentialStore:
    """Looks up and persists user records."""

    def find_by_id(self, user_id):
        return db.session.get(User, user_id)

    def find_by_email(self, email):
        return User.query.filter_by(email=email).first()

    def find_by_phone(self, phone):
        return User.query.filter_by(phone=phone).first()

    def find_by_refresh_token(self, refresh_token):
        if not refresh_token:
            return None
        return User.query.filter_by(refresh_token=refresh_token).first()

    def add(self, data):
        """Stage a user with a hashed password in the current transaction.

        Email and phone must be unused. The row is flushed so the caller can
        use ``user.id`` before committing.
        """
        if self.find_by_email(data["email"]):
            raise DuplicateEmail()
        if self.find_by_phone(data["phone"]):
            raise DuplicatePhone()

        data = dict(data)
        data["password"] = pbkdf2_sha256.hash(data["password"])
        data.setdefault("role", ROLE_USER)
        user = User(**data)

        db.session.add(user)
        try:
            db.session.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent signup
            if "email" in str(e.orig):
                raise DuplicateEmail() from e
            if "phone" in str(e.orig):
                raise DuplicatePhone() from e
            raise
        return user

    def create(self, data):
        with transaction():
            user = self.add(data)
        return user

    def save_tokens(self, user, token, refresh_token):
        with transaction():
            user.token = token
            user.refresh_token = refresh_token
        return user

    def clear_tokens(self, user):
        return self.save_tokens(user, None, None)
