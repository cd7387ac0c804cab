"""
Token Service.

Issues, validates and rotates the signed access/refresh token pair.

Validity is purely a function of signature and expiry. Rotation overwrites
the pair stored on the user but does not revoke the previous tokens: an old
access token stays usable until its own ``exp``. Only the refresh flow
compares against the stored pair, and only logout revokes explicitly.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from restaurant_pos.config import ConfigurationError
from restaurant_pos.errors import (
    Expired, InvalidSignature, TokenNotRecognized, UserNotFound, WrongTokenType
)

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


def identity_of(user):
    """Identity claims carried by both tokens of a pair."""
    return {
        "user_id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
    }


class TokenService:

    def __init__(self, secret, access_ttl=timedelta(hours=24),
                 refresh_ttl=timedelta(hours=168), algorithm="HS256",
                 store=None, clock=None):
        if not secret:
            raise ConfigurationError("JWT_SECRET_KEY must be set to sign tokens")
        self._secret = secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _encode(self, identity, token_type, ttl):
        now = self._clock()
        claims = {
            "sub": str(identity["user_id"]),
            "email": identity.get("email"),
            "first_name": identity.get("first_name"),
            "last_name": identity.get("last_name"),
            "role": identity.get("role"),
            "type": token_type,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def issue(self, identity):
        """Return a freshly signed ``(access_token, refresh_token)`` pair."""
        access_token = self._encode(identity, ACCESS, self.access_ttl)
        refresh_token = self._encode(identity, REFRESH, self.refresh_ttl)
        return access_token, refresh_token

    def validate(self, token, token_type=None):
        """Decode ``token`` and return its claims.

        Raises InvalidSignature when the token is malformed or signed with
        another key, Expired when ``exp`` has passed, and WrongTokenType when
        ``token_type`` is given and the token is of the other kind.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise Expired() from e
        except jwt.InvalidTokenError as e:
            raise InvalidSignature(f"Signature verification failed: {e}") from e

        if token_type and claims.get("type") != token_type:
            raise WrongTokenType(f"Expected a {token_type} token.")
        return claims

    def rotate(self, user_id):
        """Issue a new pair for ``user_id`` and store it as the current one."""
        user = self.store.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        access_token, refresh_token = self.issue(identity_of(user))
        self.store.save_tokens(user, access_token, refresh_token)
        logger.info(f"Tokens rotated for user {user.id}", extra={
            'event': 'tokens_rotated',
            'user_id': user.id
        })
        return access_token, refresh_token

    def refresh(self, candidate):
        """Exchange a refresh token for a new pair.

        The candidate must verify on its own and must also be the refresh
        token currently stored for some user, so a holder that has already
        rotated away from it cannot use it again.
        """
        self.validate(candidate, token_type=REFRESH)
        user = self.store.find_by_refresh_token(candidate)
        if user is None:
            raise TokenNotRecognized()
        return user, self.rotate(user.id)
