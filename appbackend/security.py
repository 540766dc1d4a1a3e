"""
AppBackend — Password Hashing and Credential Signing
=====================================================

What:  passlib password hashing and the PyJWT signer used for user login
       tokens and device credentials.
How:   `CredentialSigner` holds the HS256 secret it was constructed with; the
       enrollment post-action and the login route each receive one instead of
       reading global configuration while handling a request.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

import jwt
from passlib.context import CryptContext

from appbackend.exceptions import InternalError

# pbkdf2_sha256 for new hashes; bcrypt variants verify accounts created by the
# previous service (cost 8, $2a$ prefix)
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256", "bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt__truncate_error=False,
)

ALGORITHM = "HS256"

# Response header carrying a freshly minted credential
TOKEN_HEADER = "x-sgl-token"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


class CredentialSigner:
    """
    Signs and verifies HS256 credentials.

    Claims are opaque strings to this class: device credentials carry
    `userID` and `userEndID`, user credentials carry `userID` and an expiry.
    """

    def __init__(self, secret: str, algorithm: str = ALGORITHM):
        self._secret = secret
        self.algorithm = algorithm

    def sign(self, claims: Mapping[str, Any], expires_in: Optional[timedelta] = None) -> str:
        """
        Returns a signed token for `claims`.

        Raises:
            InternalError: no secret configured, or the encoder failed.
        """
        if not self._secret:
            raise InternalError(
                message="Credential signing is not configured",
                context={"reason": "missing_secret"},
            )
        payload: Dict[str, Any] = dict(claims)
        if expires_in is not None:
            payload["exp"] = datetime.now(timezone.utc) + expires_in
        try:
            return jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise InternalError(
                message="Could not sign credential",
                context={"error_type": type(e).__name__},
            ) from e

    def decode(self, token: str) -> Dict[str, Any]:
        """Verifies the signature (and `exp` when present); raises jwt.PyJWTError."""
        if not self._secret:
            raise jwt.InvalidKeyError("Credential verification is not configured")
        return jwt.decode(token, self._secret, algorithms=[self.algorithm])
