# testdrive/security.py
"""Password hashing, bearer tokens and Firebase ID-token verification."""
from datetime import datetime, timedelta, timezone

import jwt
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from passlib.context import CryptContext

from .errors import Unauthorized
from .utils import get_logger, retry

logger = get_logger("security")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash) -> bool:
    if not password or not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


class TokenService:
    """Issues and verifies the application's signed bearer tokens."""

    def __init__(self, secret, algorithm="HS256", expires_days=30):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_in = timedelta(days=expires_days)

    def issue(self, user_id, role) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "id": user_id,
            "role": getattr(role, "value", role),
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token) -> dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Not authorized, token expired")
        except jwt.InvalidTokenError as e:
            logger.warning("Token verification failed: %s", e)
            raise Unauthorized("Not authorized, token invalid")


class FirebaseVerifier:
    """Verifies Firebase ID tokens against Google's public certificates.

    Returns the decoded claims (``uid``/``sub``, ``email``, ``name``) or raises
    ``Unauthorized``.
    """

    def __init__(self, project_id):
        self.project_id = project_id
        self._request = google_requests.Request()

    @retry(google_exceptions.TransportError, tries=3, delay=1, backoff=2, logger=logger)
    def _verify(self, token):
        return id_token.verify_firebase_token(token, self._request, audience=self.project_id)

    def verify(self, token) -> dict:
        if not self.project_id:
            logger.error("FIREBASE_PROJECT_ID not configured, rejecting federated sign-in")
            raise Unauthorized("Firebase authentication failed")
        try:
            claims = self._verify(token)
        except google_exceptions.TransportError as e:
            logger.error("Could not reach Google certificate endpoint: %s", e)
            raise Unauthorized("Firebase authentication failed")
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.warning("Firebase token rejected: %s", e)
            if "expired" in str(e).lower():
                raise Unauthorized("Firebase token expired")
            raise Unauthorized("Invalid Firebase token")
        if not claims:
            raise Unauthorized("Invalid Firebase token")
        claims.setdefault("uid", claims.get("user_id") or claims.get("sub"))
        return claims
