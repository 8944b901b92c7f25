import secrets
import string
import time

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .config import BCRYPT_ROUNDS, SECRET_KEY, TOKEN_MAX_AGE

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_identification_number() -> str:
    """Human-readable claim number: ``C-<epoch millis>-<6 uppercase alphanumerics>``.

    Unlikely to collide but not guaranteed unique; the unique column on
    ``Claim.identification_number`` has the final word.
    """
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"C-{millis}-{suffix}"

def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(SECRET_KEY, salt="session")

def make_token(payload: dict) -> str:
    return _serializer().dumps(payload)

def read_token(token: str, max_age: int | None = None) -> dict | None:
    try:
        return _serializer().loads(token, max_age=max_age or TOKEN_MAX_AGE)
    except (SignatureExpired, BadSignature):
        return None

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False

def placeholder_password() -> str:
    return secrets.token_urlsafe(32)
