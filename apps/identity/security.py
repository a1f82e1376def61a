"""
Password hashing primitive.

One-way hash with a random salt per call, using the hasher configured in
PASSWORD_HASHERS. Callers never see or compare hashes directly.
"""
from django.contrib.auth.hashers import check_password, make_password


def hash_password(raw_password: str) -> str:
    if not raw_password:
        raise ValueError("Password must not be empty")
    return make_password(raw_password)


def verify_password(raw_password: str, hashed: str) -> bool:
    if not raw_password or not hashed:
        return False
    return check_password(raw_password, hashed)
