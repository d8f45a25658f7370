# core/hashing.py

"""
Password hashing for admin portal accounts (admin_users / sub_admin_users).
Marketplace users authenticate through Supabase Auth and never hit this.
"""

import bcrypt


def hash_password(plain_password: str) -> str:
    """bcrypt hash (salt + cost embedded in the returned string)."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Not a bcrypt hash
        return False
