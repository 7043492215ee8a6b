from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# Configure Argon2id with secure parameters
# time_cost=3, memory_cost=65536 (64MB), parallelism=4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """Hash a share password using Argon2id. The plaintext is never stored."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a share password against its Argon2id hash.

    A mismatch and an unparseable stored hash both count as "no match".
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False
