"""Password hashing helpers."""
from passlib.context import CryptContext

# Salted PBKDF2-SHA256; hashes are self-describing, so schemes can be added later
password_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """Hash a password for storage. Each hash carries its own random salt."""
    return password_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against the stored hash."""
    try:
        return password_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # Stored value is not a recognised hash (e.g. a plaintext row).
        return False


def truncate_device_id(device_id: str) -> str:
    """Partial view of a device identifier: first 8 characters and an ellipsis."""
    return f"{device_id[:8]}..."
