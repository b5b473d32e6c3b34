"""Secret Manager backed vault."""

from .key_sanitizer import fingerprint, normalize_key
from .secret_manager import GcpSecretManagerVault

__all__ = ["GcpSecretManagerVault", "fingerprint", "normalize_key"]
