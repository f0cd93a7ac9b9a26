"""SSH passwords in the OS keyring, one entry per user@host.

Key-based login never touches the keyring. A missing or locked keyring
backend is logged and treated as "no saved password".
"""

import logging

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)

SERVICE_ID = "tsi-provision"


def account(user: str, host: str) -> str:
    return f"{user}@{host}"


def lookup_password(user: str, host: str) -> str | None:
    """Saved password for user@host, or None."""
    try:
        return keyring.get_password(SERVICE_ID, account(user, host))
    except KeyringError as e:
        logger.warning("Keyring unavailable, no saved password for %s: %s", account(user, host), e)
        return None


def store_password(user: str, host: str, password: str) -> bool:
    """Save the password for later runs. False when no backend took it."""
    try:
        keyring.set_password(SERVICE_ID, account(user, host), password)
    except KeyringError as e:
        logger.warning("Password for %s not saved: %s", account(user, host), e)
        return False
    return True


def forget_password(user: str, host: str) -> bool:
    """Drop a saved password. False when there was none to drop."""
    try:
        keyring.delete_password(SERVICE_ID, account(user, host))
    except KeyringError:
        return False
    return True
