import hashlib
import logging

# Create the library logger
logger = logging.getLogger("pagewise")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_token(token: str | None) -> str:
    """
    Redacts a page token for logging.
    Hashes the token so consecutive pages can be correlated without
    leaking the server's cursor.
    """
    if not token:
        return "<empty>"
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:8]
