"""
Bearer token derivation.

The backend authenticates callers by a token derived from the identity's
private key: the key's characters as single-byte Latin-1, base64 encoded.
"""

import base64


def derive_bearer_token(private_key: str) -> str:
    """
    Derive the bearer token for ``private_key``.

    Characters outside Latin-1 are replaced with ``?``.

    Args:
        private_key: Private key string from secure storage

    Returns:
        Base64 token
    """
    raw = private_key.encode("latin-1", errors="replace")
    return base64.b64encode(raw).decode("ascii")


def authorization_header(private_key: str) -> str:
    return f"Bearer {derive_bearer_token(private_key)}"
