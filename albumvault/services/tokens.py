import secrets


def generate_share_token(nbytes: int = 32) -> str:
    """Opaque public-link token: ``nbytes`` random bytes as lower-case hex."""
    return secrets.token_hex(nbytes)
