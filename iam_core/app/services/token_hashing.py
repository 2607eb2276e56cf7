import hashlib
import secrets


def generate_secret(num_bytes: int = 32) -> str:
    """URL-safe random secret for tickets, refresh tokens and reset tokens"""
    return secrets.token_urlsafe(num_bytes)


def hash_token(plaintext: str) -> str:
    """SHA-256 hex digest used as the lookup key for stored secrets"""
    return hashlib.sha256(plaintext.encode()).hexdigest()
