import bcrypt

from iam_core.app.services.credential_verifier import ICredentialVerifier


class BcryptCredentialVerifier(ICredentialVerifier):
    """bcrypt implementation of the credential verifier (cost factor 12)"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(rounds))

    def verify(self, plaintext: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(plaintext.encode(), password_hash.encode())
        except ValueError:
            # Malformed stored hash or over-long input
            return False

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(plaintext.encode(), bcrypt.gensalt(self.rounds)).decode()

    def burn(self, plaintext: str) -> None:
        # Keeps "unknown email" as slow as "wrong password"
        self.verify(plaintext, self._dummy_hash.decode())
