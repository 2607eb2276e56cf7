from abc import ABC, abstractmethod


class ICredentialVerifier(ABC):
    """One-way password hashing capability"""

    @abstractmethod
    def verify(self, plaintext: str, password_hash: str) -> bool:
        """Check plaintext against a stored hash"""
        pass

    @abstractmethod
    def hash(self, plaintext: str) -> str:
        """Produce a new hash for storage"""
        pass

    @abstractmethod
    def burn(self, plaintext: str) -> None:
        """Spend the cost of one verify without a stored hash (user not found)"""
        pass
