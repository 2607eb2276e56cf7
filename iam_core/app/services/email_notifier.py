from abc import ABC, abstractmethod


class IEmailNotifier(ABC):
    """Outbound email collaborator. Delivery failures raise EmailDeliveryError."""

    @abstractmethod
    async def send(self, to: str, subject: str, body: str) -> None:
        pass


class EmailDeliveryError(Exception):
    pass
