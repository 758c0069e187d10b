"""Which account is active, persisted under `session`."""

import logging
from dataclasses import asdict, dataclass

from src.tr_common.errors import InvalidAddressError, WalletNotConnectedError
from src.tr_persistence.domain import keys
from src.tr_persistence.layer import PersistenceLayer

logger = logging.getLogger(__name__)


@dataclass
class Session:
    connected: bool = False
    address: str | None = None
    demo_mode: bool = False


class SessionStore:
    def __init__(self, store: PersistenceLayer) -> None:
        self._store = store
        self.session = Session()

    async def load(self) -> None:
        raw = await self._store.load(keys.SESSION)
        if not isinstance(raw, dict):
            return
        address = raw.get("address")
        if raw.get("connected") is True and isinstance(address, str) and address:
            self.session = Session(
                connected=True, address=address, demo_mode=raw.get("demo_mode") is True
            )

    def require_address(self) -> str:
        if not self.session.connected or not self.session.address:
            raise WalletNotConnectedError()
        return self.session.address

    async def connect(self, address: str, demo_mode: bool = False) -> Session:
        address = address.strip()
        if not address or not address.isalnum():
            raise InvalidAddressError(address)
        self.session = Session(connected=True, address=address, demo_mode=demo_mode)
        await self._store.save(keys.SESSION, asdict(self.session))
        logger.info("Session connected: %s (demo=%s)", address, demo_mode)
        return self.session

    async def disconnect(self) -> None:
        self.session = Session()
        await self._store.delete(keys.SESSION)
