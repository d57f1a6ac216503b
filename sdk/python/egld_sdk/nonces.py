"""
Per-sender nonce reservation
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class NonceReservation:
    """
    Nonce state of one sender.

    floor is the lowest nonce a re-sync may hand out: one past every nonce
    that was confirmed or is still in flight. The network nonce lags behind
    transactions waiting in the mempool, so it alone can repeat a used nonce.
    """
    next_nonce: int
    floor: int = 0
    in_flight: Set[int] = field(default_factory=set)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def raise_floor(self):
        if self.in_flight:
            self.floor = max(self.floor, max(self.in_flight) + 1)


class NonceCoordinator:
    """
    Hands out transaction nonces per sending address.

    Reservations for the same address are serialized; different addresses
    only share the short-lived lock that guards the address map. A nonce is
    never handed out twice while it is in flight or after it was confirmed,
    including across re-syncs from the network.

    Example:
        >>> coordinator = NonceCoordinator(lambda addr: client.get_account(addr).nonce)
        >>> nonce = coordinator.reserve(sender)
    """

    def __init__(self, nonce_fetcher: Callable[[str], int]):
        """
        Args:
            nonce_fetcher: Returns the network nonce of an address; called on
                the first reservation of an address and after abandon() or
                reset()
        """
        self._nonce_fetcher = nonce_fetcher
        self._reservations: Dict[str, NonceReservation] = {}
        self._map_lock = threading.Lock()

    def _entry(self, address: str) -> NonceReservation:
        with self._map_lock:
            entry = self._reservations.get(address)
            if entry is None:
                # next_nonce < 0 marks an entry that still needs syncing
                entry = NonceReservation(next_nonce=-1)
                self._reservations[address] = entry
            return entry

    def reserve(self, address: str) -> int:
        """
        Reserve the next nonce of an address.

        Args:
            address: Sender address (bech32)

        Returns:
            Nonce no other reservation of this address has received
        """
        while True:
            entry = self._entry(address)
            with entry.lock:
                with self._map_lock:
                    stale = self._reservations.get(address) is not entry
                if stale:
                    # reset() dropped this entry while we waited
                    continue

                if entry.next_nonce < 0:
                    network_nonce = self._nonce_fetcher(address)
                    entry.next_nonce = max(network_nonce, entry.floor)
                    logger.debug("synced nonce of %s: network=%d floor=%d next=%d",
                                 address, network_nonce, entry.floor, entry.next_nonce)

                nonce = entry.next_nonce
                entry.next_nonce += 1
                entry.in_flight.add(nonce)
                return nonce

    def confirm(self, address: str, nonce: int):
        """Mark a reserved nonce as accepted by the network"""
        entry = self._existing(address)
        if entry is None:
            return
        with entry.lock:
            entry.in_flight.discard(nonce)
            entry.floor = max(entry.floor, nonce + 1)

    def release(self, address: str, nonce: int) -> bool:
        """
        Give back a reserved nonce that was never broadcast.

        Only the most recently issued nonce can be handed out again; earlier
        ones would leave a gap, so they are only dropped from in-flight.

        Returns:
            True if the nonce will be reissued by the next reserve()
        """
        entry = self._existing(address)
        if entry is None:
            return False
        with entry.lock:
            entry.in_flight.discard(nonce)
            if entry.next_nonce >= 0 and nonce == entry.next_nonce - 1:
                entry.next_nonce = nonce
                return True
            return False

    def abandon(self, address: str, nonce: int):
        """
        Drop a reservation whose broadcast failed and re-sync the address.

        The next reserve() takes the network nonce, but never less than one
        past the confirmed and in-flight nonces. When nothing later was
        issued, the abandoned nonce is handed out again.
        """
        entry = self._existing(address)
        if entry is None:
            return
        with entry.lock:
            entry.in_flight.discard(nonce)
            entry.raise_floor()
            entry.next_nonce = -1

    def reset(self, address: str):
        """
        Forget everything about an address.

        The next reservation takes the network nonce as is; use it only when
        no transaction of the address can still be pending.
        """
        with self._map_lock:
            self._reservations.pop(address, None)

    def in_flight(self, address: str) -> Set[int]:
        entry = self._existing(address)
        if entry is None:
            return set()
        with entry.lock:
            return set(entry.in_flight)

    def _existing(self, address: str) -> Optional[NonceReservation]:
        with self._map_lock:
            return self._reservations.get(address)
