"""The set of addresses and storage slots warmed during a transaction."""

from __future__ import annotations

from .types import Address, Hash


class AccessList:
    """Addresses, each with an optional set of accessed storage slots.

    An address maps to -1 when it has no slots, otherwise to the index of its
    slot set. Additions and deletions must be undone in reverse order.
    """

    def __init__(self) -> None:
        self.addresses: dict[Address, int] = {}
        self.slots: list[set[Hash]] = []

    def contains_address(self, address: Address) -> bool:
        return address in self.addresses

    def contains(self, address: Address, slot: Hash) -> tuple[bool, bool]:
        """Report whether the address and the slot are present."""
        index = self.addresses.get(address)
        if index is None:
            return False, False
        if index == -1:
            return True, False
        return True, slot in self.slots[index]

    def copy(self) -> "AccessList":
        duplicate = AccessList()
        duplicate.addresses = dict(self.addresses)
        duplicate.slots = [set(slot_set) for slot_set in self.slots]
        return duplicate

    def add_address(self, address: Address) -> bool:
        """Add an address; return True if it was not present."""
        if address in self.addresses:
            return False
        self.addresses[address] = -1
        return True

    def add_slot(self, address: Address, slot: Hash) -> tuple[bool, bool]:
        """Add an (address, slot) pair; return whether the address and the slot were new."""
        index = self.addresses.get(address)
        if index is None or index == -1:
            self.addresses[address] = len(self.slots)
            self.slots.append({slot})
            return index is None, True
        slot_set = self.slots[index]
        if slot not in slot_set:
            slot_set.add(slot)
            return False, True
        return False, False

    def delete_slot(self, address: Address, slot: Hash) -> None:
        """Undo the most recent slot addition for the address."""
        index = self.addresses.get(address)
        if index is None:
            raise LookupError("reverting slot change, address not present in list")
        if index == -1:
            raise LookupError("reverting slot change, address has no slots")
        slot_set = self.slots[index]
        slot_set.discard(slot)
        if not slot_set:
            del self.slots[index:]
            self.addresses[address] = -1

    def delete_address(self, address: Address) -> None:
        """Undo an address addition."""
        self.addresses.pop(address, None)