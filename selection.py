from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from catalog import Catalog
from config import CFG
from models import ShipConfiguration

NONE_ID = "none"


@dataclass
class Selection:
    """Current ship, tier and equipment choices.

    Auxiliary slots share a tier whenever both hold the same equipment.
    """

    ship_id: str = field(default_factory=lambda: CFG.DEFAULT_SHIP)
    ship_tier: int = field(default_factory=lambda: CFG.DEFAULT_SHIP_TIER)
    reactor_id: str = NONE_ID
    reactor_tier: int = 1
    aux1_id: str = NONE_ID
    aux1_tier: int = 1
    aux2_id: str = NONE_ID
    aux2_tier: int = 1

    def ship_config(self, catalog: Catalog) -> Optional[ShipConfiguration]:
        return catalog.resolve_ship(self.ship_id, self.ship_tier)

    def set_ship(self, ship_id: str, catalog: Catalog) -> None:
        self.ship_id = ship_id
        tiers = catalog.ship_tiers(ship_id)
        if tiers and self.ship_tier not in tiers:
            self.ship_tier = tiers[0]

    def set_ship_tier(self, tier: int) -> None:
        self.ship_tier = int(tier)

    def set_reactor(self, reactor_id: str) -> None:
        self.reactor_id = reactor_id or NONE_ID

    def set_reactor_tier(self, tier: int) -> None:
        self.reactor_tier = int(tier)

    def set_aux1(self, aux_id: str) -> None:
        self.aux1_id = aux_id or NONE_ID
        if self.aux2_id == self.aux1_id:
            self.aux2_tier = self.aux1_tier

    def set_aux1_tier(self, tier: int) -> None:
        self.aux1_tier = int(tier)
        if self.aux1_id != NONE_ID and self.aux1_id == self.aux2_id:
            self.aux2_tier = self.aux1_tier

    def set_aux2(self, aux_id: str) -> None:
        self.aux2_id = aux_id or NONE_ID
        if self.aux1_id == self.aux2_id:
            self.aux1_tier = self.aux2_tier

    def set_aux2_tier(self, tier: int) -> None:
        self.aux2_tier = int(tier)
        if self.aux2_id != NONE_ID and self.aux1_id == self.aux2_id:
            self.aux1_tier = self.aux2_tier

    def as_dict(self) -> dict:
        return {
            "ship": self.ship_id,
            "ship_tier": self.ship_tier,
            "reactor": self.reactor_id,
            "reactor_tier": self.reactor_tier,
            "aux1": self.aux1_id,
            "aux1_tier": self.aux1_tier,
            "aux2": self.aux2_id,
            "aux2_tier": self.aux2_tier,
        }


__all__ = ["Selection", "NONE_ID"]
