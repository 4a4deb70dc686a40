"""
Firing Range Modifiers
======================
Bonuses applied to a vehicle's base maximum firing range before the
ballistics are evaluated. The rules are data (RangeModifierRules) so that
alternative rule sets can be passed in and tested on their own.

Precedence:
  1. Designated nation + designated battleship class → plotting-room bonus
  2. Destroyer class → skill bonus on the base range (no spotter bonus)
  3. Otherwise cruiser/battleship family with a spotter plane → spotter bonus
  4. Per-vehicle unique upgrade, multiplied on top of whichever applied
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .errors import UnknownVehicleClassError


class VehicleClass(Enum):
    BB = 'BB'   # battleship
    CA = 'CA'   # heavy cruiser
    CB = 'CB'   # large cruiser
    CL = 'CL'   # light cruiser
    DD = 'DD'   # destroyer
    SS = 'SS'   # submarine
    CV = 'CV'   # aircraft carrier

    @classmethod
    def parse(cls, value) -> 'VehicleClass':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise UnknownVehicleClassError(
                f"Unknown vehicle class '{value}'. "
                f"Available: {[c.value for c in cls]}"
            ) from None


# Classes that carry no main-battery shells
SKIP_CLASSES = frozenset({VehicleClass.SS, VehicleClass.CV})


@dataclass(frozen=True)
class RangeModifierRules:
    """Constant table of range multipliers."""
    plotting_room_nation: str = 'U.S.A.'
    plotting_room_class: VehicleClass = VehicleClass.BB
    plotting_room_multiplier: float = 1.16
    skill_class: VehicleClass = VehicleClass.DD
    skill_multiplier: float = 1.2
    spotter_classes: FrozenSet[VehicleClass] = frozenset({
        VehicleClass.BB, VehicleClass.CA, VehicleClass.CB, VehicleClass.CL,
    })
    spotter_multiplier: float = 1.2
    # (vehicle name, multiplier) pairs
    unique_upgrades: Tuple[Tuple[str, float], ...] = (
        ('Henri IV', 1.05),
    )

    def unique_multiplier(self, vehicle_name: str) -> Optional[float]:
        for name, multiplier in self.unique_upgrades:
            if name == vehicle_name:
                return multiplier
        return None


DEFAULT_RULES = RangeModifierRules()


@dataclass(frozen=True)
class RangeModifierInputs:
    """Per-vehicle inputs to the range modifier rules."""
    base_max_range: float          # km
    vehicle_class: VehicleClass
    has_spotter: bool = False
    vehicle_name: str = ''
    nation: str = ''


def modified_range(base_max_range: float, vehicle_class, has_spotter: bool,
                   vehicle_name: str, nation: str,
                   rules: RangeModifierRules = DEFAULT_RULES) -> float:
    """Maximum firing range (km) after all applicable bonuses."""
    vehicle_class = VehicleClass.parse(vehicle_class)
    max_range = base_max_range

    if nation == rules.plotting_room_nation and \
            vehicle_class == rules.plotting_room_class:
        max_range = base_max_range * rules.plotting_room_multiplier

    if vehicle_class == rules.skill_class:
        max_range = base_max_range * rules.skill_multiplier
    elif vehicle_class in rules.spotter_classes and has_spotter:
        max_range *= rules.spotter_multiplier

    unique = rules.unique_multiplier(vehicle_name)
    if unique:
        max_range *= unique

    return max_range


def modified_range_for(inputs: RangeModifierInputs,
                       rules: RangeModifierRules = DEFAULT_RULES) -> float:
    return modified_range(inputs.base_max_range, inputs.vehicle_class,
                          inputs.has_spotter, inputs.vehicle_name,
                          inputs.nation, rules)
