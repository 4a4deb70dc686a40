"""
Batch Orchestration
===================
Runs the ballistics engine over a fleet of vehicles:

  for each vehicle:
    modified range  ← range modifier rules
    for each shell type:
      half range    → ballistics_at_range → speed_factor
      full range    → ballistics_at_range → speed_factor

A shell with non-positive physical data, a rejected factor or (in strict
mode) an unreachable range is skipped with a warning. A vehicle with a
non-positive base range or no usable shells is dropped; an
exception while processing one vehicle is logged and counted, and the
batch carries on.
"""

import json
import logging
import math
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import InvalidShellError, UnreachableRangeError
from .factors import FactorRejected, speed_factor
from .modifiers import (
    DEFAULT_RULES, SKIP_CLASSES, RangeModifierInputs, RangeModifierRules,
    VehicleClass, modified_range_for,
)
from .shell import ShellParameters
from .solver import ballistics_at_range


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VehicleRecord:
    """One vehicle as handed over by the data-retrieval step."""
    name: str
    modifiers: RangeModifierInputs
    shells: Dict[str, ShellParameters]

    @property
    def vehicle_class(self) -> VehicleClass:
        return self.modifiers.vehicle_class

    @classmethod
    def from_dict(cls, data: dict) -> 'VehicleRecord':
        """
        Build from a plain record:

            {"name": ..., "class": "CA", "nation": ..., "baseMaxRange": 16.7,
             "hasSpotter": true, "shells": {"ap": {...}, "he": {...}}}
        """
        name = str(data['name'])
        modifiers = RangeModifierInputs(
            base_max_range=float(data['baseMaxRange']),
            vehicle_class=VehicleClass.parse(data['class']),
            has_spotter=bool(data.get('hasSpotter', False)),
            vehicle_name=name,
            nation=str(data.get('nation', '')),
        )
        shells = {
            shell_type.lower(): ShellParameters.from_dict(
                props, name=f"{name} {shell_type.upper()}",
                shell_type=shell_type.lower())
            for shell_type, props in data.get('shells', {}).items()
        }
        return cls(name=name, modifiers=modifiers, shells=shells)


@dataclass(frozen=True)
class ShellRangeResult:
    """Speed factors of one shell type at half and full modified range."""
    shell_type: str
    half_range: float          # km
    half_factor: float
    half_flight_time: float    # s, game-adjusted
    half_impact_angle: float   # degrees
    max_range: float           # km
    max_factor: float
    max_flight_time: float
    max_impact_angle: float
    shell: ShellParameters

    def to_dict(self) -> dict:
        return {
            'halfRange': self.half_range,
            'halfFactor': self.half_factor,
            'halfFlightTime': self.half_flight_time,
            'halfImpactAngle': self.half_impact_angle,
            'maxRange': self.max_range,
            'maxFactor': self.max_factor,
            'maxFlightTime': self.max_flight_time,
            'maxImpactAngle': self.max_impact_angle,
            'shellProps': self.shell.to_dict(),
        }


@dataclass
class VehicleResult:
    name: str
    vehicle_class: VehicleClass
    nation: str
    base_max_range: float
    modified_range: float
    has_spotter: bool
    shells: Dict[str, ShellRangeResult] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'class': self.vehicle_class.value,
            'nation': self.nation,
            'baseMaxRange': self.base_max_range,
            'modifiedRange': self.modified_range,
            'hasSpotter': self.has_spotter,
            'shells': {k: v.to_dict() for k, v in self.shells.items()},
        }


@dataclass
class BatchReport:
    results: Dict[str, VehicleResult] = field(default_factory=dict)
    success_count: int = 0
    error_count: int = 0
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {'ships': {name: r.to_dict() for name, r in self.results.items()}}


def evaluate_shell(shell: ShellParameters, max_range_km: float,
                   shell_type: Optional[str] = None,
                   strict: bool = False) -> Union[ShellRangeResult, FactorRejected]:
    """Ballistics and speed factors at half and full max_range_km."""
    half_range = max_range_km / 2

    half = ballistics_at_range(half_range, shell, strict=strict)
    half_factor = speed_factor(half_range, half.flight_time, half.impact_angle)
    if isinstance(half_factor, FactorRejected):
        return half_factor

    full = ballistics_at_range(max_range_km, shell, strict=strict)
    max_factor = speed_factor(max_range_km, full.flight_time, full.impact_angle)
    if isinstance(max_factor, FactorRejected):
        return max_factor

    return ShellRangeResult(
        shell_type=shell_type or shell.shell_type or '',
        half_range=half_range,
        half_factor=half_factor.value,
        half_flight_time=half.flight_time,
        half_impact_angle=half.impact_angle,
        max_range=max_range_km,
        max_factor=max_factor.value,
        max_flight_time=full.flight_time,
        max_impact_angle=full.impact_angle,
        shell=shell,
    )


def compute_vehicle(record: VehicleRecord,
                    rules: RangeModifierRules = DEFAULT_RULES,
                    strict: bool = False) -> Optional[VehicleResult]:
    """
    Evaluate every shell of one vehicle.

    Returns None when the vehicle class carries no shells, its base range
    is not positive, or none of its shells produced valid factors.
    """
    if record.vehicle_class in SKIP_CLASSES:
        logger.debug("Skipping %s: class %s", record.name,
                     record.vehicle_class.value)
        return None

    base = record.modifiers.base_max_range
    if not (base > 0) or math.isinf(base):
        logger.warning("[SKIP] %s: invalid base max range %r",
                       record.name, base)
        return None

    max_range_km = modified_range_for(record.modifiers, rules)
    result = VehicleResult(
        name=record.name,
        vehicle_class=record.vehicle_class,
        nation=record.modifiers.nation,
        base_max_range=record.modifiers.base_max_range,
        modified_range=max_range_km,
        has_spotter=record.modifiers.has_spotter,
    )

    for shell_type, shell in record.shells.items():
        try:
            shell.validate()
        except InvalidShellError as e:
            logger.warning("Invalid shell data for %s (%s): %s",
                           record.name, shell_type, e)
            continue
        try:
            outcome = evaluate_shell(shell, max_range_km, shell_type, strict)
        except UnreachableRangeError as e:
            logger.warning("Unreachable range for %s (%s): %s",
                           record.name, shell_type, e)
            continue
        if isinstance(outcome, FactorRejected):
            logger.warning("Invalid factor calculated for %s (%s): %s",
                           record.name, shell_type, outcome.reason)
            continue
        result.shells[shell_type] = outcome

    if not result.shells:
        logger.warning("[SKIP] %s: no valid shell configs", record.name)
        return None

    logger.info("[OK] %s: %s", record.name, ', '.join(result.shells))
    return result


def _compute_guarded(record: VehicleRecord, rules: RangeModifierRules,
                     strict: bool) -> Tuple[str, Optional[VehicleResult], Optional[str]]:
    try:
        return record.name, compute_vehicle(record, rules, strict), None
    except Exception as e:
        return record.name, None, f"{type(e).__name__}: {e}"


def compute_all(records: Iterable[VehicleRecord],
                rules: RangeModifierRules = DEFAULT_RULES,
                strict: bool = False, workers: int = 1) -> BatchReport:
    """
    Evaluate a fleet. With workers > 1 vehicles are spread over a process
    pool; the report is identical to the sequential run.
    """
    records = list(records)
    job = partial(_compute_guarded, rules=rules, strict=strict)

    if workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(job, records))
    else:
        outcomes = [job(r) for r in records]

    report = BatchReport()
    for name, result, error in outcomes:
        if error is not None:
            report.error_count += 1
            logger.error("[ERROR] %s: %s", name, error)
        elif result is None:
            report.skipped.append(name)
        else:
            report.results[name] = result
            report.success_count += 1

    logger.info("Calculated ballistics for %d ships (%d errors, %d skipped)",
                report.success_count, report.error_count, len(report.skipped))
    return report


def load_vehicles(path: str) -> List[VehicleRecord]:
    """
    Read a JSON list of vehicle records (see VehicleRecord.from_dict).

    Records missing a required field, or with an unknown class, are logged
    and left out.
    """
    with open(path, encoding='utf-8') as f:
        data = json.load(f)

    records = []
    for item in data:
        try:
            records.append(VehicleRecord.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            name = item.get('name', '<unnamed>') if isinstance(item, dict) \
                else '<unnamed>'
            logger.warning("[SKIP] %s: malformed record (%s: %s)",
                           name, type(e).__name__, e)
    return records


def write_summary(report: BatchReport, path: str) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(report.to_dict(), f, indent=2)
