"""
Unit Tests for Range Modifiers, Speed Factors and the Fleet Pipeline
====================================================================
Run: python -m pytest tests/ -v
"""

import sys
import os
import json
import logging
import math
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from shell_ballistics import pipeline
from shell_ballistics.errors import UnknownVehicleClassError
from shell_ballistics.factors import (
    FactorRejected, SpeedFactor, converted_range, speed_factor,
)
from shell_ballistics.modifiers import (
    DEFAULT_RULES, RangeModifierInputs, RangeModifierRules, VehicleClass,
    modified_range, modified_range_for,
)
from shell_ballistics.pipeline import (
    VehicleRecord, compute_all, compute_vehicle, evaluate_shell,
    load_vehicles, write_summary,
)


DD_RECORD = {
    'name': 'Fletcher', 'class': 'DD', 'nation': 'U.S.A.',
    'baseMaxRange': 5.0, 'hasSpotter': False,
    'shells': {
        'he': {'muzzleVelocity': 792.0, 'caliber': 127.0,
               'mass': 24.5, 'dragCoefficient': 0.32},
    },
}

CA_RECORD = {
    'name': 'Hipper', 'class': 'CA', 'nation': 'Germany',
    'baseMaxRange': 12.0, 'hasSpotter': True,
    'shells': {
        'ap': {'muzzleVelocity': 925.0, 'caliber': 203.0,
               'mass': 122.0, 'dragCoefficient': 0.3},
    },
}

CV_RECORD = {
    'name': 'Lexington', 'class': 'CV', 'nation': 'U.S.A.',
    'baseMaxRange': 0.0, 'shells': {},
}


class TestRangeModifiers:
    """Verify rule precedence and the per-vehicle overrides."""

    def test_plotting_room_for_designated_battleship(self):
        assert modified_range(20.0, 'BB', False, 'Iowa', 'U.S.A.') == \
            pytest.approx(20.0 * 1.16)

    def test_plotting_room_stacks_with_spotter(self):
        assert modified_range(20.0, 'BB', True, 'Iowa', 'U.S.A.') == \
            pytest.approx(20.0 * 1.16 * 1.2)

    def test_other_nation_battleship_only_spotter(self):
        assert modified_range(20.0, VehicleClass.BB, True, 'Yamato', 'Japan') == \
            pytest.approx(24.0)

    def test_destroyer_ignores_spotter(self):
        assert modified_range(10.0, 'DD', True, 'Gearing', 'U.S.A.') == \
            pytest.approx(12.0)

    def test_cruiser_without_spotter_unchanged(self):
        assert modified_range(15.0, 'CA', False, 'Hipper', 'Germany') == 15.0

    @pytest.mark.parametrize('cls', ['CA', 'CB', 'CL'])
    def test_cruiser_family_with_spotter(self, cls):
        assert modified_range(15.0, cls, True, 'Any', 'Germany') == \
            pytest.approx(18.0)

    def test_carrier_unchanged(self):
        assert modified_range(15.0, 'CV', True, 'Any', 'U.S.A.') == 15.0

    def test_unique_upgrade_on_top(self):
        assert modified_range(16.8, 'CL', True, 'Henri IV', 'France') == \
            pytest.approx(16.8 * 1.2 * 1.05)
        assert modified_range(16.8, 'CL', False, 'Henri IV', 'France') == \
            pytest.approx(16.8 * 1.05)

    def test_unique_upgrade_on_destroyer_branch(self):
        rules = RangeModifierRules(unique_upgrades=(('Gearing', 1.1),))
        assert modified_range(10.0, 'DD', True, 'Gearing', 'U.S.A.', rules) == \
            pytest.approx(10.0 * 1.2 * 1.1)

    def test_rules_are_swappable(self):
        rules = RangeModifierRules(spotter_multiplier=1.5, unique_upgrades=())
        assert modified_range(10.0, 'CA', True, 'Henri IV', 'France', rules) == \
            pytest.approx(15.0)

    def test_default_rules_immutable(self):
        with pytest.raises(Exception):
            DEFAULT_RULES.skill_multiplier = 2.0

    def test_modified_range_for_inputs(self):
        inputs = RangeModifierInputs(base_max_range=10.0,
                                     vehicle_class=VehicleClass.DD,
                                     has_spotter=True, vehicle_name='Gearing',
                                     nation='U.S.A.')
        assert modified_range_for(inputs) == pytest.approx(12.0)

    def test_parse_class(self):
        assert VehicleClass.parse(' dd ') is VehicleClass.DD
        with pytest.raises(UnknownVehicleClassError):
            VehicleClass.parse('XX')
        with pytest.raises(ValueError):
            VehicleClass.parse('XX')


class TestSpeedFactor:
    """Verify the factor formula and its rejection policy."""

    def test_formula(self):
        outcome = speed_factor(15.0, 10.0, 10.0)
        expected = 15000.0 / (10.0 * math.cos(math.radians(10.0))) / 32
        assert isinstance(outcome, SpeedFactor)
        assert outcome.value == pytest.approx(expected, abs=5e-4)
        assert outcome.value == round(outcome.value, 3)

    def test_rejects_steep_impact(self):
        assert isinstance(speed_factor(10.0, 10.0, 85.0001), FactorRejected)
        assert isinstance(speed_factor(10.0, 10.0, 85.0), FactorRejected)

    def test_accepts_just_below_limit(self):
        assert isinstance(speed_factor(10.0, 10.0, 84.9), SpeedFactor)

    @pytest.mark.parametrize('range_km, time_s', [(0.0, 10.0), (-1.0, 10.0),
                                                  (10.0, 0.0), (10.0, -2.0)])
    def test_rejects_non_positive_inputs(self, range_km, time_s):
        outcome = speed_factor(range_km, time_s, 10.0)
        assert isinstance(outcome, FactorRejected)
        assert outcome.reason

    def test_rejects_nan_angle(self):
        assert isinstance(speed_factor(10.0, 10.0, float('nan')), FactorRejected)

    def test_rejection_is_not_zero(self):
        assert speed_factor(0.0, 10.0, 10.0) != SpeedFactor(0.0)


class TestConvertedRange:

    def test_value(self):
        assert converted_range(15.0) == 495
        assert isinstance(converted_range(15.0), int)

    @pytest.mark.parametrize('range_km', [16.0, 18.0, 22.4, 30.0])
    def test_round_trip(self, range_km):
        back = converted_range(range_km) * 30.3 / 1000
        assert abs(back - range_km) / range_km < 0.001


class TestPipeline:
    """Verify orchestration, skipping and reporting."""

    def test_record_from_dict(self):
        record = VehicleRecord.from_dict(CA_RECORD)
        assert record.vehicle_class is VehicleClass.CA
        assert record.modifiers.has_spotter
        assert record.shells['ap'].shell_type == 'ap'
        assert record.shells['ap'].name == 'Hipper AP'

    def test_evaluate_shell(self):
        shell = VehicleRecord.from_dict(DD_RECORD).shells['he']
        result = evaluate_shell(shell, 6.0)
        assert result.shell_type == 'he'
        assert result.half_range == 3.0
        assert result.max_range == 6.0
        assert result.half_factor > 0 and result.max_factor > 0
        assert result.max_flight_time > result.half_flight_time
        assert result.max_impact_angle > result.half_impact_angle

    def test_compute_vehicle(self):
        result = compute_vehicle(VehicleRecord.from_dict(CA_RECORD))
        assert result.modified_range == pytest.approx(14.4)
        assert list(result.shells) == ['ap']
        data = result.to_dict()
        assert data['class'] == 'CA'
        assert data['shells']['ap']['maxRange'] == pytest.approx(14.4)
        assert data['shells']['ap']['shellProps']['caliber'] == 203.0

    def test_carrier_skipped(self):
        assert compute_vehicle(VehicleRecord.from_dict(CV_RECORD)) is None

    def test_rejected_factor_skips_shell(self, monkeypatch, caplog):
        monkeypatch.setattr(pipeline, 'speed_factor',
                            lambda *a: FactorRejected('forced'))
        with caplog.at_level(logging.WARNING, logger='shell_ballistics.pipeline'):
            assert compute_vehicle(VehicleRecord.from_dict(DD_RECORD)) is None
        assert 'Invalid factor' in caplog.text
        assert 'no valid shell configs' in caplog.text

    def test_strict_unreachable_skips_shell(self, caplog):
        record = VehicleRecord.from_dict(dict(DD_RECORD, baseMaxRange=200.0))
        with caplog.at_level(logging.WARNING, logger='shell_ballistics.pipeline'):
            assert compute_vehicle(record, strict=True) is None
        assert 'Unreachable range' in caplog.text

    def test_zero_mass_shell_skipped(self, caplog):
        bad_shell = dict(DD_RECORD['shells']['he'], mass=0.0)
        record = VehicleRecord.from_dict(dict(DD_RECORD, shells={'he': bad_shell}))
        with caplog.at_level(logging.WARNING, logger='shell_ballistics.pipeline'):
            assert compute_vehicle(record) is None
        assert 'Invalid shell data for Fletcher (he)' in caplog.text
        assert 'mass' in caplog.text
        assert 'no valid shell configs' in caplog.text

    def test_bad_shell_does_not_drop_good_one(self, caplog):
        shells = dict(CA_RECORD['shells'],
                      he={'muzzleVelocity': -1.0, 'caliber': 203.0,
                          'mass': 118.0, 'dragCoefficient': 0.3})
        record = VehicleRecord.from_dict(dict(CA_RECORD, shells=shells))
        with caplog.at_level(logging.WARNING, logger='shell_ballistics.pipeline'):
            result = compute_vehicle(record)
        assert list(result.shells) == ['ap']
        assert 'muzzle_velocity' in caplog.text

    @pytest.mark.parametrize('base', [0.0, -3.0])
    def test_non_positive_base_range_skipped(self, base, caplog):
        record = VehicleRecord.from_dict(dict(CA_RECORD, baseMaxRange=base))
        with caplog.at_level(logging.WARNING, logger='shell_ballistics.pipeline'):
            assert compute_vehicle(record) is None
        assert 'invalid base max range' in caplog.text

    def test_compute_all_counts(self, monkeypatch):
        real = pipeline.modified_range_for

        def broken(inputs, rules):
            if inputs.vehicle_name == 'Broken':
                raise RuntimeError('bad data')
            return real(inputs, rules)

        monkeypatch.setattr(pipeline, 'modified_range_for', broken)
        records = [VehicleRecord.from_dict(d) for d in
                   (DD_RECORD, CV_RECORD, dict(DD_RECORD, name='Broken'))]
        report = compute_all(records)
        assert list(report.results) == ['Fletcher']
        assert report.success_count == 1
        assert report.error_count == 1
        assert report.skipped == ['Lexington']

    def test_parallel_matches_sequential(self):
        records = [VehicleRecord.from_dict(d) for d in (DD_RECORD, CV_RECORD)]
        sequential = compute_all(records)
        parallel = compute_all(records, workers=2)
        assert parallel.to_dict() == sequential.to_dict()

    def test_load_and_summary(self, tmp_path):
        src = tmp_path / 'ships.json'
        src.write_text(json.dumps([DD_RECORD, CV_RECORD]), encoding='utf-8')
        records = load_vehicles(str(src))
        assert [r.name for r in records] == ['Fletcher', 'Lexington']

        out = tmp_path / 'summary.json'
        write_summary(compute_all(records), str(out))
        summary = json.loads(out.read_text(encoding='utf-8'))
        assert list(summary['ships']) == ['Fletcher']
        assert summary['ships']['Fletcher']['modifiedRange'] == pytest.approx(6.0)

    def test_load_skips_malformed_records(self, tmp_path, caplog):
        no_class = {k: v for k, v in DD_RECORD.items() if k != 'class'}
        bad_class = dict(DD_RECORD, name='Odd', **{'class': 'XX'})
        src = tmp_path / 'ships.json'
        src.write_text(json.dumps([dict(no_class, name='Nameless'), bad_class,
                                   CA_RECORD]), encoding='utf-8')
        with caplog.at_level(logging.WARNING, logger='shell_ballistics.pipeline'):
            records = load_vehicles(str(src))
        assert [r.name for r in records] == ['Hipper']
        assert '[SKIP] Nameless' in caplog.text
        assert '[SKIP] Odd' in caplog.text


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
