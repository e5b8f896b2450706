import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from estimator.pricing import (
    EstimateItem,
    EstimateZone,
    PricingSnapshot,
    add_zone,
    apply_margin,
    remove_zone,
    update_item,
    update_zone,
)
from estimator.pricing.items import find_item
from estimator.pricing.zones import group_by_zone

SNAP = PricingSnapshot(base_labor_cost=20, labor_burden_percent=25, overhead_per_man_hour=10)


def sample_items():
    return [
        EstimateItem(id='l1', type='Labor', quantity=10, cost=1, rate=45, total=450),
        EstimateItem(id='m1', type='Material', quantity=4, cost=40, rate=55, total=220,
                     markup_percent=37.5),
        EstimateItem(id='f1', type='Fee', quantity=1, cost=0, rate=25, total=25),
    ]


def test_apply_margin_reprices_every_item():
    out = {i.id: i for i in apply_margin(sample_items(), 30, SNAP)}
    assert out['l1'].rate == pytest.approx(35 / 0.7)
    assert out['l1'].total == pytest.approx(500)
    assert out['l1'].cost == 1
    assert out['m1'].rate == pytest.approx(40 / 0.7)
    assert out['m1'].markup_percent == pytest.approx((40 / 0.7 - 40) / 40 * 100)
    # no cost basis, no price
    assert out['f1'].rate == 0
    assert out['f1'].total == 0
    assert all(i.margin_percent == 30 for i in out.values())


def test_apply_margin_stores_unclamped_target():
    out = apply_margin(sample_items(), 120, SNAP)
    assert out[1].margin_percent == 120
    assert out[1].rate == pytest.approx(40 / 0.01)


def test_apply_margin_rejects_non_finite_target():
    with pytest.raises(ValueError):
        apply_margin(sample_items(), float('nan'), SNAP)


def test_apply_margin_is_idempotent():
    once = apply_margin(sample_items(), 22.5, SNAP)
    twice = apply_margin(once, 22.5, SNAP)
    assert once == twice


def test_rate_edit_round_trips_through_apply_margin():
    items = [EstimateItem(id='m1', type='Material', quantity=3, cost=42, rate=50, total=150)]
    items = update_item(items, 'm1', {'rate': 73.5}, SNAP)
    derived = find_item(items, 'm1').margin_percent
    out = apply_margin(items, derived, SNAP)
    assert out[0].rate == pytest.approx(73.5, rel=1e-6)


def test_zone_add_update():
    zones = add_zone([], EstimateZone(id='z1', name='Backyard'))
    zones = add_zone(zones, EstimateZone(id='z2', name='Front'))
    zones = update_zone(zones, 'z1', {'name': 'Back patio', 'id': 'hijack'})
    assert [z.id for z in zones] == ['z1', 'z2']
    assert zones[0].name == 'Back patio'


def test_remove_zone_orphans_items():
    zones = [EstimateZone(id='z1', name='Back'), EstimateZone(id='z2', name='Front')]
    items = [
        EstimateItem(id='a', zone_id='z1'),
        EstimateItem(id='b', zone_id='z1'),
        EstimateItem(id='c', zone_id='z2'),
        EstimateItem(id='d'),
    ]
    zones, items = remove_zone(zones, items, 'z1')
    assert [z.id for z in zones] == ['z2']
    assert len(items) == 4
    assert not any(i.zone_id == 'z1' for i in items)
    assert [i.zone_id for i in items] == [None, None, 'z2', None]


def test_group_by_zone_puts_dangling_items_in_unzoned():
    zones = [EstimateZone(id='z1', name='Back')]
    items = [EstimateItem(id='a', zone_id='z1'), EstimateItem(id='b', zone_id='gone'),
             EstimateItem(id='c')]
    groups = group_by_zone(zones, items)
    assert [i.id for i in groups['z1']] == ['a']
    assert [i.id for i in groups[None]] == ['b', 'c']
