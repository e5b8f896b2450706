import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from estimator.pricing import EstimateItem, PricingSnapshot, add_item, remove_item, update_item
from estimator.pricing.items import find_item, new_item

# loaded labor cost = 20 * 1.25 + 10 = 35
SNAP = PricingSnapshot(base_labor_cost=20, labor_burden_percent=25, overhead_per_man_hour=10)


def edit(item, changes, snapshot=SNAP):
    return find_item(update_item([item], item.id, changes, snapshot), item.id)


def assert_total_consistent(item):
    assert item.total == pytest.approx(item.quantity * item.rate, rel=1e-6)


def test_material_margin_sets_rate_total_and_markup():
    item = EstimateItem(id='m1', type='Material', quantity=10, cost=50)
    out = edit(item, {'margin_percent': 20})
    assert out.rate == pytest.approx(62.5)
    assert out.total == pytest.approx(625)
    assert out.markup_percent == pytest.approx(25)
    assert out.margin_percent == 20


def test_labor_margin_uses_snapshot_loaded_cost():
    snap = PricingSnapshot(base_labor_cost=25, labor_burden_percent=0, overhead_per_man_hour=0)
    item = EstimateItem(id='l1', type='Labor', quantity=8, cost=0)
    out = edit(item, {'margin_percent': 25}, snap)
    assert out.rate == pytest.approx(33.3333, rel=1e-4)
    assert out.total == pytest.approx(266.6667, rel=1e-4)
    assert out.cost == pytest.approx(25)


def test_cost_change_holds_margin():
    item = EstimateItem(id='m1', type='Material', quantity=2, cost=20, rate=33.33,
                        total=66.66, margin_percent=40)
    out = edit(item, {'cost': 30})
    assert out.margin_percent == 40
    assert out.rate == pytest.approx(30 / 0.6)
    assert out.markup_percent == pytest.approx((50 - 30) / 30 * 100)
    assert_total_consistent(out)


def test_cost_change_without_margin_sells_at_cost():
    item = EstimateItem(id='m1', type='Material', quantity=3, cost=10, rate=15, total=45)
    out = edit(item, {'cost': 12})
    assert out.rate == 12
    assert out.total == 36
    assert out.markup_percent == 0


def test_zero_cost_does_not_produce_nan():
    item = EstimateItem(id='m1', type='Material', quantity=1, cost=5, margin_percent=20)
    out = edit(item, {'cost': 0})
    assert out.rate == 0
    assert out.markup_percent == 0


def test_rate_change_back_derives_margin_and_markup():
    item = EstimateItem(id='m1', type='Material', quantity=4, cost=40, rate=50, total=200)
    out = edit(item, {'rate': 64})
    assert out.total == pytest.approx(256)
    assert out.margin_percent == pytest.approx(37.5)
    assert out.markup_percent == pytest.approx(60)


def test_rate_of_zero_on_material_is_guarded():
    item = EstimateItem(id='m1', type='Material', quantity=4, cost=10, rate=15, total=60)
    out = edit(item, {'rate': 0})
    assert out.total == 0
    assert out.margin_percent == 0
    assert out.markup_percent == pytest.approx(-100)


def test_labor_rate_change_uses_loaded_cost_not_stored_cost():
    item = EstimateItem(id='l1', type='Labor', quantity=10, cost=999, rate=50, total=500)
    out = edit(item, {'rate': 70})
    assert out.total == pytest.approx(700)
    assert out.margin_percent == pytest.approx(50)
    assert out.cost == 999


def test_labor_cost_edit_changes_nothing_priced():
    item = EstimateItem(id='l1', type='Labor', quantity=8, cost=35, rate=50,
                        total=400, margin_percent=30)
    out = edit(item, {'cost': 999})
    assert out.rate == 50
    assert out.total == 400
    assert out.margin_percent == 30
    assert out.cost == 999


def test_labor_margin_edit_overwrites_stale_cost():
    item = EstimateItem(id='l1', type='Labor', quantity=2, cost=12, rate=20, total=40)
    out = edit(item, {'margin_percent': 30})
    assert out.cost == pytest.approx(35)
    assert out.rate == pytest.approx(50)
    assert out.total == pytest.approx(100)


def test_labor_with_empty_snapshot_prices_at_zero():
    item = EstimateItem(id='l1', type='Labor', quantity=8)
    out = edit(item, {'margin_percent': 25}, PricingSnapshot.from_dict({}))
    assert out.rate == 0
    assert out.total == 0


def test_margin_is_clamped_for_division_only():
    item = EstimateItem(id='m1', type='Material', quantity=1, cost=10)
    out = edit(item, {'margin_percent': 150})
    assert out.rate == pytest.approx(1000)
    assert out.margin_percent == 150
    out = edit(item, {'margin_percent': -20})
    assert out.rate == pytest.approx(10)


def test_quantity_change_recomputes_total_and_flags_generated_items():
    generated = EstimateItem(id='g1', type='Material', quantity=2, rate=10, total=20,
                             calc_basis='paver-calculator')
    freehand = EstimateItem(id='f1', type='Material', quantity=2, rate=10, total=20)
    out = edit(generated, {'quantity': 5})
    assert out.total == 50
    assert out.is_overridden is True
    out = edit(freehand, {'quantity': 5})
    assert out.total == 50
    assert out.is_overridden is False


def test_multi_field_edit_margin_rate_replaces_sent_rate():
    item = EstimateItem(id='m1', type='Material', quantity=1, cost=40, rate=50, total=50)
    out = edit(item, {'margin_percent': 50, 'rate': 100})
    # rate rule runs on the rate the margin rule produced
    assert out.rate == pytest.approx(80)
    assert out.total == pytest.approx(80)
    assert out.margin_percent == pytest.approx(50)
    assert out.markup_percent == pytest.approx(100)


def test_non_finite_edits_are_rejected():
    item = EstimateItem(id='m1', type='Material', quantity=1, cost=40, rate=50, total=50)
    with pytest.raises(ValueError):
        update_item([item], 'm1', {'margin_percent': 'nan'}, SNAP)
    with pytest.raises(ValueError):
        update_item([item], 'm1', {'quantity': float('inf')}, SNAP)


def test_multi_field_edit_cost_uses_margin_from_same_call():
    item = EstimateItem(id='m1', type='Material', quantity=2, cost=40, rate=80,
                        total=160, margin_percent=50)
    out = edit(item, {'cost': 60, 'margin_percent': 25})
    assert out.rate == pytest.approx(80)
    assert out.total == pytest.approx(160)
    assert out.markup_percent == pytest.approx(100 / 3)


def test_multi_field_edit_quantity_then_margin():
    item = EstimateItem(id='m1', type='Material', quantity=1, cost=30, rate=30, total=30)
    out = edit(item, {'quantity': 4, 'margin_percent': 25})
    assert out.rate == pytest.approx(40)
    assert out.total == pytest.approx(160)


def test_total_is_not_accepted_as_an_edit():
    item = EstimateItem(id='m1', type='Material', quantity=2, rate=10, total=20)
    out = edit(item, {'total': 999, 'id': 'other', 'bogus': 1})
    assert out.id == 'm1'
    assert out.total == 20


@pytest.mark.parametrize('changes', [
    {'quantity': 7},
    {'cost': 13.37},
    {'margin_percent': 33},
    {'rate': 41.5},
    {'description': 'renamed'},
    {'quantity': 3, 'cost': 9, 'margin_percent': 10, 'rate': 12},
])
@pytest.mark.parametrize('item_type', ['Labor', 'Material', 'Equipment'])
def test_total_tracks_quantity_times_rate(changes, item_type):
    item = EstimateItem(id='x', type=item_type, quantity=2, cost=11, rate=17,
                        total=34, margin_percent=35)
    assert_total_consistent(edit(item, changes))


def test_update_leaves_other_items_alone():
    a = EstimateItem(id='a', quantity=1, rate=5, total=5)
    b = EstimateItem(id='b', quantity=1, rate=7, total=7)
    out = update_item([a, b], 'a', {'quantity': 3}, SNAP)
    assert out[1] is b
    assert out[0].total == 15


def test_unknown_item_id_is_a_no_op():
    a = EstimateItem(id='a', quantity=1, rate=5, total=5)
    assert update_item([a], 'missing', {'quantity': 3}, SNAP) == [a]


def test_add_and_remove_items():
    a = new_item('Material', quantity=2, cost=3, rate=4)
    assert a.total == 8
    items = add_item([], a)
    items = add_item(items, new_item('Labor', quantity=1, rate=50))
    assert len(items) == 2
    items = remove_item(items, a.id)
    assert [i.type for i in items] == ['Labor']


def test_unknown_type_is_treated_as_other():
    item = EstimateItem.from_dict({'type': 'Sorcery', 'quantity': 1})
    assert item.type == 'Other'
    assert item.id
