import json

import pytest

from brandplot.services.mock_store import MockBrandStore
from brandplot.services.unlock_service import (
    MISSION_ORDER, mission_rank, resolve_unlocked_mission, merge_payment_metadata, reconcile_payment
)


@pytest.fixture
def store():
    return MockBrandStore(seed=False, records=[{
        'idUnico': 'acme-brandplot',
        'nome_empresa': 'Acme',
        'missaoLiberada': 'missao_3',
        'onboardingMetadata': json.dumps({
            'missaoAtual': 'missao_3',
            'pendingUnlock': 'missao_5',
            'lastCheckout': {'product': 'jornada_completa', 'preferenceId': 'pref-1', 'status': 'pending'},
        }),
    }])


def stored_metadata(store, id_unico='acme-brandplot'):
    return json.loads(store.get(id_unico)['onboardingMetadata'])


def test_mission_rank():
    assert [mission_rank(m) for m in MISSION_ORDER] == [0, 1, 2, 3, 4, 5]
    assert mission_rank(None) == -1
    assert mission_rank('vip') == -1


@pytest.mark.parametrize('current,unlocks,status,expected', [
    (None, 'missao_1', 'approved', 'missao_1'),
    ('missao_1', 'missao_3', 'authorized', 'missao_3'),
    ('missao_3', 'missao_1', 'approved', 'missao_3'),
    ('missao_3', 'todas', 'approved', 'todas'),
    ('todas', 'missao_5', 'approved', 'todas'),
    ('missao_1', 'missao_5', 'pending', 'missao_1'),
    (None, 'missao_3', 'rejected', None),
])
def test_resolve_unlocked_mission(current, unlocks, status, expected):
    assert resolve_unlocked_mission(current, unlocks, status) == expected


def test_resolve_never_lowers_rank():
    for current in MISSION_ORDER + [None]:
        for unlocks in MISSION_ORDER:
            for status in ('approved', 'authorized', 'pending', 'rejected'):
                result = resolve_unlocked_mission(current, unlocks, status)
                assert mission_rank(result) >= mission_rank(current)


def test_merge_payment_metadata_approved():
    metadata = {
        'xpAtual': 140,
        'pendingUnlock': 'missao_3',
        'lastCheckout': {'product': 'missao_3', 'preferenceId': 'pref-9', 'status': 'pending'},
    }
    merged = merge_payment_metadata(metadata, 'missao_3', 555, 'approved', now='2025-01-01T00:00:00.000Z')

    assert merged['xpAtual'] == 140
    assert merged['pendingUnlock'] is None
    assert merged['lastCheckout'] == {
        'product': 'missao_3',
        'preferenceId': 'pref-9',
        'status': 'approved',
        'paymentId': 555,
        'approvedAt': '2025-01-01T00:00:00.000Z',
    }
    assert merged['lastPayment'] == {
        'id': 555,
        'unlocks': 'missao_3',
        'status': 'approved',
        'updatedAt': '2025-01-01T00:00:00.000Z',
    }


def test_merge_payment_metadata_pending_keeps_previous_pending():
    merged = merge_payment_metadata({'pendingUnlock': 'missao_5'}, 'missao_3', 1, 'in_process')
    assert merged['pendingUnlock'] == 'missao_5'
    assert 'approvedAt' not in merged['lastCheckout']
    assert merged['lastCheckout']['preferenceId'] is None

    merged = merge_payment_metadata({}, 'missao_3', 1, 'pending')
    assert merged['pendingUnlock'] == 'missao_3'


def test_merge_payment_metadata_authorized_keeps_previous_approval():
    metadata = {'lastCheckout': {'approvedAt': '2024-12-01T00:00:00.000Z', 'preferenceId': {'bad': 1}}}
    merged = merge_payment_metadata(metadata, 'missao_1', 2, 'authorized')
    assert merged['pendingUnlock'] is None
    assert merged['lastCheckout']['approvedAt'] == '2024-12-01T00:00:00.000Z'
    assert merged['lastCheckout']['preferenceId'] is None


def test_reconcile_lower_mission_keeps_current(store):
    updates = reconcile_payment(store, 'acme-brandplot', 'missao_1', 321, 'approved')

    assert updates['missaoLiberada'] == 'missao_3'
    record = store.get('acme-brandplot')
    assert record['missaoLiberada'] == 'missao_3'

    metadata = stored_metadata(store)
    assert metadata['missaoAtual'] == 'missao_3'
    assert metadata['pendingUnlock'] is None
    assert metadata['lastCheckout']['status'] == 'approved'
    assert metadata['lastCheckout']['preferenceId'] == 'pref-1'
    assert metadata['lastPayment']['id'] == 321


def test_reconcile_full_journey(store):
    reconcile_payment(store, 'acme-brandplot', 'todas', 322, 'approved')
    assert store.get('acme-brandplot')['missaoLiberada'] == 'todas'


def test_reconcile_pending_payment(store):
    reconcile_payment(store, 'acme-brandplot', 'missao_4', 323, 'pending')

    assert store.get('acme-brandplot')['missaoLiberada'] == 'missao_3'
    metadata = stored_metadata(store)
    assert metadata['pendingUnlock'] == 'missao_5'
    assert metadata['lastPayment']['status'] == 'pending'


def test_reconcile_unknown_unlock_is_ignored(store):
    before = store.get('acme-brandplot')
    assert reconcile_payment(store, 'acme-brandplot', 'missao_9', 324, 'approved') is None
    assert store.get('acme-brandplot') == before


def test_reconcile_keeps_unknown_stored_marker_when_nothing_unlocks():
    store = MockBrandStore(seed=False, records=[{'idUnico': 'x-brandplot', 'missaoLiberada': 'vip'}])
    updates = reconcile_payment(store, 'x-brandplot', 'missao_2', 1, 'rejected')
    assert updates['missaoLiberada'] == 'vip'
    assert store.get('x-brandplot')['missaoLiberada'] == 'vip'


def test_reconcile_recovers_from_malformed_metadata():
    store = MockBrandStore(seed=False, records=[{'idUnico': 'x-brandplot', 'onboardingMetadata': '{oops'}])
    reconcile_payment(store, 'x-brandplot', 'missao_1', 7, 'approved')

    record = store.get('x-brandplot')
    assert record['missaoLiberada'] == 'missao_1'
    assert json.loads(record['onboardingMetadata'])['lastPayment']['id'] == 7
