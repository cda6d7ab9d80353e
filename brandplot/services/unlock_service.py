"""
Mission unlock reconciliation.

A payment callback carries the mission marker it unlocks. The brand's
`missaoLiberada` only moves forward along MISSION_ORDER; the checkout
status is merged into the `onboardingMetadata` blob.
"""
import logging
from brandplot.utils import parse_json_blob, serialize_json_blob, utc_now_iso

logger = logging.getLogger(__name__)

MISSION_ORDER = ['missao_1', 'missao_2', 'missao_3', 'missao_4', 'missao_5', 'todas']
ALL_MISSIONS = 'todas'
UNLOCKING_STATUSES = ('approved', 'authorized')


def mission_rank(value):
    if value not in MISSION_ORDER:
        return -1
    return MISSION_ORDER.index(value)


def is_unlocking_status(status):
    return status in UNLOCKING_STATUSES


def resolve_unlocked_mission(current, unlocks, status):
    """Returns the marker to store; never lower than `current`."""
    should_unlock = is_unlocking_status(status)
    if should_unlock and unlocks == ALL_MISSIONS:
        return ALL_MISSIONS
    if should_unlock and mission_rank(unlocks) > mission_rank(current):
        return unlocks
    return current


def merge_payment_metadata(metadata, unlocks, payment_id, status, now=None):
    now = now or utc_now_iso()
    should_unlock = is_unlocking_status(status)

    previous_pending = metadata.get('pendingUnlock')
    if not isinstance(previous_pending, str):
        previous_pending = None

    previous_checkout = metadata.get('lastCheckout')
    if not isinstance(previous_checkout, dict):
        previous_checkout = {}

    preference_id = previous_checkout.get('preferenceId')
    if isinstance(preference_id, bool) or not isinstance(preference_id, (str, int, float)):
        preference_id = None

    last_checkout = {
        **previous_checkout,
        'status': status,
        'preferenceId': preference_id,
        'paymentId': payment_id,
    }
    if should_unlock and status == 'approved':
        last_checkout['approvedAt'] = now
    elif isinstance(previous_checkout.get('approvedAt'), str):
        last_checkout['approvedAt'] = previous_checkout['approvedAt']
    else:
        last_checkout.pop('approvedAt', None)

    return {
        **metadata,
        'pendingUnlock': None if should_unlock else (previous_pending or unlocks),
        'lastCheckout': last_checkout,
        'lastPayment': {
            'id': payment_id,
            'unlocks': unlocks,
            'status': status,
            'updatedAt': now,
        },
    }


def reconcile_payment(store, id_unico, unlocks, payment_id, status):
    """
    Applies a payment status to the brand record.
    Returns the updates written, or None when `unlocks` is not a known marker.
    """
    if unlocks not in MISSION_ORDER:
        logger.warning(f"MercadoPago webhook: missão de desbloqueio desconhecida recebida: {unlocks}")
        return None

    record = store.get(id_unico)
    current = None
    metadata = {}
    if record:
        stored_marker = record.get('missaoLiberada')
        if stored_marker in MISSION_ORDER:
            current = stored_marker
        metadata = parse_json_blob(record.get('onboardingMetadata'))

    missao_liberada = resolve_unlocked_mission(current, unlocks, status)
    if missao_liberada == current and record and record.get('missaoLiberada'):
        # Keep whatever is stored, even markers outside MISSION_ORDER
        missao_liberada = record.get('missaoLiberada')

    updates = {
        'onboardingMetadata': serialize_json_blob(
            merge_payment_metadata(metadata, unlocks, payment_id, status)
        ),
    }
    if missao_liberada:
        updates['missaoLiberada'] = missao_liberada

    store.update(id_unico, updates)
    logger.info(f"MercadoPago webhook: {id_unico} -> status={status} missaoLiberada={missao_liberada}")
    return updates
