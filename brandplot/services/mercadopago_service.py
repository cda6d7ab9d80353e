import hashlib
import hmac
import logging
import re
import requests
from brandplot.utils import retry_request

logger = logging.getLogger(__name__)

SIGNATURE_HEADERS = ('x-mercadopago-signature', 'x-signature', 'x-hub-signature')


class MercadoPagoError(Exception):
    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status

    @property
    def is_not_found(self):
        return self.status in (400, 404) or 'not found' in str(self).lower()


class MercadoPagoService:
    BASE_URL = "https://api.mercadopago.com"

    def __init__(self, access_token, base_url=None):
        if not access_token:
            raise MercadoPagoError("MP_ACCESS_TOKEN não configurado")
        self.access_token = access_token
        self.base_url = (base_url or self.BASE_URL).rstrip('/')

    def get_headers(self):
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _raise_for_error(response, action):
        if response.status_code in (200, 201):
            return
        try:
            err_json = response.json()
            msg = err_json.get('message') or err_json.get('error') or response.text
        except ValueError:
            msg = response.text
        raise MercadoPagoError(f"Failed to {action}: {msg}", status=response.status_code)

    def create_preference(self, preference):
        """
        Creates a Checkout Pro preference.
        Returns the provider payload (id, init_point, sandbox_init_point...).
        """
        url = f"{self.base_url}/checkout/preferences"

        @retry_request()
        def perform_create():
            return requests.post(url, headers=self.get_headers(), json=preference, timeout=15)

        response = perform_create()
        self._raise_for_error(response, 'create preference')
        return response.json()

    def get_payment(self, payment_id):
        url = f"{self.base_url}/v1/payments/{payment_id}"

        @retry_request()
        def perform_get():
            return requests.get(url, headers=self.get_headers(), timeout=10)

        response = perform_get()
        self._raise_for_error(response, 'fetch payment')
        return response.json()


def compute_hmac(secret, value):
    return hmac.new(secret.encode('utf-8'), value.encode('utf-8'), hashlib.sha256).hexdigest()


def parse_signature_header(header):
    """'ts=1,v1=abc' -> {'ts': '1', 'v1': 'abc'} (keys lower-cased)."""
    parsed = {}
    for part in header.split(','):
        part = part.strip()
        raw_key, sep, value = part.partition('=')
        if not raw_key or not sep:
            continue
        parsed[raw_key.strip().lower()] = value.strip()
    return parsed


def _same(a, b):
    return hmac.compare_digest(a.encode('utf-8'), b.encode('utf-8'))


def validate_signature(secret, payload, header, data_id=None, request_id=None):
    """
    Checks a webhook signature header against the shared secret.
    Without a configured secret every payload is accepted.
    """
    if not secret:
        return True
    if not header:
        return False

    normalized_header = header.strip()
    normalized_payload = re.sub(r'\s+', '', payload)
    direct_hash = compute_hmac(secret, normalized_payload)

    if _same(normalized_header, f"sha256={direct_hash}") or _same(normalized_header, direct_hash):
        return True

    parsed = parse_signature_header(normalized_header)
    candidate = parsed.get('sha256') or parsed.get('signature') or parsed.get('hash') or parsed.get('v1')
    if not candidate:
        logger.warning(f"MercadoPago webhook: assinatura inválida (hash ausente) header={header}")
        return False

    if _same(candidate, direct_hash):
        return True

    composed = compute_hmac(secret, f"{parsed.get('id', '')}{parsed.get('ts', '')}{normalized_payload}")
    if _same(candidate, composed):
        return True

    # Manifest documented by Mercado Pago for x-signature
    if data_id is not None and parsed.get('ts'):
        manifest = f"id:{str(data_id).lower()};"
        if request_id:
            manifest += f"request-id:{request_id};"
        manifest += f"ts:{parsed['ts']};"
        if _same(candidate, compute_hmac(secret, manifest)):
            return True

    logger.warning(f"MercadoPago webhook: assinatura inválida header={header}")
    return False
