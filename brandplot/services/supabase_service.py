import logging
from supabase import create_client

logger = logging.getLogger(__name__)

BRAND_TABLE = 'brandplot'


def init_supabase(app):
    url = app.config.get('SUPABASE_URL')
    # Use service role key if available for backend operations, fallback to anon key
    key = app.config.get('SUPABASE_SERVICE_ROLE_KEY') or app.config.get('SUPABASE_KEY')

    if not url or not key:
        return None

    return create_client(url, key)


class SupabaseBrandStore:
    """
    Record store accessor for the `brandplot` table.
    One row per brand, keyed by the opaque `idUnico` string.
    postgrest errors propagate to the caller.
    """

    def __init__(self, client, table=BRAND_TABLE):
        self.client = client
        self.table = table

    def get(self, id_unico, columns='*'):
        res = self.client.table(self.table).select(columns).eq('idUnico', id_unico).limit(1).execute()
        rows = res.data or []
        return rows[0] if rows else None

    def find_by_email(self, email, columns='*'):
        res = self.client.table(self.table).select(columns).eq('email', email).execute()
        return res.data or []

    def update(self, id_unico, updates):
        res = self.client.table(self.table).update(updates).eq('idUnico', id_unico).execute()
        return res.data

    def insert(self, record):
        res = self.client.table(self.table).insert(record).execute()
        return res.data
