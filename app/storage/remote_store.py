import logging

import requests

from .base import SHEETS, SYSTEM_TABLES, SheetStore, StoreError, normalize_row, normalize_rows

logger = logging.getLogger(__name__)


class RemoteStore(SheetStore):
    """
    Client of another instance's raw sheet API (``/api/data/<sheet>``).

    Only business sheets travel over HTTP; users, audits and settings stay
    in the ``local`` store so credentials never leave this instance.
    With ``username``/``password`` the store logs in through
    ``/api/auth/login`` and logs in again whenever the server answers 401.
    """
    backend = 'remote'

    def __init__(self, base_url, local, username=None, password=None, token=None, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.local = local
        self.username = username
        self.password = password
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})
        if token and 'Authorization' not in self.session.headers:
            self.session.headers.update({'Authorization': f"Bearer {token}"})

    @property
    def location(self):
        return f"{self.base_url}/api"

    def _send(self, method, url, **kwargs):
        logger.debug("Chamando API: %s %s", method, url)
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreError(f"API remota indisponível ({url}): {e}", status_code=502)

    def login(self):
        r = self._send('POST', f"{self.base_url}/api/auth/login",
                       json={'username': self.username, 'password': self.password})
        if r.status_code != 200:
            raise StoreError(f"Login na API remota falhou: {r.status_code} - {r.reason}", status_code=502)
        self.session.headers.update({'Authorization': f"Bearer {r.json()['access_token']}"})
        logger.info("Autenticado na API remota %s como %s", self.base_url, self.username)

    def _request(self, method, endpoint, **kwargs):
        url = f"{self.base_url}/api{endpoint}"
        if self.username and 'Authorization' not in self.session.headers:
            self.login()
        r = self._send(method, url, **kwargs)
        if r.status_code == 401 and self.username:
            logger.info("Token da API remota expirado, autenticando novamente")
            self.login()
            r = self._send(method, url, **kwargs)
        if r.status_code >= 400:
            raise StoreError(f"Erro na API: {r.status_code} - {r.reason}", status_code=502)
        return r.json()

    def read_sheet(self, table):
        if table in SYSTEM_TABLES:
            return self.local.read_sheet(table)
        if table not in SHEETS:
            raise StoreError(f"Tabela desconhecida: {table}", status_code=404)
        data = self._request('GET', f"/data/{table}")
        if not isinstance(data, list):
            raise StoreError(f"Resposta inválida para {table}", status_code=502)
        logger.debug("Dados lidos de %s: %d registros", table, len(data))
        return [normalize_row(table, r) for r in data]

    def write_sheet(self, table, rows):
        if table in SYSTEM_TABLES:
            return self.local.write_sheet(table, rows)
        if table not in SHEETS:
            raise StoreError(f"Tabela desconhecida: {table}", status_code=404)
        self._request('POST', f"/data/{table}", json=normalize_rows(table, rows))
        logger.debug("Dados salvos em %s: %d registros", table, len(rows))

    # System tables keep the local backend's row operations (SQL for sqlite).
    def all(self, table):
        if table in SYSTEM_TABLES:
            return self.local.all(table)
        return super().all(table)

    def get(self, table, id):
        if table in SYSTEM_TABLES:
            return self.local.get(table, id)
        return super().get(table, id)

    def find(self, table, **filters):
        if table in SYSTEM_TABLES:
            return self.local.find(table, **filters)
        return super().find(table, **filters)

    def insert(self, table, row):
        if table in SYSTEM_TABLES:
            return self.local.insert(table, row)
        return super().insert(table, row)

    def update(self, table, id, fields):
        if table in SYSTEM_TABLES:
            return self.local.update(table, id, fields)
        return super().update(table, id, fields)

    def delete(self, table, id):
        if table in SYSTEM_TABLES:
            return self.local.delete(table, id)
        return super().delete(table, id)

    def delete_where(self, table, column, value):
        if table in SYSTEM_TABLES:
            return self.local.delete_where(table, column, value)
        return super().delete_where(table, column, value)

    def get_settings(self):
        return self.local.get_settings()

    def set_setting(self, key, value):
        self.local.set_setting(key, value)

    def initialize(self):
        self.local.initialize()
        self._request('POST', '/initialize')

    def verify(self):
        try:
            return bool(self._request('GET', '/verify').get('valid')) and self.local.verify()
        except StoreError as e:
            logger.error("Verificação de integridade falhou: %s", e)
            return False

    def close(self):
        self.local.close()
        if self._owns_session:
            self.session.close()
