import json
import logging
import os

from .base import SheetStore, StoreError, TABLES, normalize_row, normalize_rows

logger = logging.getLogger(__name__)

KEY_PREFIX = 'excel_commerce_'


class JsonStore(SheetStore):
    """
    Key/value document modelled on browser local storage: every sheet is a
    JSON-encoded array stored under ``excel_commerce_<sheet>``.
    A key whose value does not decode to an array is dropped and reads as
    an empty sheet.
    """
    backend = 'json'

    def __init__(self, path):
        self.path = path

    @property
    def location(self):
        return self.path

    def _key(self, table):
        return f"{KEY_PREFIX}{table}"

    def _load(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Arquivo de dados ilegível ({self.path}): {e}")
        if not isinstance(data, dict):
            raise StoreError(f"Arquivo de dados inválido: {self.path}")
        return data

    def _save(self, data):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + '.tmp'
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreError(f"Erro ao gravar {self.path}: {e}")

    def read_sheet(self, table):
        if table not in TABLES:
            raise StoreError(f"Tabela desconhecida: {table}", status_code=404)
        data = self._load()
        raw = data.get(self._key(table))
        if raw is None:
            return []
        try:
            rows = json.loads(raw) if isinstance(raw, str) else raw
        except ValueError:
            rows = None
        if not isinstance(rows, list):
            logger.warning("Dados de %s corrompidos, removendo chave", table)
            del data[self._key(table)]
            self._save(data)
            return []
        return [normalize_row(table, r) for r in rows if isinstance(r, dict)]

    def write_sheet(self, table, rows):
        if table not in TABLES:
            raise StoreError(f"Tabela desconhecida: {table}", status_code=404)
        data = self._load()
        data[self._key(table)] = json.dumps(normalize_rows(table, rows), ensure_ascii=False)
        self._save(data)
        logger.debug("Dados salvos em %s: %d registros", table, len(rows))

    def initialize(self):
        data = self._load()
        changed = False
        for table in TABLES:
            if self._key(table) not in data:
                logger.info("Inicializando dados para %s", table)
                data[self._key(table)] = '[]'
                changed = True
        if changed:
            self._save(data)
