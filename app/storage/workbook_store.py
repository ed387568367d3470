import logging
import os

import pandas as pd

from .base import SheetStore, StoreError, TABLES, normalize_row, normalize_rows

logger = logging.getLogger(__name__)


def _frame(table, rows):
    columns = TABLES[table]
    return pd.DataFrame(normalize_rows(table, rows), columns=columns)


def _records(table, df):
    # object dtype keeps ints as ints and lets NaN become None
    df = df.astype(object).where(pd.notnull(df), None)
    return [normalize_row(table, r) for r in df.to_dict(orient='records')]


class WorkbookStore(SheetStore):
    """One .xlsx workbook, one worksheet per table, header row first."""
    backend = 'xlsx'

    def __init__(self, path):
        self.path = path

    @property
    def location(self):
        return self.path

    def _read_all(self):
        if not os.path.exists(self.path):
            return {}
        try:
            return pd.read_excel(self.path, sheet_name=None, dtype=object, engine='openpyxl')
        except Exception as e:
            raise StoreError(f"Erro ao ler planilha {self.path}: {e}")

    def _write_all(self, frames, tables=TABLES):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            with pd.ExcelWriter(self.path, engine='openpyxl') as writer:
                for table in tables:
                    df = frames.get(table)
                    if df is None:
                        df = pd.DataFrame(columns=TABLES[table])
                    df.to_excel(writer, sheet_name=table, index=False)
        except Exception as e:
            raise StoreError(f"Erro ao escrever planilha {self.path}: {e}")

    def read_sheet(self, table):
        if table not in TABLES:
            raise StoreError(f"Tabela desconhecida: {table}", status_code=404)
        frames = self._read_all()
        if table not in frames:
            logger.debug("Planilha %s não existe, retornando lista vazia", table)
            return []
        return _records(table, frames[table])

    def write_sheet(self, table, rows):
        if table not in TABLES:
            raise StoreError(f"Tabela desconhecida: {table}", status_code=404)
        frames = self._read_all()
        frames[table] = _frame(table, rows)
        self._write_all(frames)
        logger.debug("Dados salvos na planilha %s: %d registros", table, len(rows))

    def initialize(self):
        if os.path.exists(self.path):
            frames = self._read_all()
            if all(table in frames for table in TABLES):
                return
        else:
            frames = {}
            logger.info("Arquivo Excel não existe, criando %s", self.path)
        self._write_all(frames)


def write_workbook(path, data):
    """Write ``{table: rows}`` to a new workbook at ``path``."""
    frames = {table: _frame(table, rows) for table, rows in data.items()}
    WorkbookStore(path)._write_all(frames, tables=list(data))
    return path


def read_workbook(path, tables):
    frames = WorkbookStore(path)._read_all()
    return {table: _records(table, frames[table]) for table in tables if table in frames}
