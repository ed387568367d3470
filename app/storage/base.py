"""
Storage strategies share one interface so the business layer never knows
where a table lives. Relational backends map the row operations onto SQL;
sheet backends (a JSON document, a workbook, a remote spreadsheet API) read
the whole sheet, change it in memory and write it back.
"""
import logging
from abc import ABC, abstractmethod

from app.errors import ComercialError

logger = logging.getLogger(__name__)

# Business tables ("planilhas"), in export order.
SHEETS = {
    'clientes': ['id', 'nome', 'telefone', 'cpf_cnpj', 'email', 'endereco', 'cidade', 'estado',
                 'nome_fantasia', 'observacao', 'data_cadastro'],
    'produtos': ['id', 'nome', 'custo_producao', 'preco_sugerido', 'margem_lucro', 'percentual_lucro',
                 'estoque_atual', 'estoque_minimo', 'total_vendido', 'total_faturado'],
    'pedidos': ['id', 'cliente_id', 'data_pedido', 'valor_total', 'valor_lucro', 'status'],
    'itens_pedido': ['id', 'pedido_id', 'produto_id', 'quantidade', 'preco_unitario', 'custo_unitario',
                     'lucro_item'],
    'fiados': ['id', 'cliente_id', 'pedido_id', 'descricao', 'data_fiado', 'data_vencimento',
               'valor_total', 'valor_pago', 'valor_pendente'],
    'pagamentos_fiado': ['id', 'fiado_id', 'data_pagamento', 'valor_pagamento'],
    'despesas_entradas': ['id', 'tipo', 'categoria', 'descricao', 'valor', 'data'],
    'comodatos': ['id', 'cliente_id', 'produto', 'quantidade', 'quantidade_vendida', 'quantidade_paga',
                  'quantidade_pendente', 'valor_unitario', 'valor_total', 'valor_garantia',
                  'data_comodato', 'observacoes'],
    'eventos': ['id', 'titulo', 'descricao', 'data_evento', 'hora_evento', 'tipo', 'status', 'cliente_id',
                'valor', 'observacoes', 'data_criacao'],
}

SYSTEM_TABLES = {
    'users': ['id', 'username', 'password_hash', 'role', 'is_active'],
    'audits': ['id', 'ts', 'user_id', 'action', 'details'],
    'settings': ['key', 'value'],
}

TABLES = {**SHEETS, **SYSTEM_TABLES}

INTEGER_COLUMNS = {
    'id', 'cliente_id', 'pedido_id', 'produto_id', 'fiado_id', 'user_id', 'is_active',
    'estoque_atual', 'estoque_minimo', 'total_vendido', 'quantidade', 'quantidade_vendida',
    'quantidade_paga', 'quantidade_pendente',
}

REAL_COLUMNS = {
    'custo_producao', 'preco_sugerido', 'margem_lucro', 'percentual_lucro', 'total_faturado',
    'valor_total', 'valor_lucro', 'preco_unitario', 'custo_unitario', 'lucro_item', 'valor_pago',
    'valor_pendente', 'valor_pagamento', 'valor', 'valor_unitario', 'valor_garantia',
}


class StoreError(ComercialError):
    status_code = 500


def columns_for(table):
    try:
        return TABLES[table]
    except KeyError:
        raise StoreError(f"Tabela desconhecida: {table}", status_code=404)


def _is_blank(value):
    if value is None:
        return True
    # float NaN never equals itself
    return isinstance(value, float) and value != value


def normalize_row(table, row):
    """Restrict a row to the table's columns and restore numeric types."""
    clean = {}
    for col in columns_for(table):
        value = row.get(col)
        if _is_blank(value) or (value == '' and (col in INTEGER_COLUMNS or col in REAL_COLUMNS)):
            clean[col] = None
            continue
        if col in INTEGER_COLUMNS:
            try:
                value = int(float(value))
            except (TypeError, ValueError):
                value = None
        elif col in REAL_COLUMNS:
            try:
                value = float(value)
            except (TypeError, ValueError):
                value = None
        elif not isinstance(value, str):
            value = str(value)
        clean[col] = value
    return clean


def normalize_rows(table, rows):
    """normalize_row over a whole sheet, numbering rows that have no id."""
    clean = [normalize_row(table, r) for r in rows]
    if 'id' not in columns_for(table):
        return clean
    next_id = max((r['id'] for r in clean if r['id'] is not None), default=0) + 1
    for r in clean:
        if r['id'] is None:
            r['id'] = next_id
            next_id += 1
    return clean


class Store(ABC):
    backend = None

    # -- whole-sheet access --------------------------------------------

    @abstractmethod
    def read_sheet(self, table):
        """Every row of ``table`` as a list of dicts."""

    @abstractmethod
    def write_sheet(self, table, rows):
        """Replace every row of ``table``."""

    # -- row access ----------------------------------------------------

    @abstractmethod
    def all(self, table):
        pass

    @abstractmethod
    def get(self, table, id):
        pass

    @abstractmethod
    def insert(self, table, row):
        """Insert ``row`` and return it with its assigned id."""

    @abstractmethod
    def update(self, table, id, fields):
        """Apply ``fields`` to row ``id``; return the updated row or None."""

    @abstractmethod
    def delete(self, table, id):
        """Delete row ``id``; return True when something was removed."""

    @abstractmethod
    def delete_where(self, table, column, value):
        """Delete rows whose ``column`` equals ``value``; return the count."""

    def find(self, table, **filters):
        return [row for row in self.all(table)
                if all(row.get(k) == v for k, v in filters.items())]

    # -- settings --------------------------------------------------------

    def get_settings(self):
        return {row['key']: row['value'] for row in self.read_sheet('settings')}

    def set_setting(self, key, value):
        rows = [r for r in self.read_sheet('settings') if r['key'] != key]
        rows.append({'key': key, 'value': None if value is None else str(value)})
        self.write_sheet('settings', rows)

    # -- lifecycle -------------------------------------------------------

    @abstractmethod
    def initialize(self):
        """Create whatever the backend needs (files, tables)."""

    @abstractmethod
    def verify(self):
        """True when every table is readable."""

    @property
    @abstractmethod
    def location(self):
        pass

    def close(self):
        pass


class SheetStore(Store):
    """Row operations expressed as read-modify-write of a whole sheet."""

    def all(self, table):
        return self.read_sheet(table)

    def get(self, table, id):
        for row in self.read_sheet(table):
            if row.get('id') == id:
                return row
        return None

    def insert(self, table, row):
        rows = self.read_sheet(table)
        new_row = normalize_row(table, row)
        new_row['id'] = max((r['id'] or 0 for r in rows), default=0) + 1
        rows.append(new_row)
        self.write_sheet(table, rows)
        return new_row

    def update(self, table, id, fields):
        rows = self.read_sheet(table)
        updated = None
        for i, row in enumerate(rows):
            if row.get('id') == id:
                merged = {**row, **{k: v for k, v in fields.items() if k != 'id'}}
                updated = rows[i] = normalize_row(table, merged)
                break
        if updated is None:
            return None
        self.write_sheet(table, rows)
        return updated

    def delete(self, table, id):
        rows = self.read_sheet(table)
        remaining = [r for r in rows if r.get('id') != id]
        if len(remaining) == len(rows):
            return False
        self.write_sheet(table, remaining)
        return True

    def delete_where(self, table, column, value):
        rows = self.read_sheet(table)
        remaining = [r for r in rows if r.get(column) != value]
        removed = len(rows) - len(remaining)
        if removed:
            self.write_sheet(table, remaining)
        return removed

    def verify(self):
        try:
            for table in TABLES:
                if not isinstance(self.read_sheet(table), list):
                    return False
        except StoreError as e:
            logger.error("Verificação de integridade falhou: %s", e)
            return False
        return True
