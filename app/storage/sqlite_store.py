import logging
import sqlite3

from .base import Store, StoreError, TABLES, columns_for, normalize_row

logger = logging.getLogger(__name__)

SCHEMA = '''
CREATE TABLE IF NOT EXISTS clientes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    nome TEXT NOT NULL,
    telefone TEXT,
    cpf_cnpj TEXT,
    email TEXT,
    endereco TEXT,
    cidade TEXT,
    estado TEXT,
    nome_fantasia TEXT,
    observacao TEXT,
    data_cadastro TEXT
);

CREATE TABLE IF NOT EXISTS produtos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    nome TEXT NOT NULL,
    custo_producao REAL DEFAULT 0,
    preco_sugerido REAL DEFAULT 0,
    margem_lucro REAL DEFAULT 0,
    percentual_lucro REAL DEFAULT 0,
    estoque_atual INTEGER DEFAULT 0,
    estoque_minimo INTEGER DEFAULT 0,
    total_vendido INTEGER DEFAULT 0,
    total_faturado REAL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS pedidos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cliente_id INTEGER,
    data_pedido TEXT,
    valor_total REAL DEFAULT 0,
    valor_lucro REAL DEFAULT 0,
    status TEXT DEFAULT 'pendente'
);

CREATE TABLE IF NOT EXISTS itens_pedido (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    pedido_id INTEGER,
    produto_id INTEGER,
    quantidade INTEGER DEFAULT 0,
    preco_unitario REAL DEFAULT 0,
    custo_unitario REAL DEFAULT 0,
    lucro_item REAL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS fiados (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cliente_id INTEGER,
    pedido_id INTEGER,
    descricao TEXT,
    data_fiado TEXT,
    data_vencimento TEXT,
    valor_total REAL DEFAULT 0,
    valor_pago REAL DEFAULT 0,
    valor_pendente REAL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS pagamentos_fiado (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    fiado_id INTEGER,
    data_pagamento TEXT,
    valor_pagamento REAL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS despesas_entradas (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tipo TEXT NOT NULL,
    categoria TEXT,
    descricao TEXT,
    valor REAL DEFAULT 0,
    data TEXT
);

CREATE TABLE IF NOT EXISTS comodatos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cliente_id INTEGER,
    produto TEXT,
    quantidade INTEGER DEFAULT 0,
    quantidade_vendida INTEGER DEFAULT 0,
    quantidade_paga INTEGER DEFAULT 0,
    quantidade_pendente INTEGER DEFAULT 0,
    valor_unitario REAL DEFAULT 0,
    valor_total REAL DEFAULT 0,
    valor_garantia REAL DEFAULT 0,
    data_comodato TEXT,
    observacoes TEXT
);

CREATE TABLE IF NOT EXISTS eventos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    titulo TEXT NOT NULL,
    descricao TEXT,
    data_evento TEXT,
    hora_evento TEXT,
    tipo TEXT DEFAULT 'Outro',
    status TEXT DEFAULT 'Pendente',
    cliente_id INTEGER,
    valor REAL DEFAULT 0,
    observacoes TEXT,
    data_criacao TEXT
);

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    role TEXT DEFAULT 'user',
    is_active INTEGER DEFAULT 1
);

CREATE TABLE IF NOT EXISTS audits (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ts TEXT,
    user_id INTEGER,
    action TEXT,
    details TEXT
);

CREATE TABLE IF NOT EXISTS settings (key TEXT PRIMARY KEY, value TEXT);
'''


class SQLiteStore(Store):
    backend = 'sqlite'

    def __init__(self, path):
        self.path = path
        self.db = sqlite3.connect(path)
        self.db.row_factory = sqlite3.Row

    @property
    def location(self):
        return self.path

    def _execute(self, query, params=()):
        try:
            return self.db.execute(query, params)
        except sqlite3.Error as e:
            raise StoreError(f"Erro no banco de dados: {e}")

    def read_sheet(self, table):
        return self.all(table)

    def write_sheet(self, table, rows):
        columns_for(table)
        try:
            with self.db:
                self.db.execute(f'DELETE FROM {table}')
                for row in rows:
                    clean = normalize_row(table, row)
                    if table != 'settings' and clean.get('id') is None:
                        clean.pop('id')
                    cols = list(clean)
                    self.db.execute(
                        f'INSERT INTO {table} ({", ".join(cols)}) VALUES ({", ".join("?" for _ in cols)})',
                        [clean[c] for c in cols])
        except sqlite3.Error as e:
            raise StoreError(f"Erro ao salvar {table}: {e}")
        logger.debug("Dados salvos em %s: %d registros", table, len(rows))

    def all(self, table):
        order = 'key' if table == 'settings' else 'id'
        columns_for(table)
        rows = self._execute(f'SELECT * FROM {table} ORDER BY {order}').fetchall()
        return [dict(r) for r in rows]

    def get(self, table, id):
        columns_for(table)
        row = self._execute(f'SELECT * FROM {table} WHERE id = ?', (id,)).fetchone()
        return dict(row) if row else None

    def find(self, table, **filters):
        columns = columns_for(table)
        query = f'SELECT * FROM {table}'
        params = []
        if filters:
            for column in filters:
                if column not in columns:
                    raise StoreError(f"Coluna desconhecida: {table}.{column}")
            query += ' WHERE ' + ' AND '.join(f'{c} IS ?' for c in filters)
            params = list(filters.values())
        query += ' ORDER BY id'
        return [dict(r) for r in self._execute(query, params).fetchall()]

    def insert(self, table, row):
        clean = normalize_row(table, row)
        clean.pop('id', None)
        cols = list(clean)
        cursor = self._execute(
            f'INSERT INTO {table} ({", ".join(cols)}) VALUES ({", ".join("?" for _ in cols)})',
            [clean[c] for c in cols])
        self.db.commit()
        return self.get(table, cursor.lastrowid)

    def update(self, table, id, fields):
        columns = columns_for(table)
        current = self.get(table, id)
        if current is None:
            return None
        changed = [c for c in columns if c != 'id' and c in fields]
        if changed:
            # Coerce through the same rules the sheet backends use
            merged = normalize_row(table, {**current, **fields})
            params = [merged[c] for c in changed]
            params.append(id)
            self._execute(f'UPDATE {table} SET {", ".join(f"{c} = ?" for c in changed)} WHERE id = ?', params)
            self.db.commit()
        return self.get(table, id)

    def delete(self, table, id):
        columns_for(table)
        cursor = self._execute(f'DELETE FROM {table} WHERE id = ?', (id,))
        self.db.commit()
        return cursor.rowcount > 0

    def delete_where(self, table, column, value):
        if column not in columns_for(table):
            raise StoreError(f"Coluna desconhecida: {table}.{column}")
        cursor = self._execute(f'DELETE FROM {table} WHERE {column} IS ?', (value,))
        self.db.commit()
        return cursor.rowcount

    def get_settings(self):
        rows = self._execute('SELECT key, value FROM settings').fetchall()
        return {r['key']: r['value'] for r in rows}

    def set_setting(self, key, value):
        self._execute('INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)',
                      (key, None if value is None else str(value)))
        self.db.commit()

    def initialize(self):
        try:
            self.db.executescript(SCHEMA)
            self.db.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Erro ao criar tabelas: {e}")

    def verify(self):
        rows = self._execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        existing = {r['name'] for r in rows}
        missing = [t for t in TABLES if t not in existing]
        if missing:
            logger.error("Tabelas ausentes: %s", ', '.join(missing))
            return False
        return True

    def close(self):
        self.db.close()
