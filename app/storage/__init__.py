from .base import SHEETS, SYSTEM_TABLES, TABLES, Store, StoreError
from .json_store import JsonStore
from .remote_store import RemoteStore
from .sqlite_store import SQLiteStore
from .workbook_store import WorkbookStore

BACKENDS = ('sqlite', 'json', 'xlsx', 'remote')


def create_store(config):
    """Build the store selected by ``STORAGE_BACKEND``."""
    backend = config.get('STORAGE_BACKEND', 'sqlite')
    if backend == 'sqlite':
        return SQLiteStore(config['DATABASE'])
    if backend == 'json':
        return JsonStore(config['JSON_STORE_FILE'])
    if backend == 'xlsx':
        return WorkbookStore(config['WORKBOOK_FILE'])
    if backend == 'remote':
        if not config.get('REMOTE_STORE_URL'):
            raise StoreError('REMOTE_STORE_URL não configurada')
        return RemoteStore(config['REMOTE_STORE_URL'],
                           local=SQLiteStore(config['DATABASE']),
                           username=config.get('REMOTE_STORE_USERNAME'),
                           password=config.get('REMOTE_STORE_PASSWORD'),
                           token=config.get('REMOTE_STORE_TOKEN'),
                           session=config.get('REMOTE_STORE_SESSION'))
    raise StoreError(f"Backend de armazenamento desconhecido: {backend}")


__all__ = ['BACKENDS', 'SHEETS', 'SYSTEM_TABLES', 'TABLES', 'Store', 'StoreError', 'JsonStore',
           'RemoteStore', 'SQLiteStore', 'WorkbookStore', 'create_store']
