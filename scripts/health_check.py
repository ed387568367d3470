import os
import sys

import requests
from dotenv import load_dotenv

load_dotenv()

BASE_URL = os.environ.get('HEALTH_CHECK_URL', 'http://localhost:5000').rstrip('/')

REQUIRED_SHEETS = ['clientes', 'produtos', 'pedidos', 'itens_pedido', 'fiados', 'pagamentos_fiado',
                   'despesas_entradas', 'comodatos', 'eventos']

def login(session):
    print("[-] Logging in...")
    r = session.post(f"{BASE_URL}/api/auth/login", json={
        'username': os.environ.get('ADMIN_USERNAME', 'admin'),
        'password': os.environ.get('ADMIN_PASSWORD', 'admin')
    }, timeout=5)
    if r.status_code != 200:
        print(f"  [FAIL] Login returned {r.status_code}: {r.text}")
        return False
    session.headers.update({'Authorization': f"Bearer {r.json()['access_token']}"})
    print("  [OK] Logged in.")
    return True

def check_storage(session):
    print("\n[-] Verifying storage...")
    r = session.get(f"{BASE_URL}/api/verify", timeout=10)
    info = r.json()
    status = 'OK' if info.get('valid') else 'FAIL'
    print(f"  [{status}] Backend '{info.get('backend')}' at {info.get('path')}")
    return bool(info.get('valid'))

def check_sheets(session):
    print("\n[-] Verifying sheets...")
    ok = True
    for sheet in REQUIRED_SHEETS:
        r = session.get(f"{BASE_URL}/api/data/{sheet}", timeout=10)
        if r.status_code == 200 and isinstance(r.json(), list):
            print(f"  [OK] Sheet '{sheet}' ({len(r.json())} rows).")
        else:
            print(f"  [FAIL] Sheet '{sheet}' returned {r.status_code}.")
            ok = False
    return ok

def check_dashboard(session):
    print("\n[-] Verifying dashboard...")
    r = session.get(f"{BASE_URL}/api/dashboard", timeout=10)
    if r.status_code != 200:
        print(f"  [FAIL] Dashboard returned {r.status_code}.")
        return False
    print(f"  [OK] Saldo total: {r.json()['saldo_total']:.2f}")
    return True

if __name__ == "__main__":
    print(f"=== SYSTEM HEALTH CHECK ({BASE_URL}) ===")
    session = requests.Session()
    try:
        healthy = login(session) and check_storage(session)
        healthy = healthy and check_sheets(session) and check_dashboard(session)
    except requests.RequestException as e:
        print(f"\n[CRITICAL ERROR] {e}")
        sys.exit(2)
    print("\n=== CHECK COMPLETED ===" if healthy else "\n=== CHECK FAILED ===")
    sys.exit(0 if healthy else 1)
