from datetime import date, datetime, timedelta

def to_float(value):
    """Form-style coercion: anything missing or not numeric counts as zero."""
    if value is None or value == '':
        return 0.0
    if isinstance(value, bool):
        return float(value)
    try:
        result = float(str(value).replace(',', '.')) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN (e.g. an empty spreadsheet cell read back by pandas)
    if result != result:
        return 0.0
    return result

def to_int(value):
    return int(to_float(value))

def to_text(value):
    """Form-style text: missing is empty, anything else is stripped str."""
    return '' if value is None else str(value).strip()

def today_iso():
    return date.today().isoformat()

def now_iso(delta_days=0):
    return (datetime.now() + timedelta(days=delta_days)).strftime('%Y-%m-%d %H:%M:%S')

def parse_date(value):
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()
    except ValueError:
        return None

def add_days(day, days):
    return day + timedelta(days=days)

def format_currency(value):
    """R$ 1.234,56"""
    try:
        value = float(value)
    except (TypeError, ValueError):
        value = 0.0
    sign = '-' if value < 0 else ''
    formatted = f"{abs(value):,.2f}".replace(',', 'X').replace('.', ',').replace('X', '.')
    return f"{sign}R$ {formatted}"

STATUS_PEDIDO = {
    'pendente': 'Pendente',
    'producao': 'Em Produção',
    'pronto': 'Pronto',
    'entregue': 'Entregue'
}

STATUS_COLORS = {
    'pendente': '#ffc107',
    'producao': '#17a2b8',
    'pronto': '#28a745',
    'entregue': '#6c757d'
}

def status_color_filter(status):
    return STATUS_COLORS.get(status, '#007bff')

TIPOS_LANCAMENTO = ('Despesas', 'Entradas', 'Bônus')

STATUS_EVENTO = ('Pendente', 'Concluído', 'Cancelado')

TIPOS_EVENTO = ('Reunião', 'Pagamento', 'Entrega', 'Evento', 'Lembrete', 'Outro')
