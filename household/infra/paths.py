from pathlib import Path

from household.utilities import config

# Centralized location of the JSON tables (single source of truth)
DATA_DIR: Path = Path(config.DATA_DIR).resolve()

TABLES = (
    'users', 'bills', 'bill_payments', 'stock_items', 'usage_logs', 'shipping_profiles',
    'shipments', 'shipment_events', 'online_orders', 'investment_accounts',
    'investment_transactions', 'investment_valuations', 'gmail_connections', 'blackouts', 'weight_readings',
)


def table_file(name: str) -> Path:
    """JSON file backing a table (resolved against the current DATA_DIR)."""
    return DATA_DIR / f'{name}.json'


__all__ = ['DATA_DIR', 'TABLES', 'table_file']
