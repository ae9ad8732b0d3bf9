"""Example: use the service layer without Flask.

Prints the all-time participation statistics for the configured bucket.
"""

import importlib

from config import get_settings_module

from src.stamp_rally.stamp_rally.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(storage_config=settings.STORAGE_CONFIG)
    snapshot = container.statistics_service.compute()
    print(f"users={snapshot.total_users} completion={snapshot.completion_rate_label}%")
    for stat in snapshot.stamp_stats.values():
        print(f"  {stat.name}: {stat.count} ({stat.percentage_label}%)")


if __name__ == "__main__":
    main()
