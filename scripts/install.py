from __future__ import annotations
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from backslash import create_app


def install(config_object: str = 'config.DevelopmentConfig') -> None:
    """Install the database for ``config_object`` and report what was done."""
    app = create_app(config_object)
    with app.app_context():
        report = app.extensions['backslash'].install()
        print(f"Migrated {len(report.migrated)} entities: {', '.join(report.migrated)}")
        print(f"Seeded {report.lookup_rows} lookup rows")
        if report.admin is not None:
            print(f"Created admin user '{report.admin.username}'")


if __name__ == '__main__':
    install(sys.argv[1] if len(sys.argv) > 1 else 'config.DevelopmentConfig')
