"""Application entry point.

This small wrapper module creates the Flask application using the factory
defined in ``backslash/__init__.py``.  Running it directly installs the
database (tables, lookup rows and the ``backslash`` administrator) before the
development server starts, so a fresh checkout is usable right away.
"""

from backslash import create_app

app = create_app()

if __name__ == "__main__":
    # The install queries need an application context; create_app does not
    # touch the database on its own.
    with app.app_context():
        app.extensions['backslash'].install()
    app.run(debug=True)
