"""HTTP surface: Flask blueprints, auth guard and error handlers."""
