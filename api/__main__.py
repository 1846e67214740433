"""
Development server: `python -m api`.
Production runs the factory under a WSGI server instead, e.g.
`gunicorn "api:create_app()"`.
"""
import os
from . import create_app

# APP_ENV picks the config class (see get_config())
app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    debug = os.getenv("FLASK_DEBUG", str(app.config.get("DEBUG", False))).lower() in ("1", "true", "yes")
    app.run(host=host, port=port, debug=debug)
