from flask import Flask
from promo_pay.config import Config
from promo_pay.api.routes import register_routes
from promo_pay.utils.helpers import configure_logging

def create_app(config=None, session=None):
    app = Flask(__name__)
    app.config.from_object(config or Config)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    register_routes(app, session)

    return app

if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, use_reloader=False)
