from flask import Flask
from flask_cors import CORS
from waitress import serve
from poolbalance.core.config import init_logging, logger, HOST, PORT
from poolbalance.api.routes import api_bp


def create_app():
    app = Flask(__name__)
    CORS(app)

    # Register Blueprints
    app.register_blueprint(api_bp)

    @app.after_request
    def add_header(response):
        """Disable caching, every calculation is computed fresh."""
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '-1'
        return response

    return app


app = create_app()


def run():
    init_logging()
    logger.info(f"Starting Production Server (Waitress) on {HOST}:{PORT}...")
    serve(app, host=HOST, port=PORT)


if __name__ == '__main__':
    run()
