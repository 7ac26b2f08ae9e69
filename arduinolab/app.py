import logging

from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from arduinolab.cache import ViewCache
from arduinolab.config import Config
from arduinolab.routes.admin import admin_bp
from arduinolab.routes.ai import ai_bp
from arduinolab.routes.auth import auth_bp
from arduinolab.routes.comments import comments_bp
from arduinolab.routes.projects import projects_bp


def create_app(config=Config, store=None, llm_client=None):
    """Application factory.

    ``store`` and ``llm_client`` replace the Supabase-backed store and the
    OpenAI client, for tests and scripts.
    """
    app = Flask(__name__)
    app.config.from_object(config)
    if not app.config.get('TESTING'):
        config.validate()
        logging.basicConfig(level=logging.INFO)

    # Initialize extensions
    CORS(app)
    JWTManager(app)

    app.extensions['arduinolab.views'] = ViewCache()
    app.extensions['arduinolab.store'] = store
    app.extensions['arduinolab.llm'] = llm_client

    if store is None:
        # Supabase clients are created per request, see supabase_client.get_supabase
        app.logger.info("Using Supabase project: %s", app.config['SUPABASE_URL'])

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(projects_bp, url_prefix='/api/projects')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(comments_bp, url_prefix='/api/comments')
    app.register_blueprint(ai_bp, url_prefix='/api/ai')

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=5000, debug=True)
