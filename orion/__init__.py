from flask import Flask, jsonify
from config import Config
from flask_login import LoginManager
from flask_wtf import CSRFProtect
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException
from .errors import OrionError
from .generation import generator_from_config
from .models import db, User
from .verification import AnswerVerifier
import logging
import os

login_manager = LoginManager()
csrf = CSRFProtect()

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ensure instance folder exists
    os.makedirs(os.path.join(app.instance_path), exist_ok=True)

    # initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)

    # collaborators used by the game routes; tests swap these out
    app.extensions["orion_generator"] = generator_from_config(app.config)
    app.extensions["orion_verifier"] = AnswerVerifier()

    from .auth.routes import auth_bp
    from .game.routes import game_bp
    from .users.routes import users_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(game_bp)
    app.register_blueprint(users_bp)

    from .cli import register_commands

    register_commands(app)
    register_error_handlers(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify(status="fail", code="unauthorized", message="Please log in to continue."), 401

    with app.app_context():
        db.create_all()

    return app


def register_error_handlers(app):
    @app.errorhandler(OrionError)
    def handle_orion_error(exc):
        if exc.status >= 500:
            logger.error("%s: %s", exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status

    @app.errorhandler(CSRFError)
    def handle_csrf_error(exc):
        return jsonify(status="fail", code="csrf_failed", message=exc.description), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        status = "fail" if exc.code < 500 else "error"
        return jsonify(status=status, code=exc.name.lower().replace(" ", "_"), message=exc.description), exc.code
