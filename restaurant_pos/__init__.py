from flask import Flask, jsonify
from flask_smorest import Api
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_cors import CORS

from restaurant_pos.config import Config, ConfigurationError, engine_options_for

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
cors = CORS()


def create_app(config_class=Config):

    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        raise ConfigurationError("SQLALCHEMY_DATABASE_URI is not configured")
    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS",
        engine_options_for(app.config["SQLALCHEMY_DATABASE_URI"],
                           app.config["STORAGE_TIMEOUT_SECONDS"])
    )

    from .middleware import init_middleware
    from .services.tokens import TokenService
    from .services.users import CredentialStore

    # Fails fast when the signing secret is missing
    app.extensions["token_service"] = TokenService(
        secret=app.config.get("JWT_SECRET_KEY"),
        access_ttl=app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        refresh_ttl=app.config["JWT_REFRESH_TOKEN_EXPIRES"],
        store=CredentialStore(),
    )

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)

    from . import models  # noqa: F401  registers tables for migrations
    from .celery_config import make_celery
    from .controllers.user import blp as UserBlp
    from .controllers.table import blp as TableBlp
    from .controllers.menu import blp as MenuBlp
    from .controllers.food import blp as FoodBlp
    from .controllers.order import blp as OrderBlp
    from .controllers.order_item import blp as OrderItemBlp
    from .controllers.invoice import blp as InvoiceBlp
    from .services.logout import is_token_revoked

    app.extensions["celery"] = make_celery(app)

    @jwt.token_in_blocklist_loader
    def check_if_token_in_blocklist(jwt_header, jwt_payload):
        return is_token_revoked(jwt_payload)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"error": {
            "kind": "Expired",
            "type": "Unauthorized",
            "message": "The token has expired.",
            "status_code": 401,
        }}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({"error": {
            "kind": "InvalidSignature",
            "type": "Unauthorized",
            "message": f"Signature verification failed. {error}",
            "status_code": 401,
        }}), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({"error": {
            "kind": "AuthorizationRequired",
            "type": "Unauthorized",
            "message": "Request doesn't contain an access token.",
            "status_code": 401,
        }}), 401

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify({"error": {
            "kind": "TokenRevoked",
            "type": "Unauthorized",
            "message": "The token has been revoked.",
            "status_code": 401,
        }}), 401

    api = Api(app)
    api.register_blueprint(UserBlp)
    api.register_blueprint(TableBlp)
    api.register_blueprint(MenuBlp)
    api.register_blueprint(FoodBlp)
    api.register_blueprint(OrderBlp)
    api.register_blueprint(OrderItemBlp)
    api.register_blueprint(InvoiceBlp)

    # Registered after Api so our error envelope replaces flask-smorest's
    init_middleware(app)

    @app.route('/')
    def home():
        return jsonify({"message": "Welcome to the Restaurant POS API!"})

    return app
