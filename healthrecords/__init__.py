import os
from flask import Flask
from healthrecords.extensions import db, bcrypt, migrate, jwt, limiter, cors, socketio
from healthrecords.utils.encryption_util import encryptor
from healthrecords.utils.cloudinary_util import cloudinary_manager
from healthrecords.utils.error_handlers import register_error_handlers
from healthrecords.commands import register_commands
from config import config

def create_app(config_name=None):
    app = Flask(__name__)

    config_name = config_name or os.getenv('FLASK_CONFIG', 'default')
    config_class = config[config_name]
    app.config.from_object(config_class)

    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    cors.init_app(
        app,
        origins=app.config['ALLOWED_ORIGINS'],
        supports_credentials=True,
        allow_headers=['Content-Type', 'Authorization', 'X-Requested-With'],
        methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS']
    )

    # Initialize SocketIO with threading
    socketio.init_app(app, cors_allowed_origins=app.config['ALLOWED_ORIGINS'], async_mode='threading')

    # Initialize custom utilities
    encryptor.init_app(app)
    cloudinary_manager.init_app(app)

    # Logging handlers and the audit logger
    config_class.init_app(app)

    from healthrecords import models  # noqa: F401

    # Register blueprints
    from healthrecords.api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    from healthrecords.socket_handlers.chat_handler import init_chat_sessions, register_socket_handlers
    register_socket_handlers(socketio)
    init_chat_sessions(app)

    # Register error handlers and commands
    register_error_handlers(app)
    register_commands(app)

    # JWT token blacklist checker
    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        from healthrecords.models.system_models import RevokedToken
        jti = jwt_payload['jti']
        return RevokedToken.query.filter_by(jti=jti).first() is not None

    return app
