# backend/__init__.py

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix
import logging
import os


logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _env_flag(name, default):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'change-me-in-production')

app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///voting.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
    # Concurrent writers wait on the file lock instead of failing with "database is locked"
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        'connect_args': {
            'timeout': float(os.environ.get('SQLITE_BUSY_TIMEOUT', '30')),
            'check_same_thread': False,
        }
    }

app.config['MAX_CANDIDATES'] = int(os.environ.get('MAX_CANDIDATES', '16'))
app.config['AUDIT_LOG_DIR'] = os.environ.get('AUDIT_LOG_DIR', 'logs')
app.config['AUDIT_KEY_PATH'] = os.environ.get('AUDIT_KEY_PATH')
app.config['MIN_FREE_DISK_GB'] = float(os.environ.get('MIN_FREE_DISK_GB', '0.1'))

app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'true')
app.config['RATELIMIT_STORAGE_URI'] = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
app.config['VOTE_RATE_LIMIT'] = os.environ.get('VOTE_RATE_LIMIT', '60/minute')

# Voter identity is the client address; honor the proxy's X-Forwarded-For
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=int(os.environ.get('PROXY_FIX_X_FOR', '1')), x_proto=1, x_host=1)

# Initialize extensions
db = SQLAlchemy(app)
migrate = Migrate(app, db)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[os.environ.get('RATELIMIT_DEFAULT', '10000/hour')],
)
limiter.init_app(app)

socketio = SocketIO(
    app,
    async_mode=os.environ.get('SOCKETIO_ASYNC_MODE', 'threading'),
    cors_allowed_origins=os.environ.get('CORS_ALLOWED_ORIGINS', '*'),
)


# Models must be imported before create_all so the metadata is populated
from backend.database import models  # noqa: E402,F401

with app.app_context():
    db.create_all()
    logger.info("Database ready at %s", app.config['SQLALCHEMY_DATABASE_URI'])

from backend import routes  # noqa: E402,F401
