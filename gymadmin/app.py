import logging
import os

from flask import Flask, request
from flask_bcrypt import Bcrypt

from gymadmin.models.database import init_db, seed_default_admin
from gymadmin.routes.auth import auth_bp
from gymadmin.routes.check_ins import check_ins_bp
from gymadmin.routes.dashboard import dashboard_bp
from gymadmin.routes.members import members_bp
from gymadmin.routes.payments import payments_bp
from gymadmin.routes.workouts import workouts_bp
from gymadmin.utils.errors import register_error_handlers


def create_app(test_config=None):
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get(
        'SECRET_KEY',
        'your-secret-key-change-in-production'
    )
    app.config['DATABASE_PATH'] = os.environ.get('DATABASE_PATH', 'gym_admin.db')
    app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET_KEY')
    app.config['JWT_ALGORITHM'] = 'HS256'
    app.config['JWT_EXPIRES_IN'] = int(os.environ.get('JWT_EXPIRES_IN', '604800'))
    app.config['BCRYPT_LOG_ROUNDS'] = int(os.environ.get('BCRYPT_LOG_ROUNDS', '12'))
    app.config['API_PREFIX'] = os.environ.get('API_PREFIX', '/api')
    app.config['APP_ENV'] = os.environ.get('APP_ENV', 'development')
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')
    app.config['DEFAULT_ADMIN_EMAIL'] = os.environ.get('DEFAULT_ADMIN_EMAIL')
    app.config['DEFAULT_ADMIN_PASSWORD'] = os.environ.get('DEFAULT_ADMIN_PASSWORD')

    if test_config:
        app.config.update(test_config)
    if not app.config.get('JWT_SECRET_KEY'):
        app.config['JWT_SECRET_KEY'] = app.config['SECRET_KEY']

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    # Password hashing
    app.bcrypt = Bcrypt(app)

    # Initialize database (and the first admin account when configured)
    with app.app_context():
        init_db(app.config['DATABASE_PATH'])
        if app.config['DEFAULT_ADMIN_EMAIL'] and app.config['DEFAULT_ADMIN_PASSWORD']:
            seed_default_admin(
                app.config['DATABASE_PATH'],
                app.config['DEFAULT_ADMIN_EMAIL'],
                app.config['DEFAULT_ADMIN_PASSWORD'],
            )

    register_error_handlers(app)

    prefix = app.config['API_PREFIX'].rstrip('/')
    app.register_blueprint(auth_bp, url_prefix=f'{prefix}/auth')
    app.register_blueprint(members_bp, url_prefix=f'{prefix}/members')
    app.register_blueprint(payments_bp, url_prefix=f'{prefix}/payments')
    app.register_blueprint(workouts_bp, url_prefix=f'{prefix}/workouts')
    app.register_blueprint(check_ins_bp, url_prefix=f'{prefix}/check-ins')
    app.register_blueprint(dashboard_bp, url_prefix=f'{prefix}/dashboard')

    @app.route(f'{prefix}/health')
    def health():
        return {'success': True, 'message': 'OK', 'data': {'env': app.config['APP_ENV']}}

    @app.after_request
    def log_response(response):
        app.logger.debug("%s %s -> %s", request.method, request.path, response.status_code)
        return response

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, host='0.0.0.0', port=int(os.environ.get('PORT', '5000')))
