"""
Health Check and Monitoring Endpoints
Provides endpoints for liveness, readiness and process status.
"""
from flask import Blueprint, jsonify, current_app
from datetime import datetime
from sqlalchemy import text
import sys
import psutil
import os

from rota_app.models import get_db

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('/ping', methods=['GET'])
def ping():
    """
    Simple ping endpoint for basic connectivity checks.
    Returns: 200 OK with pong message
    """
    return jsonify({
        'status': 'ok',
        'message': 'pong',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness():
    """
    Readiness probe - checks that the database answers.

    Returns:
        200: Application is ready
        503: Application is not ready
    """
    checks = {'database': False}
    errors = []

    try:
        get_db().session.execute(text('SELECT 1'))
        checks['database'] = True
    except Exception as e:
        current_app.logger.error(f"Readiness check failed: {e}")
        errors.append(f"Database: {str(e)}")

    all_checks_passed = all(checks.values())
    response = {
        'status': 'ready' if all_checks_passed else 'not_ready',
        'checks': checks,
        'timestamp': datetime.utcnow().isoformat()
    }
    if errors:
        response['errors'] = errors

    return jsonify(response), 200 if all_checks_passed else 503


@health_bp.route('/status', methods=['GET'])
def status():
    """
    Detailed application status and process metrics.

    Returns:
        200: Status information
    """
    process = psutil.Process()
    memory_info = process.memory_info()
    database_uri = current_app.config.get('SQLALCHEMY_DATABASE_URI', '')

    return jsonify({
        'status': 'operational',
        'timestamp': datetime.utcnow().isoformat(),
        'application': {
            'name': 'Rota Engine',
            'version': current_app.config.get('APP_VERSION', '1.0.0'),
            'testing': current_app.testing,
            'debug': current_app.debug,
        },
        'system': {
            'python_version': sys.version,
            'platform': sys.platform,
            'process_id': os.getpid(),
        },
        'resources': {
            'memory': {
                'used_mb': round(memory_info.rss / 1024 / 1024, 2),
                'percent': round(process.memory_percent(), 2),
            },
            'cpu': {
                'percent': round(process.cpu_percent(interval=0.1), 2),
            },
        },
        'database': {
            'type': database_uri.split(':', 1)[0] if database_uri else 'unknown',
        },
        'rota': {
            'default_duration_minutes': current_app.config.get('ROTA_DEFAULT_DURATION_MINUTES'),
            'reject_on_warnings': current_app.config.get('ROTA_REJECT_ON_WARNINGS'),
        },
    }), 200
