# Mock backup API server (Flask) - simple in-memory store
from flask import Flask, jsonify, request
import uuid, time
import random

API_VERSION = 'application/vnd.go.cd.v2+json'
PROGRESS_STEPS = ['CREATING_DIR', 'BACKUP_CONFIG', 'BACKUP_DATABASE', 'POST_BACKUP_SCRIPT_START']


def create_app(polls_until_done=2, retry_after=1, fail=False, failure_rate=0.0):
    """Build a mock server that reports IN_PROGRESS for `polls_until_done` polls.

    `fail` forces the final status to ERROR; `failure_rate` picks it at random.
    """
    app = Flask(__name__)
    BACKUPS = {}

    def error(message, code):
        return jsonify({'message': message}), code

    @app.before_request
    def check_api_version():
        if request.headers.get('Accept') != API_VERSION:
            return error('The url you are trying to reach appears to be incorrect.', 404)

    # --- Backup Trigger Endpoint (/go/api/backups) ---
    @app.route('/go/api/backups', methods=['POST'])
    def create_backup():
        if request.headers.get('X-GoCD-Confirm', '').lower() != 'true':
            return error("Missing required header 'X-GoCD-Confirm' with value 'true'", 400)

        failed = fail or random.random() < failure_rate
        backup_id = str(uuid.uuid4())
        BACKUPS[backup_id] = {
            'polls': 0,
            'failed': failed,
            'time': time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime()),
            'user': request.headers.get('X-User', 'admin'),
        }
        response = jsonify({'message': 'Backup started'})
        response.status_code = 202
        response.headers['Location'] = f'/go/api/backups/{backup_id}'
        response.headers['Retry-After'] = str(retry_after)
        return response

    # --- Backup Status Endpoint (/go/api/backups/<id>) ---
    @app.route('/go/api/backups/<backup_id>', methods=['GET'])
    def backup_status(backup_id):
        entry = BACKUPS.get(backup_id)
        if entry is None:
            return error(f"Backup '{backup_id}' not found.", 404)

        entry['polls'] += 1
        body = {'time': entry['time'], 'user': {'name': entry['user']}}
        if entry['polls'] <= polls_until_done:
            step = PROGRESS_STEPS[min(entry['polls'] - 1, len(PROGRESS_STEPS) - 1)]
            body.update(status='IN_PROGRESS', message=f'Step {entry["polls"]}: {step}', progress_status=step)
        elif entry['failed']:
            body.update(status='ERROR', message='Backup failed: disk full')
        else:
            body.update(status='COMPLETED', message='Backup was generated successfully.')
        return jsonify(body), 200

    app.config['BACKUPS'] = BACKUPS
    return app


if __name__ == '__main__':
    # Flask application entry point
    create_app(polls_until_done=3, failure_rate=0.25).run(host='0.0.0.0', port=8153)
