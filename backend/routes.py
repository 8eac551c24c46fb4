# backend/routes.py

# HTTP API and Socket.IO live-update channel for the ballot and admin views.
# Views validate the request, call the registry/ledger/aggregator, record an
# audit event and render JSON; VotingError subclasses become error responses.

from flask import request, jsonify, send_file
import logging
from backend import app, limiter, socketio
from backend.audit.audit_logger import AuditLogger
from backend.errors import AlreadyVotedError, ValidationError, VotingError
from backend.export.excel_export import XLSX_MIMETYPE, build_audit_workbook, export_filename
from backend.notifications.notifier import ChangeNotifier
from backend.operations.health_monitor import check_health
from backend.security.input_validator import InputValidator
from backend.voting.ledger import VoteLedger
from backend.voting.registry import CandidateRegistry
from backend.voting.results import ResultsAggregator

logger = logging.getLogger(__name__)

notifier = ChangeNotifier()
registry = CandidateRegistry(notifier, max_candidates=app.config['MAX_CANDIDATES'])
ledger = VoteLedger(notifier)
aggregator = ResultsAggregator()
validator = InputValidator()
audit_logger = AuditLogger(log_dir=app.config['AUDIT_LOG_DIR'], key_path=app.config['AUDIT_KEY_PATH'])


@app.errorhandler(VotingError)
def handle_voting_error(error):
    if error.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.path, getattr(error, 'detail', error))
    return jsonify(error.to_dict()), error.status_code


# --- Candidates ---

@app.route('/api/candidates', methods=['GET'])
def list_candidates():
    return jsonify(registry.list_candidates())


@app.route('/api/candidates', methods=['POST'])
def add_candidate():
    payload = validator.validate_candidate_data(request.get_json(silent=True) or {})
    candidate = registry.add_candidate(payload.name, payload.description, payload.image_url)
    audit_logger.log_security_event('candidate_added', {'candidate_id': candidate['id'], 'name': candidate['name']},
                                    user_id=request.remote_addr)
    return jsonify(candidate)


@app.route('/api/candidates/<int:candidate_id>', methods=['PUT'])
def update_candidate(candidate_id):
    payload = validator.validate_candidate_data(request.get_json(silent=True) or {})
    candidate = registry.update_candidate(candidate_id, payload.name, payload.description, payload.image_url)
    audit_logger.log_security_event('candidate_updated', {'candidate_id': candidate_id, 'name': candidate['name']},
                                    user_id=request.remote_addr)
    return jsonify(candidate)


@app.route('/api/candidates/<int:candidate_id>', methods=['DELETE'])
def delete_candidate(candidate_id):
    changes = registry.delete_candidate(candidate_id)
    audit_logger.log_security_event('candidate_deleted', {'candidate_id': candidate_id, 'changes': changes},
                                    user_id=request.remote_addr)
    return jsonify({'message': 'Candidate deleted successfully', 'changes': changes})


# --- Voting ---

@app.route('/api/vote', methods=['POST'])
@limiter.limit(lambda: app.config['VOTE_RATE_LIMIT'])
def cast_vote():
    ip = request.remote_addr
    try:
        payload = validator.validate_vote_data(request.get_json(silent=True) or {})
        vote_id = ledger.cast_vote(payload.candidate_id, ip)
    except AlreadyVotedError:
        audit_logger.log_security_event('duplicate_vote_attempt', {'ip': ip})
        raise
    except ValidationError as e:
        audit_logger.log_security_event('vote_rejected', {'ip': ip, 'reason': e.message})
        raise

    audit_logger.log_security_event('vote_cast', {'vote_id': vote_id, 'candidate_id': payload.candidate_id, 'ip': ip})
    return jsonify({'message': 'Vote submitted successfully', 'voteId': vote_id})


@app.route('/api/vote/status', methods=['GET'])
def vote_status():
    ip = request.remote_addr
    return jsonify({'ip_address': ip, 'has_voted': ledger.has_voted(ip)})


# --- Results & audit ---

@app.route('/api/results', methods=['GET'])
def results():
    return jsonify([row.to_dict() for row in aggregator.compute_results()])


@app.route('/api/votes/details', methods=['GET'])
def vote_details():
    return jsonify(ledger.list_votes_detailed())


@app.route('/api/export/excel', methods=['GET'])
def export_excel():
    workbook = build_audit_workbook(ledger.list_votes_detailed(), aggregator.summary())
    audit_logger.log_security_event('audit_exported', {}, user_id=request.remote_addr)
    return send_file(workbook, mimetype=XLSX_MIMETYPE, as_attachment=True, download_name=export_filename())


@app.route('/api/health', methods=['GET'])
def health():
    res = check_health(app.config['MIN_FREE_DISK_GB'])
    return jsonify(res), 200 if res['overall_ok'] else 503


# --- Live updates ---

def _socket_handle(sid):
    def deliver(event_kind):
        socketio.emit(event_kind, to=sid)
    return deliver


@socketio.on('connect')
def handle_connect(auth=None):
    notifier.connect(request.sid, _socket_handle(request.sid))


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    notifier.disconnect(request.sid)
