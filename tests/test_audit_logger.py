import os
import json
import pytest
from backend.audit.audit_logger import AuditLogger


@pytest.fixture
def temp_log_dir(tmp_path):
    """Create a temporary directory for test logs."""
    log_dir = tmp_path / "test_logs"
    log_dir.mkdir()
    return str(log_dir)


@pytest.fixture
def audit_logger(temp_log_dir):
    return AuditLogger(log_dir=temp_log_dir)


def _entries(logger):
    with open(logger.log_file, 'r') as f:
        return [json.loads(line) for line in f if line.strip()]


def test_init_creates_log_directory(temp_log_dir):
    os.rmdir(temp_log_dir)
    AuditLogger(log_dir=temp_log_dir)
    assert os.path.exists(temp_log_dir)


def test_log_vote_event(audit_logger):
    audit_logger.log_security_event('vote_cast', {'vote_id': 1, 'ip': '1.1.1.1'}, user_id='1.1.1.1')

    entry = _entries(audit_logger)[0]
    assert entry['event_type'] == 'vote_cast'
    assert entry['data'] == {'vote_id': 1, 'ip': '1.1.1.1'}
    assert entry['user_id'] == '1.1.1.1'
    assert entry['previous_hash'] is None
    assert 'timestamp' in entry and 'hash' in entry and 'signature' in entry


def test_hash_chaining(audit_logger):
    audit_logger.log_security_event('candidate_added', {'candidate_id': 1})
    first_hash = audit_logger.previous_hash
    audit_logger.log_security_event('candidate_deleted', {'candidate_id': 1})

    second = _entries(audit_logger)[1]
    assert second['previous_hash'] == first_hash


def test_verify_log_integrity_valid(audit_logger):
    audit_logger.log_security_event('vote_cast', {'vote_id': 1})
    audit_logger.log_security_event('duplicate_vote_attempt', {'ip': '1.1.1.1'})
    assert audit_logger.verify_log_integrity() is True


def test_verify_log_integrity_empty(audit_logger):
    assert audit_logger.verify_log_integrity() is True


def test_verify_detects_edited_entry(audit_logger):
    audit_logger.log_security_event('vote_cast', {'vote_id': 1, 'candidate_id': 2})

    entries = _entries(audit_logger)
    entries[0]['data']['candidate_id'] = 3
    with open(audit_logger.log_file, 'w') as f:
        f.write(json.dumps(entries[0]) + "\n")

    assert audit_logger.verify_log_integrity() is False


def test_verify_detects_appended_garbage(audit_logger):
    audit_logger.log_security_event('vote_cast', {'vote_id': 1})
    with open(audit_logger.log_file, 'a') as f:
        f.write('{"tampered": true}\n')
    assert audit_logger.verify_log_integrity() is False


def test_previous_hash_survives_restart(temp_log_dir):
    first = AuditLogger(log_dir=temp_log_dir)
    first.log_security_event('vote_cast', {'vote_id': 1})

    second = AuditLogger(log_dir=temp_log_dir)
    assert second.previous_hash == first.previous_hash


def test_persisted_key_verifies_after_restart(temp_log_dir, tmp_path):
    key_path = str(tmp_path / "keys" / "audit.pem")
    first = AuditLogger(log_dir=temp_log_dir, key_path=key_path)
    first.log_security_event('vote_cast', {'vote_id': 1})
    assert os.path.exists(key_path)

    second = AuditLogger(log_dir=temp_log_dir, key_path=key_path)
    second.log_security_event('vote_cast', {'vote_id': 2})
    assert second.verify_log_integrity() is True


def test_write_failure_is_not_raised(audit_logger, monkeypatch):
    def mock_open(*args, **kwargs):
        raise PermissionError("Access denied")

    monkeypatch.setattr("builtins.open", mock_open)
    audit_logger.log_security_event('vote_cast', {'vote_id': 1})
