# backend/audit/audit_logger.py

import os
import json
import hashlib
import base64
import logging
from datetime import datetime, timezone
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives import serialization

# Tamper-evident audit trail of candidate and ballot activity.
# Each JSON line carries the SHA-256 of the previous entry and an Ed25519
# signature over its own canonical form.

logger = logging.getLogger(__name__)


class AuditLogger:
    def __init__(self, log_dir='logs', key_path=None):
        """
        log_dir: directory holding audit.log (created if missing)
        key_path: PEM file for the signing key; generated there on first use.
            Without it a fresh key is generated per process and older
            entries can no longer be verified after a restart.
        """
        self.log_dir = log_dir
        self.log_file = os.path.join(log_dir, 'audit.log')
        self.previous_hash = None

        os.makedirs(log_dir, exist_ok=True)

        self.signing_key = self._load_signing_key(key_path)
        self._load_previous_hash()

    def _load_signing_key(self, key_path):
        if not key_path:
            return Ed25519PrivateKey.generate()
        if os.path.exists(key_path):
            with open(key_path, 'rb') as f:
                return serialization.load_pem_private_key(f.read(), password=None)

        key = Ed25519PrivateKey.generate()
        key_dir = os.path.dirname(key_path)
        if key_dir:
            os.makedirs(key_dir, exist_ok=True)
        with open(key_path, 'wb') as f:
            f.write(key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            ))
        logger.info("Generated audit signing key at %s", key_path)
        return key

    def _load_previous_hash(self):
        if not os.path.exists(self.log_file):
            return
        with open(self.log_file, 'r') as f:
            lines = [line for line in f if line.strip()]
        if lines:
            try:
                self.previous_hash = json.loads(lines[-1]).get('hash')
            except ValueError:
                logger.warning("Last audit entry in %s is unreadable; starting a new chain", self.log_file)
                self.previous_hash = None

    @staticmethod
    def _canonical(entry):
        return json.dumps(entry, sort_keys=True).encode()

    def log_security_event(self, event_type, data, user_id=None):
        """Append one event. Failures are logged and never raised to the caller."""
        try:
            log_entry = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "event_type": event_type,
                "data": data,
                "user_id": user_id,
                "previous_hash": self.previous_hash,
            }
            entry_json = self._canonical(log_entry)
            entry_hash = hashlib.sha256(entry_json).hexdigest()
            signature = self.signing_key.sign(entry_json)
            log_entry['hash'] = entry_hash
            log_entry['signature'] = base64.b64encode(signature).decode()

            with open(self.log_file, 'a') as f:
                f.write(json.dumps(log_entry) + "\n")

            self.previous_hash = entry_hash
        except (OSError, TypeError, ValueError) as e:
            logger.error("Audit log error for %s: %s", event_type, e)

    def verify_log_integrity(self):
        if not os.path.exists(self.log_file):
            return True
        public_key = self.signing_key.public_key()
        previous_hash = None
        try:
            with open(self.log_file, 'r') as f:
                for line in f:
                    if not line.strip():
                        continue
                    log_entry = json.loads(line)
                    if log_entry.get('previous_hash') != previous_hash:
                        return False
                    signature = base64.b64decode(log_entry.pop('signature'))
                    entry_hash = log_entry.pop('hash')
                    entry_json = self._canonical(log_entry)
                    if hashlib.sha256(entry_json).hexdigest() != entry_hash:
                        return False
                    public_key.verify(signature, entry_json)
                    previous_hash = entry_hash
        except (InvalidSignature, KeyError, ValueError) as e:
            logger.warning("Audit log %s failed verification: %s", self.log_file, e)
            return False
        return True
