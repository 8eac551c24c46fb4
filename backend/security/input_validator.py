# backend/security/input_validator.py

import html
import re
import bleach
from dataclasses import dataclass
from typing import Optional

from backend.errors import ValidationError

# Largest id a 64-bit signed integer column can hold.
MAX_CANDIDATE_ID = 2**63 - 1

# Request bodies are validated into explicit structures before they reach the
# registry or the ledger. Markup is stripped and the text is stored unescaped;
# renderers escape it on output.


@dataclass(frozen=True)
class CandidatePayload:
    name: str
    description: str
    image_url: str


@dataclass(frozen=True)
class VotePayload:
    candidate_id: int


class InputValidator:
    def __init__(self, max_name_length=100, max_reference_length=2048):
        self.max_name_length = max_name_length
        self.max_reference_length = max_reference_length

        self.patterns = {
            'xss_script': re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL),
            'xss_event': re.compile(r'\bon\w+\s*=', re.IGNORECASE),
            'positive_int': re.compile(r'^\s*\d+\s*$'),
        }

    def sanitize_string(self, input_str, max_length=255):
        if input_str is None:
            return ''
        if not isinstance(input_str, str):
            raise ValidationError("Input must be a string")
        if len(input_str) > max_length:
            input_str = input_str[:max_length]

        sanitized = re.sub(self.patterns['xss_script'], '', input_str)
        sanitized = re.sub(self.patterns['xss_event'], '', sanitized)
        sanitized = html.unescape(bleach.clean(sanitized, tags=[], attributes={}, strip=True))
        # unescaping can reintroduce a tag that was written as entities
        sanitized = re.sub(self.patterns['xss_script'], '', sanitized)
        return sanitized.strip()

    def validate_candidate_data(self, data) -> CandidatePayload:
        if not isinstance(data, dict):
            raise ValidationError("Candidate data must be a JSON object")

        name = self.sanitize_string(data.get('name'), self.max_name_length)
        if not name:
            raise ValidationError("Candidate name is required")

        return CandidatePayload(
            name=name,
            description=self.sanitize_string(data.get('description'), self.max_reference_length),
            image_url=self.sanitize_string(data.get('image_url'), self.max_reference_length),
        )

    def parse_candidate_id(self, value) -> Optional[int]:
        """Return the id as an int, or None when it is missing or not a positive integer in range."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            parsed = value
        elif isinstance(value, str) and self.patterns['positive_int'].match(value):
            parsed = int(value)
        else:
            return None
        return parsed if 0 < parsed <= MAX_CANDIDATE_ID else None

    def validate_vote_data(self, data) -> VotePayload:
        if not isinstance(data, dict):
            raise ValidationError("Vote data must be a JSON object")

        candidate_id = self.parse_candidate_id(data.get('candidateId'))
        if candidate_id is None:
            raise ValidationError("Candidate ID is required")
        return VotePayload(candidate_id=candidate_id)
