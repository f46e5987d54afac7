"""Apple client secret generation.

Apple does not hand out a static client secret. Instead the secret is a
short-lived ES256 JWT signed with the .p8 key downloaded from the developer
portal.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import jwt

from headless_oauth.core.exceptions import OAuthException
from headless_oauth.services.credentials import Credential, CredentialValidator


class AppleClientSecretGenerator:
    APPLE_AUDIENCE = "https://appleid.apple.com"
    MAX_EXPIRY_SECONDS = 15777000  # about six months, Apple's upper bound

    def __init__(
        self,
        client_id: str,
        team_id: str,
        key_id: str,
        private_key_path: str,
        credential_validator: Optional[CredentialValidator] = None,
    ):
        self.client_id = client_id
        self.team_id = team_id
        self.key_id = key_id
        self.private_key_path = private_key_path
        self.credential_validator = credential_validator or CredentialValidator()

    def required_credentials(self) -> list[Credential]:
        return [
            Credential(self.client_id, "APPLE_CLIENT_ID", "client ID"),
            Credential(self.team_id, "APPLE_TEAM_ID", "team ID"),
            Credential(self.key_id, "APPLE_KEY_ID", "key ID"),
            Credential(self.private_key_path, "APPLE_PRIVATE_KEY_PATH", "private key path"),
        ]

    def generate(self, expiry_seconds: int = 3600) -> str:
        self.credential_validator.validate_many(self.required_credentials(), "Apple")
        private_key = self._load_private_key()
        now = int(time.time())
        payload = {
            "iss": self.team_id,
            "iat": now,
            "exp": now + min(expiry_seconds, self.MAX_EXPIRY_SECONDS),
            "aud": self.APPLE_AUDIENCE,
            "sub": self.client_id,
        }
        return jwt.encode(payload, private_key, algorithm="ES256", headers={"kid": self.key_id})

    def _load_private_key(self) -> str:
        path = Path(self.private_key_path)
        if not path.is_file():
            raise OAuthException(f"Apple private key file not found at: {self.private_key_path}")
        try:
            return path.read_text()
        except OSError as e:
            raise OAuthException(f"Failed to read Apple private key file: {self.private_key_path}", 400, e) from e
