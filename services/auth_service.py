"""
Mealwise Authentication Service
Verification of identity-provider JWTs
"""

from datetime import timedelta
from typing import Optional, Dict, Any
from dataclasses import dataclass
from jose import JWTError, jwt

from core.config import get_settings
from utils.date_utils import utcnow

settings = get_settings()


class AuthenticationError(Exception):
    """Custom authentication error"""
    pass


@dataclass
class AuthClaims:
    """Identity claims taken from a verified provider token"""
    auth_provider_id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None


class IdentityTokenVerifier:
    """
    Verifies session tokens issued by the external identity provider.
    Tokens are never issued here except by create_token, which exists for
    local development and tests.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ):
        self.secret_key = secret_key or settings.AUTH_JWT_SECRET
        self.algorithm = algorithm or settings.AUTH_JWT_ALGORITHM
        self.audience = audience if audience is not None else settings.AUTH_JWT_AUDIENCE
        self.issuer = issuer if issuer is not None else settings.AUTH_JWT_ISSUER

    def decode(self, token: str) -> AuthClaims:
        """Verify and decode a provider token"""
        if not token:
            raise AuthenticationError("Missing token")

        options = {"verify_aud": bool(self.audience)}
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience or None,
                issuer=self.issuer or None,
                options=options,
            )
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {str(e)}")

        return self.claims_from_payload(payload)

    def peek_subject(self, token: str) -> Optional[str]:
        """Subject of a token without verifying it; for log context only"""
        try:
            return jwt.get_unverified_claims(token).get("sub")
        except JWTError:
            return None

    @staticmethod
    def claims_from_payload(payload: Dict[str, Any]) -> AuthClaims:
        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError("Token has no subject")

        return AuthClaims(
            auth_provider_id=str(subject),
            email=payload.get("email"),
            first_name=payload.get("given_name") or payload.get("first_name"),
            last_name=payload.get("family_name") or payload.get("last_name"),
            image_url=payload.get("picture"),
        )

    def create_token(self, claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """Sign a token the way the provider would"""
        to_encode = claims.copy()
        now = utcnow()
        to_encode.update({
            "iat": now,
            "exp": now + (expires_delta or timedelta(hours=1)),
        })
        if self.audience:
            to_encode["aud"] = self.audience
        if self.issuer:
            to_encode["iss"] = self.issuer

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)


# Global verifier instance
token_verifier = IdentityTokenVerifier()
