"""
Authentication Service

Verifies bearer tokens issued by the user-identity service and extracts
the opaque user id the game engine keys player state by.
"""

import datetime
from typing import Any, Dict, Optional

import jwt


class AuthService:
    """
    JWT verification for incoming requests.
    """

    def __init__(self, jwt_secret: str, algorithm: str = "HS256"):
        """
        Args:
            jwt_secret: Shared secret of the identity service
            algorithm: JWT signing algorithm
        """
        if not jwt_secret:
            raise ValueError("JWT secret is required")
        self.jwt_secret = jwt_secret
        self.algorithm = algorithm

    def issue_token(self, user_id: str, expires_in_days: int = 7, **claims: Any) -> str:
        """
        Create a token the way the identity service does (dev tooling, tests).

        Args:
            user_id: Opaque user id
            expires_in_days: Token lifetime

        Returns:
            Encoded JWT
        """
        token_payload = {
            "user_id": user_id,
            "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=expires_in_days),
            **claims,
        }
        return jwt.encode(token_payload, self.jwt_secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            Dictionary with success status and user data or error
        """
        try:
            if not token:
                return {"success": False, "error": "Token is required"}

            payload = jwt.decode(token, self.jwt_secret, algorithms=[self.algorithm])
            user_id = payload.get("user_id") or payload.get("sub") or payload.get("id")

            if not user_id:
                return {"success": False, "error": "Invalid token payload"}

            return {
                "success": True,
                "user": {
                    "id": str(user_id),
                    "username": payload.get("username"),
                    "isAdmin": bool(payload.get("isAdmin") or payload.get("role") == "admin"),
                }
            }

        except jwt.ExpiredSignatureError:
            return {"success": False, "error": "Token has expired"}
        except jwt.InvalidTokenError:
            return {"success": False, "error": "Invalid token"}


# Global service instance
_auth_service = None


def get_auth_service() -> Optional[AuthService]:
    """Get the global auth service instance."""
    return _auth_service


def initialize_auth_service(jwt_secret: str, algorithm: str = "HS256") -> Optional[AuthService]:
    """Initialize the global auth service instance."""
    global _auth_service
    try:
        _auth_service = AuthService(jwt_secret, algorithm)
        return _auth_service
    except ValueError as e:
        print(f"Failed to initialize authentication service: {e}")
        _auth_service = None
        return None
