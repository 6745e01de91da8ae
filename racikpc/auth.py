import logging

import requests

from .errors import AuthError
from .models import User

logger = logging.getLogger(__name__)


class AuthSession:
    """
    A single user's login state against Supabase auth (GoTrue).

    One instance per user context; it is passed to whatever needs it
    instead of living in a module-level client.
    """

    def __init__(self, url, anon_key, session=None, timeout=10.0):
        self.base_url = f"{url.rstrip('/')}/auth/v1"
        self.anon_key = anon_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.access_token = None
        self._user = None

    def _headers(self, token=None):
        headers = {"apikey": self.anon_key, "Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _error_message(response):
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if not isinstance(body, dict):
            return f"HTTP {response.status_code}"
        return (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or f"HTTP {response.status_code}"
        )

    def login(self, email, password):
        """
        Signs in with e-mail and password.

        :param email: The account e-mail.
        :param password: The account password.
        :return: The logged-in User.
        :raises AuthError: On bad credentials or if auth is unreachable.
        """
        if not email or not password:
            raise AuthError("Email and password required")

        try:
            response = self.session.post(
                f"{self.base_url}/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise AuthError(f"Auth service unreachable: {e}") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.info(f"Login failed for {email}: {message}")
            raise AuthError(message)

        try:
            body = response.json()
        except ValueError as e:
            raise AuthError(f"Invalid auth response: {e}") from e

        self.access_token = body.get("access_token")
        self._user = User.from_auth_payload(body.get("user") or {})
        logger.info(f"Logged in as {self._user.username} ({self._user.role})")
        return self._user

    def restore(self, access_token):
        """
        Rebuilds the session from a stored access token.

        :param access_token: A token returned by an earlier login.
        :return: The User, or None if the token is no longer valid.
        """
        if not access_token:
            return None
        try:
            response = self.session.get(
                f"{self.base_url}/user",
                headers=self._headers(access_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Could not restore session: {e}")
            return None

        self.access_token = access_token
        self._user = User.from_auth_payload(payload)
        return self._user

    def logout(self):
        """Revokes the token (best effort) and forgets the user."""
        if self.access_token:
            try:
                response = self.session.post(
                    f"{self.base_url}/logout",
                    headers=self._headers(self.access_token),
                    timeout=self.timeout,
                )
                response.raise_for_status()
            except requests.exceptions.RequestException as e:
                logger.warning(f"Sign-out request failed: {e}")
        self.access_token = None
        self._user = None

    def current_user(self):
        return self._user

    @property
    def is_authenticated(self):
        return self._user is not None

    @property
    def is_admin(self):
        return self._user is not None and self._user.is_admin
