"""OAuth client utilities for onedrivemgr."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Sequence

from onedrivemgr.errors import AuthError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)


class OAuthClient:
    """Create and manage OAuth credentials and authorized HTTP sessions."""

    def __init__(self, auth_info: AuthInfo) -> None:
        if auth_info.kind != "oauth":
            raise ValueError("OAuthClient requires AuthInfo(kind='oauth')")
        self._auth_info = auth_info

    def get_credentials(self, scopes: Sequence[str], ensure_valid: bool = True):
        """
        Return OAuth credentials for the given scopes.

        Args:
            scopes: OAuth scopes.
            ensure_valid: If True, refresh credentials when possible.

        Returns:
            google.oauth2.credentials.Credentials

        Raises:
            AuthError: on load/refresh/flow failures.
            ValueError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise ValueError("scopes must be a non-empty sequence of strings")

        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        token_file = self._auth_info.token_file
        creds = None

        if os.path.exists(token_file):
            try:
                with open(token_file, encoding="utf-8") as f:
                    info = json.load(f)
                # from_authorized_user_info always installs Google's token endpoint.
                creds = Credentials.from_authorized_user_info(
                    info, scopes=list(scopes)
                ).with_token_uri(self._auth_info.token_uri)
            except Exception as exc:
                raise AuthError(
                    "Failed to load token_file",
                    details={"token_file": token_file},
                    cause=exc,
                ) from exc

            if not ensure_valid:
                return creds

            if not creds.valid and creds.refresh_token:
                logger.debug("Refreshing OAuth credentials from %s", token_file)
                try:
                    creds.refresh(Request())
                    self._save_credentials(creds)
                except Exception as exc:
                    raise AuthError(
                        "Failed to refresh OAuth credentials",
                        details={"token_file": token_file},
                        cause=exc,
                    ) from exc

            if creds.valid:
                return creds

        return self._run_installed_app_flow(scopes)

    def build_session(self, scopes: Sequence[str], ensure_valid: bool = True):
        """
        Build an authorized requests session for the Graph API.

        Returns:
            google.auth.transport.requests.AuthorizedSession
        """
        from google.auth.transport.requests import AuthorizedSession

        creds = self.get_credentials(scopes=scopes, ensure_valid=ensure_valid)
        return AuthorizedSession(creds)

    def load_client_config(self) -> dict[str, Any]:
        """
        Read the client secrets file as an installed-app client config.

        Both `{"installed": {...}}` and a flat `{"client_id": ...}` layout are
        accepted; missing endpoints are filled in for the configured tenant.
        """
        path = self._auth_info.client_secrets_file
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            raise AuthError(
                "Failed to read client_secrets_file",
                details={"client_secrets_file": path},
                cause=exc,
            ) from exc

        section = raw.get("installed", raw) if isinstance(raw, dict) else None
        if not isinstance(section, dict) or not section.get("client_id"):
            raise AuthError(
                "client_secrets_file has no client_id",
                details={"client_secrets_file": path},
            )

        config = dict(section)
        config.setdefault("auth_uri", self._auth_info.auth_uri)
        config.setdefault("token_uri", self._auth_info.token_uri)
        config.setdefault("redirect_uris", ["http://localhost"])
        return {"installed": config}

    def _run_installed_app_flow(self, scopes: Sequence[str]):
        from google_auth_oauthlib.flow import InstalledAppFlow

        client_config = self.load_client_config()
        try:
            flow = InstalledAppFlow.from_client_config(client_config, scopes=list(scopes))
            creds = flow.run_local_server(port=0)
        except Exception as exc:
            raise AuthError(
                "OAuth authorization flow failed",
                details={
                    "client_secrets_file": self._auth_info.client_secrets_file,
                    "token_file": self._auth_info.token_file,
                },
                cause=exc,
            ) from exc

        self._save_credentials(creds)
        return creds

    def _save_credentials(self, creds) -> None:
        token_file = self._auth_info.token_file
        token_dir = os.path.dirname(token_file)
        if token_dir:
            os.makedirs(token_dir, exist_ok=True)

        try:
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            raise AuthError(
                "Failed to save OAuth token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
