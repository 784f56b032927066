"""Supabase Auth adapter for the kiosk's signed-in user."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from supabase import Client

from retrivia.services.persistence import OAuthIdentityProvider

logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(OAuthIdentityProvider):
    """Reads the current user from the Supabase client's auth session."""

    client: Client
    provider: str = "google"

    def current_identity(self) -> str | None:
        """Return the signed-in user's id, or None when anonymous."""
        session = self.client.auth.get_session()
        if session is None or session.user is None:
            return None
        return str(session.user.id)

    def on_identity_change(
        self, callback: Callable[[str | None], None]
    ) -> Callable[[], None]:
        """Forward auth state changes as user ids; returns an unsubscribe callable."""

        def _listener(_event: object, session: object) -> None:
            user = getattr(session, "user", None)
            callback(str(user.id) if user is not None else None)

        subscription = self.client.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe

    def sign_out(self) -> None:
        """Sign the current user out."""
        self.client.auth.sign_out()

    def sign_in_url(self, redirect_to: str) -> str:
        """Start an OAuth sign-in and return the provider URL to redirect to."""
        response = self.client.auth.sign_in_with_oauth(
            {"provider": self.provider, "options": {"redirect_to": redirect_to}}
        )
        return response.url

    def complete_sign_in(self, code: str) -> str | None:
        """Exchange the OAuth callback code for a session; returns the user id."""
        response = self.client.auth.exchange_code_for_session({"auth_code": code})
        if response.user is None:
            logger.warning("OAuth code exchange returned no user")
            return None
        logger.info("Signed in user %s", response.user.id)
        return str(response.user.id)
