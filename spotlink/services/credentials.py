"""Spotify client-credentials token management."""

import base64
import logging
import threading
import time
from typing import Callable

import requests

from ..config import SPOTIFY_TOKEN_URL
from ..errors import AuthenticationFailed, CredentialUnavailable, UpstreamError
from ..models.credential import Credential
from ..utils.http import request_json

logger = logging.getLogger(__name__)

# Never schedule a renewal sooner than this, whatever the server says
MIN_RENEWAL_DELAY = 1.0


def log_renewal_error(error: Exception) -> None:
    """Default error sink: log and carry on."""
    logger.error(f"Spotify token renewal failed: {error}")


class CredentialManager:
    """Holds one Spotify bearer token and keeps it fresh.

    The first exchange runs synchronously in ``start()``; afterwards a daemon
    thread renews the token shortly before it expires. Readers call
    ``current_token()``, which never touches the network.

    Thread-safe: the credential is an immutable value replaced by a single
    assignment, and a lock keeps at most one exchange in flight.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str = SPOTIFY_TOKEN_URL,
        timeout: float = 10.0,
        refresh_margin: float = 60.0,
        retry_interval: float = 30.0,
        on_error: Callable[[Exception], None] | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
        autostart: bool = True,
    ) -> None:
        self._token_url = token_url
        self._authorization = base64.b64encode(
            f"{client_id}:{client_secret}".encode()
        ).decode()
        self._timeout = timeout
        self._refresh_margin = refresh_margin
        self._retry_interval = retry_interval
        self._on_error = on_error or log_renewal_error
        self._session = session or requests.Session()
        self._clock = clock

        self._credential: Credential | None = None
        self._last_error: Exception | None = None
        self._renew_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        if autostart:
            self.start()

    @property
    def credential(self) -> Credential | None:
        """The credential currently held, valid or not."""
        return self._credential

    @property
    def last_error(self) -> Exception | None:
        """The error from the most recent failed renewal, cleared on success."""
        return self._last_error

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def current_token(self) -> str:
        """Return the last-known-valid bearer token.

        Raises:
            CredentialUnavailable: No exchange has succeeded yet.
            AuthenticationFailed: The held token has expired and no
                renewal replaced it.
        """
        return self._valid_credential().access_token

    def authorization_header(self) -> str:
        """Value for the Authorization header of a catalog request."""
        return self._valid_credential().authorization

    def _valid_credential(self) -> Credential:
        credential = self._credential
        if credential is None:
            reason = f": {self._last_error}" if self._last_error else ""
            raise CredentialUnavailable(
                f"No Spotify token has been obtained yet{reason}"
            ) from self._last_error
        if credential.is_expired(self._clock()):
            raise AuthenticationFailed(
                "Spotify token expired and could not be renewed"
            ) from self._last_error
        return credential

    def renew(self) -> Credential:
        """Exchange the client credentials for a fresh token.

        The held credential is replaced only on success.

        Raises:
            AuthenticationFailed: The token endpoint rejected the client.
            UpstreamTimeout: The exchange timed out.
            UpstreamError: Any other transport failure.
        """
        with self._renew_lock:
            credential = self._exchange()
            self._credential = credential
            self._last_error = None

        logger.debug(
            f"Spotify token renewed, valid for "
            f"{credential.seconds_remaining(self._clock()):.0f}s"
        )
        return credential

    def start(self) -> None:
        """Run the first exchange, then start background renewal."""
        if self.running:
            return
        # Each loop owns its event, so a loop that outlived stop() still exits
        stop_event = threading.Event()
        self._stop_event = stop_event
        delay = self._renew_and_report()

        self._thread = threading.Thread(
            target=self._run,
            args=(delay, stop_event),
            name="spotify-token-renewal",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Cancel background renewal.

        A loop stuck in a slow exchange is abandoned after the join timeout;
        it exits on its own once that exchange returns.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self._timeout + 1)
            if self._thread.is_alive():
                logger.warning("Token renewal thread still busy after stop")
        self._thread = None

    def close(self) -> None:
        self.stop()
        self._session.close()

    def __enter__(self) -> "CredentialManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _run(self, delay: float, stop_event: threading.Event) -> None:
        # Each renewal is scheduled only after the previous one finished
        while not stop_event.wait(delay):
            delay = self._renew_and_report()

    def _renew_and_report(self) -> float:
        """Renew once and return the delay until the next attempt."""
        try:
            credential = self.renew()
        except Exception as e:
            # Failures stay inside the manager; the stale token serves until expiry
            self._last_error = e
            self._report(e)
            return self._retry_interval
        return self._next_delay(credential)

    def _report(self, error: Exception) -> None:
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Credential error sink raised")

    def _next_delay(self, credential: Credential) -> float:
        """Seconds to wait so the renewal lands strictly before expiry."""
        remaining = credential.seconds_remaining(self._clock())
        if remaining > 2 * self._refresh_margin:
            delay = remaining - self._refresh_margin
        else:
            delay = remaining / 2
        return max(delay, MIN_RENEWAL_DELAY)

    def _exchange(self) -> Credential:
        """POST the client-credentials grant to the token endpoint."""
        try:
            data = request_json(
                self._session,
                "POST",
                self._token_url,
                service="Spotify accounts",
                timeout=self._timeout,
                data={"grant_type": "client_credentials"},
                headers={
                    "Authorization": f"Basic {self._authorization}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )
        except UpstreamError as e:
            # invalid_client / invalid_grant come back as 400
            if e.status_code == 400:
                raise AuthenticationFailed(f"Invalid Spotify client: {e}") from e
            raise

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise AuthenticationFailed("Invalid Spotify client: no access_token in response")

        try:
            expires_in = float(data.get("expires_in", 3600))
        except (TypeError, ValueError) as e:
            raise AuthenticationFailed(f"Invalid expires_in in token response: {e}") from e

        return Credential.from_lifetime(access_token, expires_in, self._clock())
