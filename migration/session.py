"""
SharePoint endpoint sessions.

One authenticated ClientContext per site address. The credential variant
(service principal + certificate, or delegated user credential) is chosen once
per run from SharePointConfig.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from office365.runtime.auth.user_credential import UserCredential
from office365.sharepoint.client_context import ClientContext

from migration.config import AUTH_MODE_CERTIFICATE, AUTH_MODE_DELEGATED, SharePointConfig
from migration.exceptions import ConfigurationError
from migration.models import SessionFailed, SessionOpened, SessionResult

logger = logging.getLogger(__name__)


class SessionFactory:
    """Opens and closes SharePoint sessions, one endpoint at a time"""

    def __init__(
        self,
        config: SharePointConfig,
        context_factory: Callable[[str], ClientContext] = ClientContext,
    ):
        """
        Args:
            config: SharePoint configuration (selects the credential variant)
            context_factory: Builds an unauthenticated ClientContext for a site URL
        """
        if config.auth_mode not in (AUTH_MODE_CERTIFICATE, AUTH_MODE_DELEGATED):
            raise ConfigurationError(f"Unknown SharePoint auth mode: {config.auth_mode}")

        self.config = config
        self.context_factory = context_factory
        logger.info(f"SharePoint authentication: {config.auth_mode}")

    def _authenticate(self, ctx: ClientContext) -> ClientContext:
        if self.config.auth_mode == AUTH_MODE_CERTIFICATE:
            return ctx.with_client_certificate(
                self.config.tenant,
                self.config.client_id,
                self.config.thumbprint,
                cert_path=self.config.cert_path,
                passphrase=self.config.cert_passphrase,
            )
        return ctx.with_credentials(UserCredential(self.config.username, self.config.password))

    def open(self, address: str) -> SessionResult:
        """
        Open an authenticated session against one site.

        The site web is loaded immediately so that authentication problems
        surface here rather than on the first download.

        Args:
            address: SharePoint site URL

        Returns:
            SessionOpened on success, SessionFailed otherwise
        """
        try:
            ctx = self._authenticate(self.context_factory(address))
            ctx.web.get().execute_query()
            logger.info(f"SharePoint connected: {address}")
            return SessionOpened(address=address, session=ctx)
        except Exception as e:
            logger.warning(f"Failed to connect to SharePoint site {address}: {e}")
            return SessionFailed(address=address, error=str(e))

    def close(self, opened: Optional[SessionOpened]) -> None:
        """
        Tear down a session. Failures are ignored; the context is discarded either way.

        Args:
            opened: Session returned by open()
        """
        if opened is None:
            return
        try:
            opened.session.clear()
            logger.info(f"SharePoint disconnected: {opened.address}")
        except Exception as e:
            logger.debug(f"Ignoring error while closing session for {opened.address}: {e}")

    @contextmanager
    def session(self, address: str) -> Iterator[SessionResult]:
        """
        Scoped session: yields the open result and always closes an opened session.

        Args:
            address: SharePoint site URL
        """
        result = self.open(address)
        try:
            yield result
        finally:
            if isinstance(result, SessionOpened):
                self.close(result)
