import logging
from types import TracebackType
from typing import Dict, List, Optional, Type

import aiohttp

from kready._cogs.configs import configuration
from kready._cogs.helpers import typedefs, versions
from kready._cogs.structs import credentials

default_logger = logging.getLogger(__name__)


class APIContext:
    """
    A container for an aiohttp session and the credentials it is built from.

    The context is created once by the caller and passed into every operation
    explicitly -- there is no process-wide credentials state. The credentials
    inside are immutable; `reload` replaces them as a whole (with the session).

    All operations of one context are assumed to run in the same event loop,
    so there is no need to split the sessions for multiple loops.
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building.
    info: credentials.ConnectionInfo

    # List of open streamed responses.
    responses: List[aiohttp.ClientResponse]

    def __init__(
            self,
            info: credentials.ConnectionInfo,
            *,
            settings: Optional[configuration.ClientSettings] = None,
    ) -> None:
        super().__init__()
        self.settings = settings if settings is not None else configuration.ClientSettings()
        self.info = info
        self.session = self.make_aiohttp_session(info)
        self.responses = []

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {self.server!r}>'

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    @property
    def server(self) -> str:
        return self.info.server

    @property
    def default_namespace(self) -> Optional[str]:
        return self.info.default_namespace

    def make_aiohttp_session(self, info: credentials.ConnectionInfo) -> aiohttp.ClientSession:

        # If the CA is known, trust only it. Otherwise, let aiohttp use the system-wide trust.
        ssl_context = info.trust_store if info.trust_store is not None else True

        headers: Dict[str, str] = {
            'Authorization': f'Bearer {info.token}',
            'User-Agent': f'kready/{versions.version or "unknown"}',
        }

        return aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=0,
                ssl=ssl_context,
            ),
            headers=headers,
        )

    async def reload(
            self,
            info: credentials.ConnectionInfo,
            *,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        """
        Switch to the newly resolved credentials and a new session built from them.

        The old session is closed; the streamed responses of it are closed too.
        The credentials are not re-resolved here: see :func:`kready.resolve`.
        """
        logger = logger if logger is not None else default_logger
        session = self.make_aiohttp_session(info)
        await self.close()
        self.info = info
        self.session = session
        logger.debug(f"Switched to the reloaded credentials from {info.source}.")

    def add_response(self, response: aiohttp.ClientResponse) -> None:
        # There's no point keeping references to already closed responses.
        self.responses[:] = [_response for _response in self.responses if not _response.closed]
        if not response.closed:
            self.responses.append(response)

    async def close(self) -> None:
        # Close all open responses that use this session before closing the session itself.
        for response in self.responses:
            if not response.closed:
                response.close()
        self.responses.clear()
        await self.session.close()
