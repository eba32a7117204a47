"""Simulated sign-in for the demo deployment.

The studio only needs to know whether somebody is signed in; the identity is
opaque display data.  :class:`DemoIdentityProvider` stands in for a real
OAuth flow by returning a fixed identity per provider after a short delay.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from enum import Enum

from imagen_studio.core.errors import AuthError

logger = logging.getLogger(__name__)


class ProviderKind(str, Enum):
    GOOGLE = "google"
    LINKEDIN = "linkedin"


@dataclass(frozen=True)
class User:
    """Signed-in user as returned by an identity provider."""

    email: str
    name: str
    provider: ProviderKind
    is_authenticated: bool = True

    def to_dict(self) -> dict:
        data = asdict(self)
        data["provider"] = self.provider.value
        return data


_DEMO_USERS = {
    ProviderKind.GOOGLE: ("demo.user@gmail.com", "Demo User"),
    ProviderKind.LINKEDIN: ("user.professional@linkedin.com", "Professional User"),
}


class DemoIdentityProvider:
    """Returns canned identities after a simulated network delay.

    Args:
        delay: Seconds to wait before answering
        sleep: Coroutine function used to wait
    """

    def __init__(
        self,
        delay: float = 1.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._delay = delay
        self._sleep = sleep

    async def authenticate(self, provider: ProviderKind | str) -> User:
        """Sign in with *provider*.

        Raises:
            AuthError: If the provider is not supported
        """
        try:
            kind = ProviderKind(provider)
        except ValueError as e:
            raise AuthError(f"Unsupported identity provider: {provider}") from e

        if self._delay > 0:
            await self._sleep(self._delay)

        email, name = _DEMO_USERS[kind]
        logger.info("Signed in %s via %s.", email, kind.value)
        return User(email=email, name=name, provider=kind)
