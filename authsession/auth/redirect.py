"""Login/logout redirect policy with loop prevention and return-to restore."""

# pylint: disable=logging-too-many-args

from __future__ import annotations

import logging

from typing import TYPE_CHECKING

from ..state.types import REDIRECT_KEY
from ..utils import is_relative_url, is_same_url


if TYPE_CHECKING:
    from ..config import RedirectSettings
    from ..state.base import Navigator, Storage


logger = logging.getLogger("authsession.auth")


class RedirectPolicy:
    """Computes and performs navigation for the ``login``, ``logout``,
    ``home`` and ``callback`` events.

    With ``rewrite`` enabled, the page that triggered a ``login`` redirect
    is remembered in universal storage and restored by the next ``home``
    redirect.

    Parameters
    ----------
    navigator : Navigator
        Routing/navigation collaborator.
    storage : Storage
        Storage collaborator holding the return-to path.
    settings : RedirectSettings
        Destinations and flags.
    client_side : bool
        True when running in the browser; enables full page replaces.
    """

    def __init__(
        self,
        navigator: Navigator,
        storage: Storage,
        settings: RedirectSettings,
        client_side: bool = False,
    ) -> None:
        """Initialize the redirect policy."""
        self.navigator = navigator
        self.storage = storage
        self.settings = settings
        self.client_side = client_side

    def current_path(self) -> str:
        """Return the route path redirects are computed from."""
        route = self.navigator.route
        return route.full_path if self.settings.full_path else route.path

    def resolve(self, name: str) -> str | None:
        """Compute the destination for event ``name`` without navigating.

        Applies return-to rewriting (which reads and clears the persisted
        return-to path on ``home``) and loop prevention.

        Returns
        -------
        str or None
            The destination, or None when no navigation should happen.
        """
        if not self.settings.enabled:
            return None

        to = self.settings.destinations().get(name)
        if not to:
            return None

        from_ = self.current_path()

        if self.settings.rewrite:
            if name == "login" and is_relative_url(from_) and not is_same_url(to, from_):
                self.storage.set_universal(REDIRECT_KEY, from_)

            if name == "home":
                saved = self.storage.get_universal(REDIRECT_KEY)
                self.storage.set_universal(REDIRECT_KEY, None)

                if is_relative_url(saved):
                    to = saved

        # Checked after rewriting so a restored path cannot loop either
        if is_same_url(to, from_):
            logger.debug("Skipping %s redirect: already on %s", name, from_)
            return None

        return to

    def redirect(self, name: str, no_router: bool = False) -> str | None:
        """Navigate to the destination configured for event ``name``.

        Parameters
        ----------
        name : str
            ``"login"``, ``"logout"``, ``"home"`` or ``"callback"``.
        no_router : bool
            On the client side, replace the page instead of routing.

        Returns
        -------
        str or None
            The destination navigated to, or None when nothing happened.
        """
        to = self.resolve(name)
        if to is None:
            return None

        logger.debug("Redirecting on %s to %s", name, to)
        if self.client_side and no_router:
            self.navigator.replace(to)
        else:
            self.navigator.redirect(to)
        return to
