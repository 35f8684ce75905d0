"""Session bootstrap: load pots, friends and activities as one unit."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)

Listener = Callable[["BootstrapState"], None]


class BootstrapAPI(Protocol):
    """Fetch endpoints the bootstrapper depends on."""

    async def fetch_all_pots(self) -> list[dict[str, Any]]: ...

    async def fetch_friends(self, address: str) -> list[dict[str, Any]]: ...

    async def fetch_activities(self, address: str) -> list[dict[str, Any]]: ...


class FetchFailure(Exception):
    """One bootstrap resource failed to load.

    Attributes:
        resource: Name of the resource ("pots", "friends" or "activities").
        cause: The original exception raised by the fetch.
    """

    def __init__(self, resource: str, cause: Exception) -> None:
        super().__init__(f"Failed to load {resource}: {cause}")
        self.resource = resource
        self.cause = cause
        self.__cause__ = cause


@dataclass(frozen=True)
class SessionData:
    """The working set loaded for a user."""

    pots: list[dict[str, Any]] = field(default_factory=list)
    friends: list[dict[str, Any]] = field(default_factory=list)
    activities: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class BootstrapState:
    """Observable state of the bootstrap.

    ``data`` is only set after a successful load.
    """

    is_loading: bool = True
    error: FetchFailure | None = None
    data: SessionData | None = None


class SessionBootstrapper:
    """Loads a user's working set with a staleness guard.

    Every ``load_session`` call takes a new request token. Results of a call
    whose token is no longer current are dropped, so only the latest call
    (or teardown via ``cancel``) decides the observable state.
    """

    def __init__(self, api: BootstrapAPI, on_change: Listener | None = None) -> None:
        """Initialize the bootstrapper.

        Args:
            api: Client used to fetch the three resources.
            on_change: Optional listener called with every published state.
        """
        self.api = api
        self._listeners: list[Listener] = [on_change] if on_change else []
        self._token = 0
        self._state = BootstrapState()

    @property
    def state(self) -> BootstrapState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener.

        Returns:
            Callable: Function removing the listener again. Calling it more
                than once has no further effect.
        """
        self._listeners.append(listener)
        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if subscribed:
                subscribed = False
                self._listeners.remove(listener)

        return unsubscribe

    def cancel(self) -> None:
        """Discard the results of any in-flight load.

        Requests already sent are not interrupted; their results are ignored
        when they arrive.
        """
        self._token += 1

    def _publish(self, token: int, state: BootstrapState) -> bool:
        if token != self._token:
            logger.debug("Discarding stale bootstrap result (request %d, current %d)", token, self._token)
            return False

        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return True

    async def _fetch(
        self,
        resource: str,
        call: Awaitable[list[dict[str, Any]]],
        failures: list[FetchFailure],
    ) -> list[dict[str, Any]]:
        try:
            return await call
        except Exception as e:
            logger.error("Failed to load %s: %s", resource, e)
            failures.append(FetchFailure(resource, e))
            return []

    async def load_session(self, user_address: str | None) -> BootstrapState:
        """Load pots, friends and activities for a user concurrently.

        Without an address there is nothing to load and the state becomes
        "not loading, no error" right away. Otherwise all three fetches run
        to completion; if any failed, the first failure to occur becomes the
        state's error.

        Args:
            user_address: Wallet address of the authenticated user.

        Returns:
            BootstrapState: The outcome of this call. It is only published
                if no newer call or cancel happened in the meantime.
        """
        self._token += 1
        token = self._token

        if not user_address:
            outcome = BootstrapState(is_loading=False)
            self._publish(token, outcome)
            return outcome

        self._publish(token, BootstrapState(is_loading=True))

        failures: list[FetchFailure] = []
        pots, friends, activities = await asyncio.gather(
            self._fetch("pots", self.api.fetch_all_pots(), failures),
            self._fetch("friends", self.api.fetch_friends(user_address), failures),
            self._fetch("activities", self.api.fetch_activities(user_address), failures),
        )

        if failures:
            outcome = BootstrapState(is_loading=False, error=failures[0])
        else:
            outcome = BootstrapState(
                is_loading=False,
                data=SessionData(pots=pots, friends=friends, activities=activities),
            )
            logger.info(
                "Session loaded for %s: %d pots, %d friends, %d activities",
                user_address,
                len(pots),
                len(friends),
                len(activities),
            )

        self._publish(token, outcome)
        return outcome
