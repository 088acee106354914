"""Auth state change broadcasting.

ONLY event fan-out - delivers (event, session) pairs to registered listeners.

Each registration owns a queue and a delivery task. The task first resolves
and delivers the initialSession event, then drains the queue in order, so
every listener sees initialSession before anything else even when other
events are emitted while it is being resolved. Listeners never block each
other or the code that emits.
"""

import asyncio
import inspect
import logging
import uuid
from typing import Awaitable, Callable, Dict, Optional, Tuple, Union

from ...core.entities import Session
from ...core.value_objects import AuthChangeEvent

logger = logging.getLogger(__name__)

AuthStateChangeListener = Callable[
    [AuthChangeEvent, Optional[Session]],
    Union[None, Awaitable[None]],
]
InitialSessionProvider = Callable[[], Awaitable[Optional[Session]]]

_Item = Optional[Tuple[AuthChangeEvent, Optional[Session]]]


class ListenerRegistration:
    """Handle returned by EventEmitter.attach_listener."""

    def __init__(self, emitter: "EventEmitter", listener: AuthStateChangeListener):
        self.id = str(uuid.uuid4())
        self.listener = listener
        self._emitter = emitter
        self._queue: "asyncio.Queue[_Item]" = asyncio.Queue()
        self._initial_delivered = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self.removed = False

    def remove(self) -> None:
        """Stop delivering events to this listener. Idempotent.

        Safe to call from inside the listener itself. Events still queued are
        dropped.
        """
        if self.removed:
            return
        self.removed = True
        self._emitter._detach(self.id)
        # Wakes the delivery task so it can exit.
        self._queue.put_nowait(None)
        self._initial_delivered.set()

    async def wait_delivered(self) -> None:
        """Wait until everything queued so far has been delivered."""
        await self._initial_delivered.wait()
        await self._queue.join()

    def __repr__(self) -> str:
        return f"ListenerRegistration(id={self.id}, removed={self.removed})"


class EventEmitter:
    """Many-listener broadcast of auth state changes."""

    def __init__(self) -> None:
        self._registrations: Dict[str, ListenerRegistration] = {}

    @property
    def listener_count(self) -> int:
        return len(self._registrations)

    def attach_listener(
        self,
        listener: AuthStateChangeListener,
        initial_session: InitialSessionProvider,
    ) -> ListenerRegistration:
        """Register a listener and schedule its initialSession event.

        Returns immediately; must be called from a running event loop.

        Args:
            listener: Plain or coroutine function called with (event, session)
            initial_session: Coroutine factory resolving the session carried by
                the initialSession event

        Returns:
            Registration handle
        """
        registration = ListenerRegistration(self, listener)
        self._registrations[registration.id] = registration
        registration._task = asyncio.get_running_loop().create_task(
            self._deliver(registration, initial_session)
        )
        logger.debug(f"Listener {registration.id} attached")
        return registration

    def emit(self, event: AuthChangeEvent, session: Optional[Session] = None) -> None:
        """Queue the event for every registered listener. Never blocks."""
        registrations = list(self._registrations.values())
        logger.debug(f"Emitting {event.value} to {len(registrations)} listener(s)")
        for registration in registrations:
            if not registration.removed:
                registration._queue.put_nowait((event, session))

    async def flush(self) -> None:
        """Wait until all listeners have consumed every queued event."""
        for registration in list(self._registrations.values()):
            await registration.wait_delivered()

    async def close(self) -> None:
        """Remove every listener and stop the delivery tasks."""
        registrations = list(self._registrations.values())
        for registration in registrations:
            registration.remove()
        tasks = [r._task for r in registrations if r._task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _detach(self, registration_id: str) -> None:
        if self._registrations.pop(registration_id, None) is not None:
            logger.debug(f"Listener {registration_id} removed")

    async def _deliver(
        self,
        registration: ListenerRegistration,
        initial_session: InitialSessionProvider,
    ) -> None:
        try:
            session = await initial_session()
        except Exception as e:
            logger.info(f"No initial session found: {e}")
            session = None

        if not registration.removed:
            await self._invoke(registration, AuthChangeEvent.INITIAL_SESSION, session)
        registration._initial_delivered.set()

        queue = registration._queue
        while True:
            item = await queue.get()
            try:
                if item is None or registration.removed:
                    # Drop whatever is left so wait_delivered() returns.
                    while not queue.empty():
                        queue.get_nowait()
                        queue.task_done()
                    return
                await self._invoke(registration, *item)
            finally:
                queue.task_done()

    async def _invoke(
        self,
        registration: ListenerRegistration,
        event: AuthChangeEvent,
        session: Optional[Session],
    ) -> None:
        try:
            result = registration.listener(event, session)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Listener {registration.id} failed on {event.value}: {e}")
