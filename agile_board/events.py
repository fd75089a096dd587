"""Change notification fan-out between views."""

from collections.abc import Callable

import structlog

logger = structlog.get_logger()

Listener = Callable[[], None]


class Subscription:
    """Handle returned by EventBus.subscribe.

    Disposing the handle removes the listener. ``active`` doubles as the
    liveness flag a view checks before acting on a notification.
    """

    def __init__(self, bus: "EventBus", listener: Listener) -> None:
        self._bus = bus
        self.listener = listener
        self.active = True

    def dispose(self) -> None:
        """Remove the listener from its bus. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self._bus._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class EventBus:
    """Publisher telling subscribed views that some work item changed.

    Notifications carry no payload; each listener reloads its own data.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, listener: Listener) -> Subscription:
        """Register a zero-argument listener and return its disposer handle."""
        subscription = Subscription(self, listener)
        self._subscriptions.append(subscription)
        logger.debug("Listener subscribed", listeners=len(self._subscriptions))
        return subscription

    def unsubscribe(self, listener: Listener) -> None:
        """Remove every subscription registered with this exact listener."""
        for subscription in [s for s in self._subscriptions if s.listener is listener]:
            subscription.dispose()

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            logger.debug("Listener unsubscribed", listeners=len(self._subscriptions))

    def publish(self, exclude: Subscription | None = None) -> int:
        """Invoke every live listener once, in registration order.

        A listener that raises is logged and does not stop the others. A
        listener disposed by an earlier listener in the same round is skipped.

        Args:
            exclude: Subscription of the publishing view, which already holds fresh data

        Returns:
            Number of listeners invoked
        """
        invoked = 0
        for subscription in list(self._subscriptions):
            if subscription is exclude or not subscription.active:
                continue
            invoked += 1
            try:
                subscription.listener()
            except Exception as e:
                logger.error("Listener failed", listener=repr(subscription.listener), error=str(e))
        logger.debug("Change published", invoked=invoked)
        return invoked
