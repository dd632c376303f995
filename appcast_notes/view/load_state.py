"""
Load State Signal
=================

Observable idle/loading flag shared between the pipeline and its host view.
"""

from enum import Enum
from typing import Callable, List

from ..utils.logging import get_logger_for_component


class LoadState(str, Enum):
    """Values of the loading flag."""
    IDLE = "idle"
    LOADING = "loading"


Observer = Callable[[LoadState], None]


class LoadStateSignal:
    """Loading flag written by fetches and read by the host.

    Fetches bracket their request with ``begin()``/``end()``. The flag reads
    ``LOADING`` while at least one request is in flight and ``IDLE`` otherwise.
    The host may also assign ``value`` directly.
    """

    def __init__(self):
        self._value = LoadState.IDLE
        self._in_flight = 0
        self._observers: List[Observer] = []
        self.logger = get_logger_for_component("load_state")

    @property
    def value(self) -> LoadState:
        return self._value

    @value.setter
    def value(self, new_value: LoadState) -> None:
        new_value = LoadState(new_value)
        if new_value == self._value:
            return
        self._value = new_value
        self._notify()

    @property
    def is_loading(self) -> bool:
        return self._value == LoadState.LOADING

    @property
    def in_flight(self) -> int:
        """Number of fetches currently between begin() and end()."""
        return self._in_flight

    def begin(self) -> None:
        """Mark the start of a fetch."""
        self._in_flight += 1
        self.value = LoadState.LOADING

    def end(self) -> None:
        """Mark the termination of a fetch, whatever its outcome."""
        self._in_flight = max(0, self._in_flight - 1)
        if self._in_flight == 0:
            self.value = LoadState.IDLE

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register a callback for every change of the flag.

        Args:
            observer: Called with the new LoadState

        Returns:
            Callable removing the observer again
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self._value)
            except Exception as e:
                self.logger.error(
                    f"Load state observer failed: {e}", exc_info=True
                )

    def __repr__(self) -> str:
        return f"LoadStateSignal({self._value.value}, in_flight={self._in_flight})"
