import numpy as np


class ContextBuffer:
    """Trailing samples of the previous window, fed back as look-back input.

    Empty until the first window has been scored; a size of 0 disables the
    buffer entirely (legacy models).
    """

    def __init__(self, size: int) -> None:
        self._size = size
        self._tail = np.zeros(size, dtype=np.float32)
        self._filled = False

    @property
    def size(self) -> int:
        return self._size

    @property
    def filled(self) -> bool:
        return self._filled

    def prepend(self, window: np.ndarray) -> np.ndarray:
        """Return ``window`` prefixed with the stored tail, if there is one."""
        if self._size == 0 or not self._filled:
            return window
        return np.concatenate((self._tail, window))

    def update(self, window: np.ndarray) -> None:
        """Keep the last ``size`` samples of the un-prefixed ``window``."""
        if self._size == 0:
            return
        self._tail[:] = window[-self._size:]
        self._filled = True

    def clear(self) -> None:
        self._tail[:] = 0
        self._filled = False
