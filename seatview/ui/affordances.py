# seatview/ui/affordances.py

from typing import Callable, List, Optional
from seatview.core.logging import get_logger

logger = get_logger()


class UIAffordances:
    """
    State of the on-screen widgets the engine drives.
    The presentation layer reads this (or subscribes through on_change) and
    renders it; the engine never draws anything itself.
    """

    def __init__(self):
        self.price_text: Optional[str] = None
        self.return_button_visible = False
        self.active_mode: Optional[str] = None
        self.status_text: Optional[str] = None

        # Every status message in order, for display queues and tests
        self.status_history: List[str] = []

        self.on_change: Optional[Callable[[str, 'UIAffordances'], None]] = None

    @property
    def price_visible(self) -> bool:
        return self.price_text is not None

    def show_price(self, price: float):
        self.price_text = f"€{price:.0f}"
        self._changed('price')

    def hide_price(self):
        self.price_text = None
        self._changed('price')

    def set_return_button_visible(self, visible: bool):
        self.return_button_visible = visible
        self._changed('return_button')

    def set_active_mode(self, mode: str):
        """Highlight the button of the active drive mode."""
        self.active_mode = mode
        self._changed('mode')

    def show_status(self, text: str):
        self.status_text = text
        self.status_history.append(text)
        logger.info(f"Status: {text}")
        self._changed('status')

    def _changed(self, widget: str):
        if self.on_change:
            self.on_change(widget, self)
