import threading
from typing import Dict, Optional, Sequence, Tuple

from utils.errors import ConfigError

# Display colors for conflicting components, consumed in order and reused cyclically.
DEFAULT_PALETTE: Tuple[str, ...] = (
    "#e6194B", "#3cb44b", "#ffe119", "#4363d8", "#f58231", "#911eb4", "#46f0f0", "#f032e6", "#bcf60c", "#fabebe",
    "#008080", "#e6beff", "#9a6324", "#fffac8", "#800000", "#aaffc3", "#808000", "#ffd8b1", "#000075", "#808080",
    "#ffffff", "#000000", "#faebd7", "#00ffff", "#7fffd4", "#f0ffff", "#f5f5dc", "#ffe4c4", "#ffebcd", "#8a2be2",
    "#a52a2a", "#deb887", "#5f9ea0", "#7fff00", "#d2691e", "#ff7f50", "#6495ed", "#dc143c", "#00ffff", "#00008b",
    "#008b8b", "#b8860b", "#a9a9a9", "#006400", "#a9a9a9", "#bdb76b", "#8b008b", "#556b2f", "#ff8c00", "#9932cc",
    "#8b0000", "#e9967a", "#8fbc8f", "#483d8b", "#2f4f4f", "#00ced1", "#9400d3", "#ff1493", "#00bfff", "#696969",
    "#1e90ff", "#d19275", "#b22222", "#fffaf0", "#228b22", "#ff00ff", "#dcdcdc", "#f8f8ff", "#ffd700", "#daa520",
    "#808080", "#008000", "#adff2f", "#f0fff0", "#ff69b4", "#cd5c5c", "#4b0082", "#fffff0", "#f0e68c", "#e6e6fa",
    "#fff0f5", "#7cfc00", "#fffacd", "#add8e6", "#f08080", "#e0ffff", "#fafad2", "#d3d3d3", "#90ee90", "#ffb6c1",
    "#ffa07a", "#20b2aa", "#87cefa", "#778899", "#b0c4de", "#ffffe0", "#00ff00", "#32cd32", "#faf0e6", "#ff00ff",
)


class ColorAllocator:
    """
    Hands out one display color per conflicting component identity.

    The first request for a `(type, name)` key takes the color under the
    cursor and advances it, wrapping after the last palette entry. Later
    requests for the same key return the same color and leave the cursor
    alone, so every conflict entry for a component shares one color.
    """

    def __init__(self, palette: Optional[Sequence[str]] = None):
        """
        Args:
            palette: Ordered colors to cycle through. Defaults to DEFAULT_PALETTE.

        Raises:
            ConfigError: If the palette is empty.
        """
        self._palette = list(palette) if palette is not None else list(DEFAULT_PALETTE)
        if not self._palette:
            raise ConfigError("Color palette must contain at least one color.")
        self._assigned: Dict[Tuple[str, str], str] = {}
        self._cursor = 0
        self._lock = threading.Lock()

    def color_for(self, component_type: str, name: str) -> str:
        """Returns the color for a component identity, assigning one on first use."""
        key = (component_type, name)
        with self._lock:
            color = self._assigned.get(key)
            if color is None:
                color = self._palette[self._cursor]
                self._cursor = (self._cursor + 1) % len(self._palette)
                self._assigned[key] = color
            return color

    @property
    def assignments(self) -> Dict[str, str]:
        """A snapshot of the `type:name` -> color mapping handed out so far."""
        with self._lock:
            return {f"{t}:{n}": color for (t, n), color in self._assigned.items()}

    def __len__(self) -> int:
        return len(self._assigned)
