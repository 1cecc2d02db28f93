"""
Watch mode: re-render whenever the input file's modification time advances
"""

import time
from typing import Callable, Optional

from .log import LOG
from .renderer import Renderer


class Watcher:
    """
    Polls a renderer's input file and re-renders on change

    The last seen modification time is the only state kept between
    render passes.
    """

    def __init__(
        self,
        renderer: Renderer,
        interval: float = 1.0,
        lame: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.renderer = renderer
        self.interval = interval
        self.lame = lame
        self.sleep = sleep
        self.mtime: float = 0.0

    def poll(self) -> bool:
        """
        Render if the input changed since the last render

        Returns:
            True if a render pass ran
        """
        mtime = self.renderer.input_file.stat().st_mtime
        if mtime <= self.mtime:
            return False

        self.mtime = mtime
        self.renderer.render(lame=self.lame)
        LOG(f"Rendered {self.renderer.input_name}", level=1)
        return True

    def run(self, iterations: Optional[int] = None) -> None:
        """
        Poll until interrupted (or for a fixed number of iterations)

        Errors from a render pass propagate and end the loop.
        """
        count = 0
        while iterations is None or count < iterations:
            self.poll()
            count += 1
            self.sleep(self.interval)
