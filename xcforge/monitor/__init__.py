"""Terminal rendering of build progress and outcomes."""

from xcforge.monitor.renderer import BuildRenderer, StepTracker

__all__ = ["BuildRenderer", "StepTracker"]
