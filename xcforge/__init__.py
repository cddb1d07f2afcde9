"""xcforge: build orchestration for multi-platform XCFrameworks.

Archives one Xcode scheme for a primary and a companion platform, finds
the framework product inside each archive, and merges both into a single
XCFramework bundle.
"""

__version__ = "0.1.0"
__description__ = "Archive an Xcode scheme for two platforms and merge an XCFramework"

from xcforge.core.orchestrator import BuildOrchestrator
from xcforge.core.worker import BuildWorker
from xcforge.models.outcome import BuildOutcome

__all__ = ["BuildOrchestrator", "BuildWorker", "BuildOutcome", "__version__"]
