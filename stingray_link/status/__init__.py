from .compiler_status import (
    CompilerConnectionStatus as CompilerConnectionStatus,
    CompilerStatusTracker as CompilerStatusTracker,
)
