from .compiler import (
    CompileJob as CompileJob,
    CompileResult as CompileResult,
    CompilerSupervisor as CompilerSupervisor,
)
from .connection import StingrayConnection as StingrayConnection
from .context import LinkContext as LinkContext
from .env import Env as Env, load_env as load_env
from .output import OutputRouter as OutputRouter, OutputSink as OutputSink
from .registry import ConnectionHandler as ConnectionHandler
from .status import (
    CompilerConnectionStatus as CompilerConnectionStatus,
    CompilerStatusTracker as CompilerStatusTracker,
)
