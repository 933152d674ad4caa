from .compile_job import (
    CompileJob as CompileJob,
    CompileResult as CompileResult,
    build_compile_request as build_compile_request,
)
from .compiler_process import (
    CompilerProcess as CompilerProcess,
    kill_process_tree as kill_process_tree,
)
from .secret import (
    generate_secret as generate_secret,
    provision_secret as provision_secret,
    secret_path as secret_path,
)
from .supervisor import (
    CompilerSupervisor as CompilerSupervisor,
    launch_compiler as launch_compiler,
)
from .watcher import CompilerWatcher as CompilerWatcher
