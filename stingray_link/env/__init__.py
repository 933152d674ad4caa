from .env import (
    COMPILER_PORT as COMPILER_PORT,
    INSTANCE_BASE_PORT as INSTANCE_BASE_PORT,
    MAX_CONNECTIONS as MAX_CONNECTIONS,
    Env as Env,
)
from .load_env import load_env as load_env
from .time_parser import TimeParser as TimeParser
