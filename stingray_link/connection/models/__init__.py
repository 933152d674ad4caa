from .frames import (
    COMPILE_PROGRESS as COMPILE_PROGRESS,
    COMPILER as COMPILER,
    IDENTIFY as IDENTIFY,
    MESSAGE as MESSAGE,
    Frame as Frame,
    decode_frame as decode_frame,
    encode_frame as encode_frame,
    parse_frame as parse_frame,
    parse_identify_info as parse_identify_info,
    strip_padding as strip_padding,
)
from .inbound import (
    CompileProgress as CompileProgress,
    CompilerEvent as CompilerEvent,
    IdentifyInfo as IdentifyInfo,
    IdentifyResponse as IdentifyResponse,
    LogMessage as LogMessage,
)
from .outbound import (
    command_frame as command_frame,
    debugger_frame as debugger_frame,
    cancel_frame as cancel_frame,
    script_frame as script_frame,
)
