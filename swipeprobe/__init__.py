"""swipeprobe — seed, observe and synchronize swipe configuration state in UI tests."""

from .debug_state import DebugState, SwipeExecutionRecord, parse_debug_state, parse_execution_record
from .errors import ElementNotFoundError, HarnessError, SeedPayloadError, StateMismatchError
from .seeding import SeededConfiguration, decode_seed, encode_seed
from .toggle import ToggleInterpreter, interpret_toggle_value
from .waiting import Timeouts, WaitResult, wait_for_debug_state, wait_until

__version__ = "0.3.0"
