"""
cosched - Cooperative step-generator tasks on an asyncio event loop.

Plain generator functions run as tasks. Whatever a task yields tells the
scheduler what to do with it: yield a future to wait for it, a generator to
run it as a child task, a list or dict to wait for all members at once, or an
opcode to pause, set a deadline, cancel or return early.

Example:
    >>> from cosched import Scheduler, pause, deadline
    >>>
    >>> def fetch(name):
    ...     yield pause(0.1)
    ...     return name.upper()
    >>>
    >>> def main():
    ...     yield deadline(5)
    ...     results = yield {"a": fetch("a"), "b": fetch("b")}
    ...     return results
    >>>
    >>> with Scheduler() as scheduler:
    ...     scheduler.submit_blocking(main)
    {'a': 'A', 'b': 'B'}
"""

from cosched.classification import YieldKind, classify
from cosched.coroutine import Coroutine, CoroutineFactory, CoroutineLike, CoroutineState
from cosched.errors import CancelFault, CoroutineError, TimeoutFault, UnhandledOpcodeError
from cosched.handlers import OpcodeHandler, default_opcode_handlers
from cosched.join import await_all
from cosched.loop import Ticker, arm_repeating_timer, delay, disarm_timer
from cosched.opcodes import (
    Cancel,
    Deadline,
    Opcode,
    Pause,
    Return,
    cancel,
    deadline,
    pause,
    return_value,
)
from cosched.promise import CancellationQueue, Promise, rejected, resolved, settled_value
from cosched.result import Err, Ok, Result, RunResult
from cosched.run import (
    get_scheduler,
    init_scheduler,
    shutdown_scheduler,
    submit,
    submit_blocking,
    submit_blocking_safe,
    submit_delayed,
    submit_fire_and_forget,
)
from cosched.scheduler import Scheduler
from cosched.tracing import TracingCoroutine

__version__ = "0.1.0"

__all__ = [
    # Scheduler
    "Scheduler",
    "get_scheduler",
    "init_scheduler",
    "shutdown_scheduler",
    "submit",
    "submit_fire_and_forget",
    "submit_delayed",
    "submit_blocking",
    "submit_blocking_safe",
    # Coroutines
    "Coroutine",
    "CoroutineFactory",
    "CoroutineLike",
    "CoroutineState",
    "TracingCoroutine",
    # Opcodes
    "Opcode",
    "Pause",
    "Deadline",
    "Cancel",
    "Return",
    "pause",
    "deadline",
    "cancel",
    "return_value",
    "OpcodeHandler",
    "default_opcode_handlers",
    # Futures
    "Promise",
    "CancellationQueue",
    "resolved",
    "rejected",
    "settled_value",
    "await_all",
    "delay",
    "Ticker",
    "arm_repeating_timer",
    "disarm_timer",
    # Classification
    "YieldKind",
    "classify",
    # Errors
    "CoroutineError",
    "CancelFault",
    "TimeoutFault",
    "UnhandledOpcodeError",
    # Results
    "Result",
    "Ok",
    "Err",
    "RunResult",
]
