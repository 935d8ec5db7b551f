"""Mini README: Operation registry used to dispatch block calls.

Structure:
    * Operation - named handler plus the argument names and types it accepts.
    * OperationRegistry - maps operation names to ``Operation`` entries and
      resolves calls against a ``LedgerStateMachine``.
    * REGISTRY - module-level registry pre-populated with every ledger
      operation.

Block files and the HTTP ``/blocks`` endpoint refer to operations by name;
the registry turns a name, a sender and a keyword payload into the matching
state machine call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping

from ..ledger import InvalidArguments, LedgerStateMachine, UnknownOperation
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

Handler = Callable[..., object]


@dataclass(frozen=True, slots=True)
class Operation:
    """A dispatchable ledger operation."""

    name: str
    parameters: Dict[str, type]
    handler: Handler

    def invoke(self, ledger: LedgerStateMachine, sender: str, arguments: Mapping[str, object]) -> object:
        """Check argument names and types, then call the handler."""

        supplied = set(arguments)
        missing = [name for name in self.parameters if name not in supplied]
        unexpected = sorted(supplied.difference(self.parameters))
        if missing or unexpected:
            raise InvalidArguments(
                f"Operation '{self.name}' missing {missing or 'nothing'}, unexpected {unexpected or 'nothing'}"
            )
        for parameter, expected in self.parameters.items():
            value = arguments[parameter]
            # bool is an int subclass but never a valid id or amount
            if isinstance(value, bool) or not isinstance(value, expected):
                raise InvalidArguments(
                    f"Operation '{self.name}' expects {parameter} as {expected.__name__}, got {value!r}"
                )
        return self.handler(ledger, sender, **arguments)


class OperationRegistry:
    """Simple registry mapping operation names to handlers."""

    def __init__(self) -> None:
        self._operations: Dict[str, Operation] = {}

    def register(self, operation_name: str, /, **parameters: type) -> Callable[[Handler], Handler]:
        """Decorator registering ``handler`` under ``operation_name``.

        Keyword arguments map each accepted argument name to its type.
        """

        def decorator(handler: Handler) -> Handler:
            LOGGER.debug("Registering operation '%s'", operation_name)
            self._operations[operation_name] = Operation(name=operation_name, parameters=parameters, handler=handler)
            return handler

        return decorator

    def available_operations(self) -> Iterable[str]:
        """Return operation names in sorted order."""

        return sorted(self._operations.keys())

    def get(self, name: str) -> Operation:
        operation = self._operations.get(name)
        if operation is None:
            raise UnknownOperation(f"Unknown ledger operation '{name}'")
        return operation

    def dispatch(self, ledger: LedgerStateMachine, name: str, sender: str, arguments: Mapping[str, object]) -> object:
        """Resolve ``name`` and apply it to ``ledger``."""

        return self.get(name).invoke(ledger, sender, arguments)


REGISTRY = OperationRegistry()


@REGISTRY.register("register_disaster", name=str, location=str, funds_required=int)
def _register_disaster(ledger: LedgerStateMachine, sender: str, *, name, location, funds_required):
    return ledger.register_disaster(name, location, funds_required)


@REGISTRY.register("donate_to_disaster", disaster_id=int, amount=int)
def _donate_to_disaster(ledger: LedgerStateMachine, sender: str, *, disaster_id, amount):
    return ledger.donate_to_disaster(sender, disaster_id, amount)


@REGISTRY.register("register_response_team", name=str)
def _register_response_team(ledger: LedgerStateMachine, sender: str, *, name):
    return ledger.register_response_team(sender, name)


@REGISTRY.register("create_aid_proposal", disaster_id=int, amount=int)
def _create_aid_proposal(ledger: LedgerStateMachine, sender: str, *, disaster_id, amount):
    return ledger.create_aid_proposal(sender, disaster_id, amount)


@REGISTRY.register("vote_on_proposal", proposal_id=int)
def _vote_on_proposal(ledger: LedgerStateMachine, sender: str, *, proposal_id):
    return ledger.vote_on_proposal(proposal_id, voter=sender)


@REGISTRY.register("execute_proposal", proposal_id=int)
def _execute_proposal(ledger: LedgerStateMachine, sender: str, *, proposal_id):
    return ledger.execute_proposal(proposal_id)


@REGISTRY.register("close_disaster", disaster_id=int)
def _close_disaster(ledger: LedgerStateMachine, sender: str, *, disaster_id):
    return ledger.close_disaster(disaster_id)
