from src.domain.enums.publish_state import PublishState


# Mapping of valid transitions: from_state -> set of allowed to_states.
# Every failure path falls back to EDITING with the draft intact.
VALID_TRANSITIONS: dict[PublishState, frozenset[PublishState]] = {
    PublishState.EDITING: frozenset({PublishState.VALIDATING}),
    PublishState.VALIDATING: frozenset({PublishState.UPLOADING, PublishState.EDITING}),
    PublishState.UPLOADING: frozenset({PublishState.PERSISTING, PublishState.EDITING}),
    PublishState.PERSISTING: frozenset({PublishState.PUBLISHED, PublishState.EDITING}),
    # A published session ends; the next one starts implicitly
    PublishState.PUBLISHED: frozenset({PublishState.EDITING}),
}


class InvalidStateTransitionError(Exception):
    """Raised when an invalid publish state transition is attempted."""

    def __init__(self, from_state: PublishState, to_state: PublishState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid transition from {from_state.value} to {to_state.value}. "
            f"Allowed transitions: {sorted(s.value for s in VALID_TRANSITIONS.get(from_state, frozenset()))}"
        )


class PublishStateMachine:
    """
    Validates state transitions of the listing composition workflow.

    Stateless: call can_transition() or validate_transition() with explicit states.
    """

    def can_transition(self, from_state: PublishState, to_state: PublishState) -> bool:
        """Return True if transitioning from_state → to_state is permitted."""
        return to_state in VALID_TRANSITIONS.get(from_state, frozenset())

    def validate_transition(self, from_state: PublishState, to_state: PublishState) -> None:
        """Raise InvalidStateTransitionError if the transition is not permitted."""
        if not self.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(from_state, to_state)

    def get_allowed_transitions(self, from_state: PublishState) -> frozenset[PublishState]:
        """Return the set of states reachable from from_state."""
        return VALID_TRANSITIONS.get(from_state, frozenset())
