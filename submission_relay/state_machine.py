"""
Pipeline State Machine

Defines the stages of one relay invocation and the transitions allowed
between them. The happy path runs validate, download, upload, notify,
record; any failure before DONE switches to the failure notify/record
branch.
"""

from enum import Enum
from typing import Final

import structlog

from submission_relay.exceptions import InvalidStageTransitionError

log = structlog.get_logger()


class PipelineStage(str, Enum):
    """Stage of a single relay invocation."""

    START = "START"
    VALIDATING = "VALIDATING"
    DOWNLOADING = "DOWNLOADING"
    UPLOADING = "UPLOADING"
    NOTIFYING_SUCCESS = "NOTIFYING_SUCCESS"
    RECORDING_SUCCESS = "RECORDING_SUCCESS"
    DONE = "DONE"
    NOTIFYING_FAILURE = "NOTIFYING_FAILURE"
    RECORDING_FAILURE = "RECORDING_FAILURE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """Check if this is a terminal stage (no outgoing transitions)."""
        return self in TERMINAL_STAGES

    @classmethod
    def from_string(cls, value: str) -> "PipelineStage":
        """Convert string to PipelineStage enum."""
        try:
            return cls(value.upper())
        except ValueError as e:
            raise ValueError(
                f"Invalid pipeline stage: '{value}'. "
                f"Valid values are: {[s.value for s in cls]}"
            ) from e


TERMINAL_STAGES: Final[frozenset[PipelineStage]] = frozenset({
    PipelineStage.DONE,
    PipelineStage.FAILED,
})

VALID_TRANSITIONS: Final[dict[PipelineStage, frozenset[PipelineStage]]] = {
    PipelineStage.START: frozenset({
        PipelineStage.VALIDATING,
        PipelineStage.NOTIFYING_FAILURE,  # credentials could not be decoded
    }),
    PipelineStage.VALIDATING: frozenset({
        PipelineStage.DOWNLOADING,
        PipelineStage.NOTIFYING_FAILURE,
    }),
    PipelineStage.DOWNLOADING: frozenset({
        PipelineStage.UPLOADING,
        PipelineStage.NOTIFYING_FAILURE,
    }),
    PipelineStage.UPLOADING: frozenset({
        PipelineStage.NOTIFYING_SUCCESS,
        PipelineStage.NOTIFYING_FAILURE,
    }),
    PipelineStage.NOTIFYING_SUCCESS: frozenset({
        PipelineStage.RECORDING_SUCCESS,
        PipelineStage.NOTIFYING_FAILURE,
    }),
    PipelineStage.RECORDING_SUCCESS: frozenset({
        PipelineStage.DONE,
        PipelineStage.NOTIFYING_FAILURE,
    }),
    PipelineStage.NOTIFYING_FAILURE: frozenset({
        PipelineStage.RECORDING_FAILURE,
    }),
    PipelineStage.RECORDING_FAILURE: frozenset({
        PipelineStage.FAILED,
    }),
    PipelineStage.DONE: frozenset(),    # Terminal
    PipelineStage.FAILED: frozenset(),  # Terminal
}


def validate_transition(
    current_stage: PipelineStage | str,
    new_stage: PipelineStage | str,
    *,
    raise_on_invalid: bool = True,
) -> bool:
    """
    Validate that a stage transition is allowed.

    Args:
        current_stage: Current pipeline stage
        new_stage: Desired next stage
        raise_on_invalid: If True, raise exception on invalid transition

    Returns:
        True if transition is valid

    Raises:
        InvalidStageTransitionError: If transition is invalid and raise_on_invalid=True
    """
    if isinstance(current_stage, str):
        current_stage = PipelineStage.from_string(current_stage)
    if isinstance(new_stage, str):
        new_stage = PipelineStage.from_string(new_stage)

    allowed = VALID_TRANSITIONS.get(current_stage, frozenset())
    is_valid = new_stage in allowed

    if not is_valid and raise_on_invalid:
        log.warning(
            "invalid_stage_transition",
            current_stage=current_stage.value,
            new_stage=new_stage.value,
            allowed_transitions=[s.value for s in allowed],
        )
        raise InvalidStageTransitionError(
            current_stage=current_stage.value,
            new_stage=new_stage.value,
            allowed_transitions=sorted(s.value for s in allowed),
        )

    return is_valid


class StageTracker:
    """Tracks the current stage of one invocation and logs each change."""

    def __init__(self, **log_context) -> None:
        self.stage = PipelineStage.START
        self.history: list[PipelineStage] = [PipelineStage.START]
        self._log = log.bind(**log_context)

    def advance(self, new_stage: PipelineStage) -> PipelineStage:
        validate_transition(self.stage, new_stage)
        self._log.debug(
            "pipeline_stage_changed",
            from_stage=self.stage.value,
            to_stage=new_stage.value,
        )
        self.stage = new_stage
        self.history.append(new_stage)
        return new_stage
