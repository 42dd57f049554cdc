"""
control_logic.py — Hysteresis Search State Machine
===================================================

Implements the three-state machine that turns the smoothed movement
index into movement / no-movement events:

States:
    SEARCHING_FOR_MOVEMENT     — Signal is still, waiting for the index
                                 to reach the upper threshold.
    SEARCHING_FOR_NO_MOVEMENT  — Movement was declared, waiting for the
                                 index to fall to the lower threshold.
    SEARCH_TIMEOUT             — Movement never settled within the search
                                 timeout. Absorbing until reset().

Transition logic:
    index >= upper  (searching for movement)     -> movement detected,
                                                    start search timer.
    index <= lower  (searching for no movement)  -> no movement detected.
    timer >= timeout (searching for no movement) -> SEARCH_TIMEOUT.

Between the two thresholds nothing changes, which is what keeps the
state from flapping around a single boundary. The numeric state values
are part of the saved file format and must not change.
"""

import logging
from enum import IntEnum

from .timer import SearchTimer, Clock

logger = logging.getLogger("movement.control_logic")


class SearchState(IntEnum):
    SEARCHING_FOR_MOVEMENT = 0
    SEARCHING_FOR_NO_MOVEMENT = 1
    SEARCH_TIMEOUT = 2


class HysteresisStateMachine:
    """
    Movement / no-movement search with a timeout escape path.

    Attributes:
        movement_detected (bool): Set on the update that entered
            SEARCHING_FOR_NO_MOVEMENT.
        no_movement_detected (bool): Set on the update that returned to
            SEARCHING_FOR_MOVEMENT.
        timer (SearchTimer): Running while searching for no movement.
    """

    def __init__(self, clock: Clock = None):
        self.timer = SearchTimer(clock)
        self._state = SearchState.SEARCHING_FOR_MOVEMENT
        self.movement_detected = False
        self.no_movement_detected = False

    def update(self, movement_index: float, upper_threshold: float,
               lower_threshold: float, search_timeout: float) -> SearchState:
        """
        Advance the machine for one smoothed index value.

        Args:
            movement_index: Current smoothed index.
            upper_threshold: Level that declares movement.
            lower_threshold: Level that declares the movement settled.
            search_timeout: Seconds allowed for settling; 0 = unlimited.

        Returns:
            The state after the update.
        """
        self.clear_flags()

        if self._state == SearchState.SEARCHING_FOR_MOVEMENT:
            if movement_index >= upper_threshold:
                self.movement_detected = True
                self._state = SearchState.SEARCHING_FOR_NO_MOVEMENT
                self.timer.start()
                logger.info(
                    f"Movement detected (index={movement_index:.4f}, "
                    f"upper={upper_threshold})"
                )

        elif self._state == SearchState.SEARCHING_FOR_NO_MOVEMENT:
            if movement_index <= lower_threshold:
                self.no_movement_detected = True
                self._state = SearchState.SEARCHING_FOR_MOVEMENT
                self.timer.stop()
                logger.info(
                    f"No movement detected (index={movement_index:.4f}, "
                    f"lower={lower_threshold})"
                )
            elif self.timer.timed_out(search_timeout):
                self._state = SearchState.SEARCH_TIMEOUT
                self.timer.stop()
                logger.warning(
                    f"Movement did not settle within {search_timeout}s "
                    f"(index={movement_index:.4f}); reset required"
                )

        return self._state

    @property
    def state(self) -> SearchState:
        """Current search state."""
        return self._state

    def restore(self, state: SearchState, search_elapsed: float = 0.0) -> None:
        """
        Put the machine into a saved state.

        The search timer resumes with `search_elapsed` seconds already
        counted when restoring SEARCHING_FOR_NO_MOVEMENT.
        """
        self._state = SearchState(state)
        self.clear_flags()
        if self._state == SearchState.SEARCHING_FOR_NO_MOVEMENT:
            self.timer.start_from(search_elapsed)
        else:
            self.timer.stop()

    def clear_flags(self) -> None:
        self.movement_detected = False
        self.no_movement_detected = False

    def reset(self) -> None:
        """Back to SEARCHING_FOR_MOVEMENT with the timer stopped."""
        self._state = SearchState.SEARCHING_FOR_MOVEMENT
        self.clear_flags()
        self.timer.stop()
        logger.debug("Search state reset to SEARCHING_FOR_MOVEMENT")
