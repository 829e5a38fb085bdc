"""
stridebeats - Alternation Gate
A forward step only counts when it uses the opposite button from the last
accepted step. The first step of a cycle must be the left button.
"""

from typing import Optional


def is_correct_button(left_pressed: bool, right_pressed: bool, last_step_was_left: bool) -> bool:
    """True when the press continues the left/right alternation."""
    return (left_pressed and not last_step_was_left) or (right_pressed and last_step_was_left)


def resolve_step_button(left_pressed: bool, right_pressed: bool,
                        last_step_was_left: bool) -> Optional[bool]:
    """Which button satisfied the gate: True = left, False = right, None = rejected.
    With both buttons down the expected one wins."""
    if not is_correct_button(left_pressed, right_pressed, last_step_was_left):
        return None
    return not last_step_was_left


def next_expected_button(last_step_was_left: bool) -> str:
    return "Right" if last_step_was_left else "Left"
