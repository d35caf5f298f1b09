"""Membership Enforcement — the live-in-market guard and its repair rule.

Invariants:
    - All functions are PURE: no IO, no DB, no side effects
    - Guards return the error to raise on violation, None on success
    - live_in_market == True implies member_count >= threshold at every committed state
    - There is no automatic NOT_LIVE -> LIVE transition: membership growth never raises the flag

Design Decisions:
    - Return errors (not raise): services decide when to raise, tests assert on values
    - Rejection (go-live guard) and repair (deactivation) are separate functions because
      the first refuses the operation while the second always lets it through
"""

from stockhub.core.errors import LiveThresholdError


def check_can_go_live(member_count: int, threshold: int) -> LiveThresholdError | None:
    """Guard for NOT_LIVE -> LIVE: enough members right now."""
    if member_count < threshold:
        return LiveThresholdError(threshold)
    return None


def check_live_request(
    requested_live: bool | None, member_count: int, threshold: int,
) -> LiveThresholdError | None:
    """Guard for create/update: only a request for LIVE can be rejected."""
    if requested_live:
        return check_can_go_live(member_count, threshold)
    return None


def is_below_threshold(member_count: int, threshold: int) -> bool:
    return member_count < threshold


def needs_deactivation(live_in_market: bool, member_count: int, threshold: int) -> bool:
    """Repair rule: a LIVE exchange that dropped below threshold must go NOT_LIVE."""
    return live_in_market and is_below_threshold(member_count, threshold)

