"""
Unit tests for the ticket status rollup
"""

import pytest

from kitchen_tickets.models.ticket import TicketStatus
from kitchen_tickets.models.ticket_line import LineStatus
from kitchen_tickets.services.rollup import evaluate_rollup

P = LineStatus.PENDING
IP = LineStatus.IN_PROGRESS
C = LineStatus.COMPLETED
X = LineStatus.CANCELLED


@pytest.mark.parametrize("current", [TicketStatus.CANCELLED, TicketStatus.COMPLETED])
@pytest.mark.parametrize("lines", [[], [P], [IP, C], [C, C], [X, X]])
def test_terminal_ticket_never_changes(current, lines):
    assert evaluate_rollup(current, lines) == current


@pytest.mark.parametrize("current", [TicketStatus.PENDING, TicketStatus.IN_PROGRESS])
def test_ticket_without_lines_unchanged(current):
    assert evaluate_rollup(current, []) == current


@pytest.mark.parametrize("lines", [[C], [C, C], [C, X], [X, C, X]])
@pytest.mark.parametrize("current", [TicketStatus.PENDING, TicketStatus.IN_PROGRESS])
def test_all_resolved_with_a_completed_line_completes(current, lines):
    assert evaluate_rollup(current, lines) == TicketStatus.COMPLETED


@pytest.mark.parametrize("current", [TicketStatus.PENDING, TicketStatus.IN_PROGRESS])
def test_all_cancelled_lines_leave_ticket_alone(current):
    assert evaluate_rollup(current, [X, X]) == current


@pytest.mark.parametrize("lines", [[P], [P, P], [P, X], [IP], [P, IP], [P, C], [IP, X], [P, C, X], [IP, C]])
def test_open_lines_leave_pending_ticket_pending(lines):
    assert evaluate_rollup(TicketStatus.PENDING, lines) == TicketStatus.PENDING


@pytest.mark.parametrize("lines", [[IP], [P, C], [IP, C, X], [P, X]])
def test_in_progress_ticket_with_open_lines_stays_in_progress(lines):
    assert evaluate_rollup(TicketStatus.IN_PROGRESS, lines) == TicketStatus.IN_PROGRESS


def test_no_premature_completion():
    """A single unresolved line keeps the ticket open"""
    lines = [C] * 9 + [IP]
    assert evaluate_rollup(TicketStatus.IN_PROGRESS, lines) == TicketStatus.IN_PROGRESS


def test_accepts_any_iterable():
    assert evaluate_rollup(TicketStatus.PENDING, (s for s in [C, X])) == TicketStatus.COMPLETED
