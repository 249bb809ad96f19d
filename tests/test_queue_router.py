"""
Unit tests for partitioning ticket lines by queue
"""

import uuid

from kitchen_tickets.models.kitchen_queue import QueueAssignment
from kitchen_tickets.models.ticket_line import TicketLine
from kitchen_tickets.services.queue_router import partition_lines, queues_for_product


def make_line(product_id, name="Item"):
    return TicketLine(
        ticket_id=uuid.uuid4(),
        order_line_id=uuid.uuid4(),
        product_id=product_id,
        product_name=name,
    )


def assign(queue_id, product_id):
    return QueueAssignment(queue_id=queue_id, product_id=product_id)


def test_lines_grouped_by_queue():
    grill, bar = uuid.uuid4(), uuid.uuid4()
    burger, steak, beer = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    lines = [make_line(burger), make_line(beer), make_line(steak)]

    routing = partition_lines(lines, [assign(grill, burger), assign(grill, steak), assign(bar, beer)])

    assert routing.lines_for(grill) == [lines[0], lines[2]]
    assert routing.lines_for(bar) == [lines[1]]
    assert routing.unassigned == []


def test_product_in_several_queues_appears_in_each():
    grill, expo = uuid.uuid4(), uuid.uuid4()
    burger = uuid.uuid4()
    line = make_line(burger)

    routing = partition_lines([line], [assign(grill, burger), assign(expo, burger)])

    assert routing.lines_for(grill) == [line]
    assert routing.lines_for(expo) == [line]


def test_unassigned_lines_are_kept():
    grill = uuid.uuid4()
    burger, salad = uuid.uuid4(), uuid.uuid4()
    lines = [make_line(burger), make_line(salad)]

    routing = partition_lines(lines, [assign(grill, burger)])

    assert routing.unassigned == [lines[1]]
    routed = {id(line) for bucket in routing.by_queue.values() for line in bucket}
    assert routed | {id(line) for line in routing.unassigned} == {id(line) for line in lines}


def test_no_assignments():
    lines = [make_line(uuid.uuid4()), make_line(uuid.uuid4())]
    routing = partition_lines(lines, [])

    assert routing.by_queue == {}
    assert routing.unassigned == lines
    assert routing.lines_for(uuid.uuid4()) == []


def test_product_lookup_override():
    grill = uuid.uuid4()
    burger = uuid.uuid4()
    line = make_line(uuid.uuid4(), name="burger")

    routing = partition_lines(
        [line],
        [assign(grill, burger)],
        product_lookup=lambda item: burger if item.product_name == "burger" else None,
    )

    assert routing.lines_for(grill) == [line]


def test_line_without_known_product_is_unassigned():
    grill = uuid.uuid4()
    line = make_line(uuid.uuid4())

    routing = partition_lines([line], [assign(grill, line.product_id)], product_lookup=lambda item: None)

    assert routing.unassigned == [line]


def test_queues_for_product():
    grill, bar = uuid.uuid4(), uuid.uuid4()
    burger, beer = uuid.uuid4(), uuid.uuid4()
    assignments = [assign(grill, burger), assign(bar, beer), assign(bar, burger)]

    assert queues_for_product(burger, assignments) == {grill, bar}
    assert queues_for_product(uuid.uuid4(), assignments) == set()
