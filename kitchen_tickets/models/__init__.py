from kitchen_tickets.models.ticket import Ticket, TicketStatus
from kitchen_tickets.models.ticket_line import TicketLine, LineStatus
from kitchen_tickets.models.kitchen_queue import KitchenQueue, QueueAssignment
