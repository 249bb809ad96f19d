"""
Column types shared by the kitchen models
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum as SAEnum
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp, always stored and returned in UTC.

    Naive values are taken to be UTC already. SQLite keeps no offset, so
    values read back from it get UTC attached again.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def status_column(enum_cls, default):
    """Column storing an enum by its value rather than its member name"""
    return Column(
        SAEnum(
            enum_cls,
            values_callable=lambda members: [m.value for m in members],
            native_enum=False,
            length=20,
        ),
        nullable=False,
        index=True,
        default=default,
    )
