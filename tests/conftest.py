import itertools

import pytest

from internhours.models.time_logs import TimeLogRecord

DAY = "2025-03-03"


def stamp(clock, day=DAY):
    return f"{day}T{clock}:00Z"


@pytest.fixture
def at():
    return stamp


@pytest.fixture
def make_log():
    ids = itertools.count(1)

    def _make_log(time_in, time_out=None, owner_id="7", day=DAY, **fields):
        return TimeLogRecord(
            id=str(next(ids)),
            owner_id=owner_id,
            time_in=stamp(time_in, day) if time_in else None,
            time_out=stamp(time_out, day) if time_out else None,
            **fields,
        )

    return _make_log
