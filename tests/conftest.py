from concurrent.futures import Executor, Future

import pytest

from index_store import DivisionIndexStore

SAMPLE_CSV = (
    "ID,NAME,2012L,2013S,2013L\n"
    "1,Laisamis,0.05,0.07,0.12\n"
    "2,North Horr,0.09,abc,0.2\n"
    "\n"
    "3,Loiyangalani,,0.11,0.16\n"
)

SAMPLE_RATES = {
    "1": {"Aug/Sep2013": 0.0525, "Jan/Feb2013": 0.061},
    "3": {"Aug/Sep2013": 0.08},
}


GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"IBLI_ID": 1, "IBLI_UNIT": "Laisamis", "DISTRICT": "MARSABIT", "COUNTRY": "KENYA"},
            "geometry": {"type": "Polygon", "coordinates": [[[37.0, 1.0], [38.0, 1.0], [38.0, 2.0], [37.0, 1.0]]]},
        },
        {
            "type": "Feature",
            "properties": {"DIV_ID": "3", "IBLI_UNIT": "Dire", "COUNTRY": "ETHIOPIA"},
            "geometry": {"type": "Polygon", "coordinates": [[[38.0, 4.0], [39.0, 4.0], [39.0, 5.0], [38.0, 4.0]]]},
        },
    ],
}


class ManualExecutor(Executor):
    """Queues submitted jobs until the test runs them, in whatever order it chooses."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def run(self, position):
        future, fn, args, kwargs = self.jobs[position]
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def ready_store():
    """A store resolved to the latest period of SAMPLE_CSV, with SAMPLE_RATES loaded."""
    store = DivisionIndexStore(fetch_index=lambda: SAMPLE_CSV, fetch_rates=lambda: SAMPLE_RATES)
    store.load_rates().result(timeout=5)
    store.resolve(timeout=5)
    yield store
    store.shutdown()
