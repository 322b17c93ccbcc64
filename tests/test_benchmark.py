import pytest
from rich.console import Console

from benchmark import (
    Benchmark,
    build_benchmark_store,
    clear_profile_data,
    get_profile_summary,
    profile_function,
)


@pytest.fixture(autouse=True)
def fresh_profile():
    clear_profile_data()
    yield
    clear_profile_data()


def test_profile_function_records_calls_and_failures():
    @profile_function
    def flaky(fail):
        if fail:
            raise RuntimeError("boom")
        return "ok"

    assert flaky(False) == "ok"
    with pytest.raises(RuntimeError):
        flaky(True)

    (stats,) = get_profile_summary().values()
    assert stats["call_count"] == 2
    assert stats["failure_count"] == 1


def test_benchmark_counts_failed_iterations():
    calls = []

    def sometimes_fails():
        calls.append(1)
        if len(calls) == 2:
            raise ValueError("bad run")

    bench = Benchmark(Console(quiet=True))
    (result,) = bench.add("flaky", sometimes_fails, iterations=3).run()

    assert result.failures == 1
    assert len(result.times) == 2
    assert bench.get_results_dict()[0]["failures"] == 1


def test_build_benchmark_store():
    store = build_benchmark_store(homes=2, staff_per_home=5, weeks=1)

    assert len(store.all_shifts()) == 42
    assert len(store.list_staff()) == 10
    assert all(len(s.assigned_user_ids) == 1 for s in store.all_shifts())
