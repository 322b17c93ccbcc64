"""
Benchmark and Profiling Module for the Care Home Rota Scheduling System.

Provides:
- Function-level profiling with a decorator
- A benchmark runner with statistical analysis
- A benchmark suite for the overlap and assignment evaluation hot paths

Usage:
    # Run benchmarks
    python benchmark.py

    # Use profiling decorator
    @profile_function
    def my_function():
        pass
"""
import time
import statistics
import functools
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass, field

from rich.console import Console
from rich.table import Table


# =============================================================================
# PROFILING DECORATOR
# =============================================================================

@dataclass
class ProfileResult:
    """Result of profiling a function call."""
    function_name: str
    execution_time: float
    timestamp: datetime = field(default_factory=datetime.now)
    success: bool = True
    error: Optional[str] = None


_profile_data: Dict[str, List[ProfileResult]] = {}
_profile_lock = threading.Lock()


def profile_function(func: Callable) -> Callable:
    """
    Decorator to record the execution time of every call.

    Results are retrieved with get_profile_summary().
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        start_time = time.perf_counter()
        error_msg = None
        try:
            return func(*args, **kwargs)
        except Exception as e:
            error_msg = str(e)
            raise
        finally:
            result = ProfileResult(
                function_name=func.__qualname__,
                execution_time=time.perf_counter() - start_time,
                success=error_msg is None,
                error=error_msg,
            )
            with _profile_lock:
                _profile_data.setdefault(func.__qualname__, []).append(result)

    return wrapper


def _stats(times: List[float]) -> Dict[str, float]:
    return {
        "total_time": sum(times),
        "avg_time": statistics.mean(times) if times else 0,
        "min_time": min(times) if times else 0,
        "max_time": max(times) if times else 0,
        "std_dev": statistics.stdev(times) if len(times) > 1 else 0,
    }


def get_profile_summary() -> Dict[str, Dict[str, Any]]:
    """
    Get summary of all profiled functions.

    Returns:
        Dictionary with function names as keys and stats as values
    """
    with _profile_lock:
        snapshot = {name: list(results) for name, results in _profile_data.items()}

    summary = {}
    for func_name, results in snapshot.items():
        successes = sum(1 for r in results if r.success)
        summary[func_name] = {
            "call_count": len(results),
            "success_count": successes,
            "failure_count": len(results) - successes,
            **_stats([r.execution_time for r in results]),
        }
    return summary


def clear_profile_data() -> None:
    with _profile_lock:
        _profile_data.clear()


def print_profile_report(console: Optional[Console] = None) -> None:
    """Print profiled functions as a table, slowest total first."""
    console = console or Console()
    summary = get_profile_summary()
    if not summary:
        console.print("[dim]No profiling data collected.[/dim]")
        return

    table = Table(title="Profiling Report")
    table.add_column("Function", style="cyan")
    table.add_column("Calls", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Total (s)", justify="right")
    table.add_column("Avg (ms)", justify="right")
    table.add_column("Max (ms)", justify="right")
    for name, stats in sorted(summary.items(), key=lambda x: x[1]["total_time"], reverse=True):
        table.add_row(
            name,
            str(stats["call_count"]),
            str(stats["failure_count"]),
            f"{stats['total_time']:.3f}",
            f"{stats['avg_time'] * 1000:.2f}",
            f"{stats['max_time'] * 1000:.2f}",
        )
    console.print(table)


# =============================================================================
# BENCHMARK RUNNER
# =============================================================================

@dataclass
class BenchmarkResult:
    """Result of a benchmark run."""
    name: str
    iterations: int
    times: List[float]
    failures: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def mean(self) -> float:
        return statistics.mean(self.times) if self.times else 0

    @property
    def median(self) -> float:
        return statistics.median(self.times) if self.times else 0

    def to_dict(self) -> dict:
        stats = _stats(self.times)
        return {
            "name": self.name,
            "iterations": self.iterations,
            "failures": self.failures,
            "mean": self.mean,
            "median": self.median,
            "std_dev": stats["std_dev"],
            "min": stats["min_time"],
            "max": stats["max_time"],
            "timestamp": self.timestamp.isoformat(),
        }


class Benchmark:
    """
    Benchmark runner for performance testing.

    Usage:
        bench = Benchmark()
        bench.add("Overlap scan", run_scan, iterations=10)
        bench.run()
        bench.print_report()
    """

    def __init__(self, console: Optional[Console] = None):
        self.benchmarks: List[Dict] = []
        self.results: List[BenchmarkResult] = []
        self.console = console or Console()

    def add(self, name: str, func: Callable, iterations: int = 5,
            args: tuple = (), kwargs: dict = None) -> "Benchmark":
        self.benchmarks.append({
            "name": name,
            "func": func,
            "iterations": iterations,
            "args": args,
            "kwargs": kwargs or {}
        })
        return self

    def run(self) -> List[BenchmarkResult]:
        """Run all benchmarks. Failed iterations are counted, not timed."""
        self.results = []
        for bench in self.benchmarks:
            self.console.print(f"Running benchmark: [bold]{bench['name']}[/bold]...")
            times, failures = [], 0
            for i in range(bench['iterations']):
                start = time.perf_counter()
                try:
                    bench['func'](*bench['args'], **bench['kwargs'])
                except Exception as e:
                    failures += 1
                    self.console.print(f"  [red]Iteration {i + 1} failed: {e}[/red]")
                    continue
                times.append(time.perf_counter() - start)

            self.results.append(BenchmarkResult(
                name=bench['name'],
                iterations=bench['iterations'],
                times=times,
                failures=failures,
            ))
        return self.results

    def print_report(self) -> None:
        if not self.results:
            self.console.print("[dim]No benchmark results. Run benchmarks first.[/dim]")
            return

        table = Table(title="Benchmark Report")
        table.add_column("Benchmark", style="cyan")
        table.add_column("Runs", justify="right")
        table.add_column("Mean (ms)", justify="right")
        table.add_column("Median (ms)", justify="right")
        table.add_column("Max (ms)", justify="right")
        for result in self.results:
            stats = _stats(result.times)
            table.add_row(
                result.name,
                f"{len(result.times)}/{result.iterations}",
                f"{result.mean * 1000:.2f}",
                f"{result.median * 1000:.2f}",
                f"{stats['max_time'] * 1000:.2f}",
            )
        self.console.print(table)

    def get_results_dict(self) -> List[dict]:
        return [r.to_dict() for r in self.results]


# =============================================================================
# SYSTEM BENCHMARK (MAIN)
# =============================================================================

def build_benchmark_store(homes: int = 3, staff_per_home: int = 20, weeks: int = 4):
    """
    Build an in-memory store with three-shift templates materialized and
    staff assigned round-robin.
    """
    from datetime import date, timedelta

    from models.staff import Role, StaffMember
    from repository import InMemoryRotaStore
    from scheduling.materializer import materialize
    from models.schedule import WeeklyScheduleTemplate

    store = InMemoryRotaStore()
    week_start = date(2025, 1, 6)
    for h in range(homes):
        home_id = f"H{h + 1}"
        staff_ids = [f"{home_id}-S{i + 1}" for i in range(staff_per_home)]
        for staff_id in staff_ids:
            store.add_staff(StaffMember(id=staff_id, name=staff_id,
                                        role=Role.SUPPORT_WORKER, home_ids={home_id}))

        template = WeeklyScheduleTemplate.create_default(home_id)
        template.apply_library_template("three-shift", service_id="care")
        store.save_weekly_schedule_template(template)

        shifts = []
        for w in range(weeks):
            shifts.extend(materialize(template, week_start + timedelta(weeks=w)))
        for i, shift in enumerate(shifts):
            shift.assign(staff_ids[i % len(staff_ids)])
        store.add_shifts(shifts)
    return store


def run_system_benchmark():
    """Benchmark the scan and evaluation paths on synthetic data."""
    from datetime import date

    from agents.conflict_scanner import ConflictScannerAgent
    from communication.message_bus import MessageBus
    from models.time_interval import TimeInterval
    from scheduling.overlap import check_overlap

    console = Console()
    console.rule("CARE HOME ROTA SYSTEM - BENCHMARK SUITE")
    console.print(f"Started at: {datetime.now().isoformat()}")

    store = build_benchmark_store()
    home_ids = sorted({s.home_id for s in store.all_shifts()})
    all_shifts = store.all_shifts()
    message_bus = MessageBus(verbose=False)
    scanner = ConflictScannerAgent(message_bus, store)
    night = TimeInterval.from_strings("22:00", "06:00")

    def benchmark_overlap():
        for shift in all_shifts[:200]:
            check_overlap(night, shift.date, all_shifts)

    def benchmark_scan():
        return scanner.execute(home_ids=home_ids, start_date=date(2025, 1, 6),
                               end_date=date(2025, 2, 2), notify=False)

    bench = Benchmark(console)
    bench.add("Overlap check (200 x all shifts)", benchmark_overlap, iterations=3)
    bench.add("Conflict scan (4 weeks)", benchmark_scan, iterations=3)
    bench.run()
    bench.print_report()
    print_profile_report(console)

    return bench.get_results_dict()


if __name__ == "__main__":
    run_system_benchmark()
