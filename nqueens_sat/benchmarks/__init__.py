from .benchmark_runner import BenchmarkRunner
