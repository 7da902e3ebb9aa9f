#!/usr/bin/env python3
"""
Benchmark suite for Eon parsing and formatting.

Generates documents of increasing size and measures parse, format and
reformat throughput, along with the cost of keeping comments.
"""

import json
from typing import Any, Dict

import eon
from eon.profiler import PerformanceProfiler


class BenchmarkSuite:
    """Benchmark suite for the Eon parser and formatter."""

    def __init__(self, iterations: int = 5):
        """Initialize the benchmark suite."""
        self.iterations = iterations
        self.profiler = PerformanceProfiler()

    def create_test_dataset(self, size_category: str) -> Dict[str, Any]:
        """Create test datasets of different sizes."""
        if size_category == "small":
            return {
                "users": {f"user_{i}": {"name": f"User {i}", "data": f"data_{i}"} for i in range(50)},
                "posts": [{"id": i, "content": f"Post content {i}"} for i in range(100)]
            }
        elif size_category == "medium":
            return {
                "users": {
                    f"user_{i}": {
                        "name": f"User {i}",
                        "profile": {"age": 20 + i % 50, "city": f"City {i % 20}", "score": i / 7},
                        "posts": [f"post_{j}" for j in range(i % 10)]
                    } for i in range(500)
                },
                "analytics": {
                    f"day_{i}": {"views": i * 100, "clicks": i * 10} for i in range(365)
                }
            }
        elif size_category == "large":
            return {
                f"section_{i}": {
                    f"item_{j}": {
                        "id": j,
                        "data": f"Large data content {j} " * 20,
                        "metadata": {"created": f"2024-01-{(j % 30) + 1}", "tags": [f"tag_{k}" for k in range(j % 5)]}
                    } for j in range(200)
                } for i in range(50)
            }
        else:
            raise ValueError(f"Unknown size category: {size_category}")

    def create_commented_text(self, size_category: str) -> str:
        """Render a dataset with a comment above every top-level entry."""
        dataset = self.create_test_dataset(size_category)
        lines = []
        for key in dataset:
            lines.append(f"// {key}")
            lines.append(f"{key}: {json.dumps(dataset[key])}")
        return "\n".join(lines) + "\n"

    def _measure(self, name: str, text: str, operation) -> Dict[str, Any]:
        output = ""
        with self.profiler.profile_operation(name, input_size=len(text.encode("utf-8")),
                                             iterations=self.iterations) as profiler:
            for _ in range(self.iterations):
                output = operation()
                profiler.sample_performance()
            profiler.output_size = len(output.encode("utf-8")) if isinstance(output, str) else 0

        metrics = self.profiler.metrics_history[-1]
        return {
            "input_size_kb": metrics.input_size / 1024,
            "avg_time": metrics.duration / self.iterations,
            "throughput_mbps": metrics.throughput_mbps,
            "docs_per_sec": metrics.documents_per_second,
            "memory_peak_mb": metrics.memory_peak_mb,
        }

    def benchmark_dataset_sizes(self) -> Dict[str, Dict[str, Any]]:
        """Benchmark parse and format across dataset sizes."""
        print("📊 Benchmarking Dataset Sizes...")

        results = {}
        for category in ["small", "medium", "large"]:
            print(f"   Testing {category} dataset...")
            value = eon.to_value(self.create_test_dataset(category))
            text = eon.format_value(value)

            results[f"{category}/parse"] = self._measure(f"parse_{category}", text,
                                                         lambda: eon.parse_value(text))
            results[f"{category}/format"] = self._measure(f"format_{category}", text,
                                                          lambda: eon.format_value(value))
        return results

    def benchmark_comments(self) -> Dict[str, Dict[str, Any]]:
        """Compare value parsing with comment-preserving reformatting."""
        print("💬 Benchmarking Comment Preservation...")

        text = self.create_commented_text("medium")
        return {
            "parse_value": self._measure("parse_value", text, lambda: eon.parse_value(text)),
            "parse": self._measure("parse", text, lambda: eon.parse(text)),
            "reformat": self._measure("reformat", text, lambda: eon.reformat(text)),
        }

    def print_results(self, results: Dict[str, Any], title: str):
        """Print benchmark results in a formatted table."""
        print(f"\n📈 {title}")
        print("=" * 80)

        if not results:
            print("No results to display.")
            return

        first_key = next(iter(results.keys()))
        columns = list(results[first_key].keys())

        header = f"{'Config':<15}"
        for col in columns:
            header += f"{col:<15}"
        print(header)
        print("-" * len(header))

        for config, data in results.items():
            row = f"{config:<15}"
            for col in columns:
                value = data.get(col, 0)
                if isinstance(value, float):
                    if col.endswith('_time'):
                        row += f"{value:<15.5f}"
                    else:
                        row += f"{value:<15.2f}"
                else:
                    row += f"{value:<15}"
            print(row)

    def run_comprehensive_benchmark(self):
        """Run the complete benchmark suite."""
        print("🚀 Eon Benchmark Suite")
        print("=" * 60)
        print(f"{self.iterations} iterations per measurement")
        print()

        size_results = self.benchmark_dataset_sizes()
        self.print_results(size_results, "Dataset Size Scaling")

        comment_results = self.benchmark_comments()
        self.print_results(comment_results, "Comment Preservation Cost")

        if comment_results:
            overhead = comment_results["parse"]["avg_time"] / max(comment_results["parse_value"]["avg_time"], 1e-9)
            print(f"\n🎯 Keeping comments costs {overhead:.2f}x a plain value parse")

        print("\n" + self.profiler.export_metrics("summary"))


def main():
    """Run the benchmark suite."""
    benchmark = BenchmarkSuite()
    benchmark.run_comprehensive_benchmark()


if __name__ == "__main__":
    main()
