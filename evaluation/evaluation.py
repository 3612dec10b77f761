#!/usr/bin/env python3
"""
Evaluation runner for the Huffman compressor.

This evaluation script:
- Runs pytest on the tests/ folder and collects individual test results
- Measures compression ratio and timing on synthetic datasets
- Generates a structured JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--output report.json] [--size-kb 256] [--skip-tests]
"""
import os
import sys
import json
import uuid
import random
import platform
import subprocess
import time
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from huffman_service import HuffmanService  # noqa: E402


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_git_info():
    """Get git commit and branch information."""
    git_info = {"git_commit": "unknown", "git_branch": "unknown"}
    for key, cmd in (
        ("git_commit", ["git", "rev-parse", "HEAD"]),
        ("git_branch", ["git", "rev-parse", "--abbrev-ref", "HEAD"]),
    ):
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=5, cwd=str(PROJECT_ROOT)
            )
        except (OSError, subprocess.TimeoutExpired):
            continue
        if result.returncode == 0:
            value = result.stdout.strip()
            git_info[key] = value[:8] if key == "git_commit" else value
    return git_info


def get_environment_info():
    """Collect environment information for the report."""
    git_info = get_git_info()

    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "os_release": platform.release(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
        "git_commit": git_info["git_commit"],
        "git_branch": git_info["git_branch"],
    }


def run_pytest(tests_dir, timeout=600):
    """
    Run pytest on the tests/ folder with the project root on PYTHONPATH.

    Returns:
        dict with test results
    """
    print(f"\n{'=' * 60}")
    print("RUNNING TESTS")
    print(f"{'=' * 60}")
    print(f"Tests directory: {tests_dir}")

    cmd = [sys.executable, "-m", "pytest", str(tests_dir), "-v", "--tb=short"]

    env = os.environ.copy()
    env["PYTHONPATH"] = str(PROJECT_ROOT)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            env=env,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        print("❌ Test execution timed out")
        return {
            "success": False,
            "exit_code": -1,
            "tests": [],
            "summary": {"error": "Test execution timed out"},
            "stdout": "",
            "stderr": "",
        }

    stdout = result.stdout
    stderr = result.stderr
    tests = parse_pytest_verbose_output(stdout)

    counts = {
        outcome: sum(1 for t in tests if t["outcome"] == outcome)
        for outcome in ("passed", "failed", "error", "skipped")
    }
    total = len(tests)

    print(
        f"\nResults: {counts['passed']} passed, {counts['failed']} failed, "
        f"{counts['error']} errors, {counts['skipped']} skipped (total: {total})"
    )
    for test in tests:
        status_icon = {
            "passed": "✅",
            "failed": "❌",
            "error": "💥",
            "skipped": "⏭️"
        }.get(test["outcome"], "❓")
        print(f"  {status_icon} {test['nodeid']}: {test['outcome']}")

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": {
            "total": total,
            "passed": counts["passed"],
            "failed": counts["failed"],
            "errors": counts["error"],
            "skipped": counts["skipped"],
        },
        "stdout": stdout[-3000:],
        "stderr": stderr[-1000:],
    }


def parse_pytest_verbose_output(output):
    """Parse pytest verbose output to extract test results."""
    tests = []
    status_words = {
        " PASSED": "passed",
        " FAILED": "failed",
        " ERROR": "error",
        " SKIPPED": "skipped",
    }

    for line in output.split('\n'):
        line_stripped = line.strip()

        # Match lines like: tests/test_service.py::test_empty_input PASSED
        if '::' not in line_stripped:
            continue
        for status_word, outcome in status_words.items():
            if status_word in line_stripped:
                nodeid = line_stripped.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": outcome,
                })
                break

    return tests


# Synthetic dataset generators

def _sample_cdf(rng, cdf):
    r = rng.random()
    lo, hi = 0, len(cdf) - 1
    while lo < hi:
        mid = (lo + hi) // 2
        if r <= cdf[mid]:
            hi = mid
        else:
            lo = mid + 1
    return lo


def _cdf(weights):
    total = sum(weights)
    out = []
    acc = 0.0
    for w in weights:
        acc += w / total
        out.append(acc)
    return out


def gen_uniform(size, alphabet=256, seed=0):
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))


def gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=0):
    rng = random.Random(seed)
    other_symbols = [i for i in range(256) if i != dominant]
    return bytes(
        dominant if rng.random() < dom_frac else rng.choice(other_symbols)
        for _ in range(size)
    )


def gen_zipf_like(size, alphabet=128, s=1.2, seed=0):
    rng = random.Random(seed)
    cdf = _cdf([1.0 / ((i + 1) ** s) for i in range(alphabet)])
    return bytes(_sample_cdf(rng, cdf) for _ in range(size))


def gen_english_like(size, seed=0):
    rng = random.Random(seed)
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    cdf = _cdf(weights)
    return bytes(ord(chars[_sample_cdf(rng, cdf)]) for _ in range(size))


DATASETS = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "single_symbol": lambda size, seed: b"A" * size,
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}


def run_benchmark(size_bytes, seed=123):
    """Compress and decompress each dataset once, recording ratio and timing."""
    print(f"\n{'=' * 60}")
    print(f"RUNNING BENCHMARK ({size_bytes} bytes per dataset)")
    print(f"{'=' * 60}")

    service = HuffmanService()
    rows = []
    for name, generate in DATASETS.items():
        data = generate(size_bytes, seed)

        t0 = time.perf_counter()
        container = service.compress(data)
        t1 = time.perf_counter()
        restored = service.decompress(container)
        t2 = time.perf_counter()

        info = service.inspect(container)
        row = {
            "dataset": name,
            "original_bytes": len(data),
            "container_bytes": len(container),
            "header_bytes": info.header_size,
            "distinct_symbols": info.distinct_symbols,
            "max_code_length": info.max_code_length,
            "compression_ratio": len(container) / max(1, len(data)),
            "encode_ms": (t1 - t0) * 1000.0,
            "decode_ms": (t2 - t1) * 1000.0,
            "roundtrip_ok": restored == data,
        }
        rows.append(row)
        print(
            f"  {'✅' if row['roundtrip_ok'] else '❌'} {name}: "
            f"{row['original_bytes']}B → {row['container_bytes']}B "
            f"({row['compression_ratio'] * 100:.1f}%), "
            f"encode {row['encode_ms']:.1f}ms, decode {row['decode_ms']:.1f}ms"
        )
    return rows


def generate_output_path():
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir / "report.json"


def main(argv=None):
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the Huffman compressor evaluation")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )
    parser.add_argument("--size-kb", type=int, default=64, help="Size of each benchmark dataset in KB")
    parser.add_argument("--seed", type=int, default=123, help="Random seed for the datasets")
    parser.add_argument("--skip-tests", action="store_true", help="Only run the benchmark")

    args = parser.parse_args(argv)

    run_id = generate_run_id()
    started_at = datetime.now()

    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    tests = None
    if not args.skip_tests:
        tests = run_pytest(PROJECT_ROOT / "tests")
    benchmark = run_benchmark(max(1, args.size_kb) * 1024, args.seed)

    success = all(row["roundtrip_ok"] for row in benchmark)
    if tests is not None:
        success = success and tests["success"]

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "environment": get_environment_info(),
        "results": {
            "tests": tests,
            "benchmark": benchmark,
        },
    }

    output_path = Path(args.output) if args.output else generate_output_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")

    print(f"\n{'=' * 60}")
    print("EVALUATION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Run ID: {run_id}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'✅ YES' if success else '❌ NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
