#!/usr/bin/env python3
"""
Command line and batch runner for the pair-Huffman archivator.

This runner:
- Encodes and decodes single files
- Round-trips every file of a directory in parallel (one process per file)
- Generates a structured JSON report with environment metadata

Run with:
    python huffman_batch.py encode notes.txt
    python huffman_batch.py decode notes.txt.huffman notes.txt.after
    python huffman_batch.py batch TestData/ --workers 4
"""
import argparse
import json
import logging
import os
import platform
import sys
import time
import uuid
from concurrent.futures import ProcessPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path

from tqdm import tqdm

from huffman_errors import HuffmanError, MissingFileError
from huffman_metrics import build_report, format_report
from huffman_service import HuffmanService

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".huffman"
RESTORED_SUFFIX = ".after"


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_environment_info():
    """Collect environment information for the report."""
    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "os_release": platform.release(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
        "cpu_count": os.cpu_count(),
    }


def discover_files(directory):
    """List the input files of ``directory``, skipping the runner's own outputs."""
    return sorted(
        path for path in Path(directory).iterdir()
        if path.is_file()
        and ARCHIVE_SUFFIX not in path.name
        and RESTORED_SUFFIX not in path.name
    )


def process_file(path):
    """
    Encode ``path``, decode it back and compare with the original.

    Every failure is captured in the returned dict so one file never stops
    the rest of the batch.
    """
    path = Path(path)
    archive_path = path.with_name(path.name + ARCHIVE_SUFFIX)
    restored_path = path.with_name(path.name + RESTORED_SUFFIX)
    service = HuffmanService()
    started = time.perf_counter()
    result = {"file": str(path), "outcome": None, "error": None}

    try:
        archive = service.compress_file(path, archive_path)
        if not service.decompress_file(archive_path, restored_path):
            raise MissingFileError(archive_path)

        data = path.read_bytes()
        report = build_report(path, data, archive.freqs)
        result.update(
            outcome="passed" if restored_path.read_bytes() == data else "failed",
            archive_size=archive_path.stat().st_size,
            metrics=report.as_dict(),
        )
    except Exception as e:
        result.update(outcome="error", error=f"{type(e).__name__}: {e}")
    finally:
        archive_path.unlink(missing_ok=True)

    result["duration_seconds"] = round(time.perf_counter() - started, 6)
    return result


def summarize(results):
    return {
        "total": len(results),
        "passed": sum(1 for r in results if r["outcome"] == "passed"),
        "failed": sum(1 for r in results if r["outcome"] == "failed"),
        "errors": sum(1 for r in results if r["outcome"] == "error"),
    }


def run_batch(directory, workers=None, progress=True):
    """
    Round-trip every file of ``directory``.

    Args:
        directory: Folder holding the input files
        workers: Process count; 1 runs in the current process
        progress: Show a tqdm progress bar

    Returns:
        dict with per-file results and a summary
    """
    files = discover_files(directory)
    logger.info("Processing %d file(s) from %s", len(files), directory)

    results = []
    if workers == 1:
        for path in tqdm(files, desc="files", disable=not progress):
            results.append(process_file(path))
    else:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(process_file, path) for path in files]
            for future in tqdm(as_completed(futures), total=len(futures), desc="files", disable=not progress):
                results.append(future.result())

    results.sort(key=lambda r: r["file"])
    for result in results:
        if result["outcome"] != "passed":
            logger.warning("%s: %s %s", result["file"], result["outcome"], result["error"] or "")
    return {"results": results, "summary": summarize(results)}


def generate_output_path():
    """Generate output path in format: reports/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    output_dir = Path("reports") / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    return output_dir / "report.json"


def cmd_encode(args):
    destination = args.destination or args.source + ARCHIVE_SUFFIX
    service = HuffmanService()
    try:
        archive = service.compress_file(args.source, destination)
    except (HuffmanError, OSError) as e:
        logger.error("Encoding %s failed: %s", args.source, e)
        return 1

    logger.info("Encoded %s -> %s", args.source, destination)
    if not args.quiet:
        data = Path(args.source).read_bytes()
        print(format_report(build_report(args.source, data, archive.freqs)))
    return 0


def cmd_decode(args):
    service = HuffmanService()
    try:
        written = service.decompress_file(args.source, args.destination)
    except (HuffmanError, OSError) as e:
        logger.error("Decoding %s failed: %s", args.source, e)
        return 1

    if not written:
        logger.warning("Archive %s not found, nothing decoded", args.source)
        return 1
    logger.info("Decoded %s -> %s", args.source, args.destination)
    return 0


def cmd_batch(args):
    run_id = generate_run_id()
    started_at = datetime.now()
    logger.info("Run ID: %s", run_id)

    batch = run_batch(args.directory, workers=args.workers, progress=not args.no_progress)
    summary = batch["summary"]
    success = summary["total"] == summary["passed"]

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "environment": get_environment_info(),
        "summary": summary,
        "results": batch["results"],
    }

    output_path = Path(args.output) if args.output else generate_output_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)

    print(f"Results: {summary['passed']} passed, {summary['failed']} failed, "
          f"{summary['errors']} errors (total: {summary['total']})")
    print(f"Duration: {duration:.2f}s")
    print(f"Report saved to: {output_path}")
    return 0 if success else 1


def build_parser():
    parser = argparse.ArgumentParser(description="Pair-Huffman file archivator")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    encode = sub.add_parser("encode", help="Compress a file")
    encode.add_argument("source")
    encode.add_argument("destination", nargs="?", default=None,
                        help=f"Archive path (default: SOURCE{ARCHIVE_SUFFIX})")
    encode.add_argument("--quiet", action="store_true", help="Do not print the metrics table")
    encode.set_defaults(handler=cmd_encode)

    decode = sub.add_parser("decode", help="Decompress an archive")
    decode.add_argument("source")
    decode.add_argument("destination")
    decode.set_defaults(handler=cmd_decode)

    batch = sub.add_parser("batch", help="Round-trip every file of a directory")
    batch.add_argument("directory")
    batch.add_argument("--workers", type=int, default=None,
                       help="Worker processes (default: CPU count)")
    batch.add_argument("--output", type=str, default=None,
                       help="Output JSON file path (default: reports/YYYY-MM-DD/HH-MM-SS/report.json)")
    batch.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    batch.set_defaults(handler=cmd_batch)
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
