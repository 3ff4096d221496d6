#!/usr/bin/env python3
"""
Order Tracker - Command Line Launcher
Looks up one order code and prints the order details and invoice.

Usage:
    python run_tracker.py KYS-eyJwaWQiOjJ9...
    python run_tracker.py KYS-... --refresh
    python run_tracker.py              (re-uses the last entered code)
"""
import asyncio
import sys
from pathlib import Path

# Get project root directory
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))

# Fix encoding for Windows
if sys.stdout.encoding != 'utf-8':
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')


async def run(code, force_refresh):
    from order_tracker.lookup_orchestrator import TrackerContext
    from order_tracker.tracker_logger import get_logger
    from order_tracker import tracker_config as cfg
    from order_tracker import tracker_tools

    settings = cfg.TrackerSettings()
    context = TrackerContext(settings=settings, logger=get_logger(settings, console=False))
    try:
        if not code:
            code = tracker_tools.restore_input(context)["value"]
        result = await tracker_tools.lookup_order(context, code, force_refresh=force_refresh)
        if result.get("status") != "invalid-input":
            tracker_tools.remember_input(context, code)

        print(result["report"])
        if result.get("can_request_backup"):
            link = await tracker_tools.backup_request_link(context)
            if link["success"]:
                print(f"\n{link['url']}")
            else:
                print(f"\n[WARN] {link['error']}")
        return 0 if result["success"] else 1
    finally:
        context.close()


def main():
    """Main entry point"""
    args = [a for a in sys.argv[1:] if a != '--refresh']
    force_refresh = '--refresh' in sys.argv[1:]
    code = args[0] if args else ""
    try:
        return asyncio.run(run(code, force_refresh))
    except KeyboardInterrupt:
        print("\n[STOP] Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
