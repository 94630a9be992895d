#!/usr/bin/env python3
"""
Main entry point for the VPN network configuration manager.
Applies a router configuration to the host and keeps it until stopped.
"""
import argparse
import json
import platform
import signal
import sys
import threading
from typing import Any, Dict, List, Optional

import router
from common.utils.config import ConfigManager
from common.utils.logging_setup import setup_logging
from common.utils.permissions import check_admin_privileges
from router.dns import detect_backend


def router_options(settings: ConfigManager) -> Dict[str, Any]:
    """
    Build the platform-specific keyword arguments for router.new_router()
    """
    options: Dict[str, Any] = {}
    system = platform.system()
    if system == 'Linux':
        from router.dns import DNSManager
        options["dns"] = DNSManager(
            settings.get("router.interface"),
            resolv_conf=settings.get("dns.resolv_conf"),
            backup_path=settings.get("dns.backup_path"),
            timeout=settings.get("dns.reconfig_timeout"),
        )
    if system in ('Linux', 'Windows'):
        options["poll_interval"] = settings.get("monitor.poll_interval")
    return options


def load_router_config(path: str) -> router.RouterConfig:
    """Read a RouterConfig from a JSON file"""
    with open(path, 'r') as f:
        return router.RouterConfig.from_dict(json.load(f))


def cmd_run(args, settings: ConfigManager, logger) -> int:
    config = load_router_config(args.config)
    r = router.new_router(settings.get("router.interface"), **router_options(settings))

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda signum, frame: stop.set())
    signal.signal(signal.SIGTERM, lambda signum, frame: stop.set())

    try:
        r.up()
        r.set(config)
        logger.info("Configuration applied, waiting for shutdown signal")
        while not stop.wait(1.0):
            pass
    finally:
        logger.info("Shutting down")
        try:
            r.set(None)
        finally:
            r.close()
    return 0


def cmd_cleanup(args, settings: ConfigManager, logger) -> int:
    router.cleanup(settings.get("router.interface"))
    return 0


def cmd_detect(args, settings: ConfigManager, logger) -> int:
    kind = detect_backend(settings.get("dns.resolv_conf"), settings.get("dns.reconfig_timeout"))
    print(kind.value)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="vpn-router", description=__doc__)
    parser.add_argument("--settings", default=None, help="Path to the settings file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Apply a configuration until interrupted")
    run_parser.add_argument("config", help="JSON file with the router configuration")
    run_parser.set_defaults(func=cmd_run, needs_admin=True)

    cleanup_parser = subparsers.add_parser("cleanup", help="Remove state left by a crashed run")
    cleanup_parser.set_defaults(func=cmd_cleanup, needs_admin=True)

    detect_parser = subparsers.add_parser("detect", help="Print the active DNS backend")
    detect_parser.set_defaults(func=cmd_detect, needs_admin=False)

    args = parser.parse_args(argv)

    settings = ConfigManager(args.settings)
    logger = setup_logging(
        app_name="router",
        log_level=settings.get("logging.level", "INFO"),
        log_file=settings.get("logging.file"),
        log_to_console=settings.get("logging.console", True)
    )

    errors = settings.validate()
    if errors:
        for error in errors:
            logger.error(f"Invalid settings: {error}")
        return 2

    if args.needs_admin and not check_admin_privileges():
        logger.error("Administrator privileges are required")
        return 1

    try:
        return args.func(args, settings, logger)
    except router.RouterError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Cannot load configuration: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
