# main.py
import argparse
from dataclasses import replace

from api.api import inspect_host
from config import get_settings
from errors import CertInfoError
from info_formatter import OutputFormat
from log import setup_logging


def main_loop(settings):
    print("Certificate inspector - enter a host or URL\n")
    while True:
        try:
            host = input("Host to inspect (press Enter to exit): ").strip()
            if host == "":
                break
            try:
                print(inspect_host(host, settings))
            except CertInfoError as exc:
                print(f"[{exc.kind}] {exc}")
            print()
        except (KeyboardInterrupt, EOFError):
            break


def main():
    parser = argparse.ArgumentParser(description="Interactively inspect TLS leaf certificates.")
    parser.add_argument("--json", action="store_true", help="Print reports as JSON")
    args = parser.parse_args()

    settings = get_settings()
    if args.json:
        settings = replace(settings, output_format=OutputFormat.JSON)
    setup_logging(settings.log_level)
    main_loop(settings)


if __name__ == "__main__":
    main()
