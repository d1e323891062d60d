import sys
import subprocess

from equipdash.config import Settings


def main():
    """
    equipdash launcher.

    - If arguments are provided, forward directly to the CLI (no menu).
    - If no arguments are provided, show an interactive menu.
    """

    if len(sys.argv) > 1:
        sys.exit(_start_cli(sys.argv[1:]))

    print()
    print("equipdash")
    print("=========")
    print("1) Browser (Web UI)")
    print("2) Command Line Interface (CLI)")
    print("q) Quit")
    print()

    choice = input("Select mode: ").strip().lower()

    if choice == "1":
        _start_browser()
    elif choice == "2":
        sys.exit(_start_cli([]))
    elif choice in ("q", "quit", "exit"):
        sys.exit(0)
    else:
        print("Invalid selection.")
        sys.exit(1)


def _start_browser():
    settings = Settings.from_env()

    print("\nStarting equipdash web UI...\n")
    print(f"Listening on http://{settings.host}:{settings.port}")
    print("Press Ctrl-C to stop\n")

    subprocess.run(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "equipdash.web.app:app",
            "--host",
            settings.host,
            "--port",
            str(settings.port),
        ],
        check=False,
    )


def _start_cli(args):
    from equipdash.cli.equipdash import main as cli_main

    # launched from the menu with no args: show help
    if not args:
        args = ["--help"]

    return cli_main(args)


if __name__ == "__main__":
    main()
