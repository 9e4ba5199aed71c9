"""
A simple CLI for setting up and running the server.
"""

import sys

import uvicorn


def main():
    try:
        command = sys.argv[1]
    except IndexError:
        print(
            "Only supported commands are roster run, roster setup, "
            "or roster setup {teacher_institutional_id}"
        )
        exit(1)

    if command == "run":
        uvicorn.run("roster.api.app:app", host="0.0.0.0")
        return

    if command == "setup":
        from roster.api.setup import initial_setup
        from roster.config.settings import Settings

        settings = Settings()
        initial_teacher = sys.argv[2] if len(sys.argv) > 2 else None
        initial_setup(settings=settings, initial_teacher=initial_teacher)

        print("Setup complete")
        exit(0)

    print(f"Unknown command {command}")
    exit(1)
