import subprocess
import sys

SOURCES = ["src", "tests", "scripts"]


def format_code():
    subprocess.run(["uv", "run", "ruff", "format", *SOURCES])


def lint():
    subprocess.run(["uv", "run", "ruff", "check", *SOURCES])


def lint_fix():
    subprocess.run(["uv", "run", "ruff", "check", "--fix", *SOURCES])


def check():
    subprocess.run(["uv", "run", "ruff", "check", *SOURCES])
    subprocess.run(["uv", "run", "ruff", "format", "--check", *SOURCES])


def test():
    result = subprocess.run(["uv", "run", "pytest", *sys.argv[2:]])
    sys.exit(result.returncode)


def migrate():
    subprocess.run(["uv", "run", "alembic", "upgrade", "head"])


COMMANDS = {
    "format": format_code,
    "lint": lint,
    "fix": lint_fix,
    "check": check,
    "test": test,
    "migrate": migrate,
}


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(f"Usage: python scripts.py [{'|'.join(COMMANDS)}]")
        sys.exit(1)

    command = sys.argv[1]
    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        sys.exit(1)
    COMMANDS[command]()
