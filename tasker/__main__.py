"""Allow ``python -m tasker``."""

from tasker.cli import run

if __name__ == "__main__":
    run()
