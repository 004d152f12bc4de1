"""Run pylock-inspect from a source checkout without installing it."""

from pylock_inspect.cli.main import main

if __name__ == "__main__":
    main()
