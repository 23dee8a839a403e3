"""Entry point for `python -m statusline_pro`."""

import sys


def main():
    from statusline_pro.app import run
    sys.exit(run())


if __name__ == "__main__":
    main()
