import sys

from alicloudslim.cli import run


if __name__ == "__main__":
    sys.exit(run())
