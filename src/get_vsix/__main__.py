import sys

from get_vsix.cli import main

if __name__ == "__main__":
    sys.exit(main())
