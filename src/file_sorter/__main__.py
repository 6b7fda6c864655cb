import sys

from file_sorter.app import main

if __name__ == "__main__":
    sys.exit(main())
